"""
Tests for request/response schemas and the validation error mapper.
"""

import pytest
from pydantic import ValidationError

from models.errors import ErrorCode, ToolError
from schemas.companies import (
    CompanyDetail,
    CompanyFilterRequest,
    CompanyNewRequest,
    CompanyRecord,
    CompanyUpdateRequest,
)
from schemas.jobs import JobDetail, JobFilterRequest, JobListRecord, JobNewRequest, JobUpdateRequest
from utils.pydantic_error_mapper import map_pydantic_validation_error, validate_request


class TestCompanyRequests:
    def test_payload_uses_external_names(self):
        request = CompanyNewRequest.model_validate(
            {"handle": "c1", "name": "C1", "description": "D", "numEmployees": 3, "db_path": "x.db"}
        )

        assert request.num_employees == 3
        assert request.db_path == "x.db"
        assert request.payload() == {
            "handle": "c1",
            "name": "C1",
            "description": "D",
            "numEmployees": 3,
            "logoUrl": None,
        }

    def test_handle_length_limit(self):
        with pytest.raises(ValidationError):
            CompanyNewRequest.model_validate({"handle": "x" * 26, "name": "N", "description": "D"})

    def test_strict_types(self):
        with pytest.raises(ValidationError):
            CompanyNewRequest.model_validate(
                {"handle": "c1", "name": "C1", "description": "D", "numEmployees": "3"}
            )

    def test_update_changes_only_supplied_fields(self):
        request = CompanyUpdateRequest.model_validate(
            {"handle": "c1", "numEmployees": 10, "logoUrl": None}
        )

        assert request.changes() == {"numEmployees": 10, "logoUrl": None}

    def test_update_without_fields_has_no_changes(self):
        assert CompanyUpdateRequest.model_validate({"handle": "c1"}).changes() == {}

    def test_empty_db_path_rejected(self):
        with pytest.raises(ValidationError):
            CompanyUpdateRequest.model_validate({"handle": "c1", "db_path": "  "})

    def test_filters_keep_unknown_keys(self):
        request = CompanyFilterRequest.model_validate(
            {"minEmployees": 2, "city": "x", "db_path": "x.db"}
        )

        assert request.filters() == {"minEmployees": 2, "city": "x"}

    def test_filters_omit_unset(self):
        assert CompanyFilterRequest.model_validate({}).filters() == {}


class TestJobRequests:
    def test_equity_bounds(self):
        with pytest.raises(ValidationError):
            JobNewRequest.model_validate({"title": "T", "companyHandle": "c1", "equity": 1.01})

    def test_integer_equity_accepted(self):
        request = JobNewRequest.model_validate({"title": "T", "companyHandle": "c1", "equity": 0})

        assert request.payload()["equity"] == 0

    def test_update_drops_id(self):
        request = JobUpdateRequest.model_validate({"id": 4, "title": "New"})

        assert request.changes() == {"title": "New"}

    def test_filter_names(self):
        request = JobFilterRequest.model_validate({"min_salary": 10, "has_equity": True})

        assert request.filters() == {"minSalary": 10, "hasEquity": True}


class TestResponses:
    def test_company_record_renames_and_drops_extra(self):
        record = CompanyRecord.model_validate(
            {"handle": "c1", "name": "C1", "description": "D", "numEmployees": 1, "jobs": []}
        ).to_response()

        assert record == {
            "handle": "c1",
            "name": "C1",
            "description": "D",
            "numEmployees": 1,
            "logoUrl": None,
        }

    def test_company_detail_nests_jobs(self):
        detail = CompanyDetail.model_validate(
            {
                "handle": "c1",
                "name": "C1",
                "description": "D",
                "jobs": [{"id": 1, "title": "T", "salary": 5, "equity": 0.0}],
            }
        ).to_response()

        assert detail["jobs"] == [{"id": 1, "title": "T", "salary": 5, "equity": 0.0}]

    def test_job_list_record(self):
        record = JobListRecord.model_validate(
            {"id": 1, "title": "T", "companyHandle": "c1", "companyName": "C1"}
        ).to_response()

        assert record["companyName"] == "C1"
        assert record["salary"] is None

    def test_job_detail_without_company(self):
        assert JobDetail.model_validate({"id": 1, "title": "T"}).to_response()["company"] is None


class TestValidationErrorMapping:
    def test_validate_request_returns_model(self):
        request = validate_request(JobUpdateRequest, {"id": 1, "salary": 5})

        assert isinstance(request, JobUpdateRequest)

    def test_unknown_field(self):
        with pytest.raises(ToolError) as exc_info:
            validate_request(JobUpdateRequest, {"id": 1, "color": "red"})

        assert exc_info.value.code == ErrorCode.VALIDATION_ERROR
        assert exc_info.value.message == "Unknown field: color"

    def test_missing_field(self):
        with pytest.raises(ToolError) as exc_info:
            validate_request(JobNewRequest, {"title": "T"})

        assert exc_info.value.message == "Invalid companyHandle: Field required"

    def test_custom_validator_message_kept(self):
        with pytest.raises(ToolError) as exc_info:
            validate_request(
                CompanyNewRequest,
                {"handle": "c1", "name": "N", "description": "D", "logoUrl": "ftp://x"},
            )

        assert exc_info.value.message == "Invalid logoUrl: must be an http(s) URL"

    def test_multiple_issues_joined(self):
        with pytest.raises(ValidationError) as exc_info:
            JobNewRequest.model_validate({"salary": -1})

        error = map_pydantic_validation_error(exc_info.value)

        assert error.code == ErrorCode.VALIDATION_ERROR
        assert error.message.count("; ") == len(exc_info.value.errors()) - 1
        assert "Invalid title" in error.message
