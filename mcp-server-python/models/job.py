"""
Job record mapping.

Maps repository rows to the stable output schema. The schema classes in
``schemas.jobs`` drop unknown columns and rename fields to their external
camelCase names.
"""

from typing import Any, Dict

from schemas.jobs import JobDetail, JobListRecord, JobRecord


def to_job_schema(row: Dict[str, Any]) -> Dict[str, Any]:
    """Map a stored job row to {id, title, salary, equity, companyHandle}."""
    return JobRecord.model_validate(row).to_response()


def to_job_list_schema(row: Dict[str, Any]) -> Dict[str, Any]:
    """Map a listed job row; adds companyName."""
    return JobListRecord.model_validate(row).to_response()


def to_job_detail_schema(row: Dict[str, Any]) -> Dict[str, Any]:
    """Map a job detail row; the company is nested instead of its handle."""
    return JobDetail.model_validate(row).to_response()
