"""Pydantic schemas for the company tools."""

from __future__ import annotations

from typing import Optional

from pydantic import Field, field_validator

from schemas.common import (
    DbPathMixin,
    FilterRequest,
    StrictForbidRequest,
    StrictResponse,
    validate_optional_url,
)


class CompanyNewRequest(DbPathMixin, StrictForbidRequest):
    """Request schema for create_company."""

    handle: str = Field(min_length=1, max_length=25)
    name: str = Field(min_length=1)
    description: str
    num_employees: Optional[int] = Field(default=None, ge=0)
    logo_url: Optional[str] = None

    @field_validator("logo_url")
    @classmethod
    def validate_logo_url(cls, value: Optional[str]) -> Optional[str]:
        return validate_optional_url(value, "logoUrl")


class CompanyUpdateRequest(DbPathMixin, StrictForbidRequest):
    """Request schema for update_company.

    The handle selects the record and cannot itself be changed.
    """

    handle: str = Field(min_length=1)
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    num_employees: Optional[int] = Field(default=None, ge=0)
    logo_url: Optional[str] = None

    @field_validator("logo_url")
    @classmethod
    def validate_logo_url(cls, value: Optional[str]) -> Optional[str]:
        return validate_optional_url(value, "logoUrl")

    def changes(self) -> dict:
        """Fields explicitly supplied for update, under external names."""
        data = self.payload(exclude_unset=True)
        data.pop("handle", None)
        return data


class CompanyFilterRequest(FilterRequest):
    """Request schema for list_companies."""

    name: Optional[str] = None
    min_employees: Optional[int] = Field(default=None, ge=0)
    max_employees: Optional[int] = Field(default=None, ge=0)


class CompanyHandleRequest(DbPathMixin, StrictForbidRequest):
    """Request schema for get_company and delete_company."""

    handle: str = Field(min_length=1)


class CompanyJobRecord(StrictResponse):
    """Job summary nested in a company detail."""

    id: int
    title: str
    salary: Optional[int] = None
    equity: Optional[float] = None


class CompanyRecord(StrictResponse):
    """Company record as stored."""

    handle: str
    name: str
    description: str
    num_employees: Optional[int] = None
    logo_url: Optional[str] = None


class CompanyDetail(CompanyRecord):
    """Company record with its jobs."""

    jobs: list[CompanyJobRecord] = []
