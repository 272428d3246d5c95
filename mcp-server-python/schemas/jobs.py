"""Pydantic schemas for the job tools."""

from __future__ import annotations

from typing import Optional

from pydantic import Field

from schemas.common import (
    DbPathMixin,
    FilterRequest,
    StrictForbidRequest,
    StrictResponse,
)
from schemas.companies import CompanyRecord


class JobNewRequest(DbPathMixin, StrictForbidRequest):
    """Request schema for create_job."""

    title: str = Field(min_length=1)
    salary: Optional[int] = Field(default=None, ge=0)
    equity: Optional[float] = Field(default=None, ge=0, le=1.0)
    company_handle: str = Field(min_length=1, max_length=25)


class JobUpdateRequest(DbPathMixin, StrictForbidRequest):
    """Request schema for update_job.

    ``id`` selects the record; neither it nor the owning company can change.
    """

    id: int = Field(ge=1)
    title: Optional[str] = Field(default=None, min_length=1)
    salary: Optional[int] = Field(default=None, ge=0)
    equity: Optional[float] = Field(default=None, ge=0, le=1.0)

    def changes(self) -> dict:
        """Fields explicitly supplied for update, under external names."""
        data = self.payload(exclude_unset=True)
        data.pop("id", None)
        return data


class JobFilterRequest(FilterRequest):
    """Request schema for list_jobs."""

    title: Optional[str] = None
    min_salary: Optional[int] = Field(default=None, ge=0)
    has_equity: Optional[bool] = None


class JobIdRequest(DbPathMixin, StrictForbidRequest):
    """Request schema for get_job and delete_job."""

    id: int = Field(ge=1)


class JobRecord(StrictResponse):
    """Job record as stored."""

    id: int
    title: str
    salary: Optional[int] = None
    equity: Optional[float] = None
    company_handle: str


class JobListRecord(JobRecord):
    """Job record as listed, with the owning company's name."""

    company_name: Optional[str] = None


class JobDetail(StrictResponse):
    """Job record with its owning company."""

    id: int
    title: str
    salary: Optional[int] = None
    equity: Optional[float] = None
    company: Optional[CompanyRecord] = None
