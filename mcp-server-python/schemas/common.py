"""Shared schema primitives for MCP tool request/response models.

External field names are camelCase (``numEmployees``, ``companyHandle``);
Python attributes stay snake_case and either spelling is accepted on input.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel


def validate_optional_non_empty_str(value: Optional[str], field_name: str) -> Optional[str]:
    """Validate optional string fields that cannot be empty/whitespace."""
    if value is None:
        return None
    if not value.strip():
        raise ValueError(f"Invalid {field_name}: cannot be empty")
    return value


def validate_optional_url(value: Optional[str], field_name: str) -> Optional[str]:
    """Validate optional absolute http(s) URLs."""
    if value is None:
        return None
    if not value.startswith(("http://", "https://")):
        raise ValueError(f"Invalid {field_name}: must be an http(s) URL")
    return value


class StrictForbidRequest(BaseModel):
    """Request base with strict typing and rejected unknown fields."""

    model_config = ConfigDict(
        extra="forbid", strict=True, alias_generator=to_camel, populate_by_name=True
    )

    def payload(self, exclude_unset: bool = False) -> dict[str, Any]:
        """Dump the request body under its external names, without db_path."""
        return self.model_dump(by_alias=True, exclude={"db_path"}, exclude_unset=exclude_unset)


class StrictAllowRequest(BaseModel):
    """Request base with strict typing and preserved unknown fields."""

    model_config = ConfigDict(
        extra="allow", strict=True, alias_generator=to_camel, populate_by_name=True
    )


class StrictResponse(BaseModel):
    """Response/result base that drops unknown columns and dumps camelCase."""

    model_config = ConfigDict(extra="ignore", alias_generator=to_camel, populate_by_name=True)

    def to_response(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class DbPathMixin(BaseModel):
    """Reusable db_path field validation."""

    db_path: Optional[str] = None

    @field_validator("db_path")
    @classmethod
    def validate_db_path(cls, value: Optional[str]) -> Optional[str]:
        return validate_optional_non_empty_str(value, "db_path")


class FilterRequest(DbPathMixin, StrictAllowRequest):
    """Base for list filters.

    Unknown keys are kept so the filter builder can reject them by name.
    """

    def filters(self) -> dict[str, Any]:
        """Supplied filters under their external names, unknown keys last."""
        data = self.model_dump(by_alias=True, exclude_unset=True, exclude={"db_path"})
        data.update(self.model_extra or {})
        return data
