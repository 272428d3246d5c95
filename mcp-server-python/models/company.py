"""Company record mapping."""

from typing import Any, Dict

from schemas.companies import CompanyDetail, CompanyRecord


def to_company_schema(row: Dict[str, Any]) -> Dict[str, Any]:
    """Map a stored company row to {handle, name, description, numEmployees, logoUrl}."""
    return CompanyRecord.model_validate(row).to_response()


def to_company_detail_schema(row: Dict[str, Any]) -> Dict[str, Any]:
    """Map a company row that carries its ``jobs`` list."""
    return CompanyDetail.model_validate(row).to_response()
