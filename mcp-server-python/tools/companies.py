"""
MCP tool handlers for companies.

Each handler validates its arguments with a request schema, runs the
repository call inside a connection context and returns either the
success payload or ``{"error": {...}}``.
"""

import logging
from typing import Any, Dict

from config import get_config
from db import companies
from db.connection import DbWriter, get_connection
from models.company import to_company_detail_schema, to_company_schema
from models.errors import ToolError, create_internal_error
from schemas.companies import (
    CompanyFilterRequest,
    CompanyHandleRequest,
    CompanyNewRequest,
    CompanyUpdateRequest,
)
from utils.pydantic_error_mapper import validate_request

logger = logging.getLogger(__name__)


def _internal_error(tool: str, error: Exception) -> Dict[str, Any]:
    logger.exception("Unexpected error in %s", tool)
    return create_internal_error(message=str(error), original_error=error).to_dict()


def create_company(args: Dict[str, Any]) -> Dict[str, Any]:
    """
    Create a company.

    Args:
        args: {handle, name, description, numEmployees?, logoUrl?, db_path?}

    Returns:
        {"company": {handle, name, description, numEmployees, logoUrl}}
    """
    try:
        request = validate_request(CompanyNewRequest, args)
        with DbWriter(request.db_path) as writer:
            company = companies.create(writer.conn, request.payload())
            writer.commit()
        return {"company": to_company_schema(company)}

    except ToolError as e:
        return e.to_dict()
    except Exception as e:
        return _internal_error("create_company", e)


def list_companies(args: Dict[str, Any]) -> Dict[str, Any]:
    """
    List companies ordered by name, optionally filtered.

    Filters (combined with AND):
    - name: case-insensitive substring match
    - minEmployees: at least this many employees
    - maxEmployees: at most this many employees

    Returns:
        {"companies": [...], "count": int}
    """
    try:
        request = validate_request(CompanyFilterRequest, args)
        with get_connection(request.db_path) as conn:
            rows = companies.find_all(
                conn, request.filters(), limit=get_config().list_limit
            )
        result = [to_company_schema(row) for row in rows]
        return {"companies": result, "count": len(result)}

    except ToolError as e:
        return e.to_dict()
    except Exception as e:
        return _internal_error("list_companies", e)


def get_company(args: Dict[str, Any]) -> Dict[str, Any]:
    """
    Get one company with its jobs.

    Returns:
        {"company": {handle, name, description, numEmployees, logoUrl, jobs}}
    """
    try:
        request = validate_request(CompanyHandleRequest, args)
        with get_connection(request.db_path) as conn:
            company = companies.get(conn, request.handle)
        return {"company": to_company_detail_schema(company)}

    except ToolError as e:
        return e.to_dict()
    except Exception as e:
        return _internal_error("get_company", e)


def update_company(args: Dict[str, Any]) -> Dict[str, Any]:
    """
    Partially update a company.

    Only the supplied fields change. Fields: name, description,
    numEmployees, logoUrl.

    Returns:
        {"company": {handle, name, description, numEmployees, logoUrl}}
    """
    try:
        request = validate_request(CompanyUpdateRequest, args)
        with DbWriter(request.db_path) as writer:
            company = companies.update(writer.conn, request.handle, request.changes())
            writer.commit()
        return {"company": to_company_schema(company)}

    except ToolError as e:
        return e.to_dict()
    except Exception as e:
        return _internal_error("update_company", e)


def delete_company(args: Dict[str, Any]) -> Dict[str, Any]:
    """
    Delete a company and its jobs.

    Returns:
        {"deleted": handle}
    """
    try:
        request = validate_request(CompanyHandleRequest, args)
        with DbWriter(request.db_path) as writer:
            companies.remove(writer.conn, request.handle)
            writer.commit()
        return {"deleted": request.handle}

    except ToolError as e:
        return e.to_dict()
    except Exception as e:
        return _internal_error("delete_company", e)
