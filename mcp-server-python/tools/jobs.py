"""
MCP tool handlers for jobs.

Same contract as the company handlers: validated request in, success
payload or ``{"error": {...}}`` out.
"""

import logging
from typing import Any, Dict

from config import get_config
from db import jobs
from db.connection import DbWriter, get_connection
from models.errors import ToolError, create_internal_error
from models.job import to_job_detail_schema, to_job_list_schema, to_job_schema
from schemas.jobs import JobFilterRequest, JobIdRequest, JobNewRequest, JobUpdateRequest
from utils.pydantic_error_mapper import validate_request

logger = logging.getLogger(__name__)


def _internal_error(tool: str, error: Exception) -> Dict[str, Any]:
    logger.exception("Unexpected error in %s", tool)
    return create_internal_error(message=str(error), original_error=error).to_dict()


def create_job(args: Dict[str, Any]) -> Dict[str, Any]:
    """
    Create a job for an existing company.

    Args:
        args: {title, companyHandle, salary?, equity?, db_path?}

    Returns:
        {"job": {id, title, salary, equity, companyHandle}}
    """
    try:
        request = validate_request(JobNewRequest, args)
        with DbWriter(request.db_path) as writer:
            job = jobs.create(writer.conn, request.payload())
            writer.commit()
        return {"job": to_job_schema(job)}

    except ToolError as e:
        return e.to_dict()
    except Exception as e:
        return _internal_error("create_job", e)


def list_jobs(args: Dict[str, Any]) -> Dict[str, Any]:
    """
    List jobs ordered by title, optionally filtered.

    Filters (combined with AND):
    - title: case-insensitive substring match
    - minSalary: salary of at least this amount
    - hasEquity: true keeps only jobs offering non-zero equity

    Returns:
        {"jobs": [{id, title, salary, equity, companyHandle, companyName}, ...],
         "count": int}
    """
    try:
        request = validate_request(JobFilterRequest, args)
        with get_connection(request.db_path) as conn:
            rows = jobs.find_all(conn, request.filters(), limit=get_config().list_limit)
        result = [to_job_list_schema(row) for row in rows]
        return {"jobs": result, "count": len(result)}

    except ToolError as e:
        return e.to_dict()
    except Exception as e:
        return _internal_error("list_jobs", e)


def get_job(args: Dict[str, Any]) -> Dict[str, Any]:
    """
    Get one job with its company.

    Returns:
        {"job": {id, title, salary, equity, company}}
    """
    try:
        request = validate_request(JobIdRequest, args)
        with get_connection(request.db_path) as conn:
            job = jobs.get(conn, request.id)
        return {"job": to_job_detail_schema(job)}

    except ToolError as e:
        return e.to_dict()
    except Exception as e:
        return _internal_error("get_job", e)


def update_job(args: Dict[str, Any]) -> Dict[str, Any]:
    """
    Partially update a job. Fields: title, salary, equity.

    Returns:
        {"job": {id, title, salary, equity, companyHandle}}
    """
    try:
        request = validate_request(JobUpdateRequest, args)
        with DbWriter(request.db_path) as writer:
            job = jobs.update(writer.conn, request.id, request.changes())
            writer.commit()
        return {"job": to_job_schema(job)}

    except ToolError as e:
        return e.to_dict()
    except Exception as e:
        return _internal_error("update_job", e)


def delete_job(args: Dict[str, Any]) -> Dict[str, Any]:
    """
    Delete a job.

    Returns:
        {"deleted": id}
    """
    try:
        request = validate_request(JobIdRequest, args)
        with DbWriter(request.db_path) as writer:
            jobs.remove(writer.conn, request.id)
            writer.commit()
        return {"deleted": request.id}

    except ToolError as e:
        return e.to_dict()
    except Exception as e:
        return _internal_error("delete_job", e)
