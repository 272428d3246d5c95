#!/usr/bin/env python3
"""
MCP Server entry point for Jobly.

Exposes create/list/get/update/delete tools for companies and jobs stored
in a SQLite database. The server uses the FastMCP framework and runs in
stdio mode, the standard transport for MCP servers invoked by LLM agents.

Usage:
    python server.py
"""

import logging

from mcp.server.fastmcp import FastMCP

from config import get_config
from tools.companies import (
    create_company,
    delete_company,
    get_company,
    list_companies,
    update_company,
)
from tools.jobs import create_job, delete_job, get_job, list_jobs, update_job

config = get_config()
mcp = FastMCP(
    name=config.server_name,
    instructions=(
        "This server manages companies and the jobs they post. "
        "\n\n"
        "Companies are keyed by handle; jobs by numeric id and belong to one company. "
        "Use list_companies / list_jobs to search (all supplied filters apply together), "
        "get_company / get_job for details, create_* to add records, update_* for partial "
        "updates (only supplied fields change) and delete_* to remove records. "
        "Deleting a company also deletes its jobs. "
        "Every tool returns {'error': {code, message, retryable}} on failure."
    ),
)


def _args(**kwargs) -> dict:
    """Keep only explicitly provided arguments."""
    return {key: value for key, value in kwargs.items() if value is not None}


@mcp.tool(
    name="create_company",
    description="Create a company. Fails with VALIDATION_ERROR if the handle is taken.",
)
def create_company_tool(
    handle: str,
    name: str,
    description: str,
    num_employees: int | None = None,
    logo_url: str | None = None,
    db_path: str | None = None,
) -> dict:
    """
    Create a company.

    Args:
        handle: Unique short identifier (1-25 chars).
        name: Company name.
        description: Company description.
        num_employees: Headcount, >= 0.
        logo_url: Absolute http(s) URL of the logo.
        db_path: Optional SQLite path override (default: data/jobly.db).

    Returns:
        {"company": {handle, name, description, numEmployees, logoUrl}}
    """
    return create_company(
        _args(
            handle=handle,
            name=name,
            description=description,
            numEmployees=num_employees,
            logoUrl=logo_url,
            db_path=db_path,
        )
    )


@mcp.tool(
    name="list_companies",
    description=(
        "List companies ordered by name. Optional filters are combined with AND: "
        "name (case-insensitive substring), min_employees, max_employees."
    ),
)
def list_companies_tool(
    name: str | None = None,
    min_employees: int | None = None,
    max_employees: int | None = None,
    db_path: str | None = None,
) -> dict:
    """
    List companies.

    min_employees greater than max_employees is a VALIDATION_ERROR.

    Returns:
        {"companies": [...], "count": int}
    """
    return list_companies(
        _args(
            name=name,
            minEmployees=min_employees,
            maxEmployees=max_employees,
            db_path=db_path,
        )
    )


@mcp.tool(name="get_company", description="Get a company by handle, including its jobs.")
def get_company_tool(handle: str, db_path: str | None = None) -> dict:
    """Return {"company": {..., "jobs": [{id, title, salary, equity}, ...]}}."""
    return get_company(_args(handle=handle, db_path=db_path))


@mcp.tool(
    name="update_company",
    description=(
        "Partially update a company: only the supplied fields change. "
        "At least one of name, description, num_employees, logo_url is required. "
        "Omitted or null arguments leave the field unchanged, so a field cannot be "
        "cleared to null through this tool."
    ),
)
def update_company_tool(
    handle: str,
    name: str | None = None,
    description: str | None = None,
    num_employees: int | None = None,
    logo_url: str | None = None,
    db_path: str | None = None,
) -> dict:
    """Return {"company": {...}} with the updated record."""
    return update_company(
        _args(
            handle=handle,
            name=name,
            description=description,
            numEmployees=num_employees,
            logoUrl=logo_url,
            db_path=db_path,
        )
    )


@mcp.tool(name="delete_company", description="Delete a company and all of its jobs.")
def delete_company_tool(handle: str, db_path: str | None = None) -> dict:
    """Return {"deleted": handle}."""
    return delete_company(_args(handle=handle, db_path=db_path))


@mcp.tool(name="create_job", description="Create a job for an existing company.")
def create_job_tool(
    title: str,
    company_handle: str,
    salary: int | None = None,
    equity: float | None = None,
    db_path: str | None = None,
) -> dict:
    """
    Create a job.

    Args:
        title: Job title.
        company_handle: Handle of the owning company (must exist).
        salary: Salary, >= 0.
        equity: Equity fraction between 0 and 1.
        db_path: Optional SQLite path override.

    Returns:
        {"job": {id, title, salary, equity, companyHandle}}
    """
    return create_job(
        _args(
            title=title,
            companyHandle=company_handle,
            salary=salary,
            equity=equity,
            db_path=db_path,
        )
    )


@mcp.tool(
    name="list_jobs",
    description=(
        "List jobs ordered by title. Optional filters are combined with AND: "
        "title (case-insensitive substring), min_salary, has_equity."
    ),
)
def list_jobs_tool(
    title: str | None = None,
    min_salary: int | None = None,
    has_equity: bool | None = None,
    db_path: str | None = None,
) -> dict:
    """Return {"jobs": [{..., companyName}, ...], "count": int}."""
    return list_jobs(
        _args(title=title, minSalary=min_salary, hasEquity=has_equity, db_path=db_path)
    )


@mcp.tool(name="get_job", description="Get a job by id, including its company.")
def get_job_tool(id: int, db_path: str | None = None) -> dict:
    """Return {"job": {id, title, salary, equity, company}}."""
    return get_job(_args(id=id, db_path=db_path))


@mcp.tool(
    name="update_job",
    description=(
        "Partially update a job: only the supplied fields change. "
        "At least one of title, salary, equity is required. "
        "Omitted or null arguments leave the field unchanged."
    ),
)
def update_job_tool(
    id: int,
    title: str | None = None,
    salary: int | None = None,
    equity: float | None = None,
    db_path: str | None = None,
) -> dict:
    """Return {"job": {...}} with the updated record."""
    return update_job(
        _args(id=id, title=title, salary=salary, equity=equity, db_path=db_path)
    )


@mcp.tool(name="delete_job", description="Delete a job by id.")
def delete_job_tool(id: int, db_path: str | None = None) -> dict:
    """Return {"deleted": id}."""
    return delete_job(_args(id=id, db_path=db_path))


def main():
    """
    Main entry point for the MCP server.

    Runs the server in stdio mode.
    """
    config.setup_logging()

    logger = logging.getLogger(__name__)
    logger.info("Starting Jobly MCP Server")
    logger.info(f"Server name: {config.server_name}")
    logger.info(f"Database path: {config.db_path}")

    for warning in config.validate():
        logger.warning(warning)

    logger.info("Server starting in stdio mode")
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
