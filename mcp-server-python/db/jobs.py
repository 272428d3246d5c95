"""
Job repository.

Query functions for the jobs table. Each function takes an open
connection; transaction boundaries belong to the caller (see DbWriter).
"""

import logging
import sqlite3
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

from db.connection import CASEFOLD_FUNCTION
from models.errors import (
    create_db_error,
    create_not_found_error,
    create_validation_error,
    sanitize_sql_error,
)
from utils.sql import (
    FilterKind,
    FilterRule,
    sql_for_filters,
    sql_for_partial_update,
    where_sql,
)

logger = logging.getLogger(__name__)

JOB_JS_TO_SQL = MappingProxyType({"companyHandle": "company_handle"})

JOB_FILTER_RULES = (
    FilterRule("title", "j.title", FilterKind.CONTAINS),
    FilterRule("minSalary", "j.salary", FilterKind.MIN),
    FilterRule("hasEquity", "j.equity", FilterKind.FLAG),
)

_JOB_COLUMNS = """
    id,
    title,
    salary,
    equity,
    company_handle AS "companyHandle"
"""


def _fetch_job(conn: sqlite3.Connection, job_id: int) -> Optional[Dict[str, Any]]:
    row = conn.execute(
        f"SELECT {_JOB_COLUMNS} FROM jobs WHERE id = ?",
        (job_id,),
    ).fetchone()
    return dict(row) if row is not None else None


def create(conn: sqlite3.Connection, data: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Insert a job and return the stored record.

    Args:
        conn: Writable connection
        data: {title, salary, equity, companyHandle}

    Returns:
        {id, title, salary, equity, companyHandle}

    Raises:
        ToolError: VALIDATION_ERROR for a duplicate title,
            NOT_FOUND if the company does not exist
    """
    title = data["title"]
    company_handle = data["companyHandle"]
    try:
        duplicate = conn.execute(
            "SELECT title FROM jobs WHERE title = ?", (title,)
        ).fetchone()
        if duplicate is not None:
            raise create_validation_error(f"Duplicate job: {title}")

        company = conn.execute(
            "SELECT handle FROM companies WHERE handle = ?", (company_handle,)
        ).fetchone()
        if company is None:
            raise create_not_found_error(f"No company: {company_handle}")

        cursor = conn.execute(
            """
            INSERT INTO jobs (title, salary, equity, company_handle)
            VALUES (?, ?, ?, ?)
            """,
            (title, data.get("salary"), data.get("equity"), company_handle),
        )
        logger.info("Created job %s for company %s", cursor.lastrowid, company_handle)
        return _fetch_job(conn, cursor.lastrowid)

    except sqlite3.IntegrityError as e:
        raise create_validation_error(f"Invalid job: {sanitize_sql_error(str(e))}") from e
    except sqlite3.Error as e:
        raise create_db_error(str(e), retryable=False, original_error=e) from e


def find_all(
    conn: sqlite3.Connection,
    filters: Optional[Mapping[str, Any]] = None,
    limit: Optional[int] = None,
) -> List[Dict[str, Any]]:
    """
    List jobs ordered by title, each with its company name.

    Supported filters (all applied together):
    - title: case-insensitive substring of the job title
    - minSalary: inclusive lower bound on salary
    - hasEquity: true limits to jobs with non-zero equity

    Returns:
        [{id, title, salary, equity, companyHandle, companyName}, ...]

    Raises:
        ToolError: VALIDATION_ERROR for an unknown filter
    """
    clause = sql_for_filters(
        filters,
        JOB_FILTER_RULES,
        placeholder="?",
        like_operator="LIKE",
        case_fold=CASEFOLD_FUNCTION,
        like_escape=True,
    )
    params = list(clause.values)

    query = f"""
        SELECT j.id,
               j.title,
               j.salary,
               j.equity,
               j.company_handle AS "companyHandle",
               c.name AS "companyName"
        FROM jobs AS j
        LEFT JOIN companies AS c ON c.handle = j.company_handle
        {where_sql(clause)}
        ORDER BY j.title, j.id
    """
    if limit is not None:
        params.append(limit)
        query += f" LIMIT ?{len(params)}"

    try:
        rows = conn.execute(query, params).fetchall()
        return [dict(row) for row in rows]
    except sqlite3.Error as e:
        raise create_db_error(str(e), retryable=False, original_error=e) from e


def get(conn: sqlite3.Connection, job_id: int) -> Dict[str, Any]:
    """
    Return a job with its company.

    Returns:
        {id, title, salary, equity, company}
        where company is {handle, name, description, numEmployees, logoUrl}

    Raises:
        ToolError: NOT_FOUND if no such job
    """
    try:
        job = _fetch_job(conn, job_id)
        if job is None:
            raise create_not_found_error(f"No job: {job_id}")

        row = conn.execute(
            """
            SELECT handle,
                   name,
                   description,
                   num_employees AS "numEmployees",
                   logo_url AS "logoUrl"
            FROM companies
            WHERE handle = ?
            """,
            (job.pop("companyHandle"),),
        ).fetchone()
        job["company"] = dict(row) if row is not None else None
        return job

    except sqlite3.Error as e:
        raise create_db_error(str(e), retryable=False, original_error=e) from e


def update(conn: sqlite3.Connection, job_id: int, data: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Partially update a job; only the supplied fields change.

    Data can include: {title, salary, equity}

    Raises:
        ToolError: VALIDATION_ERROR on empty data, NOT_FOUND if no such job
    """
    set_clause = sql_for_partial_update(data, JOB_JS_TO_SQL, placeholder="?")
    id_idx = len(set_clause.values) + 1

    try:
        cursor = conn.execute(
            f"UPDATE jobs SET {set_clause.text} WHERE id = ?{id_idx}",
            [*set_clause.values, job_id],
        )
        if cursor.rowcount == 0:
            raise create_not_found_error(f"No job: {job_id}")

        logger.info("Updated job %s fields=%s", job_id, list(data))
        return _fetch_job(conn, job_id)

    except sqlite3.IntegrityError as e:
        raise create_validation_error(f"Invalid job: {sanitize_sql_error(str(e))}") from e
    except sqlite3.Error as e:
        raise create_db_error(str(e), retryable=False, original_error=e) from e


def remove(conn: sqlite3.Connection, job_id: int) -> None:
    """
    Delete a job.

    Raises:
        ToolError: NOT_FOUND if no such job
    """
    try:
        cursor = conn.execute("DELETE FROM jobs WHERE id = ?", (job_id,))
        if cursor.rowcount == 0:
            raise create_not_found_error(f"No job: {job_id}")
        logger.info("Deleted job %s", job_id)

    except sqlite3.Error as e:
        raise create_db_error(str(e), retryable=False, original_error=e) from e
