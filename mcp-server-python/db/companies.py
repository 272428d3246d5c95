"""
Company repository.

Query functions for the companies table. Each function takes an open
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

# External field name -> column name, for fields whose names differ
COMPANY_JS_TO_SQL = MappingProxyType(
    {
        "numEmployees": "num_employees",
        "logoUrl": "logo_url",
    }
)

COMPANY_FILTER_RULES = (
    FilterRule("name", "name", FilterKind.CONTAINS),
    FilterRule("minEmployees", "num_employees", FilterKind.MIN),
    FilterRule("maxEmployees", "num_employees", FilterKind.MAX),
)

_COMPANY_COLUMNS = """
    handle,
    name,
    description,
    num_employees AS "numEmployees",
    logo_url AS "logoUrl"
"""


def _fetch_company(conn: sqlite3.Connection, handle: str) -> Optional[Dict[str, Any]]:
    row = conn.execute(
        f"SELECT {_COMPANY_COLUMNS} FROM companies WHERE handle = ?",
        (handle,),
    ).fetchone()
    return dict(row) if row is not None else None


def create(conn: sqlite3.Connection, data: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Insert a company and return the stored record.

    Args:
        conn: Writable connection
        data: {handle, name, description, numEmployees, logoUrl}

    Returns:
        {handle, name, description, numEmployees, logoUrl}

    Raises:
        ToolError: VALIDATION_ERROR if the handle is already taken
    """
    handle = data["handle"]
    try:
        duplicate = conn.execute(
            "SELECT handle FROM companies WHERE handle = ?", (handle,)
        ).fetchone()
        if duplicate is not None:
            raise create_validation_error(f"Duplicate company: {handle}")

        conn.execute(
            """
            INSERT INTO companies (handle, name, description, num_employees, logo_url)
            VALUES (?, ?, ?, ?, ?)
            """,
            (
                handle,
                data["name"],
                data["description"],
                data.get("numEmployees"),
                data.get("logoUrl"),
            ),
        )
        logger.info("Created company %s", handle)
        return _fetch_company(conn, handle)

    except sqlite3.IntegrityError as e:
        raise create_validation_error(
            f"Invalid company: {sanitize_sql_error(str(e))}"
        ) from e
    except sqlite3.Error as e:
        raise create_db_error(str(e), retryable=False, original_error=e) from e


def find_all(
    conn: sqlite3.Connection,
    filters: Optional[Mapping[str, Any]] = None,
    limit: Optional[int] = None,
) -> List[Dict[str, Any]]:
    """
    List companies ordered by name.

    Supported filters (all applied together):
    - name: case-insensitive substring of the company name
    - minEmployees / maxEmployees: inclusive bounds on num_employees

    Raises:
        ToolError: VALIDATION_ERROR for an unknown filter or an inverted range
    """
    clause = sql_for_filters(
        filters,
        COMPANY_FILTER_RULES,
        placeholder="?",
        like_operator="LIKE",
        case_fold=CASEFOLD_FUNCTION,
        like_escape=True,
        min_key="minEmployees",
        max_key="maxEmployees",
    )
    params = list(clause.values)

    query = f"""
        SELECT {_COMPANY_COLUMNS}
        FROM companies
        {where_sql(clause)}
        ORDER BY name
    """
    if limit is not None:
        params.append(limit)
        query += f" LIMIT ?{len(params)}"

    try:
        rows = conn.execute(query, params).fetchall()
        return [dict(row) for row in rows]
    except sqlite3.Error as e:
        raise create_db_error(str(e), retryable=False, original_error=e) from e


def get(conn: sqlite3.Connection, handle: str) -> Dict[str, Any]:
    """
    Return a company with its jobs.

    Returns:
        {handle, name, description, numEmployees, logoUrl, jobs}
        where jobs is [{id, title, salary, equity}, ...]

    Raises:
        ToolError: NOT_FOUND if no such company
    """
    try:
        company = _fetch_company(conn, handle)
        if company is None:
            raise create_not_found_error(f"No company: {handle}")

        rows = conn.execute(
            """
            SELECT id, title, salary, equity
            FROM jobs
            WHERE company_handle = ?
            ORDER BY id
            """,
            (handle,),
        ).fetchall()
        company["jobs"] = [dict(row) for row in rows]
        return company

    except sqlite3.Error as e:
        raise create_db_error(str(e), retryable=False, original_error=e) from e


def update(conn: sqlite3.Connection, handle: str, data: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Partially update a company; only the supplied fields change.

    Data can include: {name, description, numEmployees, logoUrl}

    Raises:
        ToolError: VALIDATION_ERROR on empty data, NOT_FOUND if no such company
    """
    set_clause = sql_for_partial_update(data, COMPANY_JS_TO_SQL, placeholder="?")
    handle_idx = len(set_clause.values) + 1

    try:
        cursor = conn.execute(
            f"UPDATE companies SET {set_clause.text} WHERE handle = ?{handle_idx}",
            [*set_clause.values, handle],
        )
        if cursor.rowcount == 0:
            raise create_not_found_error(f"No company: {handle}")

        logger.info("Updated company %s fields=%s", handle, list(data))
        return _fetch_company(conn, handle)

    except sqlite3.IntegrityError as e:
        raise create_validation_error(
            f"Invalid company: {sanitize_sql_error(str(e))}"
        ) from e
    except sqlite3.Error as e:
        raise create_db_error(str(e), retryable=False, original_error=e) from e


def remove(conn: sqlite3.Connection, handle: str) -> None:
    """
    Delete a company (its jobs go with it).

    Raises:
        ToolError: NOT_FOUND if no such company
    """
    try:
        cursor = conn.execute("DELETE FROM companies WHERE handle = ?", (handle,))
        if cursor.rowcount == 0:
            raise create_not_found_error(f"No company: {handle}")
        logger.info("Deleted company %s", handle)

    except sqlite3.Error as e:
        raise create_db_error(str(e), retryable=False, original_error=e) from e
