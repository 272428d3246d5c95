"""
SQL fragment builders for the company and job repositories.

Two clause shapes are supported and nothing more:

- an equality SET list for partial updates (``sql_for_partial_update``)
- a conjunctive WHERE list over a fixed set of filter kinds
  (``sql_for_filters``)

Both return an ``SqlClause`` whose ``values`` must be bound, in order, to the
numbered placeholders in ``text``. Placeholders are 1-based and contiguous.
"""

import logging
from enum import Enum
from typing import Any, List, Mapping, NamedTuple, Optional, Sequence

from models.errors import create_validation_error

logger = logging.getLogger(__name__)

# Postgres-style ``$1``; SQLite callers pass "?" to get ``?1``.
DEFAULT_PLACEHOLDER = "$"
DEFAULT_LIKE_OPERATOR = "ILIKE"
LIKE_ESCAPE_CHAR = "\\"


class SqlClause(NamedTuple):
    """SQL fragment plus the parameter list bound to its placeholders."""

    text: str
    values: List[Any]


class FilterKind(str, Enum):
    """Comparison shapes a filter rule can produce."""

    CONTAINS = "contains"
    MIN = "min"
    MIN_EXCLUSIVE = "min_exclusive"
    MAX = "max"
    FLAG = "flag"


class FilterRule(NamedTuple):
    """A recognized filter key and the column predicate it maps to."""

    key: str
    column: str
    kind: FilterKind


def escape_like(value: Any) -> str:
    """Escape LIKE wildcards so the value matches literally."""
    text = str(value)
    for char in (LIKE_ESCAPE_CHAR, "%", "_"):
        text = text.replace(char, LIKE_ESCAPE_CHAR + char)
    return text


def sql_for_partial_update(
    data: Mapping[str, Any],
    js_to_sql: Optional[Mapping[str, str]] = None,
    placeholder: str = DEFAULT_PLACEHOLDER,
) -> SqlClause:
    """
    Build the SET clause of a partial UPDATE.

    Each key of ``data`` is translated to its column name through
    ``js_to_sql`` (keys without a translation are used verbatim) and emitted
    as ``"<column>"=<placeholder><n>``.

    Args:
        data: Fields to update, in bind order
        js_to_sql: External field name -> column name
        placeholder: Placeholder prefix ("$" or "?")

    Returns:
        SqlClause such as ('"first_name"=$1, "age"=$2', ['Aliya', 32])

    Raises:
        ToolError: VALIDATION_ERROR if ``data`` is empty
    """
    if not data:
        raise create_validation_error("No data")

    translations = js_to_sql or {}
    cols = []
    values = []
    for idx, (key, value) in enumerate(data.items(), start=1):
        column = translations.get(key, key)
        cols.append(f'"{column}"={placeholder}{idx}')
        values.append(value)

    return SqlClause(", ".join(cols), values)


def check_min_max(
    filters: Mapping[str, Any], min_key: Optional[str], max_key: Optional[str]
) -> None:
    """
    Reject a lower bound that exceeds the upper bound.

    Only applies when both bounds are supplied (not None).

    Raises:
        ToolError: VALIDATION_ERROR on an inverted range
    """
    if min_key is None or max_key is None:
        return
    low = filters.get(min_key)
    high = filters.get(max_key)
    if low is not None and high is not None and low > high:
        logger.debug("Rejected filter range %s=%r > %s=%r", min_key, low, max_key, high)
        raise create_validation_error("Invalid min/max range")


def _contains_predicate(
    column: str,
    marker: str,
    like_operator: str,
    case_fold: Optional[str],
    like_escape: bool,
) -> str:
    if case_fold:
        column = f"{case_fold}({column})"
        marker = f"{case_fold}({marker})"
    predicate = f"{column} {like_operator} {marker}"
    if like_escape:
        predicate += f" ESCAPE '{LIKE_ESCAPE_CHAR}'"
    return predicate


def sql_for_filters(
    filters: Optional[Mapping[str, Any]],
    rules: Sequence[FilterRule],
    placeholder: str = DEFAULT_PLACEHOLDER,
    like_operator: str = DEFAULT_LIKE_OPERATOR,
    case_fold: Optional[str] = None,
    like_escape: bool = False,
    min_key: Optional[str] = None,
    max_key: Optional[str] = None,
) -> SqlClause:
    """
    Build the predicate list of a WHERE clause.

    Every supplied filter contributes one predicate and the predicates are
    joined with AND. Filters set to None count as not supplied, and a falsy
    FLAG filter contributes nothing. CONTAINS values match literally, with
    ``%``, ``_`` and the escape character escaped. When nothing applies the
    clause text is empty and the caller must leave out the WHERE keyword.

    Args:
        filters: Filter key -> value, in bind order
        rules: Filters recognized for this entity
        placeholder: Placeholder prefix ("$" or "?")
        like_operator: Operator used for CONTAINS filters
        case_fold: SQL function applied to both sides of a CONTAINS match
        like_escape: Append an explicit ESCAPE clause to CONTAINS matches
        min_key: Filter key holding the lower bound of a range check
        max_key: Filter key holding the upper bound of a range check

    Returns:
        SqlClause such as ('salary >= $1 AND title ILIKE $2', [50, '%eng%'])

    Raises:
        ToolError: VALIDATION_ERROR for an unknown key or inverted range
    """
    if not filters:
        return SqlClause("", [])

    rules_by_key = {rule.key: rule for rule in rules}
    for key in filters:
        if key not in rules_by_key:
            logger.debug("Rejected unknown filter key %r", key)
            raise create_validation_error(f"Invalid filter: {key}")

    check_min_max(filters, min_key, max_key)

    predicates = []
    values: List[Any] = []
    for key, value in filters.items():
        if value is None:
            continue
        rule = rules_by_key[key]

        if rule.kind == FilterKind.FLAG:
            if value:
                predicates.append(f"{rule.column} <> 0")
            continue

        # Bound parameter: the index is the next slot in ``values``.
        marker = f"{placeholder}{len(values) + 1}"
        if rule.kind == FilterKind.CONTAINS:
            predicates.append(
                _contains_predicate(rule.column, marker, like_operator, case_fold, like_escape)
            )
            values.append(f"%{escape_like(value)}%")
        elif rule.kind == FilterKind.MIN:
            predicates.append(f"{rule.column} >= {marker}")
            values.append(value)
        elif rule.kind == FilterKind.MIN_EXCLUSIVE:
            predicates.append(f"{rule.column} > {marker}")
            values.append(value)
        elif rule.kind == FilterKind.MAX:
            predicates.append(f"{rule.column} <= {marker}")
            values.append(value)

    return SqlClause(" AND ".join(predicates), values)


def where_sql(clause: SqlClause) -> str:
    """Render a filter clause as a WHERE keyword line, or '' when empty."""
    if not clause.text:
        return ""
    return f"WHERE {clause.text}"
