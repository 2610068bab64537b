"""
repositories/listing.py
-----------------------
Builds paged list queries from a normalized ListFilter.

Values always travel as parameters. The only identifiers spliced into the
SQL are the equality column (chosen by the repository, never the caller)
and the sort column, which must be a SortBy member.
"""

from typing import Any, Optional

from models.common import ListFilter, SortBy


def build_list_query(
    base_sql: str,
    filt: ListFilter,
    column: Optional[str] = None,
    value: Any = None,
) -> tuple[str, list]:
    """
    Append WHERE / ORDER BY / LIMIT / OFFSET to ``base_sql``.

    Args:
        base_sql: "SELECT ... FROM table" without a trailing semicolon.
        filt: A filter already passed through ``normalized()``.
        column: Equality filter column; only used when value is not None.
        value: Equality filter value.

    Returns:
        (sql, params) ready for Database.query.
    """
    if not isinstance(filt.sort_by, SortBy):
        raise TypeError("build_list_query expects a normalized filter")

    sql = base_sql
    params: list = []
    if column is not None and value is not None:
        sql += f" WHERE {column} = %s"
        params.append(value)

    sql += f" ORDER BY {filt.sort_by.value} {filt.direction}"
    sql += " LIMIT %s OFFSET %s;"
    params.extend([filt.page_size, filt.offset])
    return sql, params
