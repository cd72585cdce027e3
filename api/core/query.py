"""
Small builder for dynamic SQL fragments with asyncpg placeholders.

Filters and partial updates are sparse, so their WHERE / SET clauses are
assembled at request time. The builder keeps the `$n` numbering and the
argument list in lockstep:

    qb = QueryBuilder()
    qb.add("name", "ILIKE", "%an%")
    qb.add("age", "=", 30)
    sql = f"SELECT ... {qb.where_clause()} LIMIT {qb.bind(10)} OFFSET {qb.bind(0)}"
    await db.fetch_all(sql, *qb.args)

Column names and operators are interpolated into SQL text, so they must come
from code, never from user input. Values are always bound.
"""

from __future__ import annotations

from typing import Any

ALLOWED_OPERATORS = {"=", "ILIKE"}


def like_pattern(value: str) -> str:
    """
    Wrap `value` for a substring match, escaping LIKE wildcards so user input
    matches literally (Postgres' default LIKE escape character is backslash).
    """
    escaped = value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class QueryBuilder:
    def __init__(self) -> None:
        self.args: list[Any] = []
        self._fragments: list[tuple[str, str, str]] = []

    def __len__(self) -> int:
        return len(self._fragments)

    def bind(self, value: Any) -> str:
        """
        Append a parameter and return its placeholder.
        """
        self.args.append(value)
        return f"${len(self.args)}"

    def add(self, column: str, operator: str, value: Any) -> "QueryBuilder":
        if operator not in ALLOWED_OPERATORS:
            raise ValueError(f"Unsupported operator: {operator}")
        self._fragments.append((column, operator, self.bind(value)))
        return self

    def where_clause(self) -> str:
        if not self._fragments:
            return ""
        return "WHERE " + " AND ".join(f"{col} {op} {ph}" for col, op, ph in self._fragments)

    def set_clause(self) -> str:
        if not self._fragments:
            raise ValueError("No columns to set.")
        # SET only ever assigns.
        return "SET " + ", ".join(f"{col} = {ph}" for col, _, ph in self._fragments)
