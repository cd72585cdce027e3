"""
Person persistence (raw SQL).

Every function translates driver failures into `StorageError`, and write
operations that touch zero rows raise `NotFoundError`.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Mapping
from contextlib import asynccontextmanager
from typing import Any

import asyncpg

from core import db
from core.errors import NotFoundError, StorageError, ValidationError
from core.query import QueryBuilder, like_pattern

from .schemas import FILTER_FIELDS, WRITABLE_FIELDS, Person, PersonFields

PERSON_COLUMNS = "id, name, surname, patronymic, age, gender, nationality"

# Substring match on free text, exact match on the rest.
_FILTER_OPERATORS = {
    "name": "ILIKE",
    "surname": "ILIKE",
    "age": "=",
    "gender": "=",
    "nationality": "=",
}

logger = logging.getLogger(__name__)


@asynccontextmanager
async def _storage(operation: str, person_id: int | None = None) -> AsyncIterator[None]:
    try:
        yield
    except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError) as exc:
        logger.error("storage_failed operation=%s person_id=%s error=%s", operation, person_id, exc)
        raise StorageError(f"{operation} failed: {exc}", operation=operation, person_id=person_id) from exc


def _row_to_person(row: dict[str, Any]) -> Person:
    return Person(**row)


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def build_filters(filters: Mapping[str, Any] | None) -> QueryBuilder:
    """
    Turn caller filters into WHERE fragments. Unknown keys and blank values
    are ignored.
    """
    qb = QueryBuilder()
    filters = filters or {}
    for field in FILTER_FIELDS:
        value = filters.get(field)
        if _is_blank(value):
            continue
        operator = _FILTER_OPERATORS[field]
        if operator == "ILIKE":
            value = like_pattern(str(value).strip())
        qb.add(field, operator, value)
    return qb


async def create(person: PersonFields) -> int:
    async with _storage("create"):
        person_id = await db.fetch_val(
            """
            INSERT INTO persons (name, surname, patronymic, age, gender, nationality)
            VALUES ($1, $2, $3, $4, $5, $6)
            RETURNING id
            """,
            person.name,
            person.surname,
            person.patronymic,
            person.age,
            person.gender,
            person.nationality,
        )
    if person_id is None:
        raise StorageError("create returned no id", operation="create")
    return int(person_id)


async def get_by_id(person_id: int) -> Person | None:
    async with _storage("get", person_id):
        row = await db.fetch_one(
            f"""
            SELECT {PERSON_COLUMNS}
            FROM persons
            WHERE id = $1
            """,
            person_id,
        )
    return _row_to_person(row) if row is not None else None


async def list_persons(
    *,
    page: int = 1,
    limit: int = 10,
    filters: Mapping[str, Any] | None = None,
) -> list[Person]:
    """
    One page of persons ordered by id. `page` is 1-indexed.
    """
    qb = build_filters(filters)
    offset = (page - 1) * limit
    sql = (
        f"SELECT {PERSON_COLUMNS} FROM persons {qb.where_clause()} "
        f"ORDER BY id ASC LIMIT {qb.bind(limit)} OFFSET {qb.bind(offset)}"
    )
    async with _storage("list"):
        rows = await db.fetch_all(sql, *qb.args)
    return [_row_to_person(r) for r in rows]


async def update(person: Person) -> None:
    async with _storage("update", person.id):
        affected = await db.execute(
            """
            UPDATE persons
            SET name = $1, surname = $2, patronymic = $3, age = $4, gender = $5, nationality = $6
            WHERE id = $7
            """,
            person.name,
            person.surname,
            person.patronymic,
            person.age,
            person.gender,
            person.nationality,
            person.id,
        )
    if affected == 0:
        raise NotFoundError(person_id=person.id)


async def patch(person_id: int, changes: Mapping[str, Any]) -> None:
    qb = QueryBuilder()
    for field in WRITABLE_FIELDS:
        if field in changes:
            qb.add(field, "=", changes[field])
    if len(qb) == 0:
        raise ValidationError("No fields to update.")

    sql = f"UPDATE persons {qb.set_clause()} WHERE id = {qb.bind(person_id)}"
    async with _storage("patch", person_id):
        affected = await db.execute(sql, *qb.args)
    if affected == 0:
        raise NotFoundError(person_id=person_id)


async def delete(person_id: int) -> None:
    async with _storage("delete", person_id):
        affected = await db.execute("DELETE FROM persons WHERE id = $1", person_id)
    if affected == 0:
        raise NotFoundError(person_id=person_id)
