"""
Request parsing dependencies for person routes.

Query and path values are taken as raw strings and parsed here so invalid
input produces the API's own 400 messages instead of FastAPI's 422 payload.
"""

from __future__ import annotations

import logging

from fastapi import Query, Request

from core.errors import ValidationError

from .service import PersonService

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10

# Postgres BIGINT / INTEGER ranges.
MAX_BIGINT = 2**63 - 1
MAX_INTEGER = 2**31 - 1

logger = logging.getLogger(__name__)


def _positive_int(raw: str | None, *, default: int | None, message: str) -> int:
    value = (raw or "").strip()
    if not value and default is not None:
        return default
    try:
        parsed = int(value)
    except ValueError:
        logger.debug("invalid_integer value=%r", raw)
        raise ValidationError(message) from None
    if parsed < 1 or parsed > MAX_BIGINT:
        logger.debug("out_of_range_integer value=%r", raw)
        raise ValidationError(message)
    return parsed


def get_person_service(request: Request) -> PersonService:
    return request.app.state.person_service


def person_id_path(person_id: str) -> int:
    return _positive_int(person_id, default=None, message="Invalid ID")


def pagination(
    page: str | None = Query(default=None),
    limit: str | None = Query(default=None),
) -> tuple[int, int]:
    parsed_page = _positive_int(page, default=DEFAULT_PAGE, message="Invalid page number")
    parsed_limit = _positive_int(limit, default=DEFAULT_LIMIT, message="Invalid limit")
    # OFFSET is bound as BIGINT.
    if (parsed_page - 1) * parsed_limit > MAX_BIGINT:
        raise ValidationError("Invalid page number")
    return parsed_page, parsed_limit


def person_filters(
    name: str | None = Query(default=None),
    surname: str | None = Query(default=None),
    age: str | None = Query(default=None),
    gender: str | None = Query(default=None),
    nationality: str | None = Query(default=None),
) -> dict[str, str | int]:
    filters: dict[str, str | int] = {}
    if name and name.strip():
        filters["name"] = name.strip()
    if surname and surname.strip():
        filters["surname"] = surname.strip()
    if age and age.strip():
        try:
            parsed_age = int(age.strip())
        except ValueError:
            raise ValidationError("Invalid age filter") from None
        if not 0 <= parsed_age <= MAX_INTEGER:
            raise ValidationError("Invalid age filter")
        filters["age"] = parsed_age
    if gender and gender.strip():
        filters["gender"] = gender.strip().lower()
    if nationality and nationality.strip():
        filters["nationality"] = nationality.strip().upper()
    return filters
