"""
Person use cases.

Flow for creation:
1) Ask the predictors for age / gender / nationality (best effort)
2) Insert the person with whatever came back
3) Return the stored row with its generated id

Everything else is a pass-through to the repository that adds logging.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from core.errors import NotFoundError, ValidationError

from . import repository
from .enrichment import EnrichmentClient
from .schemas import Person, PersonCreateRequest, PersonFields


class PersonService:
    def __init__(self, enricher: EnrichmentClient, logger: logging.Logger | None = None) -> None:
        self.enricher = enricher
        self.log = logger or logging.getLogger(__name__)

    async def create_person(self, request: PersonCreateRequest) -> Person:
        enrichment = await self.enricher.enrich(request.name)
        fields = PersonFields(
            name=request.name,
            surname=request.surname,
            patronymic=request.patronymic,
            age=enrichment.age,
            gender=enrichment.gender,
            nationality=enrichment.nationality,
        )
        # Storage faults are logged with context by the repository.
        person_id = await repository.create(fields)
        self.log.info("person_created id=%s", person_id)
        return Person(id=person_id, **fields.model_dump())

    async def get_person(self, person_id: int) -> Person:
        person = await repository.get_by_id(person_id)
        if person is None:
            raise NotFoundError(person_id=person_id)
        return person

    async def list_persons(
        self,
        *,
        page: int,
        limit: int,
        filters: Mapping[str, Any] | None = None,
    ) -> list[Person]:
        persons = await repository.list_persons(page=page, limit=limit, filters=filters)
        self.log.info("persons_listed count=%s page=%s limit=%s", len(persons), page, limit)
        return persons

    async def update_person(self, person: Person) -> None:
        try:
            await repository.update(person)
        except (NotFoundError, ValidationError) as exc:
            self.log.info("update_person_rejected id=%s reason=%s", person.id, exc)
            raise
        self.log.info("person_updated id=%s", person.id)

    async def patch_person(self, person_id: int, changes: Mapping[str, Any]) -> None:
        try:
            await repository.patch(person_id, changes)
        except (NotFoundError, ValidationError) as exc:
            self.log.info("patch_person_rejected id=%s reason=%s", person_id, exc)
            raise
        self.log.info("person_patched id=%s fields=%s", person_id, sorted(changes))

    async def delete_person(self, person_id: int) -> None:
        try:
            await repository.delete(person_id)
        except (NotFoundError, ValidationError) as exc:
            self.log.info("delete_person_rejected id=%s reason=%s", person_id, exc)
            raise
        self.log.info("person_deleted id=%s", person_id)
