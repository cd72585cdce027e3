from __future__ import annotations

import logging
from typing import Any

import pytest
from fastapi.testclient import TestClient

import main
from core.errors import NotFoundError, StorageError, ValidationError
from persons.schemas import Person, PersonCreateRequest


class StubService:
    def __init__(self) -> None:
        self.calls: list[tuple[str, Any]] = []
        self.error: Exception | None = None
        self.persons = [
            Person(id=1, name="Anna", surname="Ivanova", gender="female"),
            Person(id=2, name="Ivan", surname="Petrov", age=30, gender="male", nationality="RU"),
        ]

    def _maybe_fail(self) -> None:
        if self.error is not None:
            raise self.error

    async def create_person(self, request: PersonCreateRequest) -> Person:
        self.calls.append(("create", request))
        self._maybe_fail()
        return Person(id=3, name=request.name, surname=request.surname, patronymic=request.patronymic, age=25)

    async def get_person(self, person_id: int) -> Person:
        self.calls.append(("get", person_id))
        self._maybe_fail()
        for person in self.persons:
            if person.id == person_id:
                return person
        raise NotFoundError(person_id=person_id)

    async def list_persons(self, *, page: int, limit: int, filters: dict) -> list[Person]:
        self.calls.append(("list", (page, limit, filters)))
        self._maybe_fail()
        return self.persons

    async def update_person(self, person: Person) -> None:
        self.calls.append(("update", person))
        self._maybe_fail()

    async def patch_person(self, person_id: int, changes: dict) -> None:
        self.calls.append(("patch", (person_id, changes)))
        if not changes:
            raise ValidationError("No fields to update.")
        self._maybe_fail()

    async def delete_person(self, person_id: int) -> None:
        self.calls.append(("delete", person_id))
        self._maybe_fail()


@pytest.fixture()
def service() -> StubService:
    return StubService()


@pytest.fixture()
def client(service) -> TestClient:
    app = main.create_app(use_lifespan=False)
    app.state.person_service = service
    return TestClient(app)


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_create_person(client, service):
    resp = client.post("/api/v1/persons", json={"name": " Dmitriy ", "surname": "Ushakov"})

    assert resp.status_code == 201
    assert resp.json() == {"id": 3, "name": "Dmitriy", "surname": "Ushakov", "age": 25}
    assert service.calls[0][1].name == "Dmitriy"


@pytest.mark.parametrize(
    "body",
    [
        {"surname": "Ushakov"},
        {"name": "", "surname": "Ushakov"},
        {"name": "Dmitriy", "surname": "   "},
    ],
)
def test_create_person_rejects_invalid_body(client, service, body):
    resp = client.post("/api/v1/persons", json=body)
    assert resp.status_code == 400
    assert "error" in resp.json()
    assert service.calls == []


def test_create_person_storage_failure_is_500(client, service, caplog):
    service.error = StorageError("create failed: boom", operation="create")
    with caplog.at_level(logging.DEBUG, logger="main"):
        resp = client.post("/api/v1/persons", json={"name": "Anna", "surname": "K"})
    assert not [r for r in caplog.records if r.name == "main" and r.levelno >= logging.ERROR]
    assert resp.status_code == 500
    assert resp.json() == {"error": "Internal storage error"}


def test_list_defaults_and_omits_absent_fields(client, service):
    resp = client.get("/api/v1/persons")

    assert resp.status_code == 200
    assert resp.json()[0] == {"id": 1, "name": "Anna", "surname": "Ivanova", "gender": "female"}
    assert service.calls == [("list", (1, 10, {}))]


def test_list_parses_filters(client, service):
    resp = client.get(
        "/api/v1/persons",
        params={"page": "2", "limit": "5", "name": "an", "age": "30", "gender": "", "nationality": "ru"},
    )
    assert resp.status_code == 200
    assert service.calls == [("list", (2, 5, {"name": "an", "age": 30, "nationality": "RU"}))]


@pytest.mark.parametrize(
    "params, message",
    [
        ({"page": "0"}, "Invalid page number"),
        ({"page": "abc"}, "Invalid page number"),
        ({"limit": "-1"}, "Invalid limit"),
        ({"age": "old"}, "Invalid age filter"),
        ({"page": str(2**70)}, "Invalid page number"),
        ({"limit": str(2**63)}, "Invalid limit"),
        ({"page": str(2**62), "limit": "10"}, "Invalid page number"),
        ({"age": str(2**31)}, "Invalid age filter"),
        ({"age": "-1"}, "Invalid age filter"),
    ],
)
def test_list_rejects_bad_query_before_service(client, service, params, message):
    resp = client.get("/api/v1/persons", params=params)
    assert resp.status_code == 400
    assert resp.json() == {"error": message}
    assert service.calls == []


def test_get_person(client):
    resp = client.get("/api/v1/persons/2")
    assert resp.status_code == 200
    assert resp.json()["nationality"] == "RU"


def test_get_person_not_found(client):
    resp = client.get("/api/v1/persons/99")
    assert resp.status_code == 404
    assert resp.json() == {"error": "Person not found"}


@pytest.mark.parametrize("raw_id", ["abc", "0", "-4", str(2**63), str(2**70)])
def test_invalid_id_is_400(client, service, raw_id):
    assert client.get(f"/api/v1/persons/{raw_id}").json() == {"error": "Invalid ID"}
    assert client.delete(f"/api/v1/persons/{raw_id}").status_code == 400
    assert service.calls == []


def test_update_person_replaces_all_fields(client, service):
    resp = client.put(
        "/api/v1/persons/2",
        json={"id": 999, "name": "Ivan", "surname": "Sidorov", "age": 31, "nationality": "kz"},
    )

    assert resp.status_code == 200
    assert resp.json() == {"message": "Person updated"}
    op, person = service.calls[0]
    assert op == "update"
    assert person == Person(id=2, name="Ivan", surname="Sidorov", age=31, nationality="KZ")


def test_update_person_rejects_unknown_gender(client, service):
    resp = client.put("/api/v1/persons/2", json={"name": "I", "surname": "S", "gender": "robot"})
    assert resp.status_code == 400
    assert service.calls == []


def test_update_missing_person_is_404(client, service):
    service.error = NotFoundError(person_id=2)
    resp = client.put("/api/v1/persons/2", json={"name": "I", "surname": "S"})
    assert resp.status_code == 404


def test_patch_passes_only_present_fields(client, service):
    resp = client.patch("/api/v1/persons/1", json={"age": 40, "patronymic": None})

    assert resp.status_code == 200
    assert resp.json() == {"message": "Person patched"}
    assert service.calls == [("patch", (1, {"patronymic": None, "age": 40}))]


def test_empty_patch_is_400(client):
    resp = client.patch("/api/v1/persons/1", json={})
    assert resp.status_code == 400
    assert resp.json() == {"error": "No fields to update."}


def test_patch_null_name_is_400(client, service):
    resp = client.patch("/api/v1/persons/1", json={"name": None})
    assert resp.status_code == 400
    assert service.calls == []


def test_delete_person(client, service):
    resp = client.delete("/api/v1/persons/2")
    assert resp.status_code == 200
    assert resp.json() == {"message": "Person deleted"}
    assert service.calls == [("delete", 2)]


def test_delete_missing_person_is_404(client, service):
    service.error = NotFoundError(person_id=5)
    assert client.delete("/api/v1/persons/5").status_code == 404


def test_largest_bigint_id_reaches_service(client, service):
    resp = client.get(f"/api/v1/persons/{2**63 - 1}")
    assert resp.status_code == 404
    assert service.calls == [("get", 2**63 - 1)]


def test_last_representable_page_is_accepted(client, service):
    resp = client.get("/api/v1/persons", params={"page": str(2**62), "limit": "1"})
    assert resp.status_code == 200
    assert service.calls == [("list", (2**62, 1, {}))]
