from __future__ import annotations

from typing import Any

import pytest

from core import db


class RecordingDB:
    """
    Stands in for `core.db`: records every statement and returns canned results.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, str, tuple[Any, ...]]] = []
        self.row: dict[str, Any] | None = None
        self.rows: list[dict[str, Any]] = []
        self.value: Any = None
        self.affected = 1
        self.error: BaseException | None = None

    def _record(self, kind: str, sql: str, args: tuple[Any, ...]) -> None:
        self.calls.append((kind, " ".join(sql.split()), args))
        if self.error is not None:
            raise self.error

    @property
    def last_sql(self) -> str:
        return self.calls[-1][1]

    @property
    def last_args(self) -> tuple[Any, ...]:
        return self.calls[-1][2]

    async def fetch_one(self, sql: str, *args: Any) -> dict[str, Any] | None:
        self._record("fetch_one", sql, args)
        return self.row

    async def fetch_all(self, sql: str, *args: Any) -> list[dict[str, Any]]:
        self._record("fetch_all", sql, args)
        return self.rows

    async def fetch_val(self, sql: str, *args: Any) -> Any:
        self._record("fetch_val", sql, args)
        return self.value

    async def execute(self, sql: str, *args: Any) -> int:
        self._record("execute", sql, args)
        return self.affected


@pytest.fixture()
def fake_db(monkeypatch) -> RecordingDB:
    fake = RecordingDB()
    for name in ("fetch_one", "fetch_all", "fetch_val", "execute"):
        monkeypatch.setattr(db, name, getattr(fake, name))
    return fake


def person_row(person_id: int, name: str = "Ivan", surname: str = "Petrov", **extra: Any) -> dict[str, Any]:
    row = {
        "id": person_id,
        "name": name,
        "surname": surname,
        "patronymic": None,
        "age": None,
        "gender": None,
        "nationality": None,
    }
    row.update(extra)
    return row


@pytest.fixture()
def make_row():
    return person_row
