"""
Demographic predictor clients (agify / genderize / nationalize).

Used endpoints (each takes `?name=`):
- agify        -> {"age": 42, ...}
- genderize    -> {"gender": "male" | "female" | null, ...}
- nationalize  -> {"country": [{"country_id": "US", "probability": 0.4}, ...]}

Every predictor raises `EnrichmentError` on any failure. `enrich()` is the
best-effort entry point: it runs all three concurrently and leaves a field
`None` when its predictor fails.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any

import httpx

from core.config import Settings
from core.errors import EnrichmentError

KNOWN_GENDERS = {"male", "female"}
FALLBACK_GENDER = "other"


@dataclass(frozen=True)
class Enrichment:
    age: int | None = None
    gender: str | None = None
    nationality: str | None = None


def normalize_gender(value: Any) -> str:
    if isinstance(value, str) and value in KNOWN_GENDERS:
        return value
    return FALLBACK_GENDER


def pick_nationality(countries: Any) -> str | None:
    """
    Return the country_id with the strictly highest probability. Ties keep
    the first one seen; malformed entries are skipped.
    """
    if not isinstance(countries, list):
        raise EnrichmentError("nationalize returned no country list.")

    best_id: str | None = None
    best_prob = float("-inf")
    for item in countries:
        if not isinstance(item, dict):
            continue
        country_id = item.get("country_id")
        prob = item.get("probability")
        if not isinstance(country_id, str) or not country_id.strip():
            continue
        if isinstance(prob, bool) or not isinstance(prob, (int, float)):
            continue
        if prob > best_prob:
            best_prob = float(prob)
            best_id = country_id.strip().upper()
    return best_id


class EnrichmentClient:
    def __init__(
        self,
        *,
        agify_url: str,
        genderize_url: str,
        nationalize_url: str,
        http_client: httpx.AsyncClient,
        logger: logging.Logger | None = None,
    ) -> None:
        self.agify_url = agify_url
        self.genderize_url = genderize_url
        self.nationalize_url = nationalize_url
        self._http = http_client
        self._log = logger or logging.getLogger(__name__)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        http_client: httpx.AsyncClient | None = None,
        logger: logging.Logger | None = None,
    ) -> "EnrichmentClient":
        return cls(
            agify_url=settings.agify_url,
            genderize_url=settings.genderize_url,
            nationalize_url=settings.nationalize_url,
            http_client=http_client or httpx.AsyncClient(timeout=settings.enrichment_timeout_s),
            logger=logger,
        )

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _get_json(self, url: str, name: str) -> dict[str, Any]:
        try:
            resp = await self._http.get(url, params={"name": name})
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise EnrichmentError(f"Request to {url} failed: {exc!r}") from exc

        if resp.status_code != 200:
            body = resp.text[:200]
            raise EnrichmentError(f"{url} responded {resp.status_code}: {body}")

        try:
            data = resp.json()
        except ValueError as exc:
            raise EnrichmentError(f"{url} returned invalid JSON.") from exc
        if not isinstance(data, dict):
            raise EnrichmentError(f"{url} returned a non-object payload.")
        return data

    async def predict_age(self, name: str) -> int:
        data = await self._get_json(self.agify_url, name)
        age = data.get("age")
        if isinstance(age, bool) or not isinstance(age, int):
            raise EnrichmentError(f"agify returned no age for {name!r}.")
        return age

    async def predict_gender(self, name: str) -> str:
        data = await self._get_json(self.genderize_url, name)
        return normalize_gender(data.get("gender"))

    async def predict_nationality(self, name: str) -> str | None:
        data = await self._get_json(self.nationalize_url, name)
        return pick_nationality(data.get("country"))

    async def _best_effort(self, field: str, coro: Any, name: str) -> Any:
        try:
            return await coro
        except EnrichmentError as exc:
            self._log.debug("enrichment_failed field=%s name=%s error=%s", field, name, exc)
            return None

    async def enrich(self, name: str) -> Enrichment:
        age, gender, nationality = await asyncio.gather(
            self._best_effort("age", self.predict_age(name), name),
            self._best_effort("gender", self.predict_gender(name), name),
            self._best_effort("nationality", self.predict_nationality(name), name),
        )
        return Enrichment(age=age, gender=gender, nationality=nationality)
