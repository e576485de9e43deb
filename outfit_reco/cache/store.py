"""Redis-backed result and rationale caches."""

from __future__ import annotations

import json
import logging
from typing import Sequence

from pydantic import BaseModel, Field, ValidationError, field_validator
from redis import Redis

from outfit_reco.cache.keys import rationale_cache_key
from outfit_reco.catalog.models import CatalogIndex
from outfit_reco.errors import RationaleValidationError
from outfit_reco.recommender.outfit import OutfitCandidate

logger = logging.getLogger(__name__)


def create_redis(url: str) -> Redis:
    """Create a Redis client that returns ``str`` values."""

    return Redis.from_url(url, decode_responses=True)


class Rationale(BaseModel):
    """Natural-language explanation attached to an outfit."""

    paragraph: str = Field(min_length=1)
    bullets: list[str] = Field(default_factory=list)

    @field_validator("paragraph")
    @classmethod
    def _paragraph_has_text(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("paragraph is blank")
        return value


class ResultCache:
    """Maps request cache keys to generated outfit lists."""

    def __init__(self, client: Redis, catalog: CatalogIndex, ttl_seconds: int = 60 * 20) -> None:
        self._client = client
        self._catalog = catalog
        self._ttl = ttl_seconds

    def get(self, key: str) -> list[OutfitCandidate] | None:
        """Return cached outfits, or ``None`` on a miss or an unusable entry."""

        raw = self._client.get(key)
        if raw is None:
            return None
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Discarding unreadable result cache entry %s", key)
            return None
        if not isinstance(payload, list):
            return None

        outfits: list[OutfitCandidate] = []
        for entry in payload:
            outfit = OutfitCandidate.from_cache(entry, self._catalog) if isinstance(entry, dict) else None
            if outfit is None:
                logger.info("Result cache entry %s references unknown products; regenerating", key)
                return None
            outfits.append(outfit)
        return outfits

    def put(self, key: str, outfits: Sequence[OutfitCandidate]) -> None:
        body = json.dumps([outfit.to_cache() for outfit in outfits])
        self._client.set(key, body, ex=self._ttl)


class RationaleCache:
    """Stores validated rationale under the outfit fingerprint."""

    def __init__(self, client: Redis, ttl_seconds: int = 60 * 60 * 24 * 3) -> None:
        self._client = client
        self._ttl = ttl_seconds

    def get(self, fingerprint: str) -> Rationale | None:
        """Return the stored rationale.

        Raises :class:`RationaleValidationError` when an entry exists but is corrupt.
        """

        raw = self._client.get(rationale_cache_key(fingerprint))
        if raw is None:
            return None
        try:
            return Rationale.model_validate_json(raw)
        except ValidationError as exc:
            raise RationaleValidationError(
                f"Corrupt rationale cache entry for {fingerprint}"
            ) from exc

    def put(self, fingerprint: str, rationale: Rationale) -> None:
        self._client.set(
            rationale_cache_key(fingerprint),
            rationale.model_dump_json(),
            ex=self._ttl,
        )

    def delete(self, fingerprint: str) -> None:
        self._client.delete(rationale_cache_key(fingerprint))