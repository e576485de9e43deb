"""Recommendation pipeline that coordinates search, caching and enrichment."""

from __future__ import annotations

import logging
import math
import random
import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator

from outfit_reco.cache.keys import DEFAULT_COUNT, reco_cache_key
from outfit_reco.cache.store import Rationale, RationaleCache, ResultCache
from outfit_reco.catalog.models import CatalogIndex, Product
from outfit_reco.errors import InputError, NotFoundError, RationaleValidationError
from outfit_reco.metrics.prometheus_exporter import (
    outfit_generation_seconds,
    recommendation_requests_total,
    result_cache_lookups_total,
)
from outfit_reco.recommender.engine import generate
from outfit_reco.recommender.outfit import OutfitCandidate
from outfit_reco.workers.jobs import EnrichmentJob
from outfit_reco.workers.queue import DISPATCH_ERRORS, EnrichmentQueue

logger = logging.getLogger(__name__)

MIN_COUNT = 1
MAX_COUNT = 10


class ReasoningStatus(str, Enum):
    READY = "ready"
    PENDING = "pending"


def _optional_text(value: str | None) -> str | None:
    if value is None:
        return None
    cleaned = value.strip().lower()
    return cleaned or None


@dataclass(frozen=True, slots=True)
class RecommendationRequest:
    """Validated request parameters."""

    base_sku: str
    budget: float | None = None
    season: str | None = None
    occasion: str | None = None
    count: int = DEFAULT_COUNT

    @classmethod
    def from_query(
        cls,
        base_sku: str | None,
        *,
        budget: str | None = None,
        season: str | None = None,
        occasion: str | None = None,
        count: str | None = None,
    ) -> "RecommendationRequest":
        """Parse raw query-string values, raising :class:`InputError` on bad input."""

        sku = (base_sku or "").strip()
        if not sku:
            raise InputError("base_sku is required")

        parsed_budget: float | None = None
        if budget not in (None, ""):
            try:
                parsed_budget = float(budget)
            except ValueError as exc:
                raise InputError("budget must be a number") from exc
            if not math.isfinite(parsed_budget) or parsed_budget <= 0:
                raise InputError("budget must be a positive number")

        parsed_count = DEFAULT_COUNT
        if count not in (None, ""):
            try:
                parsed_count = int(float(count))
            except (ValueError, OverflowError) as exc:
                raise InputError("count must be an integer") from exc
        parsed_count = max(MIN_COUNT, min(MAX_COUNT, parsed_count))

        return cls(
            base_sku=sku,
            budget=parsed_budget,
            season=_optional_text(season),
            occasion=_optional_text(occasion),
            count=parsed_count,
        )

    @property
    def cache_key(self) -> str:
        return reco_cache_key(
            self.base_sku,
            budget=self.budget,
            season=self.season,
            occasion=self.occasion,
            count=self.count,
        )


@dataclass(slots=True)
class EnrichedOutfit:
    outfit: OutfitCandidate
    status: ReasoningStatus
    rationale: Rationale | None = None

    def to_dict(self) -> dict[str, Any]:
        outfit = self.outfit
        return {
            "reco_id": outfit.reco_id,
            "top": outfit.top.to_dict(),
            "bottom": outfit.bottom.to_dict(),
            "footwear": outfit.footwear.to_dict(),
            "accessories": [item.to_dict() for item in outfit.accessories],
            "match_score": outfit.match_score,
            "total_price": outfit.total_price,
            "reasoning_fast": list(outfit.reasons),
            "ai_reasoning_status": self.status.value,
            "ai_reasoning": self.rationale.model_dump() if self.rationale else None,
        }


@dataclass(slots=True)
class RecommendationResult:
    base_sku: str
    cached: bool
    latency_ms: int
    outfits: list[EnrichedOutfit] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "base_sku": self.base_sku,
            "cached": self.cached,
            "latency_ms": self.latency_ms,
            "outfits": [outfit.to_dict() for outfit in self.outfits],
        }


@dataclass(slots=True)
class _KeyLock:
    lock: threading.Lock = field(default_factory=threading.Lock)
    holders: int = 0


class RecommendationOrchestrator:
    """Serves recommendations without ever waiting on rationale generation."""

    def __init__(
        self,
        catalog: CatalogIndex,
        result_cache: ResultCache,
        rationale_cache: RationaleCache,
        queue: EnrichmentQueue,
        *,
        rng: random.Random | None = None,
    ) -> None:
        self._catalog = catalog
        self._result_cache = result_cache
        self._rationale_cache = rationale_cache
        self._queue = queue
        self._rng = rng or random.Random()
        self._locks: dict[str, _KeyLock] = {}
        self._locks_guard = threading.Lock()

    @contextmanager
    def _locked(self, key: str) -> Iterator[None]:
        """Hold the lock for ``key``; the entry is dropped once no request holds it."""

        with self._locks_guard:
            entry = self._locks.get(key)
            if entry is None:
                entry = self._locks[key] = _KeyLock()
            entry.holders += 1
        try:
            with entry.lock:
                yield
        finally:
            with self._locks_guard:
                entry.holders -= 1
                if entry.holders == 0:
                    del self._locks[key]

    def recommend(self, request: RecommendationRequest) -> RecommendationResult:
        """Return cached or freshly generated outfits with whatever rationale is ready."""

        started = time.perf_counter()
        recommendation_requests_total.inc()

        base = self._catalog.get(request.base_sku)
        if base is None:
            raise NotFoundError("Base product not found")

        outfits, cached = self._load_or_generate(base, request)
        enriched = [self._attach_rationale(base, outfit, request) for outfit in outfits]

        return RecommendationResult(
            base_sku=request.base_sku,
            cached=cached,
            latency_ms=int((time.perf_counter() - started) * 1000),
            outfits=enriched,
        )

    def _load_or_generate(
        self, base: Product, request: RecommendationRequest
    ) -> tuple[list[OutfitCandidate], bool]:
        key = request.cache_key
        outfits = self._result_cache.get(key)
        if outfits is not None:
            result_cache_lookups_total.labels(outcome="hit").inc()
            return outfits, True

        # concurrent identical requests wait here instead of repeating the search
        with self._locked(key):
            outfits = self._result_cache.get(key)
            if outfits is not None:
                result_cache_lookups_total.labels(outcome="hit").inc()
                return outfits, True

            result_cache_lookups_total.labels(outcome="miss").inc()
            with outfit_generation_seconds.time():
                outfits = generate(
                    base,
                    self._catalog.by_role,
                    request.count,
                    budget=request.budget,
                    season=request.season,
                    occasion=request.occasion,
                    rng=self._rng,
                )
            self._result_cache.put(key, outfits)
            logger.info("Generated %d outfits for %s", len(outfits), key)
            return outfits, False

    def _attach_rationale(
        self, base: Product, outfit: OutfitCandidate, request: RecommendationRequest
    ) -> EnrichedOutfit:
        try:
            rationale = self._rationale_cache.get(outfit.reco_id)
        except RationaleValidationError:
            logger.warning("Discarding corrupt rationale for %s", outfit.reco_id)
            self._rationale_cache.delete(outfit.reco_id)
            rationale = None

        if rationale is not None:
            return EnrichedOutfit(outfit, ReasoningStatus.READY, rationale)

        self._enqueue(base, outfit, request)
        return EnrichedOutfit(outfit, ReasoningStatus.PENDING)

    def _enqueue(self, base: Product, outfit: OutfitCandidate, request: RecommendationRequest) -> None:
        job = EnrichmentJob.from_outfit(
            base,
            outfit,
            budget=request.budget,
            season=request.season,
            occasion=request.occasion,
        )
        try:
            self._queue.enqueue(job)
        except DISPATCH_ERRORS:
            logger.exception("Failed to enqueue enrichment job %s", outfit.reco_id)
