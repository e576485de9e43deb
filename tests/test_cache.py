"""Tests for cache keys, fingerprints and the Redis-backed caches."""

from __future__ import annotations

import json

import pytest

from outfit_reco.cache.keys import (
    budget_bucket,
    outfit_fingerprint,
    rationale_cache_key,
    reco_cache_key,
)
from outfit_reco.cache.store import Rationale, RationaleCache, ResultCache
from outfit_reco.errors import RationaleValidationError
from outfit_reco.recommender.engine import generate


@pytest.mark.parametrize(
    ("budget", "expected"),
    [(None, "na"), (0, "na"), (1749, "1500"), (1750, "2000"), (2000, "2000"), (200, "0")],
)
def test_budget_bucket(budget, expected) -> None:
    assert budget_bucket(budget) == expected


def test_reco_cache_key_format() -> None:
    assert reco_cache_key("T1", budget=2100, season="summer", count=3) == "reco:v2:T1:b2000:ssummer:ona:c3"
    assert reco_cache_key("T1") == "reco:v2:T1:bna:sna:ona:c5"
    assert rationale_cache_key("abc") == "ai:v2:abc"


def test_nearby_budgets_share_a_key() -> None:
    assert reco_cache_key("T1", budget=1900, count=5) == reco_cache_key("T1", budget=2200, count=5)


def test_fingerprint_ignores_accessory_order() -> None:
    first = outfit_fingerprint("T1", "T1", "B1", "F1", ["A2", "A1"])
    second = outfit_fingerprint("T1", "T1", "B1", "F1", ["A1", "A2"])

    assert first == second
    assert len(first) == 40
    assert first != outfit_fingerprint("T1", "T1", "B2", "F1", ["A1", "A2"])


def test_result_cache_round_trip(fake_redis, catalog, base_top, rng) -> None:
    cache = ResultCache(fake_redis, catalog, ttl_seconds=1200)
    outfits = generate(base_top, catalog.by_role, 5, budget=2000, rng=rng)
    key = reco_cache_key("T1", budget=2000)

    cache.put(key, outfits)
    restored = cache.get(key)

    assert fake_redis.expiry[key] == 1200
    assert [outfit.reco_id for outfit in restored] == [outfit.reco_id for outfit in outfits]
    assert restored == outfits


def test_result_cache_miss_on_unknown_sku(fake_redis, catalog) -> None:
    cache = ResultCache(fake_redis, catalog)
    entry = {
        "reco_id": "x",
        "top": "T1",
        "bottom": "GONE",
        "footwear": "F1",
        "accessories": ["A1"],
        "match_score": 0.5,
        "total_price": 10,
    }
    fake_redis.set("key", json.dumps([entry]))

    assert cache.get("key") is None
    assert cache.get("missing") is None


def test_rationale_cache_round_trip(fake_redis) -> None:
    cache = RationaleCache(fake_redis, ttl_seconds=60)
    rationale = Rationale(paragraph="A relaxed look built around the tee.", bullets=["Style: easy"])

    cache.put("fp", rationale)

    assert cache.get("fp") == rationale
    assert fake_redis.expiry["ai:v2:fp"] == 60


def test_rationale_cache_flags_corrupt_entries(fake_redis) -> None:
    cache = RationaleCache(fake_redis)
    fake_redis.set("ai:v2:fp", '{"paragraph": "cut')

    with pytest.raises(RationaleValidationError):
        cache.get("fp")

    cache.delete("fp")
    assert cache.get("fp") is None
