"""Deterministic cache keys and outfit fingerprints.

Key formats are shared with every process that reads the cache, so changing them
requires bumping ``CACHE_VERSION``.
"""

from __future__ import annotations

import hashlib
import math
from typing import Iterable

CACHE_VERSION = "v2"
BUDGET_BUCKET = 500
DEFAULT_COUNT = 5


def budget_bucket(budget: float | None) -> str:
    """Round ``budget`` half-up to the nearest bucket; ``na`` when absent."""

    if not budget or not math.isfinite(budget):
        return "na"
    return str(int(math.floor(budget / BUDGET_BUCKET + 0.5)) * BUDGET_BUCKET)


def reco_cache_key(
    base_sku: str,
    *,
    budget: float | None = None,
    season: str | None = None,
    occasion: str | None = None,
    count: int | None = None,
) -> str:
    return (
        f"reco:{CACHE_VERSION}:{base_sku}:b{budget_bucket(budget)}"
        f":s{season or 'na'}:o{occasion or 'na'}:c{count or DEFAULT_COUNT}"
    )


def rationale_cache_key(fingerprint: str) -> str:
    return f"ai:{CACHE_VERSION}:{fingerprint}"


def job_key(fingerprint: str) -> str:
    return f"job:{CACHE_VERSION}:{fingerprint}"


def outfit_fingerprint(
    base_sku: str,
    top_sku: str,
    bottom_sku: str,
    footwear_sku: str,
    accessory_skus: Iterable[str] = (),
) -> str:
    """SHA-1 over the base and constituent SKUs; accessory order does not matter."""

    accessories = ",".join(sorted(accessory_skus))
    raw = f"{base_sku}|{top_sku}|{bottom_sku}|{footwear_sku}|{accessories}"
    return hashlib.sha1(raw.encode("utf-8")).hexdigest()
