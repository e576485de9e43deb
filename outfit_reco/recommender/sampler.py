"""Candidate filtering and relevance-biased sampling."""

from __future__ import annotations

import math
import random
from typing import Iterable, Sequence

from outfit_reco.catalog.models import Product

EXPLOIT_SHARE = 0.6


def jaccard_similarity(left: Iterable[str], right: Iterable[str], *, empty: float = 0.5) -> float:
    """Jaccard index of two tag collections; ``empty`` is returned when both are empty."""

    a, b = set(left), set(right)
    if not a and not b:
        return empty
    union = len(a | b)
    return len(a & b) / union if union else 0.0


def gender_compatible(base: Product, candidate: Product) -> bool:
    return not base.gender or not candidate.gender or candidate.gender == base.gender


def _declares_or_matches(declared: frozenset[str], wanted: str | None) -> bool:
    if not wanted or not declared:
        return True
    return wanted.lower() in declared


def passes_constraints(
    product: Product,
    *,
    budget: float | None = None,
    season: str | None = None,
    occasion: str | None = None,
) -> bool:
    """Single-item sanity checks applied before combinations are built.

    Products without season or occasion tags pass any season or occasion filter.
    """

    if budget and product.price > budget * 0.5:
        return False
    if not _declares_or_matches(product.seasons, season):
        return False
    return _declares_or_matches(product.occasions, occasion)


def filter_candidates(
    products: Sequence[Product],
    base: Product,
    *,
    budget: float | None = None,
    season: str | None = None,
    occasion: str | None = None,
) -> list[Product]:
    """Drop the base item, gender mismatches and products violating the constraints."""

    return [
        product
        for product in products
        if product.sku
        and product.sku != base.sku
        and gender_compatible(base, product)
        and passes_constraints(product, budget=budget, season=season, occasion=occasion)
    ]


def sample_candidates(
    products: Sequence[Product],
    size: int,
    base_tags: Iterable[str],
    rng: random.Random | None = None,
) -> list[Product]:
    """Keep the most tag-similar 60% and fill the rest with a random draw."""

    if len(products) <= size:
        return list(products)

    rng = rng or random.Random()
    base_set = set(base_tags)
    ranked = sorted(
        products,
        key=lambda product: jaccard_similarity(base_set, product.tags),
        reverse=True,
    )
    exploit = math.floor(size * EXPLOIT_SHARE)
    selected = ranked[:exploit]
    remaining = ranked[exploit:]
    selected.extend(rng.sample(remaining, min(size - exploit, len(remaining))))
    return selected


def select_candidates(
    products: Sequence[Product],
    base: Product,
    size: int,
    *,
    budget: float | None = None,
    season: str | None = None,
    occasion: str | None = None,
    rng: random.Random | None = None,
) -> list[Product]:
    """Filter then sample one role's product list."""

    eligible = filter_candidates(products, base, budget=budget, season=season, occasion=occasion)
    return sample_candidates(eligible, size, base.tags, rng)
