"""Combinatorial outfit search over the role-partitioned catalog."""

from __future__ import annotations

import itertools
import logging
import random
from dataclasses import dataclass, field
from typing import Mapping, Sequence

from outfit_reco.cache.keys import outfit_fingerprint
from outfit_reco.catalog.models import Product, Role
from outfit_reco.errors import CapacityError
from outfit_reco.recommender.outfit import OutfitCandidate
from outfit_reco.recommender.sampler import select_candidates
from outfit_reco.recommender.scorer import score_outfit
from outfit_reco.recommender.selector import BestOfSelector

logger = logging.getLogger(__name__)

MAX_ITERATIONS = 5000
QUALITY_FLOOR = 0.3
EARLY_STOP_SCORE = 0.7
DIVERSITY_WINDOW = 5
MIN_DIFFERENT_ITEMS = 3
MIN_ACCESSORIES = 2
CORE_BUDGET_SHARE = 0.8

SAMPLE_SIZES = {
    Role.TOP: 20,
    Role.BOTTOM: 20,
    Role.FOOTWEAR: 20,
    Role.ACCESSORY: 30,
    Role.OTHER: 30,
}


@dataclass(slots=True)
class SearchStats:
    """Counters describing how a search ended."""

    iterations: int = 0
    scored: int = 0
    capped: bool = False
    stopped_early: bool = False


@dataclass(slots=True)
class SearchResult:
    outfits: list[OutfitCandidate] = field(default_factory=list)
    stats: SearchStats = field(default_factory=SearchStats)


class IterationBudget:
    """Counts combinations and raises :class:`CapacityError` past the limit."""

    def __init__(self, limit: int = MAX_ITERATIONS) -> None:
        self.limit = limit
        self.used = 0

    def consume(self) -> None:
        if self.used >= self.limit:
            raise CapacityError(f"search iteration budget of {self.limit} exhausted")
        self.used += 1


def differs_enough(existing: OutfitCandidate, candidate: OutfitCandidate) -> bool:
    """True when at least ``MIN_DIFFERENT_ITEMS`` of the candidate's items are new."""

    existing_skus = set(existing.skus)
    candidate_skus = candidate.skus
    shared = sum(1 for sku in candidate_skus if sku in existing_skus)
    return shared <= max(0, len(candidate_skus) - MIN_DIFFERENT_ITEMS)


def _first_unused(products: Sequence[Product], used: set[str]) -> Product | None:
    for product in products:
        if product.sku not in used:
            return product
    return None


def _pick_accessories(
    accessories: Sequence[Product],
    others: Sequence[Product],
    used: set[str],
) -> list[Product]:
    picked: list[Product] = []
    for pool in (accessories, others):
        product = _first_unused(pool, used)
        if product is not None:
            picked.append(product)
            used.add(product.sku)
    return picked


def search(
    base: Product,
    catalog_by_role: Mapping[Role, Sequence[Product]],
    count: int = 5,
    *,
    budget: float | None = None,
    season: str | None = None,
    occasion: str | None = None,
    rng: random.Random | None = None,
    max_iterations: int = MAX_ITERATIONS,
) -> SearchResult:
    """Enumerate top x bottom x footwear combinations and keep the best ``count``."""

    if count < 1:
        raise ValueError("count must be positive")

    rng = rng or random.Random()
    candidates: dict[Role, list[Product]] = {
        role: select_candidates(
            catalog_by_role.get(role, ()),
            base,
            SAMPLE_SIZES[role],
            budget=budget,
            season=season,
            occasion=occasion,
            rng=rng,
        )
        for role in Role
    }
    # the anchor item is never substituted inside its own slot
    if base.role in (Role.TOP, Role.BOTTOM, Role.FOOTWEAR):
        candidates[base.role] = [base]

    selector: BestOfSelector[OutfitCandidate] = BestOfSelector(
        count * 3, key=lambda outfit: outfit.match_score
    )
    seen: set[str] = set()
    stats = SearchStats()
    iteration_budget = IterationBudget(max_iterations)

    combinations = itertools.product(
        candidates[Role.TOP], candidates[Role.BOTTOM], candidates[Role.FOOTWEAR]
    )
    try:
        for top, bottom, footwear in combinations:
            iteration_budget.consume()
            stats.iterations = iteration_budget.used

            if len(selector) >= count * 2 and (selector.min_score() or 0.0) > EARLY_STOP_SCORE:
                stats.stopped_early = True
                break

            core_total = top.price + bottom.price + footwear.price
            if budget and core_total > budget * CORE_BUDGET_SHARE:
                continue

            used = {top.sku, bottom.sku, footwear.sku, base.sku}
            accessories = _pick_accessories(candidates[Role.ACCESSORY], candidates[Role.OTHER], used)
            if len(accessories) < MIN_ACCESSORIES:
                continue

            total = core_total + sum(item.price for item in accessories)
            if budget and total > budget:
                continue

            result = score_outfit(
                base,
                top,
                bottom,
                footwear,
                accessories,
                budget=budget,
                season=season,
                occasion=occasion,
            )
            stats.scored += 1
            if result.score < QUALITY_FLOOR:
                continue

            reco_id = outfit_fingerprint(
                base.sku, top.sku, bottom.sku, footwear.sku, (item.sku for item in accessories)
            )
            if reco_id in seen:
                continue

            outfit = OutfitCandidate(
                reco_id=reco_id,
                top=top,
                bottom=bottom,
                footwear=footwear,
                accessories=tuple(accessories),
                match_score=result.score,
                total_price=result.total_price,
                reasons=result.reasons,
            )
            leaders = selector.sorted_desc()[:DIVERSITY_WINDOW]
            if not all(differs_enough(existing, outfit) for existing in leaders):
                continue

            seen.add(reco_id)
            selector.push(outfit)
    except CapacityError:
        stats.capped = True
        logger.debug("Search for %s hit the iteration cap of %d", base.sku, max_iterations)

    outfits = selector.sorted_desc()[:count]
    logger.debug(
        "Search for %s: %d iterations, %d scored, %d kept (capped=%s, early_stop=%s)",
        base.sku,
        stats.iterations,
        stats.scored,
        len(outfits),
        stats.capped,
        stats.stopped_early,
    )
    return SearchResult(outfits=outfits, stats=stats)


def generate(
    base: Product,
    catalog_by_role: Mapping[Role, Sequence[Product]],
    count: int = 5,
    *,
    budget: float | None = None,
    season: str | None = None,
    occasion: str | None = None,
    rng: random.Random | None = None,
) -> list[OutfitCandidate]:
    """Return up to ``count`` outfits for ``base``, best first. Empty when nothing fits."""

    return search(
        base,
        catalog_by_role,
        count,
        budget=budget,
        season=season,
        occasion=occasion,
        rng=rng,
    ).outfits
