"""Outfit scoring utilities."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from outfit_reco.catalog.models import Product
from outfit_reco.recommender.sampler import jaccard_similarity

NEUTRAL_COLORS = frozenset({"black", "white", "grey", "gray", "cream", "beige", "tan", "brown"})

STYLE_WEIGHT = 0.35
COLOR_WEIGHT = 0.25
OCCASION_WEIGHT = 0.20
SEASON_WEIGHT = 0.10
BUDGET_WEIGHT = 0.10

UNCONSTRAINED = 0.6


@dataclass(frozen=True, slots=True)
class OutfitScore:
    """Weighted match score with one reason string per sub-score."""

    score: float
    total_price: float
    reasons: tuple[str, ...]


def style_match(base: Product, items: Sequence[Product]) -> float:
    if not items:
        return 0.0
    similarities = [jaccard_similarity(base.tags, item.tags, empty=0.0) for item in items]
    return sum(similarities) / len(similarities)


def color_harmony(items: Sequence[Product]) -> float:
    """More loud colours in one outfit means lower harmony."""

    colors = set().union(*(item.colors for item in items)) if items else set()
    if not colors:
        return 0.6
    if len(colors) == 1:
        return 0.9
    loud = colors - NEUTRAL_COLORS
    if len(loud) <= 1:
        return 0.85
    if len(loud) == 2:
        return 0.65
    return 0.45


def tag_fit(items: Sequence[Product], wanted: str | None, attribute: str) -> float:
    if not wanted:
        return UNCONSTRAINED
    value = wanted.lower()
    hits = sum(1 for item in items if value in getattr(item, attribute))
    return min(1.0, 0.4 + hits / max(1, len(items)))


def budget_alignment(total: float, budget: float | None) -> float:
    if not budget:
        return UNCONSTRAINED
    if total > budget:
        return 0.0
    return 0.5 + 0.5 * (total / budget)


def _amount(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else f"{value:.2f}"


def score_outfit(
    base: Product,
    top: Product,
    bottom: Product,
    footwear: Product,
    accessories: Sequence[Product] = (),
    *,
    budget: float | None = None,
    season: str | None = None,
    occasion: str | None = None,
) -> OutfitScore:
    """Score one candidate outfit against the base product and constraints."""

    items = [top, bottom, footwear, *accessories]
    total = sum(item.price for item in items)

    style = style_match(base, items)
    color = color_harmony(items)
    occasion_fit = tag_fit(items, occasion, "occasions")
    season_fit = tag_fit(items, season, "seasons")
    budget_fit = budget_alignment(total, budget)

    score = (
        STYLE_WEIGHT * style
        + COLOR_WEIGHT * color
        + OCCASION_WEIGHT * occasion_fit
        + SEASON_WEIGHT * season_fit
        + BUDGET_WEIGHT * budget_fit
    )

    budget_note = f"total {_amount(total)}" + (f" / {_amount(budget)}" if budget else "")
    reasons = (
        f"Style match {style:.2f} (tag overlap)",
        f"Color harmony {color:.2f} (neutral/loud rule)",
        f"Occasion fit {occasion_fit:.2f} ({occasion or 'not specified'})",
        f"Season fit {season_fit:.2f} ({season or 'not specified'})",
        f"Budget alignment {budget_fit:.2f} ({budget_note})",
    )
    return OutfitScore(score=max(0.0, min(1.0, score)), total_price=total, reasons=reasons)
