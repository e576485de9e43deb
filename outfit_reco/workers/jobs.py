"""Enrichment job payloads and lifecycle states."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

from outfit_reco.catalog.models import Product
from outfit_reco.recommender.outfit import OutfitCandidate


class JobState(str, Enum):
    """Lifecycle of one rationale enrichment job."""

    QUEUED = "queued"
    PROCESSING = "processing"
    RETRY_SCHEDULED = "retry_scheduled"
    STORED = "stored"
    EXHAUSTED = "exhausted"


class ItemFacts(BaseModel):
    sku: str
    title: str
    brand: str = ""

    @classmethod
    def of(cls, product: Product) -> "ItemFacts":
        return cls(sku=product.sku, title=product.title, brand=product.brand)


class BaseItemFacts(ItemFacts):
    tags: list[str] = Field(default_factory=list)


class OutfitFacts(BaseModel):
    top: ItemFacts
    bottom: ItemFacts
    footwear: ItemFacts
    accessories: list[ItemFacts] = Field(default_factory=list)


class Constraints(BaseModel):
    budget: float | None = None
    season: str | None = None
    occasion: str | None = None


class EnrichmentJob(BaseModel):
    """Scalar facts needed to explain one outfit.

    Jobs cross process boundaries, so they carry copies rather than catalog objects.
    """

    reco_id: str
    base: BaseItemFacts
    items: OutfitFacts
    constraints: Constraints = Field(default_factory=Constraints)

    @classmethod
    def from_outfit(
        cls,
        base: Product,
        outfit: OutfitCandidate,
        *,
        budget: float | None = None,
        season: str | None = None,
        occasion: str | None = None,
    ) -> "EnrichmentJob":
        return cls(
            reco_id=outfit.reco_id,
            base=BaseItemFacts(sku=base.sku, title=base.title, brand=base.brand, tags=list(base.tags)),
            items=OutfitFacts(
                top=ItemFacts.of(outfit.top),
                bottom=ItemFacts.of(outfit.bottom),
                footwear=ItemFacts.of(outfit.footwear),
                accessories=[ItemFacts.of(item) for item in outfit.accessories],
            ),
            constraints=Constraints(budget=budget, season=season, occasion=occasion),
        )
