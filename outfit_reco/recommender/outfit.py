"""Outfit candidate type and its cache representation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from outfit_reco.catalog.models import CatalogIndex, Product


@dataclass(frozen=True, slots=True)
class OutfitCandidate:
    """Scored combination of catalog products. Never mutated after scoring."""

    reco_id: str
    top: Product
    bottom: Product
    footwear: Product
    accessories: tuple[Product, ...]
    match_score: float
    total_price: float
    reasons: tuple[str, ...] = ()

    @property
    def items(self) -> tuple[Product, ...]:
        return (self.top, self.bottom, self.footwear, *self.accessories)

    @property
    def skus(self) -> list[str]:
        return [item.sku for item in self.items]

    def to_cache(self) -> dict[str, Any]:
        """Compact JSON form that stores SKUs only."""

        return {
            "reco_id": self.reco_id,
            "top": self.top.sku,
            "bottom": self.bottom.sku,
            "footwear": self.footwear.sku,
            "accessories": [item.sku for item in self.accessories],
            "match_score": self.match_score,
            "total_price": self.total_price,
            "reasoning_fast": list(self.reasons),
        }

    @classmethod
    def from_cache(cls, payload: Mapping[str, Any], catalog: CatalogIndex) -> "OutfitCandidate | None":
        """Rebuild an outfit from :meth:`to_cache`; ``None`` if a SKU no longer resolves."""

        try:
            top = catalog.get(payload["top"])
            bottom = catalog.get(payload["bottom"])
            footwear = catalog.get(payload["footwear"])
            accessories = [catalog.get(sku) for sku in payload.get("accessories", [])]
            candidate = cls(
                reco_id=str(payload["reco_id"]),
                top=top,
                bottom=bottom,
                footwear=footwear,
                accessories=tuple(accessories),
                match_score=float(payload["match_score"]),
                total_price=float(payload["total_price"]),
                reasons=tuple(str(reason) for reason in payload.get("reasoning_fast", [])),
            )
        except (KeyError, TypeError, ValueError):
            return None
        if any(item is None for item in candidate.items):
            return None
        return candidate
