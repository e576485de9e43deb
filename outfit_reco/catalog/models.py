"""Catalog domain types and the read-only product index."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Mapping


class Role(str, Enum):
    """Slot a product occupies inside an outfit."""

    TOP = "top"
    BOTTOM = "bottom"
    FOOTWEAR = "footwear"
    ACCESSORY = "accessory"
    OTHER = "other"


@dataclass(frozen=True, slots=True)
class Product:
    """Normalised catalog row. Immutable once the catalog is loaded."""

    sku: str
    title: str
    brand: str = ""
    price: float = 0.0
    role: Role = Role.OTHER
    gender: str = ""
    tags: tuple[str, ...] = ()
    colors: frozenset[str] = frozenset()
    seasons: frozenset[str] = frozenset()
    occasions: frozenset[str] = frozenset()
    styles: frozenset[str] = frozenset()
    image: str = ""
    category: str = ""
    sub_category: str = ""
    product_type: str = ""
    tokens: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, object]:
        """Serialise the product for API responses."""

        return {
            "sku": self.sku,
            "title": self.title,
            "brand": self.brand,
            "price": self.price,
            "role": self.role.value,
            "gender": self.gender,
            "category": self.category,
            "sub_category": self.sub_category,
            "product_type": self.product_type,
            "tags": list(self.tags),
            "colors": sorted(self.colors),
            "seasons": sorted(self.seasons),
            "occasions": sorted(self.occasions),
            "styles": sorted(self.styles),
            "image": self.image or None,
        }


@dataclass(slots=True)
class CatalogIndex:
    """In-memory product store partitioned by role and keyed by SKU."""

    products: list[Product] = field(default_factory=list)
    by_sku: dict[str, Product] = field(default_factory=dict)
    by_role: dict[Role, list[Product]] = field(
        default_factory=lambda: {role: [] for role in Role},
    )

    @classmethod
    def from_products(cls, products: Iterable[Product]) -> "CatalogIndex":
        index = cls()
        for product in products:
            index.products.append(product)
            if product.sku:
                index.by_sku[product.sku] = product
            index.by_role[product.role].append(product)
        return index

    def get(self, sku: str) -> Product | None:
        return self.by_sku.get(sku)

    def products_for(self, role: Role | str) -> list[Product]:
        return self.by_role.get(Role(role), [])

    def role_counts(self) -> Mapping[str, int]:
        return {role.value: len(items) for role, items in self.by_role.items()}
