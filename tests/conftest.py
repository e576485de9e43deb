"""Shared fixtures: catalog builders and an in-memory Redis double."""

from __future__ import annotations

import random
from typing import Any, Callable, Iterable

import pytest

from outfit_reco.catalog.models import CatalogIndex, Product, Role


class FakeRedis:
    """Implements the handful of Redis commands the caches and job store use."""

    def __init__(self) -> None:
        self.store: dict[str, str] = {}
        self.expiry: dict[str, int | None] = {}

    def get(self, key: str) -> str | None:
        return self.store.get(key)

    def set(
        self,
        key: str,
        value: str,
        ex: int | None = None,
        nx: bool = False,
        xx: bool = False,
    ) -> bool | None:
        if nx and key in self.store:
            return None
        if xx and key not in self.store:
            return None
        self.store[key] = value
        self.expiry[key] = ex
        return True

    def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            if self.store.pop(key, None) is not None:
                removed += 1
            self.expiry.pop(key, None)
        return removed

    def ping(self) -> bool:
        return True

    def close(self) -> None:
        return None


def build_product(
    sku: str,
    role: str,
    *,
    price: float = 100.0,
    tags: Iterable[str] = ("casual",),
    gender: str = "",
    colors: Iterable[str] = (),
    seasons: Iterable[str] = (),
    occasions: Iterable[str] = (),
    title: str | None = None,
    brand: str = "Acme",
) -> Product:
    return Product(
        sku=sku,
        title=title or f"Item {sku}",
        brand=brand,
        price=price,
        role=Role(role),
        gender=gender,
        tags=tuple(tags),
        colors=frozenset(colors),
        seasons=frozenset(seasons),
        occasions=frozenset(occasions),
    )


@pytest.fixture
def make_product() -> Callable[..., Product]:
    return build_product


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def base_top() -> Product:
    return build_product("T1", "top", price=500, tags=["casual"])


@pytest.fixture
def catalog(base_top: Product) -> CatalogIndex:
    """Small catalog with three candidates in every role."""

    products: list[Any] = [base_top]
    products += [build_product(f"T{i}", "top", price=400) for i in (2, 3)]
    products += [build_product(f"B{i}", "bottom", price=300) for i in (1, 2, 3)]
    products += [build_product(f"F{i}", "footwear", price=400) for i in (1, 2, 3)]
    products += [build_product(f"A{i}", "accessory", price=100) for i in (1, 2, 3)]
    products += [build_product(f"O{i}", "other", price=150) for i in (1, 2, 3)]
    return CatalogIndex.from_products(products)
