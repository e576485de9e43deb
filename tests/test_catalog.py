"""Tests for catalog normalisation, role inference and loading."""

from __future__ import annotations

import csv
from pathlib import Path

import pytest

from outfit_reco.catalog.attribute_extractor import normalize_product, parse_tags_cell, tokenize
from outfit_reco.catalog.classifier import infer_role
from outfit_reco.catalog.loader import load_catalog
from outfit_reco.catalog.models import Product, Role

COLUMNS = [
    "sku_id",
    "title",
    "brand_name",
    "category",
    "sub_category",
    "product_type",
    "gender",
    "lowest_price",
    "tags",
    "featured_image",
]


def _row(**overrides: str) -> dict[str, str]:
    row = {column: "" for column in COLUMNS}
    row.update(overrides)
    return row


def test_tokenize_strips_punctuation() -> None:
    assert tokenize("Black/White Crew-Neck TEE!") == ["black", "white", "crew-neck", "tee"]
    assert tokenize(None) == []


def test_parse_tags_cell_handles_list_literal() -> None:
    assert parse_tags_cell("['Crew Length', 'socks']") == ["crew", "length", "socks"]
    assert parse_tags_cell("") == []


def test_normalize_product_derives_attributes() -> None:
    product = normalize_product(
        _row(
            sku_id="S1",
            title="Black Oversized Tee",
            brand_name="Bonkers",
            category="Topwear",
            product_type="Tshirt",
            gender="Men",
            lowest_price="799",
            tags="['Summer', 'casual']",
            featured_image="https://img.example/1.jpg",
        )
    )

    assert product.sku == "S1"
    assert product.role is Role.TOP
    assert product.gender == "men"
    assert product.price == 799.0
    assert product.tags == ("summer", "casual")
    assert product.colors == {"black"}
    assert product.seasons == {"summer"}
    assert product.occasions == {"casual"}
    assert product.styles == {"oversized"}
    assert product.image == "https://img.example/1.jpg"


def test_normalize_product_tolerates_bad_price() -> None:
    product = normalize_product(_row(sku_id="S2", title="Cap", lowest_price="n/a"))

    assert product.price == 0.0


@pytest.mark.parametrize(
    ("title", "expected"),
    [
        ("Utility Cargo Vest", Role.OTHER),
        ("Relaxed Cargo Pants", Role.BOTTOM),
        ("Retro Running Sneakers", Role.FOOTWEAR),
        ("Graphic Hoodie", Role.TOP),
        ("Leather Wallet", Role.ACCESSORY),
        ("Mystery Box", Role.OTHER),
    ],
)
def test_infer_role_from_keywords(title: str, expected: Role) -> None:
    tokens = tuple(tokenize(title))

    assert infer_role(Product(sku="X", title=title, tokens=tokens)) is expected


def test_infer_role_falls_back_to_category() -> None:
    product = Product(sku="X", title="Classic", category="Footwear", tokens=("classic", "footwear"))

    assert infer_role(product) is Role.FOOTWEAR


def test_load_catalog_indexes_by_sku_and_role(tmp_path: Path) -> None:
    path = tmp_path / "catalog.csv"
    with path.open("w", newline="", encoding="utf-8") as handle:
        writer = csv.DictWriter(handle, fieldnames=COLUMNS)
        writer.writeheader()
        writer.writerow(_row(sku_id="T1", title="Basic Tee", lowest_price="499", tags="['casual']"))
        writer.writerow(_row(sku_id="B1", title="Slim Jeans", lowest_price="1299"))
        writer.writerow(_row(sku_id="F1", title="Canvas Sneakers", lowest_price="1999"))
        writer.writerow(_row(sku_id="", title="Untracked Socks", lowest_price="99"))

    catalog = load_catalog(path)

    assert len(catalog.products) == 4
    assert set(catalog.by_sku) == {"T1", "B1", "F1"}
    assert [product.sku for product in catalog.products_for("top")] == ["T1"]
    assert [product.sku for product in catalog.products_for(Role.BOTTOM)] == ["B1"]
    assert [product.title for product in catalog.products_for("accessory")] == ["Untracked Socks"]


def test_load_catalog_rejects_unknown_format(tmp_path: Path) -> None:
    path = tmp_path / "catalog.json"
    path.write_text("[]", encoding="utf-8")

    with pytest.raises(ValueError):
        load_catalog(path)
