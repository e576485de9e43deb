"""Attribute extraction helpers for catalog rows."""

from __future__ import annotations

import re
from dataclasses import replace
from typing import Any, Mapping

from outfit_reco.catalog.classifier import infer_role
from outfit_reco.catalog.models import Product

COLORS = frozenset(
    {
        "black", "white", "grey", "gray", "cream", "beige", "tan", "brown",
        "red", "maroon", "burgundy", "blue", "navy", "green", "olive",
        "yellow", "gold", "silver", "pink", "purple", "orange",
    }
)
SEASONS = frozenset({"winter", "summer", "spring", "autumn", "fall", "monsoon"})
OCCASIONS = frozenset(
    {"casual", "formal", "party", "wedding", "office", "work", "gym", "sports", "streetwear"}
)
STYLES = frozenset(
    {"streetwear", "minimal", "classic", "athleisure", "oversized", "vintage", "preppy"}
)

_NON_TOKEN = re.compile(r"[^a-z0-9\s-]")
_TAG_DECORATION = re.compile(r"[\[\]'\"]")


def tokenize(text: Any) -> list[str]:
    """Lower-case ``text`` and split it into alphanumeric tokens."""

    cleaned = _NON_TOKEN.sub(" ", str(text or "").lower())
    return [token for token in cleaned.split() if token]


def parse_tags_cell(cell: Any) -> list[str]:
    """Turn a list-literal cell such as ``['Crew Length', 'socks']`` into tokens."""

    if not cell:
        return []
    return tokenize(_TAG_DECORATION.sub(" ", str(cell)))


def _text(row: Mapping[str, Any], key: str) -> str:
    value = row.get(key)
    if value is None:
        return ""
    # pandas hands back NaN for empty spreadsheet cells
    if isinstance(value, float) and value != value:
        return ""
    return str(value).strip()


def _price(row: Mapping[str, Any]) -> float:
    try:
        price = float(_text(row, "lowest_price") or 0)
    except ValueError:
        return 0.0
    return max(price, 0.0)


def _pick(tokens: list[str], vocabulary: frozenset[str]) -> frozenset[str]:
    return frozenset(token for token in tokens if token in vocabulary)


def normalize_product(row: Mapping[str, Any]) -> Product:
    """Build a :class:`Product` from a raw catalog row, inferring its role."""

    sku = _text(row, "sku_id")
    title = _text(row, "title")
    brand = _text(row, "brand_name")
    category = _text(row, "category")
    sub_category = _text(row, "sub_category")
    product_type = _text(row, "product_type")
    tags = parse_tags_cell(_text(row, "tags"))

    text = " ".join([title, brand, category, sub_category, product_type, " ".join(tags)])
    tokens = tokenize(text)

    draft = Product(
        sku=sku,
        title=title,
        brand=brand,
        price=_price(row),
        gender=_text(row, "gender").lower(),
        tags=tuple(tags),
        colors=_pick(tokens, COLORS),
        seasons=_pick(tokens, SEASONS),
        occasions=_pick(tokens, OCCASIONS),
        styles=_pick(tokens, STYLES),
        image=_text(row, "featured_image"),
        category=category,
        sub_category=sub_category,
        product_type=product_type,
        tokens=tuple(tokens),
    )
    return replace(draft, role=infer_role(draft))
