"""Keyword based role classification for catalog products."""

from __future__ import annotations

import re
from typing import Iterable

from outfit_reco.catalog.models import Product, Role

TOP = ("tshirt", "t-shirt", "tee", "shirt", "hoodie", "sweatshirt", "jacket", "coat", "sweater", "top", "polo")
BOTTOM = ("jeans", "pants", "pant", "trouser", "trousers", "cargo", "cargos", "shorts")
FOOTWEAR = ("sneaker", "sneakers", "shoe", "shoes", "slide", "slides", "boot", "boots")
ACCESSORY = (
    "bag", "wallet", "cap", "hat", "sunglasses", "watch", "ring",
    "bracelet", "necklace", "keychain", "belt", "socks",
)
OUTERWEAR = ("vest", "jacket", "coat", "blazer", "cardigan", "parka", "windbreaker", "bomber")

_OUTERWEAR_MARKERS = {"vest", "jacket", "coat"}

_CATEGORY_FOOTWEAR = re.compile(r"shoe|sneaker|slide|boot|footwear")
_OUTERWEAR_TEXT = re.compile(r"vest|jacket|coat|blazer|outerwear")
_CATEGORY_BOTTOM = re.compile(r"jean|pant|trouser|cargo|short")
_TITLE_NOT_BOTTOM = re.compile(r"vest|jacket|coat")
_CATEGORY_TOP = re.compile(r"tee|shirt|hoodie|sweatshirt|jacket|sweater|polo")
_CATEGORY_ACCESSORY = re.compile(r"bag|wallet|cap|watch|sunglass|accessor|sock|belt")


def _has_any(words: set[str], keywords: Iterable[str]) -> bool:
    return any(keyword in words for keyword in keywords)


def infer_role(product: Product) -> Role:
    """Return the outfit slot for ``product``.

    Outerwear is checked first so that "cargo vest" or "denim jacket" never lands in
    the bottom or top slot.
    """

    words = set(product.tokens) | set(product.tags)

    if _has_any(words, OUTERWEAR):
        return Role.OTHER
    if _has_any(words, FOOTWEAR):
        return Role.FOOTWEAR
    if _has_any(words, BOTTOM) and not words & _OUTERWEAR_MARKERS:
        return Role.BOTTOM
    if _has_any(words, TOP):
        return Role.TOP
    if _has_any(words, ACCESSORY):
        return Role.ACCESSORY

    category = f"{product.category} {product.sub_category} {product.product_type}".lower()
    title = product.title.lower()

    if _CATEGORY_FOOTWEAR.search(category):
        return Role.FOOTWEAR
    if _OUTERWEAR_TEXT.search(title) or _OUTERWEAR_TEXT.search(category):
        return Role.OTHER
    if _CATEGORY_BOTTOM.search(category) and not _TITLE_NOT_BOTTOM.search(title):
        return Role.BOTTOM
    if _CATEGORY_TOP.search(category):
        return Role.TOP
    if _CATEGORY_ACCESSORY.search(category):
        return Role.ACCESSORY
    return Role.OTHER
