"""Load the product catalog from a spreadsheet export."""

from __future__ import annotations

import logging
from pathlib import Path

import pandas as pd

from outfit_reco.catalog.attribute_extractor import normalize_product
from outfit_reco.catalog.models import CatalogIndex

logger = logging.getLogger(__name__)


def _read_rows(path: Path) -> list[dict]:
    suffix = path.suffix.lower()
    if suffix == ".csv":
        frame = pd.read_csv(path, dtype=str, keep_default_na=False)
    elif suffix in {".xlsx", ".xls"}:
        frame = pd.read_excel(path, sheet_name=0, dtype=str, keep_default_na=False)
    else:
        raise ValueError(f"Unsupported catalog format: {path.suffix or path.name}")
    return frame.to_dict(orient="records")


def load_catalog(path: str | Path) -> CatalogIndex:
    """Read every row of the catalog file and index it by SKU and role."""

    catalog_path = Path(path).expanduser().resolve()
    if not catalog_path.exists():
        raise FileNotFoundError(f"Catalog file not found: {catalog_path}")

    rows = _read_rows(catalog_path)
    index = CatalogIndex.from_products(normalize_product(row) for row in rows)
    logger.info(
        "Loaded %d products from %s (%s)",
        len(index.products),
        catalog_path.name,
        ", ".join(f"{role}={count}" for role, count in index.role_counts().items()),
    )
    return index
