"""CSV-backed catalog provider."""

import logging
from typing import Any, Optional

import pandas as pd

from errors import CatalogError
from schemas.catalog import Category, Product
from .catalog_provider import CatalogProvider

logger = logging.getLogger(__name__)


class CSVCatalogProvider(CatalogProvider):
    """
    Catalog read from product and category CSV exports.

    Expected product columns: id, name, description, price, category,
    slug, is_active. Category columns: id, name, description, slug,
    is_active. Missing optional columns are tolerated.
    """

    def __init__(self, products_csv: str, categories_csv: Optional[str] = None):
        """
        Initialize CSV catalog.

        Args:
            products_csv: Path to the product export
            categories_csv: Optional path to the category export
        """
        self.products_csv = products_csv
        self.categories_csv = categories_csv

    def _load(self, csv_path: str) -> pd.DataFrame:
        """Load and clean one CSV file."""
        try:
            df = pd.read_csv(csv_path, dtype={"id": str})
        except (OSError, UnicodeDecodeError, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
            logger.error(f"Failed to read catalog CSV {csv_path}: {e}")
            raise CatalogError(f"Could not read catalog CSV {csv_path}: {e}") from e

        if "is_active" in df.columns:
            df["is_active"] = self._parse_boolean(df["is_active"]).astype(bool)
        else:
            df["is_active"] = True

        if "price" in df.columns:
            df["price"] = pd.to_numeric(df["price"], errors="coerce")

        return df

    def _parse_boolean(self, series: pd.Series) -> pd.Series:
        """Parse boolean values."""
        def to_bool(val):
            if pd.isna(val) or val is None:
                return False
            if isinstance(val, bool):
                return val
            if isinstance(val, str):
                return val.lower().strip() in ['true', 't', 'yes', 'y', '1']
            return bool(val)

        return series.apply(to_bool)

    def _clean(self, value: Any) -> Optional[Any]:
        """Map pandas nulls to None."""
        if value is None or (not isinstance(value, str) and pd.isna(value)):
            return None
        return value

    def _text(self, row: dict, column: str) -> str:
        value = self._clean(row.get(column))
        return str(value) if value is not None else ""

    def _optional_text(self, row: dict, column: str) -> Optional[str]:
        value = self._clean(row.get(column))
        return str(value) if value is not None else None

    def list_active_products(self, limit: Optional[int] = None) -> list[Product]:
        df = self._load(self.products_csv)
        df = df[df["is_active"]]

        products = []
        for row in df.to_dict(orient="records"):
            price = self._clean(row.get("price"))
            products.append(Product(
                id=self._text(row, "id"),
                name=self._text(row, "name"),
                description=self._text(row, "description"),
                price=float(price) if price is not None else None,
                category=self._optional_text(row, "category"),
                slug=self._optional_text(row, "slug"),
            ))
            if limit is not None and len(products) >= limit:
                break

        logger.debug(f"Loaded {len(products)} active products from {self.products_csv}")
        return products

    def list_active_categories(self) -> list[Category]:
        if not self.categories_csv:
            return []

        df = self._load(self.categories_csv)
        df = df[df["is_active"]]

        return [
            Category(
                id=self._text(row, "id"),
                name=self._text(row, "name"),
                description=self._text(row, "description"),
                slug=self._optional_text(row, "slug"),
            )
            for row in df.to_dict(orient="records")
        ]
