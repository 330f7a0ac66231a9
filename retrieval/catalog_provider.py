"""Catalog provider interface with an in-memory implementation."""

from abc import ABC, abstractmethod
from typing import Optional

from schemas.catalog import Category, Product


class CatalogProvider(ABC):
    """Read-only access to the storefront catalog."""

    @abstractmethod
    def list_active_products(self, limit: Optional[int] = None) -> list[Product]:
        """
        List active products.

        Args:
            limit: Optional maximum number of products

        Returns:
            Active products in catalog order
        """
        pass

    @abstractmethod
    def list_active_categories(self) -> list[Category]:
        """List active categories in catalog order."""
        pass


class InMemoryCatalogProvider(CatalogProvider):
    """Catalog held in memory (sample furniture data when none is given)."""

    def __init__(
        self,
        products: Optional[list[Product]] = None,
        categories: Optional[list[Category]] = None
    ):
        if products is None and categories is None:
            products = self._create_sample_products()
            categories = self._create_sample_categories()
        self._products = list(products or [])
        self._categories = list(categories or [])

    def _create_sample_products(self) -> list[Product]:
        """Create sample product data."""
        return [
            Product(
                id="prod-001",
                name="Teak Dining Table",
                description="Solid teak dining table seating six, hand finished with natural oil.",
                price=1299.0,
                category="cat-dining",
                slug="teak-dining-table",
            ),
            Product(
                id="prod-002",
                name="Extendable Oak Dining Table",
                description="Oak dining table that extends from four to eight seats.",
                price=1549.0,
                category="cat-dining",
                slug="extendable-oak-dining-table",
            ),
            Product(
                id="prod-003",
                name="Rattan Lounge Chair",
                description="Woven rattan lounge chair with a mahogany frame and linen cushion.",
                price=489.0,
                category="cat-living",
                slug="rattan-lounge-chair",
            ),
            Product(
                id="prod-004",
                name="Mahogany Bookshelf",
                description="Five tier mahogany bookshelf with adjustable shelves.",
                price=679.0,
                category="cat-living",
                slug="mahogany-bookshelf",
            ),
            Product(
                id="prod-005",
                name="Acacia Outdoor Bench",
                description="Weather treated acacia bench for gardens and patios.",
                price=359.0,
                category="cat-outdoor",
                slug="acacia-outdoor-bench",
            ),
            Product(
                id="prod-006",
                name="Reclaimed Wood Coffee Table",
                description="Low coffee table built from reclaimed boat timber.",
                price=None,
                category="cat-living",
                slug="reclaimed-wood-coffee-table",
            ),
        ]

    def _create_sample_categories(self) -> list[Category]:
        """Create sample category data."""
        return [
            Category(
                id="cat-dining",
                name="Dining Room",
                description="Dining tables, chairs and sideboards",
                slug="dining-room",
            ),
            Category(
                id="cat-living",
                name="Living Room",
                description="Sofas, lounge chairs, coffee tables and shelving",
                slug="living-room",
            ),
            Category(
                id="cat-outdoor",
                name="Outdoor Furniture",
                description="Benches, loungers and garden sets",
                slug="outdoor-furniture",
            ),
        ]

    def list_active_products(self, limit: Optional[int] = None) -> list[Product]:
        products = [p.model_copy() for p in self._products if p.is_active]
        return products[:limit] if limit is not None else products

    def list_active_categories(self) -> list[Category]:
        return [c.model_copy() for c in self._categories if c.is_active]
