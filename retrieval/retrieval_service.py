"""Unified retrieval over products, categories and documentation."""

import logging
import threading
from typing import Optional

import yaml

from config.settings import Settings
from errors import InitializationError
from schemas.catalog import Category, Product
from schemas.search import ItemType, SearchableItem, SearchResult
from .catalog_provider import CatalogProvider
from .fuzzy_index import FuzzyIndex

logger = logging.getLogger(__name__)


class RetrievalService:
    """Owns one fuzzy index per collection and merges their results."""

    def __init__(
        self,
        catalog: CatalogProvider,
        documentation: Optional[list[SearchableItem]] = None,
        settings: Optional[Settings] = None
    ):
        """
        Initialize retrieval service. Indices are built lazily.

        Args:
            catalog: Catalog collaborator used to populate product/category indices
            documentation: Static documentation items (defaults to documentation.yaml)
            settings: Application settings
        """
        self.catalog = catalog
        self.settings = settings or Settings()
        self._documentation = documentation
        self._lock = threading.Lock()
        self._product_index: Optional[FuzzyIndex] = None
        self._category_index: Optional[FuzzyIndex] = None
        self._documentation_index: Optional[FuzzyIndex] = None

    @property
    def is_initialized(self) -> bool:
        return (
            self._product_index is not None
            and self._category_index is not None
            and self._documentation_index is not None
        )

    def initialize(self):
        """Build all indices once. Later calls are no-ops; use refresh() to rebuild."""
        if self.is_initialized:
            return
        self._build()

    def refresh(self):
        """Rebuild all indices from the catalog."""
        self._build()

    def _build(self):
        """Build fresh indices and swap them in together."""
        try:
            product_items = [self._product_item(p) for p in self.catalog.list_active_products()]
            category_items = [self._category_item(c) for c in self.catalog.list_active_categories()]
            documentation_items = self._documentation_items()
        except Exception as e:
            logger.error(f"Error initializing search indices: {e}")
            raise InitializationError(f"Failed to build search indices: {e}") from e

        product_index = self._new_index(product_items)
        category_index = self._new_index(category_items)
        documentation_index = self._new_index(documentation_items)

        with self._lock:
            self._product_index = product_index
            self._category_index = category_index
            self._documentation_index = documentation_index

        logger.info(
            f"Search indices built: {len(product_items)} products, "
            f"{len(category_items)} categories, {len(documentation_items)} docs"
        )

    def _new_index(self, items: list[SearchableItem]) -> FuzzyIndex:
        return FuzzyIndex(
            items,
            threshold=self.settings.search_threshold,
            min_match_char_length=self.settings.min_match_char_length,
        )

    def _product_item(self, product: Product) -> SearchableItem:
        return SearchableItem(
            id=product.id,
            type=ItemType.PRODUCT,
            title=product.name,
            description=product.description or "",
            content=f"{product.name} {product.description or ''}".strip(),
            metadata={"slug": product.slug, "categoryId": product.category},
        )

    def _category_item(self, category: Category) -> SearchableItem:
        return SearchableItem(
            id=category.id,
            type=ItemType.CATEGORY,
            title=category.name,
            description=category.description or "",
            content=f"{category.name} {category.description or ''}".strip(),
            metadata={"slug": category.slug},
        )

    def _documentation_items(self) -> list[SearchableItem]:
        """Static documentation entries."""
        if self._documentation is not None:
            return list(self._documentation)

        with open(self.settings.documentation_path, 'r') as f:
            rows = yaml.safe_load(f) or []
        return [SearchableItem(type=ItemType.DOCUMENTATION, **row) for row in rows]

    def _indices(self) -> tuple[FuzzyIndex, FuzzyIndex, FuzzyIndex]:
        """Current indices, building them first if needed."""
        if not self.is_initialized:
            self.initialize()
        with self._lock:
            return self._product_index, self._category_index, self._documentation_index

    def search(self, query: str, limit: int = 10) -> list[SearchResult]:
        """
        Search across all collections.

        Each collection gets a fixed share of the limit (products half,
        categories and documentation a quarter each, rounded down). A
        collection returning fewer than its share does not hand the
        remainder to the others.

        Args:
            query: Free-text query
            limit: Maximum total results

        Returns:
            Merged results sorted by descending score
        """
        product_index, category_index, documentation_index = self._indices()

        results = []
        results.extend(product_index.search(query, int(limit * self.settings.product_result_ratio)))
        results.extend(category_index.search(query, int(limit * self.settings.category_result_ratio)))
        results.extend(
            documentation_index.search(query, int(limit * self.settings.documentation_result_ratio))
        )

        results.sort(key=lambda r: r.score, reverse=True)
        return results[:max(limit, 0)]

    def search_products(self, query: str, limit: int = 10) -> list[SearchResult]:
        """Search products only."""
        return self._indices()[0].search(query, limit)

    def search_categories(self, query: str, limit: int = 10) -> list[SearchResult]:
        """Search categories only."""
        return self._indices()[1].search(query, limit)

    def search_documentation(self, query: str, limit: int = 5) -> list[SearchResult]:
        """Search documentation only."""
        return self._indices()[2].search(query, limit)

    def search_by_type(
        self,
        query: str,
        limit: int = 10,
        item_type: Optional[ItemType] = None
    ) -> list[SearchResult]:
        """Search one collection, or all of them when no type is given."""
        if item_type == ItemType.PRODUCT:
            return self.search_products(query, limit)
        elif item_type == ItemType.CATEGORY:
            return self.search_categories(query, limit)
        elif item_type == ItemType.DOCUMENTATION:
            return self.search_documentation(query, limit)
        else:
            return self.search(query, limit)

    def get_suggestions(self, query: str, limit: int = 5) -> list[str]:
        """Titles of the best unified matches for a partial query."""
        return [r.title for r in self.search(query, limit)]
