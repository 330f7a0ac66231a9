"""Tests for the unified retrieval service."""

import pytest
from unittest.mock import Mock
from errors import CatalogError, InitializationError
from retrieval.catalog_provider import InMemoryCatalogProvider
from retrieval.retrieval_service import RetrievalService
from schemas.catalog import Category, Product
from schemas.search import ItemType, SearchableItem


def oak_catalog() -> InMemoryCatalogProvider:
    products = [
        Product(id=f"p{i}", name=f"Oak Table {i}", description="Solid oak table")
        for i in range(1, 6)
    ]
    categories = [
        Category(id=f"c{i}", name=f"Oak Tables {i}", description="Every oak table we sell")
        for i in range(1, 4)
    ]
    return InMemoryCatalogProvider(products=products, categories=categories)


OAK_DOCS = [
    SearchableItem(
        id="d1",
        type=ItemType.DOCUMENTATION,
        title="Oak Table Care",
        description="Caring for an oak table",
    )
]


class TestRetrievalService:
    """Test index lifecycle and merged search."""

    def setup_method(self):
        """Set up test fixtures."""
        self.service = RetrievalService(oak_catalog(), documentation=OAK_DOCS)

    def test_lazy_initialization(self):
        """Test the first search builds the indices."""
        assert self.service.is_initialized is False

        self.service.search("oak table", 4)

        assert self.service.is_initialized is True

    def test_initialize_is_idempotent(self):
        """Test a second initialize() does not reload the catalog."""
        catalog = Mock(wraps=InMemoryCatalogProvider())
        service = RetrievalService(catalog, documentation=[])

        service.initialize()
        first = service.search_products("dining table", 5)
        service.initialize()
        second = service.search_products("dining table", 5)

        assert catalog.list_active_products.call_count == 1
        assert [r.id for r in first] == [r.id for r in second]

    def test_refresh_picks_up_catalog_changes(self):
        """Test refresh() rebuilds from the current catalog."""
        products = [Product(id="p1", name="Oak Table", description="Solid oak table")]
        catalog = InMemoryCatalogProvider(products=products, categories=[])
        service = RetrievalService(catalog, documentation=[])
        service.initialize()
        assert service.search_products("walnut desk", 5) == []

        catalog._products.append(Product(id="p2", name="Walnut Desk", description="Walnut desk"))
        service.refresh()

        assert [r.id for r in service.search_products("walnut desk", 5)] == ["p2"]

    def test_fixed_ratio_allocation(self):
        """Test each collection gets its share of the limit."""
        results = self.service.search("oak table", 4)

        types = [r.type for r in results]
        assert types.count(ItemType.PRODUCT) == 2
        assert types.count(ItemType.CATEGORY) == 1
        assert types.count(ItemType.DOCUMENTATION) == 1

    def test_unused_share_not_redistributed(self):
        """Test a short collection leaves its remainder unused."""
        results = self.service.search("oak table", 10)

        types = [r.type for r in results]
        assert types.count(ItemType.PRODUCT) == 5
        assert types.count(ItemType.CATEGORY) == 2
        assert types.count(ItemType.DOCUMENTATION) == 1
        assert len(results) == 8

    def test_small_limit_rounds_down(self):
        """Test shares are rounded down."""
        results = self.service.search("oak table", 1)

        assert results == []

    def test_merged_results_sorted(self):
        """Test merged results are ordered by descending score."""
        service = RetrievalService(InMemoryCatalogProvider())

        results = service.search("dining", 8)

        scores = [r.score for r in results]
        assert scores == sorted(scores, reverse=True)
        assert len(results) <= 8

    def test_sample_catalog_search(self):
        """Test a product search over the built-in catalog."""
        service = RetrievalService(InMemoryCatalogProvider())

        results = service.search_products("dining table", 5)

        ids = [r.id for r in results]
        assert set(ids[:2]) == {"prod-001", "prod-002"}
        assert results[0].metadata["slug"] in {"teak-dining-table", "extendable-oak-dining-table"}

    def test_documentation_loaded_from_yaml(self):
        """Test documentation defaults come from the bundled table."""
        service = RetrievalService(InMemoryCatalogProvider())

        results = service.search_documentation("search", 3)

        assert results[0].id == "doc-3"
        assert results[0].score == 1.0

    def test_search_by_type(self):
        """Test restricting search to one collection."""
        service = RetrievalService(InMemoryCatalogProvider())

        categories = service.search_by_type("dining", 5, ItemType.CATEGORY)
        everything = service.search_by_type("dining", 8)

        assert categories
        assert all(r.type == ItemType.CATEGORY for r in categories)
        assert {r.type for r in everything} >= {ItemType.PRODUCT, ItemType.CATEGORY}

    def test_get_suggestions(self):
        """Test suggestions are result titles."""
        suggestions = self.service.get_suggestions("oak table", 4)

        assert len(suggestions) == 4
        assert all("Oak Table" in s for s in suggestions)

    def test_short_query_returns_nothing(self):
        """Test queries under two characters yield nothing anywhere."""
        assert self.service.search("o", 10) == []
        assert self.service.search_products("", 10) == []

    def test_catalog_failure_raises_initialization_error(self):
        """Test catalog errors surface as InitializationError."""
        catalog = Mock()
        catalog.list_active_products.side_effect = CatalogError("catalog down")
        service = RetrievalService(catalog, documentation=[])

        with pytest.raises(InitializationError):
            service.initialize()

        assert service.is_initialized is False
