"""Catalog provider backed by the storefront REST API."""

import logging
from typing import Any, Optional

import requests

from errors import CatalogError
from schemas.catalog import Category, Product
from .catalog_provider import CatalogProvider

logger = logging.getLogger(__name__)


class CatalogAPIProvider(CatalogProvider):
    """
    Reads active products and categories from the storefront API.

    Unlike a search client this provider cannot degrade to empty
    results: an empty catalog would silently produce empty indices, so
    every failure is raised as CatalogError for the caller to handle.
    """

    def __init__(
        self,
        base_url: str,
        timeout: int = 10,
        auth_token: Optional[str] = None
    ):
        """
        Initialize Catalog API provider.

        Args:
            base_url: Base URL of the catalog API (e.g., https://shop.example.com/api/v1)
            timeout: Request timeout in seconds (default: 10)
            auth_token: Optional bearer token
        """
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.auth_token = auth_token
        self._last_error: Optional[str] = None

    def _get_headers(self) -> dict:
        """Build request headers."""
        headers = {
            "Accept": "application/json",
            "User-Agent": "Blue-Ocean-Copilot/1.0"
        }
        if self.auth_token:
            headers["Authorization"] = f"Bearer {self.auth_token}"
        return headers

    def _handle_error(self, error: Exception, context: str) -> CatalogError:
        """
        Record an API error and wrap it.

        Args:
            error: Exception that occurred
            context: Context string for logging

        Returns:
            CatalogError to raise
        """
        self._last_error = str(error)
        logger.warning(f"Catalog API error during {context}: {error}")
        return CatalogError(f"Catalog API error during {context}: {error}")

    def _get_items(self, path: str, params: dict, context: str) -> list[dict]:
        """GET a collection endpoint and return its items."""
        url = f"{self.base_url}/{path}"
        try:
            response = requests.get(
                url,
                params=params,
                headers=self._get_headers(),
                timeout=self.timeout
            )
        except requests.exceptions.Timeout as e:
            raise self._handle_error(
                Exception(f"Request timeout after {self.timeout}s"), context
            ) from e
        except requests.exceptions.RequestException as e:
            raise self._handle_error(e, context) from e

        if response.status_code in (401, 403):
            raise self._handle_error(
                Exception(f"Authentication failed: {response.status_code}"), context
            )

        if response.status_code != 200:
            raise self._handle_error(
                Exception(f"API returned status {response.status_code}: {response.text}"),
                context
            )

        try:
            data = response.json()
        except ValueError as e:
            raise self._handle_error(e, context) from e

        # Expected format: {"results": [...]}, {"data": [...]} or a bare list
        if isinstance(data, dict):
            items = data.get("results") or data.get("data") or data.get(path) or []
        elif isinstance(data, list):
            items = data
        else:
            raise self._handle_error(
                Exception(f"Unexpected API response format: {type(data)}"), context
            )

        self._last_error = None
        return [item for item in items if isinstance(item, dict)]

    def list_active_products(self, limit: Optional[int] = None) -> list[Product]:
        params: dict[str, Any] = {"isActive": "true"}
        if limit is not None:
            params["limit"] = limit

        products = []
        for item in self._get_items("products", params, "list_active_products"):
            product = self._parse_product(item)
            if product and product.is_active:
                products.append(product)

        return products[:limit] if limit is not None else products

    def list_active_categories(self) -> list[Category]:
        categories = []
        for item in self._get_items("categories", {"isActive": "true"}, "list_active_categories"):
            category = self._parse_category(item)
            if category and category.is_active:
                categories.append(category)
        return categories

    def _parse_product(self, item: dict) -> Optional[Product]:
        """
        Parse API item to Product.

        Handles both flat prices and the storefront's {"prices": {"retail": ...}} shape.
        """
        try:
            price = item.get("price")
            prices = item.get("prices")
            if price is None and isinstance(prices, dict):
                price = prices.get("retail")

            category = item.get("category")
            if isinstance(category, dict):
                category = category.get("id") or category.get("_id") or category.get("name")

            return Product(
                id=str(item.get("id") or item.get("_id") or ""),
                name=item.get("name") or item.get("title") or "",
                description=item.get("description") or "",
                price=float(price) if price is not None else None,
                category=str(category) if category else None,
                slug=item.get("slug"),
                is_active=item.get("isActive", item.get("is_active", True)),
            )
        except (TypeError, ValueError) as e:
            logger.warning(f"Failed to parse product item: {e}")
            return None

    def _parse_category(self, item: dict) -> Optional[Category]:
        """Parse API item to Category."""
        try:
            return Category(
                id=str(item.get("id") or item.get("_id") or ""),
                name=item.get("name") or "",
                description=item.get("description") or "",
                slug=item.get("slug"),
                is_active=item.get("isActive", item.get("is_active", True)),
            )
        except (TypeError, ValueError) as e:
            logger.warning(f"Failed to parse category item: {e}")
            return None

    def get_last_error(self) -> Optional[str]:
        """Get the last error message."""
        return self._last_error
