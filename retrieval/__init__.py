"""Retrieval layer: fuzzy indices and catalog collaborators."""

from .catalog_provider import CatalogProvider, InMemoryCatalogProvider
from .catalog_api_provider import CatalogAPIProvider
from .csv_catalog_provider import CSVCatalogProvider
from .fuzzy_index import FuzzyIndex
from .retrieval_service import RetrievalService

__all__ = [
    "CatalogProvider",
    "InMemoryCatalogProvider",
    "CatalogAPIProvider",
    "CSVCatalogProvider",
    "FuzzyIndex",
    "RetrievalService",
]
