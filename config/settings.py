"""Application settings."""

import os
from pathlib import Path
from typing import Optional
from pydantic import BaseModel, Field

CONFIG_DIR = Path(__file__).parent


class Settings(BaseModel):
    """Application configuration settings."""

    # Agent identity
    agent_name: str = "Blue Ocean Copilot"
    agent_version: str = "1.0.0"
    capabilities: list[str] = Field(default_factory=lambda: [
        "semantic_search",
        "code_analysis",
        "product_recommendation",
        "business_insights",
        "documentation",
        "query_optimization",
        "natural_language_processing",
    ])

    # Catalog sources (first configured one wins: API, CSV, built-in sample)
    catalog_api_url: Optional[str] = None
    catalog_api_token: Optional[str] = None
    catalog_api_timeout: int = 10
    products_csv_path: Optional[str] = None
    categories_csv_path: Optional[str] = None

    # Declarative tables
    intent_patterns_path: str = str(CONFIG_DIR / "intent_patterns.yaml")
    documentation_path: str = str(CONFIG_DIR / "documentation.yaml")

    # Persistence settings
    persistence_enabled: bool = True
    db_path: str = "data/conversations.db"

    # Context retention
    max_messages_in_context: int = 20
    max_context_age_seconds: int = 24 * 60 * 60
    context_compression_threshold: int = 10
    max_topics: int = 10
    max_context_keywords: int = 20
    min_keyword_length: int = 3
    max_keywords_per_message: int = 5
    priority_keywords: list[str] = Field(default_factory=lambda: [
        "product",
        "price",
        "furniture",
        "order",
        "category",
        "customer",
        "export",
        "wholesale",
        "retail",
    ])

    # Search settings
    search_threshold: float = 0.4
    min_match_char_length: int = 2
    product_result_ratio: float = 0.5
    category_result_ratio: float = 0.25
    documentation_result_ratio: float = 0.25

    # Display
    max_description_length: int = 100

    # Logging
    log_level: str = "INFO"

    def __init__(self, **data):
        # Auto-load overrides from environment if not provided
        env_overrides = {
            "db_path": "AGENT_DB_PATH",
            "products_csv_path": "CATALOG_CSV_PATH",
            "categories_csv_path": "CATEGORIES_CSV_PATH",
            "catalog_api_url": "CATALOG_API_URL",
            "catalog_api_token": "CATALOG_API_TOKEN",
            "log_level": "AGENT_LOG_LEVEL",
        }
        for field, env_var in env_overrides.items():
            if data.get(field) is None and os.environ.get(env_var):
                data[field] = os.environ[env_var]

        # Unset values fall back to field defaults
        data = {key: value for key, value in data.items() if value is not None}
        super().__init__(**data)
