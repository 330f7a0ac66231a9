"""Search index schemas."""

from enum import Enum
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field


class ItemType(str, Enum):
    """Collections the assistant can search."""
    PRODUCT = "product"
    CATEGORY = "category"
    DOCUMENTATION = "documentation"


class SearchableItem(BaseModel):
    """Read-only snapshot of an indexed item."""
    model_config = ConfigDict(frozen=True)

    id: str
    type: ItemType
    title: str
    description: str = ""
    content: Optional[str] = None
    tags: Optional[list[str]] = None
    metadata: Optional[dict[str, Any]] = None


class SearchResult(BaseModel):
    """A ranked match. Score 1.0 is a perfect match."""
    id: str
    type: ItemType
    title: str
    description: str = ""
    score: float = Field(0.0, ge=0.0, le=1.0)
    metadata: Optional[dict[str, Any]] = None
