"""Catalog records supplied by the catalog collaborator."""

from typing import Optional
from pydantic import BaseModel


class Product(BaseModel):
    """An active catalog product."""
    id: str
    name: str
    description: str = ""
    price: Optional[float] = None  # retail price
    category: Optional[str] = None
    slug: Optional[str] = None
    is_active: bool = True


class Category(BaseModel):
    """An active catalog category."""
    id: str
    name: str
    description: str = ""
    slug: Optional[str] = None
    is_active: bool = True
