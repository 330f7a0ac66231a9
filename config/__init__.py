"""Configuration for the shopping assistant."""

from .settings import Settings

__all__ = ["Settings"]
