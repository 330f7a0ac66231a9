"""Agents for the shopping assistant."""

from .intent_classifier import IntentClassifier
from .response_generator import ResponseGenerator

__all__ = [
    "IntentClassifier",
    "ResponseGenerator",
]
