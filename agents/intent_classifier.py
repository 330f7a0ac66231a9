"""Intent classifier for incoming shopper messages."""

import re
import logging
from pathlib import Path
from typing import Optional

import yaml

from schemas.intent import Intent, IntentPattern, IntentResult

logger = logging.getLogger(__name__)

DEFAULT_PATTERNS_PATH = Path(__file__).parent.parent / "config" / "intent_patterns.yaml"


class IntentClassifier:
    """Scores messages against a weighted keyword table."""

    def __init__(
        self,
        patterns: Optional[list[IntentPattern]] = None,
        patterns_path: Optional[str] = None
    ):
        """
        Initialize classifier with its pattern table.

        Args:
            patterns: Explicit pattern table, evaluated in order
            patterns_path: Path to intent_patterns.yaml (used when patterns is None)
        """
        if patterns is None:
            patterns = self._load_patterns(patterns_path or DEFAULT_PATTERNS_PATH)
        self.patterns = list(patterns)

    def _load_patterns(self, path) -> list[IntentPattern]:
        """Load the pattern table from YAML."""
        with open(path, 'r') as f:
            rows = yaml.safe_load(f) or []
        patterns = [IntentPattern(**row) for row in rows]
        logger.debug(f"Loaded {len(patterns)} intent patterns from {path}")
        return patterns

    def classify(self, message: str) -> IntentResult:
        """
        Classify a message into one of the known intents.

        Args:
            message: Raw user message

        Returns:
            IntentResult with best intent, confidence and entities
        """
        message_lower = message.lower()

        best_intent = Intent.GENERAL_QUESTION
        best_score = 0.0

        # Strictly greater keeps the earlier pattern on ties
        for pattern in self.patterns:
            score = self._score(pattern, message_lower)
            if score > best_score:
                best_score = score
                best_intent = pattern.intent

        return IntentResult(
            intent=best_intent,
            confidence=min(best_score, 1.0),
            entities=self.extract_entities(message),
        )

    def _score(self, pattern: IntentPattern, message_lower: str) -> float:
        """Fraction of pattern keywords present, scaled by the pattern weight."""
        matches = [kw for kw in pattern.keywords if kw in message_lower]
        return (len(matches) / len(pattern.keywords)) * pattern.weight

    def extract_entities(self, message: str) -> list[str]:
        """
        Extract candidate named references.

        Capitalized words longer than two characters come first, then
        every run of digits, each in order of appearance.
        """
        entities = [
            word for word in message.split()
            if len(word) > 2 and word[0].isupper()
        ]
        entities.extend(re.findall(r"\d+", message))
        return entities
