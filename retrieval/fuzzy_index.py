"""Weighted multi-field fuzzy index built on rapidfuzz."""

import logging
from typing import Optional

from rapidfuzz import fuzz, utils

from schemas.search import SearchableItem, SearchResult

logger = logging.getLogger(__name__)

FIELD_WEIGHTS = {
    "title": 0.4,
    "description": 0.3,
    "content": 0.2,
    "tags": 0.1,
}


class FuzzyIndex:
    """
    Approximate-match index over one collection of searchable items.

    Each item is scored per field with a location-independent partial
    match, and the field scores are combined by weight over the fields
    the item actually carries. Items scoring below ``1 - threshold`` are
    dropped.
    """

    def __init__(
        self,
        items: list[SearchableItem],
        threshold: float = 0.4,
        min_match_char_length: int = 2,
        weights: Optional[dict[str, float]] = None,
    ):
        """
        Build the index.

        Args:
            items: Items to index (snapshotted, never mutated)
            threshold: Maximum accepted distance, 0 = exact only, 1 = anything
            min_match_char_length: Queries shorter than this return nothing
            weights: Field weights (defaults to FIELD_WEIGHTS)
        """
        self.threshold = threshold
        self.min_match_char_length = min_match_char_length
        self.weights = weights or FIELD_WEIGHTS
        self._items = tuple(items)
        self._fields = [self._prepare(item) for item in self._items]

    def __len__(self) -> int:
        return len(self._items)

    @property
    def items(self) -> tuple[SearchableItem, ...]:
        return self._items

    def _prepare(self, item: SearchableItem) -> dict[str, list[str]]:
        """Normalize the searchable fields of one item, skipping empty ones."""
        raw = {
            "title": [item.title],
            "description": [item.description],
            "content": [item.content or ""],
            "tags": list(item.tags or []),
        }
        prepared = {}
        for field, values in raw.items():
            cleaned = [utils.default_process(v) for v in values if v]
            cleaned = [v for v in cleaned if v]
            if cleaned:
                prepared[field] = cleaned
        return prepared

    def _score_item(self, query: str, fields: dict[str, list[str]]) -> float:
        """Weighted mean of per-field similarities in [0, 1]."""
        total = 0.0
        weight_sum = 0.0
        for field, values in fields.items():
            weight = self.weights.get(field, 0.0)
            if weight <= 0:
                continue
            similarity = max(fuzz.partial_ratio(query, value) for value in values) / 100.0
            total += weight * similarity
            weight_sum += weight
        if weight_sum == 0:
            return 0.0
        return total / weight_sum

    def search(self, query: str, limit: int = 10) -> list[SearchResult]:
        """
        Search the index.

        Args:
            query: Free-text query
            limit: Maximum number of results

        Returns:
            Results sorted by descending score; ties keep index order
        """
        query = utils.default_process(query or "")
        if limit <= 0 or len(query) < self.min_match_char_length:
            return []

        min_score = 1.0 - self.threshold
        scored = []
        for item, fields in zip(self._items, self._fields):
            score = self._score_item(query, fields)
            if score >= min_score:
                scored.append((item, score))

        # sort is stable, so equal scores keep insertion order
        scored.sort(key=lambda pair: pair[1], reverse=True)

        return [
            SearchResult(
                id=item.id,
                type=item.type,
                title=item.title,
                description=item.description,
                score=round(min(max(score, 0.0), 1.0), 4),
                metadata=item.metadata,
            )
            for item, score in scored[:limit]
        ]
