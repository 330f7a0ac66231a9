"""Tests for Intent Classifier."""

import pytest
from agents.intent_classifier import IntentClassifier
from schemas.intent import Intent, IntentPattern


class TestIntentClassifier:
    """Test keyword-based intent classification."""

    def setup_method(self):
        """Set up test fixtures."""
        self.classifier = IntentClassifier()

    def test_patterns_loaded_from_yaml(self):
        """Test the default table is loaded in declaration order."""
        intents = [p.intent for p in self.classifier.patterns]

        assert intents[0] == Intent.PRODUCT_SEARCH
        assert intents[-1] == Intent.GENERAL_QUESTION
        assert len(intents) == 6

    def test_product_search_classification(self):
        """Test search phrasing resolves to product_search."""
        result = self.classifier.classify("find me a dining table")

        assert result.intent == Intent.PRODUCT_SEARCH
        assert result.confidence == pytest.approx(0.8 / 5)

    def test_product_inquiry_classification(self):
        """Test price questions resolve to product_inquiry."""
        result = self.classifier.classify("what about the price?")

        assert result.intent == Intent.PRODUCT_INQUIRY
        assert result.confidence == pytest.approx(0.85 / 5)

    def test_recommendation_classification(self):
        """Test recommendation phrasing."""
        result = self.classifier.classify("Can you recommend the best sofa?")

        assert result.intent == Intent.PRODUCT_RECOMMENDATION
        assert result.confidence == pytest.approx(2 / 5 * 0.9)

    def test_code_help_classification(self):
        """Test developer questions resolve to code_help."""
        result = self.classifier.classify("How do I call the products API endpoint in code?")

        assert result.intent == Intent.CODE_HELP

    def test_business_analytics_classification(self):
        """Test reporting questions outscore the weaker search match."""
        result = self.classifier.classify("Show me the sales report")

        assert result.intent == Intent.BUSINESS_ANALYTICS
        assert result.confidence == pytest.approx(2 / 5 * 0.85)

    def test_no_match_defaults_to_general_question(self):
        """Test unmatched messages fall back with zero confidence."""
        result = self.classifier.classify("hello there")

        assert result.intent == Intent.GENERAL_QUESTION
        assert result.confidence == 0.0

    def test_tie_keeps_earlier_pattern(self):
        """Test equal scores resolve to the earlier declared pattern."""
        classifier = IntentClassifier(patterns=[
            IntentPattern(intent=Intent.PRODUCT_SEARCH, keywords=["table"], weight=0.5),
            IntentPattern(intent=Intent.PRODUCT_INQUIRY, keywords=["table"], weight=0.5),
        ])

        result = classifier.classify("table")

        assert result.intent == Intent.PRODUCT_SEARCH

    def test_confidence_capped_at_one(self):
        """Test confidence never exceeds 1.0."""
        classifier = IntentClassifier(patterns=[
            IntentPattern(intent=Intent.PRODUCT_SEARCH, keywords=["sofa"], weight=2.0),
        ])

        result = classifier.classify("sofa")

        assert result.confidence == 1.0

    def test_confidence_in_range_for_varied_messages(self):
        """Test every classification stays within the closed set and [0, 1]."""
        messages = [
            "",
            "?",
            "find search show looking for need",
            "recommend suggest best which should i",
            "What is the price, cost, size and material?",
            "code function api endpoint implement",
        ]

        for message in messages:
            result = self.classifier.classify(message)
            assert result.intent in set(Intent)
            assert 0.0 <= result.confidence <= 1.0

    def test_entity_extraction(self):
        """Test capitalized words come first, then numbers."""
        result = self.classifier.classify("Is the Teak Dining Table 180 cm or 200?")

        assert result.entities == ["Teak", "Dining", "Table", "180", "200"]

    def test_entity_extraction_skips_short_words(self):
        """Test capitalized words of two characters are ignored."""
        entities = self.classifier.extract_entities("Hi OK I need 4 Chairs")

        assert entities == ["Chairs", "4"]
