"""Tests for the agent service."""

import threading
import time
import pytest
from unittest.mock import Mock
from config.settings import Settings
from errors import CatalogError, DeadlineExceededError, InitializationError, InvalidRequestError, PersistenceError
from memory.base_store import InMemoryConversationStore
from orchestrator import AgentService
from retrieval.catalog_provider import InMemoryCatalogProvider
from schemas.agent import AgentRequest, MessageRole
from schemas.intent import Intent, IntentResult
from schemas.responses import GeneratedResponse
from schemas.search import ItemType


class TestAgentService:
    """Test end-to-end turn processing."""

    def setup_method(self):
        """Set up test fixtures."""
        self.settings = Settings(persistence_enabled=False)
        self.repository = InMemoryConversationStore()
        self.service = AgentService(
            settings=self.settings,
            catalog=InMemoryCatalogProvider(),
            repository=self.repository,
        )

    def test_new_conversation(self):
        """Test a first message creates a conversation."""
        response = self.service.process_request(AgentRequest(message="find me a dining table"))

        assert response.conversation_id
        assert response.message
        assert response.metadata.confidence == pytest.approx(0.16)
        assert response.metadata.processing_time >= 0
        assert "Teak Dining Table" in response.metadata.sources

        context = self.service.context_store.get_context(response.conversation_id)
        assert context.metadata.message_count == 2

    def test_follow_up_turn(self):
        """Test a second turn on the same conversation."""
        classified = []
        classify = self.service.classifier.classify

        def record_intent(message):
            result = classify(message)
            classified.append(result.intent)
            return result

        self.service.classifier = Mock()
        self.service.classifier.classify.side_effect = record_intent

        first = self.service.process_request(AgentRequest(message="find me a dining table"))
        second = self.service.process_request(AgentRequest(
            message="what about the price?",
            conversation_id=first.conversation_id,
        ))

        assert classified == [Intent.PRODUCT_SEARCH, Intent.PRODUCT_INQUIRY]
        assert second.conversation_id == first.conversation_id
        assert second.metadata.confidence == pytest.approx(0.17)
        context = self.service.context_store.get_context(first.conversation_id)
        assert context.metadata.message_count == 4

    def test_history_round_trip(self):
        """Test history ends with the user message and the reply."""
        response = self.service.process_request(AgentRequest(
            message="Show me the Teak Dining Table",
            conversation_id="conv-1",
        ))

        history = self.service.get_conversation_history("conv-1")

        assert [m.role for m in history] == [MessageRole.USER, MessageRole.AGENT]
        assert history[0].content == "Show me the Teak Dining Table"
        assert history[1].content == response.message
        assert history[1].metadata["model"] == "Blue Ocean Copilot"
        assert history[1].metadata["context"] == ["Show", "Teak", "Dining", "Table"]

    @pytest.mark.parametrize("message", ["", "   ", "\n\t"])
    def test_blank_message_rejected(self, message):
        """Test blank messages are rejected without creating state."""
        with pytest.raises(InvalidRequestError):
            self.service.process_request(AgentRequest(message=message, conversation_id="conv-1"))

        assert len(self.service.context_store) == 0
        assert self.repository.find_by_conversation_id("conv-1") is None

    def test_turn_persisted(self):
        """Test each turn is mirrored to the repository."""
        self.service.process_request(AgentRequest(message="hello", conversation_id="conv-1", user_id="u1"))

        stored = self.repository.find_by_conversation_id("conv-1")

        assert stored.user_id == "u1"
        assert len(stored.messages) == 2
        assert stored.metadata.status == "active"

    def test_history_falls_back_to_repository(self):
        """Test history is served from storage once the live context is gone."""
        self.service.process_request(AgentRequest(message="hello", conversation_id="conv-1"))
        self.service.clear_conversation("conv-1")

        history = self.service.get_conversation_history("conv-1")

        assert len(history) == 2
        assert self.service.get_conversation_history("unknown") == []

    def test_persistence_failure_swallowed(self):
        """Test a failing repository does not fail the turn."""
        repository = Mock()
        repository.upsert.side_effect = PersistenceError("disk full")
        service = AgentService(
            settings=self.settings,
            catalog=InMemoryCatalogProvider(),
            repository=repository,
        )

        response = service.process_request(AgentRequest(message="hello", conversation_id="conv-1"))

        assert response.message
        assert repository.upsert.called
        assert len(service.get_conversation_history("conv-1")) == 2

    def test_repository_read_failure_returns_empty_history(self):
        """Test a failing repository read yields no history."""
        repository = Mock()
        repository.find_by_conversation_id.side_effect = PersistenceError("locked")
        service = AgentService(settings=self.settings, repository=repository)

        assert service.get_conversation_history("conv-1") == []

    def test_initialization_failure(self):
        """Test catalog failures surface as InitializationError."""
        catalog = Mock()
        catalog.list_active_products.side_effect = CatalogError("catalog down")
        service = AgentService(settings=self.settings, catalog=catalog, repository=self.repository)

        with pytest.raises(InitializationError):
            service.process_request(AgentRequest(message="hello"))

    def test_initialize_once(self):
        """Test indices are built once across turns."""
        catalog = Mock(wraps=InMemoryCatalogProvider())
        service = AgentService(settings=self.settings, catalog=catalog, repository=self.repository)

        service.initialize()
        service.initialize()
        service.process_request(AgentRequest(message="find me a dining table"))

        assert catalog.list_active_products.call_count == 1

    def test_deadline_exceeded(self):
        """Test an expired deadline aborts the turn."""
        with pytest.raises(DeadlineExceededError):
            self.service.process_request(
                AgentRequest(message="hello", conversation_id="conv-1"), timeout=-1
            )

        assert self.service.context_store.get_context("conv-1") is None

    def test_deadline_exceeded_is_invalid_request(self):
        """Test callers catching InvalidRequestError also see deadline failures."""
        assert issubclass(DeadlineExceededError, InvalidRequestError)

    def test_deadline_during_turn_leaves_no_trace(self):
        """Test a deadline firing mid-turn records nothing."""
        def slow_classify(message):
            time.sleep(0.2)
            return IntentResult()

        classifier = Mock()
        classifier.classify.side_effect = slow_classify
        service = AgentService(
            settings=self.settings,
            catalog=InMemoryCatalogProvider(),
            repository=self.repository,
            classifier=classifier,
        )
        service.initialize()

        with pytest.raises(DeadlineExceededError):
            service.process_request(AgentRequest(message="hello", conversation_id="c1"), timeout=0.1)

        assert service.context_store.get_context("c1") is None
        assert self.repository.find_by_conversation_id("c1") is None
        assert service.context_store.is_in_use("c1") is False

    def test_deadline_during_turn_keeps_existing_history(self):
        """Test an aborted turn leaves an existing conversation unchanged."""
        self.service.process_request(AgentRequest(message="hello", conversation_id="c1"))

        def slow_classify(message):
            time.sleep(0.2)
            return IntentResult()

        self.service.classifier = Mock()
        self.service.classifier.classify.side_effect = slow_classify

        with pytest.raises(DeadlineExceededError):
            self.service.process_request(AgentRequest(message="again", conversation_id="c1"), timeout=0.1)

        context = self.service.context_store.get_context("c1")
        assert context.metadata.message_count == 2
        assert len(self.repository.find_by_conversation_id("c1").messages) == 2

    def test_conversation_cleared_during_turn(self):
        """Test clearing a conversation mid-turn does not fail the turn."""
        generator = Mock()

        def clear_then_answer(intent, message):
            self.service.clear_conversation("c2")
            return GeneratedResponse(message="Here you go")

        generator.generate.side_effect = clear_then_answer
        self.service.generator = generator
        self.service.process_request(AgentRequest(message="first", conversation_id="c2"))

        response = self.service.process_request(AgentRequest(message="second", conversation_id="c2"))

        assert response.message == "Here you go"
        history = self.service.get_conversation_history("c2")
        assert [m.content for m in history] == ["second", "Here you go"]
        assert self.service.context_store.is_in_use("c2") is False

    def test_list_conversations(self):
        """Test stored conversations are listed per user."""
        self.service.process_request(AgentRequest(message="hello", conversation_id="c1", user_id="u1"))
        self.service.process_request(AgentRequest(message="hello", conversation_id="c2", user_id="u2"))

        listed = self.service.list_conversations(user_id="u1")

        assert [c.conversation_id for c in listed] == ["c1"]
        assert listed[0].messages == []
        assert len(self.service.list_conversations()) == 2

    def test_list_conversations_repository_failure(self):
        """Test a failing repository lists nothing."""
        repository = Mock()
        repository.list_conversations.side_effect = PersistenceError("locked")
        service = AgentService(settings=self.settings, repository=repository)

        assert service.list_conversations() == []

    def test_wire_format_is_camel_case(self):
        """Test responses serialise with camelCase keys."""
        response = self.service.process_request(AgentRequest(message="hello"))

        data = response.model_dump(by_alias=True)

        assert "conversationId" in data
        assert "processingTime" in data["metadata"]

    def test_request_accepts_camel_case(self):
        """Test requests validate from camelCase payloads."""
        request = AgentRequest.model_validate({"message": "hi", "conversationId": "c1", "userId": "u1"})

        assert request.conversation_id == "c1"
        assert request.user_id == "u1"

    def test_concurrent_turns_serialised(self):
        """Test concurrent turns on one conversation never interleave."""
        errors = []

        def send(i):
            try:
                self.service.process_request(AgentRequest(message=f"hello {i}", conversation_id="conv-1"))
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=send, args=(i,)) for i in range(5)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        history = self.service.get_conversation_history("conv-1")
        assert errors == []
        assert len(history) == 10
        assert [m.role for m in history] == [MessageRole.USER, MessageRole.AGENT] * 5

    def test_search_and_suggestions(self):
        """Test direct search helpers."""
        categories = self.service.search("dining", 5, ItemType.CATEGORY)
        suggestions = self.service.get_suggestions("dining", 4)

        assert categories and all(r.type == ItemType.CATEGORY for r in categories)
        assert suggestions

    def test_get_config(self):
        """Test the public configuration."""
        config = self.service.get_config()

        assert config["name"] == "Blue Ocean Copilot"
        assert config["version"] == "1.0.0"
        assert "semantic_search" in config["capabilities"]

    def test_sweep(self):
        """Test sweep reports evictions."""
        self.service.process_request(AgentRequest(message="hello"))

        assert self.service.sweep() == 0
