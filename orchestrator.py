"""Main orchestrator for the Blue Ocean shopping assistant."""

import time
import uuid
import logging
import threading
from typing import Any, Optional

from config.settings import Settings
from errors import DeadlineExceededError, InvalidRequestError, PersistenceError
from schemas.agent import (
    AgentMessage,
    AgentRequest,
    AgentResponse,
    MessageRole,
    ResponseMetadata,
    StoredConversation,
)
from schemas.responses import PersistenceResult
from schemas.search import ItemType, SearchResult

# Retrieval components
from retrieval.catalog_provider import CatalogProvider, InMemoryCatalogProvider
from retrieval.catalog_api_provider import CatalogAPIProvider
from retrieval.csv_catalog_provider import CSVCatalogProvider
from retrieval.retrieval_service import RetrievalService

# Memory components
from memory.base_store import ConversationRepository, InMemoryConversationStore
from memory.context_store import ContextStore
from memory.sqlite_store import SQLiteConversationStore

# Agents
from agents.intent_classifier import IntentClassifier
from agents.response_generator import ResponseGenerator

logger = logging.getLogger(__name__)


class AgentService:
    """Entry point turning a user message into a structured assistant response."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        catalog: Optional[CatalogProvider] = None,
        repository: Optional[ConversationRepository] = None,
        context_store: Optional[ContextStore] = None,
        retrieval: Optional[RetrievalService] = None,
        classifier: Optional[IntentClassifier] = None,
        generator: Optional[ResponseGenerator] = None,
    ):
        """
        Initialize the service. Collaborators not supplied are built from settings.

        Args:
            settings: Application settings
            catalog: Catalog collaborator
            repository: Conversation persistence collaborator
            context_store: Live conversation store
            retrieval: Retrieval service
            classifier: Intent classifier
            generator: Response generator
        """
        self.settings = settings or Settings()

        self.catalog = catalog or self._init_catalog()
        self.repository = repository or self._init_repository()
        self.context_store = context_store or ContextStore(self.settings)
        self.retrieval = retrieval or RetrievalService(self.catalog, settings=self.settings)
        self.classifier = classifier or IntentClassifier(patterns_path=self.settings.intent_patterns_path)
        self.generator = generator or ResponseGenerator(self.retrieval, self.catalog, self.settings)

        self._initialized = False
        self._init_lock = threading.Lock()

    def _init_catalog(self) -> CatalogProvider:
        """Pick the catalog collaborator from settings."""
        if self.settings.catalog_api_url:
            logger.info(f"Using catalog API: {self.settings.catalog_api_url}")
            return CatalogAPIProvider(
                base_url=self.settings.catalog_api_url,
                timeout=self.settings.catalog_api_timeout,
                auth_token=self.settings.catalog_api_token,
            )
        if self.settings.products_csv_path:
            logger.info(f"Using CSV catalog: {self.settings.products_csv_path}")
            return CSVCatalogProvider(
                products_csv=self.settings.products_csv_path,
                categories_csv=self.settings.categories_csv_path,
            )
        logger.info("No catalog configured, using built-in sample catalog")
        return InMemoryCatalogProvider()

    def _init_repository(self) -> ConversationRepository:
        """Pick the persistence collaborator from settings."""
        if not self.settings.persistence_enabled:
            return InMemoryConversationStore()
        try:
            return SQLiteConversationStore(db_path=self.settings.db_path)
        except Exception as e:
            logger.error(f"Failed to initialize conversation store: {e}")
            return InMemoryConversationStore()

    def initialize(self):
        """Build search indices once per service lifetime."""
        if self._initialized:
            return

        with self._init_lock:
            if self._initialized:
                return
            self.retrieval.initialize()
            self._initialized = True
            logger.info("Agent service initialized successfully")

    def process_request(
        self,
        request: AgentRequest,
        timeout: Optional[float] = None
    ) -> AgentResponse:
        """
        Process one user turn end-to-end.

        Args:
            request: Inbound request
            timeout: Optional deadline in seconds for the whole turn

        Returns:
            AgentResponse for the caller

        Raises:
            InvalidRequestError: Blank message, or the deadline fired
            InitializationError: Search indices could not be built
        """
        start = time.perf_counter()
        deadline = start + timeout if timeout is not None else None

        self.initialize()
        self._check_deadline(deadline)

        if not request.message or not request.message.strip():
            raise InvalidRequestError()

        conversation_id = request.conversation_id or str(uuid.uuid4())

        with self.context_store.conversation_lock(conversation_id):
            user_message = AgentMessage(role=MessageRole.USER, content=request.message)

            # Nothing is written to the store until the last deadline check passes
            intent = self.classifier.classify(request.message)
            logger.debug(
                f"Conversation {conversation_id}: intent={intent.intent.value} "
                f"confidence={intent.confidence:.2f}"
            )
            self._check_deadline(deadline)

            generated = self.generator.generate(intent, request.message)
            self._check_deadline(deadline)

            agent_message = AgentMessage(
                role=MessageRole.AGENT,
                content=generated.message,
                metadata={
                    "model": self.settings.agent_name,
                    "context": intent.entities,
                },
            )
            self.context_store.append_turn(
                conversation_id, [user_message, agent_message], request.user_id
            )

            result = self._save_conversation(conversation_id, request.user_id)
            if not result.ok:
                logger.warning(f"Conversation {conversation_id} not persisted: {result.error}")

        processing_time = int((time.perf_counter() - start) * 1000)

        return AgentResponse(
            conversation_id=conversation_id,
            message=generated.message,
            suggestions=generated.suggestions,
            actions=generated.actions,
            metadata=ResponseMetadata(
                processing_time=processing_time,
                confidence=intent.confidence,
                sources=generated.sources,
            ),
        )

    def _check_deadline(self, deadline: Optional[float]):
        if deadline is not None and time.perf_counter() > deadline:
            raise DeadlineExceededError()

    def _save_conversation(self, conversation_id: str, user_id: Optional[str]) -> PersistenceResult:
        """Mirror the live message list to the repository. Never raises."""
        context = self.context_store.get_context(conversation_id)
        if context is None:
            return PersistenceResult.failure(PersistenceError(f"No live context for {conversation_id}"))

        try:
            self.repository.upsert(
                conversation_id,
                list(context.messages),
                user_id=user_id or context.user_id,
            )
        except Exception as e:
            logger.error(f"Error saving conversation: {e}")
            return PersistenceResult.failure(e)

        return PersistenceResult.success()

    def get_conversation_history(self, conversation_id: str) -> list[AgentMessage]:
        """
        Messages of a conversation: live store first, then the repository.

        Returns an empty list when neither has it.
        """
        context = self.context_store.get_context(conversation_id)
        if context is not None:
            return list(context.messages)

        try:
            stored = self.repository.find_by_conversation_id(conversation_id)
        except Exception as e:
            logger.error(f"Error loading conversation history: {e}")
            return []

        return list(stored.messages) if stored else []

    def list_conversations(
        self,
        user_id: Optional[str] = None,
        limit: int = 50
    ) -> list[StoredConversation]:
        """Stored conversations, newest first. Empty when the repository fails."""
        try:
            return self.repository.list_conversations(user_id=user_id, limit=limit)
        except Exception as e:
            logger.error(f"Error listing conversations: {e}")
            return []

    def clear_conversation(self, conversation_id: str) -> bool:
        """Drop the live context of a conversation."""
        return self.context_store.delete_context(conversation_id)

    def search(
        self,
        query: str,
        limit: int = 10,
        item_type: Optional[ItemType] = None
    ) -> list[SearchResult]:
        """Direct search across one or all collections."""
        self.initialize()
        return self.retrieval.search_by_type(query, limit, item_type)

    def get_suggestions(self, query: str, limit: int = 5) -> list[str]:
        """Title suggestions for a partial query."""
        self.initialize()
        return self.retrieval.get_suggestions(query, limit)

    def get_config(self) -> dict[str, Any]:
        """Public description of the assistant."""
        return {
            "name": self.settings.agent_name,
            "version": self.settings.agent_version,
            "capabilities": list(self.settings.capabilities),
        }

    def sweep(self) -> int:
        """Evict stale contexts. Call periodically from the host process."""
        return self.context_store.sweep()

    def shutdown(self):
        self.context_store.shutdown()


# Alias for backward compatibility
Orchestrator = AgentService
