"""Conversation persistence interface."""

import threading
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from schemas.agent import AgentMessage, StoredConversation, StoredConversationMetadata


class ConversationRepository(ABC):
    """Durable mirror of live conversations."""

    @abstractmethod
    def find_by_conversation_id(self, conversation_id: str) -> Optional[StoredConversation]:
        """
        Load a stored conversation.

        Args:
            conversation_id: Conversation ID

        Returns:
            StoredConversation or None if not found
        """
        pass

    @abstractmethod
    def upsert(
        self,
        conversation_id: str,
        messages: list[AgentMessage],
        user_id: Optional[str] = None,
        metadata: Optional[StoredConversationMetadata] = None
    ) -> StoredConversation:
        """
        Create or replace a stored conversation.

        Args:
            conversation_id: Conversation ID
            messages: Full message list to store
            user_id: Optional owner
            metadata: Optional metadata; start_time is preserved on update

        Returns:
            The stored record
        """
        pass

    @abstractmethod
    def list_conversations(
        self,
        user_id: Optional[str] = None,
        limit: int = 50
    ) -> list[StoredConversation]:
        """
        List conversations, most recently updated first.

        Args:
            user_id: Optional owner filter
            limit: Maximum number of conversations

        Returns:
            StoredConversation records without their messages
        """
        pass


class InMemoryConversationStore(ConversationRepository):
    """Repository kept in a dict, for tests and ephemeral deployments."""

    def __init__(self):
        self._records: dict[str, StoredConversation] = {}
        self._lock = threading.Lock()

    def find_by_conversation_id(self, conversation_id: str) -> Optional[StoredConversation]:
        with self._lock:
            record = self._records.get(conversation_id)
            return record.model_copy(deep=True) if record else None

    def upsert(
        self,
        conversation_id: str,
        messages: list[AgentMessage],
        user_id: Optional[str] = None,
        metadata: Optional[StoredConversationMetadata] = None
    ) -> StoredConversation:
        now = datetime.now()
        with self._lock:
            existing = self._records.get(conversation_id)
            start_time = existing.metadata.start_time if existing else now
            status = metadata.status if metadata else "active"
            record = StoredConversation(
                conversation_id=conversation_id,
                user_id=user_id if user_id is not None else (existing.user_id if existing else None),
                messages=list(messages),
                metadata=StoredConversationMetadata(
                    start_time=start_time,
                    last_update=now,
                    message_count=len(messages),
                    status=status,
                ),
            )
            self._records[conversation_id] = record
            return record.model_copy(deep=True)

    def list_conversations(
        self,
        user_id: Optional[str] = None,
        limit: int = 50
    ) -> list[StoredConversation]:
        with self._lock:
            records = [
                r for r in self._records.values()
                if user_id is None or r.user_id == user_id
            ]
        records.sort(key=lambda r: r.metadata.last_update, reverse=True)
        return [r.model_copy(update={"messages": []}, deep=True) for r in records[:max(limit, 0)]]
