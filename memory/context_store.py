"""In-memory conversation context and derived memory."""

import logging
import threading
from contextlib import contextmanager
from datetime import datetime, timedelta
from typing import Iterable, Iterator, Optional

from config.settings import Settings
from errors import ConversationNotFoundError
from schemas.agent import (
    AgentMemory,
    AgentMessage,
    ConversationContext,
    ConversationMetadata,
    MessageRole,
)

logger = logging.getLogger(__name__)

STOP_WORDS = frozenset([
    "the", "and", "for", "are", "but", "not", "you", "all", "can",
    "her", "was", "one", "our", "out", "this", "that", "with", "have",
    "from", "they", "what", "been", "more", "when", "your",
])


def _merge_recent_unique(existing: list[str], new: Iterable[str], cap: int) -> list[str]:
    """Union preserving first-seen order, keeping only the last `cap` entries."""
    merged = list(dict.fromkeys([*existing, *new]))
    return merged[-cap:] if cap > 0 else []


class ContextStore:
    """
    Live store of conversation contexts and their derived memory.

    Holds state for a single process. Callers must run clear_old_contexts()
    (or sweep()) periodically; nothing is evicted automatically.
    """

    def __init__(self, settings: Optional[Settings] = None):
        """
        Initialize an empty store.

        Args:
            settings: Retention and compression limits
        """
        self.settings = settings or Settings()
        self._contexts: dict[str, ConversationContext] = {}
        self._memories: dict[str, AgentMemory] = {}
        self._conversation_locks: dict[str, threading.Lock] = {}
        self._lock_holders: dict[str, int] = {}
        self._lock = threading.RLock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._contexts)

    def conversation_ids(self) -> list[str]:
        with self._lock:
            return list(self._contexts)

    @contextmanager
    def conversation_lock(self, conversation_id: str) -> Iterator[None]:
        """
        Hold the lock serialising turns of one conversation.

        The lock entry lives for as long as any thread holds or waits on
        it, so evicting the context never hands a second turn a fresh lock.
        """
        with self._lock:
            lock = self._conversation_locks.get(conversation_id)
            if lock is None:
                lock = threading.Lock()
                self._conversation_locks[conversation_id] = lock
            self._lock_holders[conversation_id] = self._lock_holders.get(conversation_id, 0) + 1

        try:
            with lock:
                yield
        finally:
            with self._lock:
                remaining = self._lock_holders[conversation_id] - 1
                if remaining:
                    self._lock_holders[conversation_id] = remaining
                else:
                    del self._lock_holders[conversation_id]
                    del self._conversation_locks[conversation_id]

    def is_in_use(self, conversation_id: str) -> bool:
        """Whether a turn currently holds or waits on the conversation lock."""
        with self._lock:
            return conversation_id in self._lock_holders

    def create_context(self, conversation_id: str, user_id: Optional[str] = None) -> ConversationContext:
        """Create (or replace) the context for a conversation."""
        now = datetime.now()
        context = ConversationContext(
            conversation_id=conversation_id,
            user_id=user_id,
            metadata=ConversationMetadata(start_time=now, last_update=now, message_count=0),
        )
        with self._lock:
            self._contexts[conversation_id] = context
            self._memories[conversation_id] = AgentMemory(conversation_id=conversation_id)
        logger.debug(f"Created context for conversation {conversation_id}")
        return context

    def get_or_create_context(self, conversation_id: str, user_id: Optional[str] = None) -> ConversationContext:
        """Fetch the context, creating it atomically when absent."""
        with self._lock:
            context = self._contexts.get(conversation_id)
            if context is None:
                context = self.create_context(conversation_id, user_id)
            return context

    def get_context(self, conversation_id: str) -> Optional[ConversationContext]:
        with self._lock:
            return self._contexts.get(conversation_id)

    def add_message(self, conversation_id: str, message: AgentMessage):
        """
        Append a message, refresh memory and compress if over the limit.

        Raises:
            ConversationNotFoundError: If the context was never created
        """
        with self._lock:
            context = self._contexts.get(conversation_id)
            if context is None:
                raise ConversationNotFoundError(conversation_id)

            context.messages.append(message)
            context.metadata.last_update = datetime.now()

            self._update_memory(conversation_id, message)

            if len(context.messages) > self.settings.max_messages_in_context:
                self._compress(context)

            context.metadata.message_count = len(context.messages)

    def append_turn(
        self,
        conversation_id: str,
        messages: list[AgentMessage],
        user_id: Optional[str] = None
    ) -> ConversationContext:
        """Append the messages of one turn together, recreating the context if it was evicted."""
        with self._lock:
            context = self.get_or_create_context(conversation_id, user_id)
            for message in messages:
                self.add_message(conversation_id, message)
            return context

    def _update_memory(self, conversation_id: str, message: AgentMessage):
        memory = self._memories.get(conversation_id)
        if memory is None:
            memory = AgentMemory(conversation_id=conversation_id)
            self._memories[conversation_id] = memory

        short_term = memory.short_term_memory
        short_term.append(message)
        overflow = len(short_term) - self.settings.max_messages_in_context
        if overflow > 0:
            del short_term[:overflow]

        long_term = memory.long_term_memory
        long_term.topics = _merge_recent_unique(
            long_term.topics, self.extract_topics(message.content), self.settings.max_topics
        )
        long_term.context = _merge_recent_unique(
            long_term.context, self.extract_keywords(message.content), self.settings.max_context_keywords
        )

    def extract_topics(self, content: str) -> list[str]:
        """Priority keywords mentioned in the message."""
        content_lower = content.lower()
        return [kw for kw in self.settings.priority_keywords if kw in content_lower]

    def extract_keywords(self, content: str) -> list[str]:
        """First few non-stop-words longer than the minimum keyword length."""
        words = [
            word for word in content.lower().split()
            if len(word) > self.settings.min_keyword_length and word not in STOP_WORDS
        ]
        return words[:self.settings.max_keywords_per_message]

    def _compress(self, context: ConversationContext):
        """Keep every system message plus the most recent non-system ones, in order."""
        keep = self.settings.context_compression_threshold
        non_system = [m for m in context.messages if m.role != MessageRole.SYSTEM]
        recent_ids = {m.id for m in non_system[-keep:]} if keep > 0 else set()

        before = len(context.messages)
        context.messages = [
            m for m in context.messages
            if m.role == MessageRole.SYSTEM or m.id in recent_ids
        ]
        logger.debug(
            f"Compressed conversation {context.conversation_id}: "
            f"{before} -> {len(context.messages)} messages"
        )

    def get_memory(self, conversation_id: str) -> Optional[AgentMemory]:
        with self._lock:
            return self._memories.get(conversation_id)

    def rebuild_memory(self, conversation_id: str) -> Optional[AgentMemory]:
        """Regenerate the memory cache from the retained message history."""
        with self._lock:
            context = self._contexts.get(conversation_id)
            if context is None:
                return None
            self._memories[conversation_id] = AgentMemory(conversation_id=conversation_id)
            for message in context.messages:
                self._update_memory(conversation_id, message)
            return self._memories[conversation_id]

    def get_relevant_context(self, conversation_id: str, query: str) -> list[AgentMessage]:
        """
        Recent messages sharing a priority keyword with the query.

        Falls back to the last five messages when nothing overlaps.
        """
        with self._lock:
            context = self._contexts.get(conversation_id)
            if context is None:
                return []
            recent = context.messages[-self.settings.max_messages_in_context:]

        query_lower = query.lower()
        query_keywords = [kw for kw in self.settings.priority_keywords if kw in query_lower]
        relevant = [
            m for m in recent
            if any(kw in m.content.lower() for kw in query_keywords)
        ]
        return relevant if relevant else recent[-5:]

    def get_user_conversations(self, user_id: str) -> list[str]:
        with self._lock:
            return [cid for cid, ctx in self._contexts.items() if ctx.user_id == user_id]

    def delete_context(self, conversation_id: str) -> bool:
        with self._lock:
            deleted = self._contexts.pop(conversation_id, None) is not None
            self._memories.pop(conversation_id, None)
        return deleted

    def clear_old_contexts(self, now: Optional[datetime] = None) -> int:
        """
        Evict contexts idle for longer than the maximum context age.

        Conversations with a turn in flight are left for the next sweep.

        Returns:
            Number of evicted conversations
        """
        now = now or datetime.now()
        max_age = timedelta(seconds=self.settings.max_context_age_seconds)

        with self._lock:
            stale = [
                cid for cid, ctx in self._contexts.items()
                if now - ctx.metadata.last_update > max_age and cid not in self._lock_holders
            ]
            for cid in stale:
                del self._contexts[cid]
                self._memories.pop(cid, None)

        if stale:
            logger.info(f"Evicted {len(stale)} stale conversation contexts")
        return len(stale)

    def sweep(self, now: Optional[datetime] = None) -> int:
        """Periodic maintenance hook for the host process."""
        return self.clear_old_contexts(now)

    def shutdown(self):
        """Drop all live state."""
        with self._lock:
            count = len(self._contexts)
            self._contexts.clear()
            self._memories.clear()
        logger.info(f"Context store shut down ({count} conversations dropped)")
