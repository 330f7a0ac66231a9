"""Conversation context, derived memory and persistence."""

from .base_store import ConversationRepository, InMemoryConversationStore
from .context_store import ContextStore
from .sqlite_store import SQLiteConversationStore

__all__ = [
    "ConversationRepository",
    "InMemoryConversationStore",
    "ContextStore",
    "SQLiteConversationStore",
]
