"""Pydantic schemas for the shopping assistant."""

from .agent import (
    AgentAction,
    ActionType,
    AgentMemory,
    AgentMessage,
    AgentRequest,
    AgentResponse,
    ConversationContext,
    ConversationMetadata,
    LongTermMemory,
    MessageRole,
    ResponseMetadata,
    StoredConversation,
    StoredConversationMetadata,
)
from .catalog import Category, Product
from .intent import Intent, IntentPattern, IntentResult
from .responses import GeneratedResponse, PersistenceResult
from .search import ItemType, SearchableItem, SearchResult

__all__ = [
    "AgentAction",
    "ActionType",
    "AgentMemory",
    "AgentMessage",
    "AgentRequest",
    "AgentResponse",
    "ConversationContext",
    "ConversationMetadata",
    "LongTermMemory",
    "MessageRole",
    "ResponseMetadata",
    "StoredConversation",
    "StoredConversationMetadata",
    "Category",
    "Product",
    "Intent",
    "IntentPattern",
    "IntentResult",
    "GeneratedResponse",
    "PersistenceResult",
    "ItemType",
    "SearchableItem",
    "SearchResult",
]
