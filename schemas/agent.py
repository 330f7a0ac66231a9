"""Conversation, memory and request/response schemas."""

import uuid
from datetime import datetime
from enum import Enum
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """Base for models exchanged with the transport layer (camelCase on the wire)."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MessageRole(str, Enum):
    """Author of a conversation message."""
    USER = "user"
    AGENT = "agent"
    SYSTEM = "system"


class AgentMessage(WireModel):
    """A single message in a conversation."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    role: MessageRole
    content: str
    timestamp: datetime = Field(default_factory=datetime.now)
    metadata: Optional[dict[str, Any]] = None  # model name, extracted entities


class ConversationMetadata(WireModel):
    """Bookkeeping for a live conversation."""
    start_time: datetime = Field(default_factory=datetime.now)
    last_update: datetime = Field(default_factory=datetime.now)
    message_count: int = 0
    topic: Optional[str] = None


class ConversationContext(WireModel):
    """Full ordered message history of one conversation."""
    conversation_id: str
    user_id: Optional[str] = None
    messages: list[AgentMessage] = Field(default_factory=list)
    metadata: ConversationMetadata = Field(default_factory=ConversationMetadata)


class LongTermMemory(BaseModel):
    """Bounded summaries derived from the whole conversation."""
    topics: list[str] = Field(default_factory=list)
    preferences: dict[str, Any] = Field(default_factory=dict)
    context: list[str] = Field(default_factory=list)


class AgentMemory(BaseModel):
    """Derived per-conversation memory. Safe to rebuild from history."""
    conversation_id: str
    short_term_memory: list[AgentMessage] = Field(default_factory=list)
    long_term_memory: LongTermMemory = Field(default_factory=LongTermMemory)


class ActionType(str, Enum):
    """Kinds of references the caller may act on."""
    NAVIGATE = "navigate"
    SEARCH = "search"
    FILTER = "filter"
    RECOMMEND = "recommend"
    EXPLAIN = "explain"


class AgentAction(WireModel):
    """An actionable reference attached to a response. Never executed by the core."""
    type: ActionType
    payload: dict[str, Any] = Field(default_factory=dict)
    description: str


class AgentRequest(WireModel):
    """Inbound request from the transport layer."""
    message: str
    conversation_id: Optional[str] = None
    user_id: Optional[str] = None
    context: Optional[dict[str, Any]] = None  # current page, user role, etc.


class ResponseMetadata(WireModel):
    """Timing and provenance for a response."""
    processing_time: int = Field(0, ge=0, description="Wall-clock milliseconds")
    confidence: float = Field(0.0, ge=0.0, le=1.0)
    sources: Optional[list[str]] = None


class AgentResponse(WireModel):
    """Structured reply returned to the transport layer."""
    conversation_id: str
    message: str
    suggestions: Optional[list[str]] = None
    actions: Optional[list[AgentAction]] = None
    metadata: ResponseMetadata = Field(default_factory=ResponseMetadata)


class StoredConversationMetadata(BaseModel):
    """Metadata kept alongside a persisted conversation."""
    start_time: datetime = Field(default_factory=datetime.now)
    last_update: datetime = Field(default_factory=datetime.now)
    message_count: int = 0
    status: str = "active"


class StoredConversation(BaseModel):
    """Durable mirror of a conversation held by the persistence collaborator."""
    conversation_id: str
    user_id: Optional[str] = None
    messages: list[AgentMessage] = Field(default_factory=list)
    metadata: StoredConversationMetadata = Field(default_factory=StoredConversationMetadata)
