"""Internal response schemas."""

from typing import Optional
from pydantic import BaseModel

from .agent import AgentAction


class GeneratedResponse(BaseModel):
    """Output of the response generator for one turn."""
    message: str
    suggestions: Optional[list[str]] = None
    actions: Optional[list[AgentAction]] = None
    sources: Optional[list[str]] = None


class PersistenceResult(BaseModel):
    """Outcome of a best-effort write or read against the conversation store."""
    ok: bool
    error: Optional[str] = None

    @classmethod
    def success(cls) -> "PersistenceResult":
        return cls(ok=True)

    @classmethod
    def failure(cls, error: Exception) -> "PersistenceResult":
        return cls(ok=False, error=str(error))
