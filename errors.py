"""Error taxonomy for the shopping assistant core."""


ERROR_MESSAGES = {
    "INVALID_REQUEST": "Invalid request format. Please check your input.",
    "SERVICE_UNAVAILABLE": "The agent service is temporarily unavailable. Please try again later.",
    "CONVERSATION_NOT_FOUND": "Conversation not found. Please start a new conversation.",
    "DEADLINE_EXCEEDED": "The request took too long to process. Please try again.",
}


class AgentError(Exception):
    """Base class for all assistant errors."""


class InvalidRequestError(AgentError):
    """Request rejected before any state was touched."""

    def __init__(self, message: str = ERROR_MESSAGES["INVALID_REQUEST"]):
        super().__init__(message)


class DeadlineExceededError(InvalidRequestError):
    """Caller-supplied deadline fired before the turn was recorded."""

    def __init__(self, message: str = ERROR_MESSAGES["DEADLINE_EXCEEDED"]):
        super().__init__(message)


class ConversationNotFoundError(AgentError):
    """A low-level context operation referenced an unknown conversation."""

    def __init__(self, conversation_id: str):
        super().__init__(f"{ERROR_MESSAGES['CONVERSATION_NOT_FOUND']} (id: {conversation_id})")
        self.conversation_id = conversation_id


class RetrievalError(AgentError):
    """Lookup against an index or the catalog failed."""


class CatalogError(RetrievalError):
    """The catalog collaborator could not be read."""


class PersistenceError(AgentError):
    """The conversation store could not be read or written."""


class InitializationError(AgentError):
    """Search indices could not be built."""

    user_message = ERROR_MESSAGES["SERVICE_UNAVAILABLE"]
