"""Assistant-level exceptions."""


class AssistantError(Exception):
    """Base exception for knowledge assistant operations."""

    pass


class StoreUnavailableError(AssistantError):
    """The knowledge store could not be reached after retrying."""

    def __init__(self, message: str, attempts: int = 0):
        self.attempts = attempts
        super().__init__(message)


class ConversationNotFoundError(AssistantError):
    """Feedback was submitted for a conversation that does not exist."""

    def __init__(self, conversation_id: str):
        self.conversation_id = conversation_id
        super().__init__(f"Conversation not found: {conversation_id}")


class InvalidQueryError(AssistantError):
    """Query is empty or too long to be processed."""

    pass


class CalculationError(AssistantError):
    """Arithmetic expression could not be evaluated."""

    pass
