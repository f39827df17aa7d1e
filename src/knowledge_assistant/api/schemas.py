"""API request and response schemas."""

from datetime import datetime

from pydantic import BaseModel, Field


class ResolveRequest(BaseModel):
    """Resolve request schema."""

    query: str = Field(..., description="Raw user query or teach command")
    user_id: str | None = Field(default=None, description="Caller id, used for visibility and history")

    model_config = {"json_schema_extra": {
        "example": {
            "query": "What is the capital of France?",
            "user_id": "u-42",
        }
    }}


class ResolveResponse(BaseModel):
    """Resolve response schema."""

    response: str = Field(..., description="Answer text")
    kind: str = Field(..., description="Result variant (knowledge, cache, provider, learned, ...)")
    source: str = Field(..., description="Source tag stored on the conversation record")
    confidence: float = Field(..., description="Confidence of the answer")
    knowledge_id: str | None = Field(default=None, description="Knowledge entry used or written")
    conversation_id: str | None = Field(default=None, description="Conversation id for feedback")
    awaiting_confirmation: bool = Field(default=False, description="A clarification is pending")
    similarity: float | None = Field(default=None, description="Match similarity of a knowledge hit")
    possibly_stale: bool = Field(default=False, description="The stored answer may be outdated")
    attribution: str | None = Field(default=None, description="Provider that produced the answer")
    took_ms: int = Field(..., description="Resolution duration in milliseconds")

    model_config = {"json_schema_extra": {
        "example": {
            "response": "Paris is the capital of France.",
            "kind": "knowledge",
            "source": "user",
            "confidence": 0.95,
            "knowledge_id": "3f2a9c1e0b7d4e5f8a6b1c2d3e4f5a6b",
            "conversation_id": "9b8c7d6e5f4a3b2c1d0e9f8a7b6c5d4e",
            "awaiting_confirmation": False,
            "similarity": 0.83,
            "possibly_stale": False,
            "attribution": None,
            "took_ms": 12,
        }
    }}


class FeedbackRequest(BaseModel):
    """Feedback request schema."""

    conversation_id: str = Field(..., description="Conversation the feedback refers to", min_length=1)
    feedback: int = Field(..., ge=-1, le=1, description="-1 (wrong), 0 (neutral) or 1 (helpful)")

    model_config = {"json_schema_extra": {
        "example": {
            "conversation_id": "9b8c7d6e5f4a3b2c1d0e9f8a7b6c5d4e",
            "feedback": -1,
        }
    }}


class FeedbackResponse(BaseModel):
    """Feedback response schema."""

    conversation_id: str
    feedback: int
    knowledge_id: str | None = None
    previous_confidence: float | None = None
    new_confidence: float | None = None


class ConversationItem(BaseModel):
    """A single conversation record."""

    id: str
    query: str
    response: str
    source: str
    confidence: float
    feedback: int
    knowledge_id: str | None = None
    created_at: datetime


class HistoryResponse(BaseModel):
    """Conversation history of a user, newest first."""

    user_id: str
    conversations: list[ConversationItem] = Field(default_factory=list)


class ReverifyResponse(BaseModel):
    """Outcome of a knowledge re-verification run."""

    checked: int
    updated: int
    unchanged: int
    no_answer: int
    failed: int
    updated_ids: list[str] = Field(default_factory=list)


class CacheSweepResponse(BaseModel):
    """Outcome of a cache sweep."""

    deleted: int


class PurgeResponse(BaseModel):
    """Outcome of a knowledge purge."""

    deleted: int


class ClearHistoryResponse(BaseModel):
    """Outcome of clearing a user's history."""

    user_id: str
    deleted: int
