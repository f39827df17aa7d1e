"""SQLAlchemy models for the knowledge assistant.

- KnowledgeEntry: learned question -> answer facts (the knowledge store)
- CacheEntry: memoized external provider answers
- ConversationRecord: one audit row per resolved query, carries user feedback
- KnowledgeRevision: audit trail of answers replaced by re-verification
"""

import uuid
from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import Boolean, DateTime, Float, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, validates

MIN_CONFIDENCE = 0.1
MAX_CONFIDENCE = 1.0


def utcnow() -> datetime:
    """Current UTC time as a naive datetime (SQLite stores no tz info)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def new_id() -> str:
    return uuid.uuid4().hex


def clamp_confidence(value: float) -> float:
    """Clamp a confidence value into [0.1, 1.0], rounded to avoid float drift."""
    return round(min(MAX_CONFIDENCE, max(MIN_CONFIDENCE, float(value))), 4)


class KnowledgeSource(str, Enum):
    """Where a knowledge entry came from."""

    USER = "user"
    USER_EXPLICIT = "user_explicit"  # Re-taught over an existing entry
    WEB = "web"
    AI = "ai"
    SYSTEM = "system"


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class KnowledgeEntry(Base):
    """A learned fact: normalized question key plus its answer."""

    __tablename__ = "knowledge_entries"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    normalized_query: Mapped[str] = mapped_column(Text, index=True)
    response: Mapped[str] = mapped_column(Text)
    context: Mapped[str | None] = mapped_column(Text, nullable=True)
    source: Mapped[str] = mapped_column(String(32), default=KnowledgeSource.USER.value)
    confidence: Mapped[float] = mapped_column(Float, default=MAX_CONFIDENCE)
    times_used: Mapped[int] = mapped_column(Integer, default=0)

    # Visibility
    owner_user_id: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    is_public: Mapped[bool] = mapped_column(Boolean, default=False)

    # Provenance of generated answers
    is_ai_generated: Mapped[bool] = mapped_column(Boolean, default=False)
    ai_provider: Mapped[str | None] = mapped_column(String(64), nullable=True)

    # Set when a possibly stale answer was served, cleared by re-verification
    needs_reverification: Mapped[bool] = mapped_column(Boolean, default=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)
    last_verified_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    @validates("confidence")
    def _clamp_confidence(self, key: str, value: float) -> float:
        return clamp_confidence(value)

    def __repr__(self) -> str:
        return (
            f"<KnowledgeEntry(id={self.id}, query={self.normalized_query[:40]!r}, "
            f"source={self.source}, confidence={self.confidence})>"
        )


class CacheEntry(Base):
    """Memoized external provider answer, keyed by a hash of the query."""

    __tablename__ = "response_cache"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    query_hash: Mapped[str] = mapped_column(String(64), unique=True, index=True)
    query: Mapped[str] = mapped_column(Text)
    response: Mapped[str] = mapped_column(Text)
    source: Mapped[str] = mapped_column(String(64))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, index=True)

    def __repr__(self) -> str:
        return f"<CacheEntry(hash={self.query_hash[:12]}, source={self.source})>"


class ConversationRecord(Base):
    """Audit row written once per resolved query.

    knowledge_id is a weak reference: no foreign key, the entry may be gone.
    """

    __tablename__ = "conversation_records"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    user_id: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    query: Mapped[str] = mapped_column(Text)
    response: Mapped[str] = mapped_column(Text)
    knowledge_id: Mapped[str | None] = mapped_column(String(32), nullable=True)
    source: Mapped[str] = mapped_column(String(32), default="default")
    confidence: Mapped[float] = mapped_column(Float, default=MIN_CONFIDENCE)
    feedback: Mapped[int] = mapped_column(Integer, default=0)  # -1, 0 or 1
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, index=True)

    def __repr__(self) -> str:
        return (
            f"<ConversationRecord(id={self.id}, user={self.user_id}, "
            f"knowledge_id={self.knowledge_id}, feedback={self.feedback})>"
        )


class KnowledgeRevision(Base):
    """Previous answer of a knowledge entry replaced during re-verification."""

    __tablename__ = "knowledge_revisions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    knowledge_id: Mapped[str] = mapped_column(String(32), index=True)
    previous_response: Mapped[str] = mapped_column(Text)
    new_response: Mapped[str] = mapped_column(Text)
    reason: Mapped[str] = mapped_column(String(256))
    source: Mapped[str | None] = mapped_column(String(64), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    def __repr__(self) -> str:
        return f"<KnowledgeRevision(knowledge_id={self.knowledge_id}, reason={self.reason!r})>"
