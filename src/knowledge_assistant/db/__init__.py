"""Database module for the knowledge assistant."""

from knowledge_assistant.db.database import async_session_maker, engine, init_db
from knowledge_assistant.db.models import (
    Base,
    CacheEntry,
    ConversationRecord,
    KnowledgeEntry,
    KnowledgeRevision,
    KnowledgeSource,
)

__all__ = [
    "Base",
    "CacheEntry",
    "ConversationRecord",
    "KnowledgeEntry",
    "KnowledgeRevision",
    "KnowledgeSource",
    "engine",
    "async_session_maker",
    "init_db",
]
