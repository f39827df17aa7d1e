"""Conversation records: one audit row per resolved query."""

import logging

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from knowledge_assistant.config import Settings
from knowledge_assistant.db.models import ConversationRecord, clamp_confidence
from knowledge_assistant.db.retry import run_with_retry

logger = logging.getLogger(__name__)


class ConversationLog:
    """Writes and reads conversation records."""

    def __init__(
        self,
        settings: Settings,
        session_factory: async_sessionmaker[AsyncSession],
    ):
        self.settings = settings
        self.session_factory = session_factory

    async def log(
        self,
        query: str,
        response: str,
        confidence: float,
        source: str,
        user_id: str | None = None,
        knowledge_id: str | None = None,
    ) -> ConversationRecord:
        """Persist a conversation record and return it."""

        async def _log() -> ConversationRecord:
            async with self.session_factory() as session:
                record = ConversationRecord(
                    user_id=user_id,
                    query=query,
                    response=response,
                    knowledge_id=knowledge_id,
                    source=source,
                    confidence=clamp_confidence(confidence),
                )
                session.add(record)
                await session.commit()
                return record

        record = await run_with_retry(_log, self.settings, "conversation log")
        logger.debug(f"Logged conversation {record.id} (source={source}, knowledge={knowledge_id})")
        return record

    async def get_user_history(
        self, user_id: str, limit: int = 10, offset: int = 0
    ) -> list[ConversationRecord]:
        """Get a user's conversations, newest first."""
        async with self.session_factory() as session:
            result = await session.execute(
                select(ConversationRecord)
                .where(ConversationRecord.user_id == user_id)
                .order_by(ConversationRecord.created_at.desc())
                .limit(limit)
                .offset(offset)
            )
            return list(result.scalars().all())

    async def get_recent(self, limit: int = 20) -> list[ConversationRecord]:
        """Get the most recent conversations across all users."""
        async with self.session_factory() as session:
            result = await session.execute(
                select(ConversationRecord).order_by(ConversationRecord.created_at.desc()).limit(limit)
            )
            return list(result.scalars().all())

    async def clear_user_history(self, user_id: str) -> int:
        """Delete all conversations of a user.

        Returns:
            Number of deleted records
        """
        async with self.session_factory() as session:
            result = await session.execute(
                delete(ConversationRecord).where(ConversationRecord.user_id == user_id)
            )
            await session.commit()
            deleted = result.rowcount or 0
        logger.info(f"Cleared {deleted} conversations for user {user_id}")
        return deleted
