"""Knowledge store queries shared by retrieval, mutation and admin tasks."""

import logging

from sqlalchemy import ColumnElement, delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from knowledge_assistant.config import Settings
from knowledge_assistant.db.models import KnowledgeEntry, KnowledgeSource
from knowledge_assistant.db.retry import run_with_retry

logger = logging.getLogger(__name__)


def visible_to(user_id: str | None) -> ColumnElement[bool]:
    """SQL clause: entry is owned by the caller, ownerless, or public."""
    clauses = [KnowledgeEntry.owner_user_id.is_(None), KnowledgeEntry.is_public.is_(True)]
    if user_id is not None:
        clauses.append(KnowledgeEntry.owner_user_id == user_id)
    return or_(*clauses)


def escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


async def load_match_keys(
    session: AsyncSession, user_id: str | None
) -> list[tuple[str, str, float, int]]:
    """Load (id, normalized_query, confidence, times_used) of every visible entry."""
    result = await session.execute(
        select(
            KnowledgeEntry.id,
            KnowledgeEntry.normalized_query,
            KnowledgeEntry.confidence,
            KnowledgeEntry.times_used,
        ).where(visible_to(user_id))
    )
    return [tuple(row) for row in result.all()]


async def load_entries(session: AsyncSession, entry_ids: list[str]) -> dict[str, KnowledgeEntry]:
    if not entry_ids:
        return {}
    result = await session.execute(select(KnowledgeEntry).where(KnowledgeEntry.id.in_(entry_ids)))
    return {entry.id: entry for entry in result.scalars().all()}


async def substring_candidates(
    session: AsyncSession, query: str, user_id: str | None, limit: int = 5
) -> list[KnowledgeEntry]:
    """Simplified lookup: entries whose key contains the query verbatim."""
    pattern = f"%{escape_like(query)}%"
    result = await session.execute(
        select(KnowledgeEntry)
        .where(KnowledgeEntry.normalized_query.like(pattern, escape="\\"))
        .where(visible_to(user_id))
        .order_by(KnowledgeEntry.confidence.desc(), KnowledgeEntry.times_used.desc())
        .limit(limit)
    )
    return list(result.scalars().all())


async def increment_usage(session: AsyncSession, entry_id: str) -> None:
    """Bump times_used without touching updated_at."""
    await session.execute(
        update(KnowledgeEntry)
        .where(KnowledgeEntry.id == entry_id)
        .values(
            times_used=KnowledgeEntry.times_used + 1,
            updated_at=KnowledgeEntry.updated_at,
        )
    )
    await session.commit()


async def flag_for_reverification(session: AsyncSession, entry_id: str) -> None:
    await session.execute(
        update(KnowledgeEntry)
        .where(KnowledgeEntry.id == entry_id)
        .values(needs_reverification=True, updated_at=KnowledgeEntry.updated_at)
    )
    await session.commit()


async def get_entry(
    entry_id: str,
    session_factory: async_sessionmaker[AsyncSession],
) -> KnowledgeEntry | None:
    """Fetch a knowledge entry by id."""
    async with session_factory() as session:
        return await session.get(KnowledgeEntry, entry_id)


async def count_entries(session_factory: async_sessionmaker[AsyncSession]) -> dict[str, int]:
    """Count entries per source."""
    async with session_factory() as session:
        result = await session.execute(
            select(KnowledgeEntry.source, func.count()).group_by(KnowledgeEntry.source)
        )
        return {source: count for source, count in result.all()}


async def purge_knowledge(
    settings: Settings,
    session_factory: async_sessionmaker[AsyncSession],
) -> int:
    """Delete all learned knowledge except system entries.

    Returns:
        Number of deleted entries
    """

    async def _purge() -> int:
        async with session_factory() as session:
            result = await session.execute(
                delete(KnowledgeEntry).where(KnowledgeEntry.source != KnowledgeSource.SYSTEM.value)
            )
            await session.commit()
            return result.rowcount or 0

    deleted = await run_with_retry(_purge, settings, "knowledge purge")
    logger.warning(f"Purged {deleted} knowledge entries (system entries kept)")
    return deleted
