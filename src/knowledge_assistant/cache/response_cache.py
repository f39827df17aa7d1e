"""Time-boxed cache of external provider answers.

Entries are keyed by a hash of the case-folded, whitespace-collapsed query.
Reads ignore entries older than the TTL without deleting them; sweep() removes
entries older than the longer retention window.
"""

import hashlib
import logging
from datetime import datetime, timedelta

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from knowledge_assistant.config import Settings
from knowledge_assistant.db.models import CacheEntry, utcnow
from knowledge_assistant.db.retry import run_with_retry
from knowledge_assistant.text.normalizer import collapse_whitespace

logger = logging.getLogger(__name__)


def cache_key(query: str) -> str:
    """Stable hash of the case-folded, whitespace-normalized query."""
    canonical = collapse_whitespace(query.casefold())
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


class ResponseCache:
    """Persistent cache shielding external providers from repeat queries."""

    def __init__(
        self,
        settings: Settings,
        session_factory: async_sessionmaker[AsyncSession],
    ):
        self.settings = settings
        self.session_factory = session_factory
        self.ttl = timedelta(days=settings.CACHE_TTL_DAYS)
        self.retention = timedelta(days=settings.CACHE_RETENTION_DAYS)

    async def get(self, query: str, now: datetime | None = None) -> CacheEntry | None:
        """Return the live entry for a query, or None if absent or expired."""
        key = cache_key(query)
        now = now or utcnow()

        async def _get() -> CacheEntry | None:
            async with self.session_factory() as session:
                return await session.scalar(select(CacheEntry).where(CacheEntry.query_hash == key))

        entry = await run_with_retry(_get, self.settings, "cache read")
        if entry is None:
            return None
        if now - entry.created_at > self.ttl:
            logger.debug(f"Cache entry for '{query}' expired (created {entry.created_at})")
            return None
        logger.info(f"Cache hit for '{query}' (source: {entry.source})")
        return entry

    async def put(
        self,
        query: str,
        response: str,
        source: str,
        now: datetime | None = None,
    ) -> CacheEntry:
        """Insert or replace the entry for a query, refreshing its timestamp."""
        key = cache_key(query)
        created_at = now or utcnow()

        async def _upsert() -> CacheEntry:
            async with self.session_factory() as session:
                entry = await self._write(session, key, query, response, source, created_at)
                try:
                    await session.commit()
                except IntegrityError:
                    # Another writer inserted the same hash first
                    await session.rollback()
                    entry = await self._write(session, key, query, response, source, created_at)
                    await session.commit()
                return entry

        entry = await run_with_retry(_upsert, self.settings, "cache write")
        logger.debug(f"Cached response for '{query}' (source: {source})")
        return entry

    @staticmethod
    async def _write(
        session: AsyncSession,
        key: str,
        query: str,
        response: str,
        source: str,
        created_at: datetime,
    ) -> CacheEntry:
        entry = await session.scalar(select(CacheEntry).where(CacheEntry.query_hash == key))
        if entry is None:
            entry = CacheEntry(query_hash=key, query=query)
            session.add(entry)
        entry.query = query
        entry.response = response
        entry.source = source
        entry.created_at = created_at
        return entry

    async def sweep(self, now: datetime | None = None) -> int:
        """Delete entries older than the retention window.

        Returns:
            Number of deleted entries
        """
        cutoff = (now or utcnow()) - self.retention

        async def _sweep() -> int:
            async with self.session_factory() as session:
                result = await session.execute(delete(CacheEntry).where(CacheEntry.created_at < cutoff))
                await session.commit()
                return result.rowcount or 0

        deleted = await run_with_retry(_sweep, self.settings, "cache sweep")
        logger.info(f"Cache sweep removed {deleted} entries older than {cutoff:%Y-%m-%d}")
        return deleted
