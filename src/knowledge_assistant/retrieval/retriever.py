"""Fuzzy knowledge retrieval over the knowledge store."""

import logging
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from knowledge_assistant.config import Settings
from knowledge_assistant.db.models import KnowledgeEntry
from knowledge_assistant.db.retry import run_with_retry
from knowledge_assistant.exceptions import StoreUnavailableError
from knowledge_assistant.knowledge import store
from knowledge_assistant.retrieval.ranking import (
    USAGE_SIMILARITY,
    Candidate,
    rank_candidates,
)
from knowledge_assistant.retrieval.similarity import MatchType, keyword_matches, match_type, similarity

logger = logging.getLogger(__name__)


@dataclass
class RankedEntry:
    """A knowledge entry with its relevance against the query."""

    entry: KnowledgeEntry
    similarity: float
    match_type: MatchType
    keyword_matches: int

    @property
    def id(self) -> str:
        return self.entry.id

    @property
    def response(self) -> str:
        return self.entry.response


class KnowledgeRetriever:
    """Finds stored answers for a normalized query.

    Never raises: store failures fall back to a plain substring lookup and
    then to an empty result.
    """

    def __init__(
        self,
        settings: Settings,
        session_factory: async_sessionmaker[AsyncSession],
    ):
        self.settings = settings
        self.session_factory = session_factory

    async def find_answers(
        self,
        query: str,
        confidence_threshold: float | None = None,
        scope_user_id: str | None = None,
        track_usage: bool = True,
    ) -> list[RankedEntry]:
        """Find stored answers for a query, best first.

        Args:
            query: Normalized query text
            confidence_threshold: Similarity admission gate (defaults to settings)
            scope_user_id: Caller, used for visibility scoping
            track_usage: Increment times_used of a strong top match

        Returns:
            Ranked entries, possibly empty
        """
        if not query:
            return []
        threshold = (
            self.settings.MIN_CONFIDENCE_THRESHOLD
            if confidence_threshold is None
            else confidence_threshold
        )

        try:
            return await run_with_retry(
                lambda: self._ranked_lookup(query, threshold, scope_user_id, track_usage),
                self.settings,
                "knowledge lookup",
            )
        except (StoreUnavailableError, SQLAlchemyError) as e:
            logger.error(f"Knowledge lookup failed for '{query}', trying substring lookup: {e}")

        try:
            return await self._substring_lookup(query, scope_user_id)
        except SQLAlchemyError as e:
            logger.error(f"Substring lookup failed for '{query}': {e}")
            return []

    async def _ranked_lookup(
        self,
        query: str,
        threshold: float,
        user_id: str | None,
        track_usage: bool,
    ) -> list[RankedEntry]:
        async with self.session_factory() as session:
            keys = await store.load_match_keys(session, user_id)
            candidates = [
                Candidate(id=entry_id, normalized_query=key, confidence=conf, times_used=used)
                for entry_id, key, conf, used in keys
            ]
            ranked = rank_candidates(query, candidates, threshold, self.settings.RETRIEVAL_LIMIT)
            if not ranked:
                logger.debug(f"No knowledge candidates for '{query}' among {len(keys)} entries")
                return []

            entries = await store.load_entries(session, [s.candidate.id for s in ranked])
            results = [
                RankedEntry(
                    entry=entries[s.candidate.id],
                    similarity=s.similarity,
                    match_type=s.match_type,
                    keyword_matches=s.keyword_matches,
                )
                for s in ranked
                if s.candidate.id in entries
            ]

            if track_usage and results and results[0].similarity > USAGE_SIMILARITY:
                top = results[0].entry
                await store.increment_usage(session, top.id)
                await session.refresh(top)

            for index, result in enumerate(results[:3]):
                logger.debug(
                    f"Match #{index + 1} for '{query}': '{result.entry.normalized_query}' "
                    f"(similarity={result.similarity:.2f}, type={int(result.match_type)}, "
                    f"confidence={result.entry.confidence:.2f})"
                )
            return results

    async def _substring_lookup(self, query: str, user_id: str | None) -> list[RankedEntry]:
        async with self.session_factory() as session:
            entries = await store.substring_candidates(session, query, user_id)
            return [
                RankedEntry(
                    entry=entry,
                    similarity=similarity(query, entry.normalized_query),
                    match_type=match_type(query, entry.normalized_query),
                    keyword_matches=keyword_matches(query, entry.normalized_query),
                )
                for entry in entries
            ]
