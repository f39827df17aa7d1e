"""Bulk re-verification of knowledge that may have gone out of date.

Candidates are entries flagged when a possibly stale answer was served, plus
entries about time-sensitive topics (presidents, populations, "current"
facts) that have not been verified recently. Each candidate is re-asked to
the generative providers; a substantially different answer replaces the
stored one and leaves a KnowledgeRevision audit row.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from sqlalchemy import and_, or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from knowledge_assistant.config import Settings
from knowledge_assistant.db.models import KnowledgeEntry, KnowledgeRevision, KnowledgeSource, utcnow
from knowledge_assistant.db.retry import run_with_retry
from knowledge_assistant.exceptions import StoreUnavailableError
from knowledge_assistant.knowledge.store import escape_like
from knowledge_assistant.providers.gateway import ProviderGateway
from knowledge_assistant.retrieval.similarity import jaccard_similarity

logger = logging.getLogger(__name__)

TIME_SENSITIVE_KEYWORDS = (
    "president",
    "prime minister",
    "capital",
    "population",
    "currency",
    "ceo",
    "current",
    "recent",
    "latest",
)

REVISION_REASON = "Automatic re-verification"


@dataclass
class ReverificationReport:
    """Counts of what happened to each checked entry."""

    checked: int = 0
    updated: int = 0
    unchanged: int = 0
    no_answer: int = 0
    failed: int = 0
    updated_ids: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class _Candidate:
    id: str
    normalized_query: str
    response: str


async def find_candidates(
    settings: Settings,
    session_factory: async_sessionmaker[AsyncSession],
    now: datetime | None = None,
    limit: int | None = None,
) -> list[KnowledgeEntry]:
    """Entries due for re-verification, most used and oldest first.

    Flagged entries qualify regardless of when they were last verified;
    keyword matches only once REVERIFY_AFTER_DAYS have passed.
    """
    cutoff = (now or utcnow()) - timedelta(days=settings.REVERIFY_AFTER_DAYS)
    keyword_match = or_(
        *(
            KnowledgeEntry.normalized_query.ilike(f"%{escape_like(keyword)}%", escape="\\")
            for keyword in TIME_SENSITIVE_KEYWORDS
        )
    )
    not_recently_verified = or_(
        KnowledgeEntry.last_verified_at.is_(None),
        KnowledgeEntry.last_verified_at < cutoff,
    )
    async with session_factory() as session:
        result = await session.execute(
            select(KnowledgeEntry)
            .where(
                KnowledgeEntry.source != KnowledgeSource.SYSTEM.value,
                KnowledgeEntry.confidence > settings.REVERIFY_MIN_CONFIDENCE,
                or_(
                    KnowledgeEntry.needs_reverification.is_(True),
                    and_(keyword_match, not_recently_verified),
                ),
            )
            .order_by(KnowledgeEntry.times_used.desc(), KnowledgeEntry.updated_at.asc())
            .limit(limit or settings.REVERIFY_LIMIT)
        )
        return list(result.scalars().all())


class KnowledgeReverifier:
    """Re-asks generative providers about stored answers that may be outdated."""

    def __init__(
        self,
        settings: Settings,
        session_factory: async_sessionmaker[AsyncSession],
        gateway: ProviderGateway,
    ):
        self.settings = settings
        self.session_factory = session_factory
        self.gateway = gateway

    async def reverify_knowledge(self, limit: int | None = None) -> ReverificationReport:
        """Check all current candidates in batches.

        Returns:
            Report of checked, updated and unchanged entries
        """
        report = ReverificationReport()
        if not self.gateway.ai_enabled:
            logger.warning("Re-verification skipped: no generative provider is enabled")
            return report

        entries = await find_candidates(self.settings, self.session_factory, limit=limit)
        candidates = [_Candidate(e.id, e.normalized_query, e.response) for e in entries]
        logger.info(f"Re-verifying {len(candidates)} knowledge entries")

        batch_size = max(1, self.settings.REVERIFY_BATCH_SIZE)
        for start in range(0, len(candidates), batch_size):
            batch = candidates[start : start + batch_size]
            outcomes = await asyncio.gather(
                *(self._verify(candidate) for candidate in batch), return_exceptions=True
            )
            for candidate, outcome in zip(batch, outcomes):
                report.checked += 1
                if isinstance(outcome, (StoreUnavailableError, SQLAlchemyError)):
                    logger.error(f"Re-verification of {candidate.id} failed: {outcome}")
                    report.failed += 1
                elif isinstance(outcome, BaseException):
                    raise outcome
                elif outcome == "updated":
                    report.updated += 1
                    report.updated_ids.append(candidate.id)
                elif outcome == "unchanged":
                    report.unchanged += 1
                else:
                    report.no_answer += 1

        logger.info(
            f"Re-verification done: {report.updated} updated, {report.unchanged} unchanged, "
            f"{report.no_answer} without answer, {report.failed} failed"
        )
        return report

    async def _verify(self, candidate: _Candidate) -> str:
        answer = await self.gateway.generate(candidate.normalized_query)
        if answer is None or not answer.answer:
            await self._touch(candidate.id, clear_flag=False)
            logger.info(f"No fresh answer for '{candidate.normalized_query}'")
            return "no_answer"

        score = jaccard_similarity(candidate.response.lower(), answer.answer.lower())
        if score >= self.settings.REVERIFY_UNCHANGED_SIMILARITY:
            await self._touch(candidate.id, clear_flag=True)
            logger.debug(f"'{candidate.normalized_query}' still current (jaccard={score:.2f})")
            return "unchanged"

        async def _replace() -> None:
            async with self.session_factory() as session:
                entry = await session.get(KnowledgeEntry, candidate.id)
                if entry is None:
                    return
                now = utcnow()
                session.add(
                    KnowledgeRevision(
                        knowledge_id=entry.id,
                        previous_response=entry.response,
                        new_response=answer.answer,
                        reason=REVISION_REASON,
                        source=answer.provider or answer.source,
                    )
                )
                entry.response = answer.answer
                entry.is_ai_generated = True
                entry.ai_provider = answer.provider or answer.source
                entry.needs_reverification = False
                entry.updated_at = now
                entry.last_verified_at = now
                await session.commit()

        await run_with_retry(_replace, self.settings, "knowledge revision")
        logger.info(f"Updated '{candidate.normalized_query}' (jaccard={score:.2f})")
        return "updated"

    async def _touch(self, entry_id: str, clear_flag: bool) -> None:
        values = {"last_verified_at": utcnow(), "updated_at": KnowledgeEntry.updated_at}
        if clear_flag:
            values["needs_reverification"] = False

        async def _update() -> None:
            async with self.session_factory() as session:
                await session.execute(
                    update(KnowledgeEntry).where(KnowledgeEntry.id == entry_id).values(**values)
                )
                await session.commit()

        await run_with_retry(_update, self.settings, "verification timestamp")
