"""Learning and merge-on-write for the knowledge store.

A write first looks for a visible entry whose key is more than 0.8 similar to
the new question. If one exists the new answer replaces its response;
otherwise a new entry is inserted. The lookup and the write are not atomic:
two concurrent teach calls for the same fact can both insert.
"""

import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from knowledge_assistant.config import Settings
from knowledge_assistant.db.models import KnowledgeEntry, KnowledgeSource, utcnow
from knowledge_assistant.db.retry import run_with_retry
from knowledge_assistant.exceptions import InvalidQueryError
from knowledge_assistant.knowledge import store
from knowledge_assistant.retrieval.similarity import similarity
from knowledge_assistant.text.normalizer import normalize

logger = logging.getLogger(__name__)


@dataclass
class LearnOutcome:
    """Result of a knowledge write."""

    entry: KnowledgeEntry
    merged: bool


class KnowledgeMutator:
    """Inserts or merges knowledge entries."""

    def __init__(
        self,
        settings: Settings,
        session_factory: async_sessionmaker[AsyncSession],
    ):
        self.settings = settings
        self.session_factory = session_factory

    async def _find_merge_target(
        self, session: AsyncSession, normalized_query: str, user_id: str | None
    ) -> tuple[str, float] | None:
        best: tuple[str, float] | None = None
        for entry_id, key, _confidence, _used in await store.load_match_keys(session, user_id):
            score = similarity(normalized_query, key)
            if score > self.settings.MERGE_SIMILARITY_THRESHOLD and (best is None or score > best[1]):
                best = (entry_id, score)
        return best

    async def learn(
        self,
        question: str,
        answer: str,
        owner_user_id: str | None = None,
        context: str | None = None,
    ) -> LearnOutcome:
        """Teach the store an answer to a question.

        Args:
            question: Question text (normalized before storage)
            answer: Answer text, stored as given
            owner_user_id: Teaching user; None makes the entry public
            context: Optional provenance note

        Returns:
            The merged or inserted entry

        Raises:
            InvalidQueryError: If question or answer is empty
            StoreUnavailableError: If the store stays unreachable
        """
        normalized_query = normalize(question, self.settings.MAX_QUERY_LENGTH)
        answer = (answer or "").strip()
        if not normalized_query or not answer:
            raise InvalidQueryError("Both a question and an answer are required to learn")

        async def _learn() -> LearnOutcome:
            async with self.session_factory() as session:
                now = utcnow()
                target = await self._find_merge_target(session, normalized_query, owner_user_id)
                if target is not None:
                    entry = await session.get(KnowledgeEntry, target[0])
                    entry.response = answer
                    entry.confidence = max(entry.confidence, self.settings.LEARNED_CONFIDENCE)
                    entry.source = KnowledgeSource.USER_EXPLICIT.value
                    entry.is_ai_generated = False
                    entry.ai_provider = None
                    entry.needs_reverification = False
                    if context is not None:
                        entry.context = context
                    entry.updated_at = now
                    entry.last_verified_at = now
                    await session.commit()
                    logger.info(
                        f"Knowledge updated: '{entry.normalized_query}' "
                        f"(matched '{normalized_query}' at {target[1]:.2f})"
                    )
                    return LearnOutcome(entry=entry, merged=True)

                entry = KnowledgeEntry(
                    normalized_query=normalized_query,
                    response=answer,
                    context=context,
                    source=KnowledgeSource.USER.value,
                    confidence=self.settings.LEARNED_CONFIDENCE,
                    owner_user_id=owner_user_id,
                    is_public=owner_user_id is None,
                    created_at=now,
                    updated_at=now,
                    last_verified_at=now,
                )
                session.add(entry)
                await session.commit()
                logger.info(f"New knowledge added: '{normalized_query}'")
                return LearnOutcome(entry=entry, merged=False)

        return await run_with_retry(_learn, self.settings, "knowledge learn")

    async def merge_external_answer(
        self,
        query: str,
        answer: str,
        source: KnowledgeSource,
        context: str | None = None,
        ai_provider: str | None = None,
    ) -> LearnOutcome:
        """Persist an accepted web or AI answer with the same merge rule.

        External answers are ownerless and public.
        """
        normalized_query = normalize(query, self.settings.MAX_QUERY_LENGTH)
        if not normalized_query or not answer:
            raise InvalidQueryError("Cannot store an empty external answer")
        is_ai = source == KnowledgeSource.AI

        async def _merge() -> LearnOutcome:
            async with self.session_factory() as session:
                now = utcnow()
                target = await self._find_merge_target(session, normalized_query, None)
                if target is not None:
                    entry = await session.get(KnowledgeEntry, target[0])
                    entry.response = answer
                    entry.context = context
                    entry.confidence = max(entry.confidence, self.settings.EXTERNAL_CONFIDENCE)
                    entry.source = source.value
                    entry.is_ai_generated = is_ai
                    entry.ai_provider = ai_provider if is_ai else None
                    entry.needs_reverification = False
                    entry.updated_at = now
                    entry.last_verified_at = now
                    await session.commit()
                    logger.info(f"Updated '{entry.normalized_query}' with {source.value} answer")
                    return LearnOutcome(entry=entry, merged=True)

                entry = KnowledgeEntry(
                    normalized_query=normalized_query,
                    response=answer,
                    context=context,
                    source=source.value,
                    confidence=self.settings.EXTERNAL_CONFIDENCE,
                    owner_user_id=None,
                    is_public=True,
                    is_ai_generated=is_ai,
                    ai_provider=ai_provider if is_ai else None,
                    created_at=now,
                    updated_at=now,
                    last_verified_at=now,
                )
                session.add(entry)
                await session.commit()
                logger.info(f"Stored {source.value} answer for '{normalized_query}'")
                return LearnOutcome(entry=entry, merged=False)

        return await run_with_retry(_merge, self.settings, "external answer write")
