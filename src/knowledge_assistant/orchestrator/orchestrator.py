"""Query resolution: the staged cascade from learning to the default answer.

Stages run strictly in order and the first one that produces an answer wins:

    creator -> learning -> greeting -> system info -> calculation ->
    programming / factual lookups -> knowledge base -> cache ->
    [AI if preferred] -> web search -> [AI as fallback] -> default

Every answer except a rejected input is written to the conversation log.
"""

import asyncio
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from knowledge_assistant.cache.response_cache import ResponseCache
from knowledge_assistant.config import Settings
from knowledge_assistant.db.models import KnowledgeSource
from knowledge_assistant.db.retry import run_with_retry
from knowledge_assistant.exceptions import CalculationError, InvalidQueryError, StoreUnavailableError
from knowledge_assistant.intent.classifier import IntentResult, classify
from knowledge_assistant.intent.rules import Intent
from knowledge_assistant.intent.teach import (
    TeachCommand,
    has_teach_lead_in,
    parse_teach_command,
    strip_correction,
)
from knowledge_assistant.knowledge import store
from knowledge_assistant.knowledge.history import ConversationLog
from knowledge_assistant.knowledge.mutation import KnowledgeMutator
from knowledge_assistant.orchestrator import canned
from knowledge_assistant.orchestrator.calculator import evaluate, extract_expression, format_number
from knowledge_assistant.orchestrator.lookups import factual_lookup, programming_lookup
from knowledge_assistant.orchestrator.refine import refine_factual_response
from knowledge_assistant.orchestrator.relevance import is_relevant_answer
from knowledge_assistant.orchestrator.results import (
    CacheHit,
    Canned,
    Clarification,
    Default,
    KnowledgeHit,
    Learned,
    ProviderHit,
    Rejected,
    Resolution,
)
from knowledge_assistant.providers.gateway import ProviderGateway
from knowledge_assistant.providers.prompts import is_ai_query, is_potentially_outdated
from knowledge_assistant.retrieval.retriever import KnowledgeRetriever
from knowledge_assistant.text.normalizer import normalize

logger = logging.getLogger(__name__)

INTENT_THRESHOLD = 0.5
GREETING_MAX_WORDS = 6
CANNED_CONFIDENCE = 1.0


class Orchestrator:
    """Resolves queries through the fallback cascade."""

    def __init__(
        self,
        settings: Settings,
        session_factory: async_sessionmaker[AsyncSession],
        gateway: ProviderGateway,
    ):
        self.settings = settings
        self.session_factory = session_factory
        self.gateway = gateway
        self.retriever = KnowledgeRetriever(settings, session_factory)
        self.mutator = KnowledgeMutator(settings, session_factory)
        self.cache = ResponseCache(settings, session_factory)
        self.conversations = ConversationLog(settings, session_factory)

    async def resolve(self, query: str, user_id: str | None = None) -> Resolution:
        """Answer a raw user query.

        Never raises: invalid input is rejected, and a deadline overrun or an
        unexpected failure degrades to the default answer.

        Args:
            query: Raw user input
            user_id: Caller, used for knowledge visibility and history

        Returns:
            One of the Resolution variants
        """
        rejected = self._validate(query)
        if rejected is not None:
            return rejected

        try:
            result = await asyncio.wait_for(
                self._run_stages(query, user_id),
                timeout=self.settings.REQUEST_DEADLINE_SECONDS,
            )
        except asyncio.TimeoutError:
            logger.warning(
                f"Resolution of '{query[:80]}' exceeded {self.settings.REQUEST_DEADLINE_SECONDS}s deadline"
            )
            result = self._default()
        except Exception as e:
            logger.error(f"Resolution failed for '{query[:80]}': {type(e).__name__}: {e}", exc_info=True)
            result = self._default()

        return await self._record(query, result, user_id)

    def _validate(self, query: object) -> Rejected | None:
        if not isinstance(query, str) or not query.strip():
            return Rejected(canned.EMPTY_QUERY_MESSAGE, source="rejected", confidence=0.0)
        if len(query) > self.settings.MAX_RAW_QUERY_LENGTH:
            logger.info(f"Rejected query of {len(query)} characters")
            return Rejected(
                canned.oversized_query_message(self.settings.MAX_RAW_QUERY_LENGTH),
                source="rejected",
                confidence=0.0,
            )
        if not normalize(query, self.settings.MAX_QUERY_LENGTH):
            return Rejected(canned.EMPTY_QUERY_MESSAGE, source="rejected", confidence=0.0)
        return None

    async def _record(self, query: str, result: Resolution, user_id: str | None) -> Resolution:
        try:
            record = await self.conversations.log(
                query=query.strip(),
                response=result.response,
                confidence=result.confidence,
                source=result.source,
                user_id=user_id,
                knowledge_id=result.knowledge_id,
            )
        except (StoreUnavailableError, SQLAlchemyError) as e:
            logger.error(f"Could not log conversation for '{query[:80]}': {e}")
            return result
        return result.with_conversation(record.id)

    def _default(self) -> Default:
        return Default(canned.DEFAULT_MESSAGE, source="default", confidence=canned.DEFAULT_CONFIDENCE)

    async def _run_stages(self, raw: str, user_id: str | None) -> Resolution:
        normalized = normalize(raw, self.settings.MAX_QUERY_LENGTH)

        if canned.is_creator_query(normalized):
            logger.info(f"Creator query: '{normalized}'")
            return Canned(canned.creator_response(self.settings), source="system", confidence=CANNED_CONFIDENCE)

        intent = classify(normalized, raw)

        learned = await self._learning_stage(raw, intent, user_id)
        if learned is not None:
            return learned

        if intent.intent == Intent.GREETING and len(normalized.split()) <= GREETING_MAX_WORDS:
            logger.info(f"Greeting: '{normalized}'")
            return Canned(canned.greeting_response(normalized), source="greeting", confidence=CANNED_CONFIDENCE)

        if canned.is_system_info_query(normalized):
            logger.info(f"System info query: '{normalized}'")
            return Canned(canned.system_info_response(self.settings), source="system", confidence=CANNED_CONFIDENCE)

        calculated = self._calculation_stage(raw)
        if calculated is not None:
            return calculated

        for lookup in (programming_lookup, factual_lookup):
            found = lookup(normalized)
            if found is not None:
                logger.info(f"Answered '{normalized}' from {found.source} lookup")
                return Canned(found.response, source=found.source, confidence=found.confidence)

        knowledge = await self._knowledge_stage(normalized, user_id)
        if knowledge is not None:
            return knowledge

        cached = await self._cache_stage(normalized)
        if cached is not None:
            return cached

        if self.settings.ai_preferred and is_ai_query(normalized):
            generated = await self._ai_stage(normalized)
            if generated is not None:
                return generated

        searched = await self._web_stage(normalized)
        if searched is not None:
            return searched

        if not self.settings.ai_preferred:
            generated = await self._ai_stage(normalized)
            if generated is not None:
                return generated

        logger.info(f"No source could answer '{normalized}'")
        return self._default()

    async def _learning_stage(self, raw: str, intent: IntentResult, user_id: str | None) -> Resolution | None:
        if intent.intent == Intent.CORRECTION:
            command = parse_teach_command(strip_correction(raw))
            if intent.confidence < INTENT_THRESHOLD and command is None:
                return None
        else:
            command = parse_teach_command(raw)
            explicit = has_teach_lead_in(raw) or (command is not None and command.explicit)
            if intent.intent == Intent.GREETING and not explicit:
                return None
            wants_learning = (
                (intent.intent == Intent.LEARNING and intent.confidence >= INTENT_THRESHOLD)
                or explicit
                or (command is not None and not intent.is_question_form)
            )
            if not wants_learning:
                return None

        if not self.settings.LEARNING_ENABLED:
            logger.info("Teach command ignored: learning is disabled")
            return Canned(canned.LEARNING_DISABLED_MESSAGE, source="system", confidence=CANNED_CONFIDENCE)
        if command is None:
            logger.info(f"Could not parse teach command '{raw[:80]}'")
            return Clarification(
                canned.CLARIFICATION_MESSAGE,
                source="clarification",
                confidence=CANNED_CONFIDENCE,
                awaiting_confirmation=True,
            )
        return await self._learn(command, user_id)

    async def _learn(self, command: TeachCommand, user_id: str | None) -> Resolution:
        try:
            outcome = await self.mutator.learn(command.question, command.answer, owner_user_id=user_id)
        except InvalidQueryError:
            return Clarification(
                canned.CLARIFICATION_MESSAGE,
                source="clarification",
                confidence=CANNED_CONFIDENCE,
                awaiting_confirmation=True,
            )
        except (StoreUnavailableError, SQLAlchemyError) as e:
            logger.error(f"Could not store teach command '{command.question}': {e}")
            return Canned(canned.STORE_UNAVAILABLE_MESSAGE, source="system", confidence=CANNED_CONFIDENCE)

        logger.info(
            f"Learned '{outcome.entry.normalized_query}' ({command.form}, merged={outcome.merged})"
        )
        return Learned(
            canned.learned_response(command, outcome.merged),
            source="learning",
            confidence=CANNED_CONFIDENCE,
            knowledge_id=outcome.entry.id,
            merged=outcome.merged,
        )

    def _calculation_stage(self, raw: str) -> Canned | None:
        expression = extract_expression(raw)
        if expression is None:
            return None
        try:
            value = evaluate(expression)
        except CalculationError as e:
            logger.info(f"Calculation '{expression}' failed: {e}")
            return Canned(
                f"I couldn't calculate {expression}: {str(e).lower()}.",
                source="calculation",
                confidence=CANNED_CONFIDENCE,
            )
        logger.info(f"Calculated '{expression}'")
        return Canned(
            f"{expression} = {format_number(value)}",
            source="calculation",
            confidence=CANNED_CONFIDENCE,
        )

    async def _knowledge_stage(self, normalized: str, user_id: str | None) -> KnowledgeHit | None:
        answers = await self.retriever.find_answers(normalized, scope_user_id=user_id)
        if not answers or answers[0].similarity <= self.settings.KNOWLEDGE_MATCH_THRESHOLD:
            return None

        top = answers[0]
        stale = is_potentially_outdated(top.response)
        if stale and not top.entry.needs_reverification:
            await self._flag_stale(top.id)

        logger.info(
            f"Knowledge hit for '{normalized}': '{top.entry.normalized_query}' "
            f"(similarity={top.similarity:.2f}, stale={stale})"
        )
        return KnowledgeHit(
            refine_factual_response(normalized, top.response),
            source=top.entry.source,
            confidence=top.entry.confidence,
            knowledge_id=top.id,
            similarity=top.similarity,
            possibly_stale=stale,
        )

    async def _flag_stale(self, entry_id: str) -> None:
        async def _flag() -> None:
            async with self.session_factory() as session:
                await store.flag_for_reverification(session, entry_id)

        try:
            await run_with_retry(_flag, self.settings, "reverification flag")
        except (StoreUnavailableError, SQLAlchemyError) as e:
            logger.warning(f"Could not flag entry {entry_id} for reverification: {e}")

    async def _cache_stage(self, normalized: str) -> CacheHit | None:
        if not self.settings.CACHE_ENABLED:
            return None
        try:
            entry = await self.cache.get(normalized)
        except (StoreUnavailableError, SQLAlchemyError) as e:
            logger.warning(f"Cache read failed for '{normalized}': {e}")
            return None
        if entry is None:
            return None
        return CacheHit(entry.response, source="cache", confidence=self.settings.EXTERNAL_CONFIDENCE)

    async def _web_stage(self, normalized: str) -> ProviderHit | None:
        answer = await self.gateway.search(normalized)
        if answer is None:
            return None
        if not is_relevant_answer(normalized, answer.answer):
            logger.info(f"Discarded irrelevant {answer.source} answer for '{normalized}'")
            return None

        response = refine_factual_response(normalized, answer.answer)
        knowledge_id = await self._persist_external(
            normalized, response, KnowledgeSource.WEB, context=answer.context
        )
        return ProviderHit(
            response,
            source=KnowledgeSource.WEB.value,
            confidence=self.settings.EXTERNAL_CONFIDENCE,
            knowledge_id=knowledge_id,
            provider_kind="web",
            attribution=answer.source,
        )

    async def _ai_stage(self, normalized: str) -> ProviderHit | None:
        answer = await self.gateway.generate(normalized)
        if answer is None or not answer.answer:
            return None

        knowledge_id = await self._persist_external(
            normalized, answer.answer, KnowledgeSource.AI, ai_provider=answer.provider
        )
        return ProviderHit(
            answer.answer,
            source=KnowledgeSource.AI.value,
            confidence=self.settings.EXTERNAL_CONFIDENCE,
            knowledge_id=knowledge_id,
            provider_kind="ai",
            attribution=answer.source,
        )

    async def _persist_external(
        self,
        normalized: str,
        response: str,
        source: KnowledgeSource,
        context: str | None = None,
        ai_provider: str | None = None,
    ) -> str | None:
        """Merge an accepted provider answer into the store and the cache.

        Persistence failures are logged; the answer is still served.
        """
        knowledge_id = None
        try:
            outcome = await self.mutator.merge_external_answer(
                normalized, response, source, context=context, ai_provider=ai_provider
            )
            knowledge_id = outcome.entry.id
        except (StoreUnavailableError, SQLAlchemyError, InvalidQueryError) as e:
            logger.error(f"Could not store {source.value} answer for '{normalized}': {e}")

        if self.settings.CACHE_ENABLED:
            try:
                await self.cache.put(normalized, response, source.value)
            except (StoreUnavailableError, SQLAlchemyError) as e:
                logger.warning(f"Could not cache {source.value} answer for '{normalized}': {e}")
        return knowledge_id
