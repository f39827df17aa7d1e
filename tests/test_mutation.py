"""Tests for learning and merge-on-write."""

import pytest
from sqlalchemy import func, select

from conftest import add_entry
from knowledge_assistant.db.models import KnowledgeEntry, KnowledgeSource
from knowledge_assistant.exceptions import InvalidQueryError
from knowledge_assistant.knowledge.mutation import KnowledgeMutator


@pytest.fixture
def mutator(settings, session_factory):
    return KnowledgeMutator(settings, session_factory)


async def count_entries(session_factory) -> int:
    async with session_factory() as session:
        return await session.scalar(select(func.count()).select_from(KnowledgeEntry))


class TestLearn:
    """Tests for KnowledgeMutator.learn()."""

    @pytest.mark.asyncio
    async def test_inserts_new_entry(self, mutator, session_factory):
        """A new fact is stored normalized, public and at the learned confidence."""
        outcome = await mutator.learn("Paris is the capital of France", "Paris is the capital of France.")

        assert outcome.merged is False
        entry = outcome.entry
        assert entry.normalized_query == "paris is the capital of france"
        assert entry.response == "Paris is the capital of France."
        assert entry.source == KnowledgeSource.USER.value
        assert entry.confidence == 0.95
        assert entry.is_public is True
        assert entry.last_verified_at is not None
        assert await count_entries(session_factory) == 1

    @pytest.mark.asyncio
    async def test_merges_into_similar_entry(self, mutator, session_factory):
        """Re-teaching a near-identical question replaces the answer in place."""
        first = await mutator.learn("the capital of australia", "Sydney")
        second = await mutator.learn("Capital of Australia?", "Canberra")

        assert second.merged is True
        assert second.entry.id == first.entry.id
        assert second.entry.response == "Canberra"
        assert second.entry.source == KnowledgeSource.USER_EXPLICIT.value
        assert await count_entries(session_factory) == 1

    @pytest.mark.asyncio
    async def test_merge_keeps_higher_confidence(self, mutator, session_factory):
        """Merging never lowers an entry's confidence."""
        entry = await add_entry(session_factory, "capital of australia", "Sydney", confidence=1.0)

        outcome = await mutator.learn("capital of australia", "Canberra")

        assert outcome.entry.id == entry.id
        assert outcome.entry.confidence == 1.0

    @pytest.mark.asyncio
    async def test_merge_clears_reverification_flag(self, mutator, session_factory):
        await add_entry(session_factory, "capital of australia", "Sydney", needs_reverification=True)

        outcome = await mutator.learn("capital of australia", "Canberra")

        assert outcome.entry.needs_reverification is False

    @pytest.mark.asyncio
    async def test_dissimilar_question_inserts(self, mutator, session_factory):
        await mutator.learn("capital of australia", "Canberra")
        outcome = await mutator.learn("tallest mountain on earth", "Mount Everest")

        assert outcome.merged is False
        assert await count_entries(session_factory) == 2

    @pytest.mark.asyncio
    async def test_private_entries_of_others_are_not_merge_targets(self, mutator, session_factory):
        """A user's private fact is never overwritten by another user."""
        await mutator.learn("wifi password", "guest123", owner_user_id="alice")
        outcome = await mutator.learn("wifi password", "other", owner_user_id="bob")

        assert outcome.merged is False
        assert outcome.entry.owner_user_id == "bob"
        assert outcome.entry.is_public is False
        assert await count_entries(session_factory) == 2

    @pytest.mark.asyncio
    @pytest.mark.parametrize("question,answer", [("", "Paris"), ("capital of france", "  "), ("???", "Paris")])
    async def test_rejects_empty_parts(self, mutator, question, answer):
        with pytest.raises(InvalidQueryError):
            await mutator.learn(question, answer)


class TestMergeExternalAnswer:
    """Tests for KnowledgeMutator.merge_external_answer()."""

    @pytest.mark.asyncio
    async def test_stores_ai_answer_with_provenance(self, mutator):
        outcome = await mutator.merge_external_answer(
            "who discovered penicillin", "Alexander Fleming.", KnowledgeSource.AI, ai_provider="claude"
        )

        entry = outcome.entry
        assert outcome.merged is False
        assert entry.source == "ai"
        assert entry.is_ai_generated is True
        assert entry.ai_provider == "claude"
        assert entry.confidence == 0.85
        assert entry.owner_user_id is None
        assert entry.is_public is True

    @pytest.mark.asyncio
    async def test_web_answer_has_no_ai_provider(self, mutator):
        outcome = await mutator.merge_external_answer(
            "capital of france", "Paris.", KnowledgeSource.WEB, context="Wikipedia", ai_provider="ignored"
        )

        assert outcome.entry.is_ai_generated is False
        assert outcome.entry.ai_provider is None
        assert outcome.entry.context == "Wikipedia"

    @pytest.mark.asyncio
    async def test_merges_onto_taught_entry(self, mutator, session_factory):
        """An external answer for a known question updates it without lowering confidence."""
        taught = await mutator.learn("capital of france", "Paris")

        outcome = await mutator.merge_external_answer("capital of france", "Paris, France.", KnowledgeSource.WEB)

        assert outcome.merged is True
        assert outcome.entry.id == taught.entry.id
        assert outcome.entry.confidence == 0.95
        assert outcome.entry.source == "web"
        assert await count_entries(session_factory) == 1
