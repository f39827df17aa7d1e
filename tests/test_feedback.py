"""Tests for feedback-driven confidence updates."""

import pytest

from conftest import add_entry, make_settings
from knowledge_assistant.db.models import ConversationRecord, KnowledgeEntry
from knowledge_assistant.exceptions import ConversationNotFoundError
from knowledge_assistant.knowledge import store
from knowledge_assistant.knowledge.feedback import FeedbackUpdater, get_confidence_step
from knowledge_assistant.knowledge.history import ConversationLog


@pytest.fixture
def updater(settings, session_factory):
    return FeedbackUpdater(settings, session_factory)


async def conversation_for(settings, session_factory, entry: KnowledgeEntry | None) -> ConversationRecord:
    return await ConversationLog(settings, session_factory).log(
        query="what is the capital of france",
        response="Paris",
        confidence=entry.confidence if entry else 0.1,
        source="user",
        knowledge_id=entry.id if entry else None,
    )


class TestConfidenceStep:
    """Tests for get_confidence_step()."""

    def test_negative_step_is_larger(self):
        """Wrong answers are demoted faster than right ones are reinforced."""
        settings = make_settings()
        assert get_confidence_step(1, settings) == 0.05
        assert get_confidence_step(-1, settings) == -0.1
        assert get_confidence_step(0, settings) == 0.0


class TestApplyFeedback:
    """Tests for FeedbackUpdater.apply_feedback()."""

    @pytest.mark.asyncio
    async def test_negative_feedback_lowers_confidence(self, updater, settings, session_factory):
        """-1 on an entry at 0.9 leaves it at 0.8."""
        entry = await add_entry(session_factory, "capital of france", "Paris", confidence=0.9)
        conversation = await conversation_for(settings, session_factory, entry)

        outcome = await updater.apply_feedback(conversation.id, -1)

        assert outcome.previous_confidence == pytest.approx(0.9)
        assert outcome.new_confidence == pytest.approx(0.8)
        stored = await store.get_entry(entry.id, session_factory)
        assert stored.confidence == pytest.approx(0.8)

    @pytest.mark.asyncio
    async def test_positive_feedback_is_capped(self, updater, settings, session_factory):
        entry = await add_entry(session_factory, "capital of france", "Paris", confidence=0.98)
        conversation = await conversation_for(settings, session_factory, entry)

        outcome = await updater.apply_feedback(conversation.id, 1)

        assert outcome.new_confidence == 1.0

    @pytest.mark.asyncio
    async def test_negative_feedback_has_floor(self, updater, settings, session_factory):
        entry = await add_entry(session_factory, "capital of france", "Paris", confidence=0.15)
        conversation = await conversation_for(settings, session_factory, entry)

        outcome = await updater.apply_feedback(conversation.id, -1)

        assert outcome.new_confidence == 0.1

    @pytest.mark.asyncio
    async def test_neutral_feedback_only_records(self, updater, settings, session_factory):
        entry = await add_entry(session_factory, "capital of france", "Paris", confidence=0.9)
        conversation = await conversation_for(settings, session_factory, entry)

        outcome = await updater.apply_feedback(conversation.id, 0)

        assert outcome.new_confidence is None
        stored = await store.get_entry(entry.id, session_factory)
        assert stored.confidence == pytest.approx(0.9)

    @pytest.mark.asyncio
    async def test_feedback_is_stored_on_conversation(self, updater, settings, session_factory):
        conversation = await conversation_for(settings, session_factory, None)

        outcome = await updater.apply_feedback(conversation.id, 1)

        assert outcome.knowledge_id is None
        assert outcome.new_confidence is None
        async with session_factory() as session:
            record = await session.get(ConversationRecord, conversation.id)
        assert record.feedback == 1

    @pytest.mark.asyncio
    async def test_deleted_entry_is_tolerated(self, updater, settings, session_factory):
        """Feedback on a conversation whose entry is gone still records the feedback."""
        entry = await add_entry(session_factory, "capital of france", "Paris", confidence=0.9)
        conversation = await conversation_for(settings, session_factory, entry)
        await store.purge_knowledge(settings, session_factory)

        outcome = await updater.apply_feedback(conversation.id, -1)

        assert outcome.knowledge_id == entry.id
        assert outcome.new_confidence is None

    @pytest.mark.asyncio
    async def test_unknown_conversation(self, updater):
        with pytest.raises(ConversationNotFoundError):
            await updater.apply_feedback("does-not-exist", 1)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("value", [2, -2, True])
    async def test_invalid_value(self, updater, value):
        with pytest.raises(ValueError):
            await updater.apply_feedback("any", value)
