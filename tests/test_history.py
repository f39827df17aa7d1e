"""Tests for conversation records."""

import pytest

from knowledge_assistant.knowledge.history import ConversationLog


@pytest.fixture
def conversations(settings, session_factory):
    return ConversationLog(settings, session_factory)


class TestConversationLog:
    """Tests for ConversationLog."""

    @pytest.mark.asyncio
    async def test_log_clamps_confidence(self, conversations):
        record = await conversations.log("q", "r", confidence=0.0, source="default")

        assert record.id
        assert record.confidence == 0.1
        assert record.feedback == 0

    @pytest.mark.asyncio
    async def test_user_history_newest_first(self, conversations):
        for index in range(3):
            await conversations.log(f"question {index}", "answer", 0.5, "default", user_id="alice")
        await conversations.log("other", "answer", 0.5, "default", user_id="bob")

        history = await conversations.get_user_history("alice")

        assert [r.query for r in history] == ["question 2", "question 1", "question 0"]

    @pytest.mark.asyncio
    async def test_user_history_pagination(self, conversations):
        for index in range(5):
            await conversations.log(f"question {index}", "answer", 0.5, "default", user_id="alice")

        page = await conversations.get_user_history("alice", limit=2, offset=1)

        assert [r.query for r in page] == ["question 3", "question 2"]

    @pytest.mark.asyncio
    async def test_recent_and_clear(self, conversations):
        await conversations.log("a", "r", 0.5, "default", user_id="alice")
        await conversations.log("b", "r", 0.5, "default")

        assert len(await conversations.get_recent()) == 2
        assert await conversations.clear_user_history("alice") == 1
        assert await conversations.get_user_history("alice") == []
