"""Tests for knowledge retrieval against a real SQLite store."""

from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy.exc import SQLAlchemyError

from conftest import add_entry
from knowledge_assistant.knowledge import store
from knowledge_assistant.retrieval.retriever import KnowledgeRetriever


@pytest.fixture
def retriever(settings, session_factory):
    return KnowledgeRetriever(settings, session_factory)


class TestFindAnswers:
    """Tests for KnowledgeRetriever.find_answers()."""

    @pytest.mark.asyncio
    async def test_finds_similar_entry_and_tracks_usage(self, retriever, session_factory):
        """A strong top match is returned and its usage counter incremented."""
        entry = await add_entry(
            session_factory, "paris is the capital of france", "Paris is the capital of France."
        )

        results = await retriever.find_answers("what is the capital of france")

        assert len(results) == 1
        assert results[0].id == entry.id
        assert results[0].similarity > 0.75
        assert results[0].entry.times_used == 1
        stored = await store.get_entry(entry.id, session_factory)
        assert stored.times_used == 1

    @pytest.mark.asyncio
    async def test_usage_not_tracked_when_disabled(self, retriever, session_factory):
        entry = await add_entry(session_factory, "capital of france", "Paris")

        await retriever.find_answers("capital of france", track_usage=False)

        stored = await store.get_entry(entry.id, session_factory)
        assert stored.times_used == 0

    @pytest.mark.asyncio
    async def test_usage_does_not_touch_updated_at(self, retriever, session_factory):
        """Serving an answer is not an edit of the answer."""
        entry = await add_entry(session_factory, "capital of france", "Paris")

        await retriever.find_answers("capital of france")

        stored = await store.get_entry(entry.id, session_factory)
        assert stored.updated_at == entry.updated_at

    @pytest.mark.asyncio
    async def test_empty_query(self, retriever, session_factory):
        await add_entry(session_factory, "capital of france", "Paris")
        assert await retriever.find_answers("") == []

    @pytest.mark.asyncio
    async def test_no_match(self, retriever, session_factory):
        await add_entry(session_factory, "capital of france", "Paris")
        assert await retriever.find_answers("how tall is mount everest") == []

    @pytest.mark.asyncio
    async def test_private_entries_are_scoped_to_owner(self, retriever, session_factory):
        """Private entries are only visible to their owner."""
        await add_entry(session_factory, "my locker code", "4512", owner_user_id="alice", is_public=False)

        assert len(await retriever.find_answers("my locker code", scope_user_id="alice")) == 1
        assert await retriever.find_answers("my locker code", scope_user_id="bob") == []
        assert await retriever.find_answers("my locker code") == []

    @pytest.mark.asyncio
    async def test_public_entries_visible_to_everyone(self, retriever, session_factory):
        await add_entry(session_factory, "office wifi", "guest123", owner_user_id="alice", is_public=True)
        assert len(await retriever.find_answers("office wifi", scope_user_id="bob")) == 1

    @pytest.mark.asyncio
    async def test_falls_back_to_substring_lookup(self, retriever, session_factory):
        """When ranked lookup fails, a plain substring lookup still answers."""
        entry = await add_entry(session_factory, "paris is the capital of france", "Paris")

        with patch.object(store, "load_match_keys", AsyncMock(side_effect=SQLAlchemyError("boom"))):
            results = await retriever.find_answers("capital of france")

        assert [r.id for r in results] == [entry.id]

    @pytest.mark.asyncio
    async def test_never_raises(self, retriever):
        """Failures of both lookups yield an empty result."""
        with patch.object(store, "load_match_keys", AsyncMock(side_effect=SQLAlchemyError("boom"))), \
             patch.object(store, "substring_candidates", AsyncMock(side_effect=SQLAlchemyError("boom"))):
            assert await retriever.find_answers("capital of france") == []
