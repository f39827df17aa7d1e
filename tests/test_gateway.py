"""Tests for provider rotation in the gateway."""

import asyncio

import httpx
import pytest

from conftest import FakeGenerator, FakeSearch, make_settings
from knowledge_assistant.providers.base import SearchAnswer
from knowledge_assistant.providers.exceptions import ProviderConnectionError, ProviderRateLimitError
from knowledge_assistant.providers.gateway import ProviderGateway, first_success


class SlowSearch(FakeSearch):
    """Search provider that never answers within the timeout."""

    async def search(self, query: str, timeout: float) -> SearchAnswer:
        self.calls.append(query)
        await asyncio.sleep(10)
        return SearchAnswer(answer="too late", source=self.name)


def search_settings(**overrides):
    return make_settings(WEB_SEARCH_ENABLED=True, **overrides)


class TestSearch:
    """Tests for ProviderGateway.search()."""

    @pytest.mark.asyncio
    async def test_first_provider_answers(self):
        first = FakeSearch("first", answer="Answer one")
        second = FakeSearch("second", answer="Answer two")
        gateway = ProviderGateway(search_settings(), search_providers=[first, second])

        result = await gateway.search("query")

        assert result.answer == "Answer one"
        assert second.calls == []

    @pytest.mark.asyncio
    async def test_rotates_past_failures(self):
        """A failing provider is skipped in favour of the next one."""
        failing = FakeSearch("failing", error=ProviderRateLimitError("slow down", provider="failing"))
        working = FakeSearch("working", answer="Answer")
        gateway = ProviderGateway(search_settings(), search_providers=[failing, working])

        result = await gateway.search("query")

        assert result.source == "working"
        assert failing.calls == ["query"]

    @pytest.mark.asyncio
    async def test_rotates_past_empty_answers(self):
        empty = FakeSearch("empty", answer=None)
        working = FakeSearch("working", answer="Answer")
        gateway = ProviderGateway(search_settings(), search_providers=[empty, working])

        assert (await gateway.search("query")).source == "working"

    @pytest.mark.asyncio
    async def test_timeout_moves_on(self):
        slow = SlowSearch("slow")
        working = FakeSearch("working", answer="Answer")
        gateway = ProviderGateway(
            search_settings(WEB_SEARCH_TIMEOUT_SECONDS=0.05), search_providers=[slow, working]
        )

        result = await gateway.search("query")

        assert result.source == "working"
        assert slow.calls == ["query"]

    @pytest.mark.asyncio
    async def test_unexpected_errors_never_escape(self):
        """Bugs and raw HTTP errors inside a provider degrade to 'no answer'."""
        broken = FakeSearch("broken", error=RuntimeError("bug"))
        http = FakeSearch("http", error=httpx.RemoteProtocolError("bad frame"))
        gateway = ProviderGateway(
            search_settings(PROVIDER_MAX_ATTEMPTS=5), search_providers=[broken, http]
        )

        assert await gateway.search("query") is None

    @pytest.mark.asyncio
    async def test_attempt_limit(self):
        first = FakeSearch("first", error=ProviderConnectionError("down", provider="first"))
        second = FakeSearch("second", error=ProviderConnectionError("down", provider="second"))
        third = FakeSearch("third", answer="Answer")
        gateway = ProviderGateway(
            search_settings(PROVIDER_MAX_ATTEMPTS=2), search_providers=[first, second, third]
        )

        assert await gateway.search("query") is None
        assert third.calls == []

    @pytest.mark.asyncio
    async def test_disabled(self):
        provider = FakeSearch("first", answer="Answer")
        gateway = ProviderGateway(make_settings(WEB_SEARCH_ENABLED=False), search_providers=[provider])

        assert gateway.search_enabled is False
        assert await gateway.search("query") is None
        assert provider.calls == []

    @pytest.mark.asyncio
    async def test_no_providers(self):
        gateway = ProviderGateway(search_settings())
        assert gateway.search_enabled is False
        assert await gateway.search("query") is None


class TestGenerate:
    """Tests for ProviderGateway.generate()."""

    @pytest.mark.asyncio
    async def test_unavailable_provider_does_not_use_an_attempt(self):
        unconfigured = FakeGenerator("claude", answer="never", available=False)
        local = FakeGenerator("ollama", answer="Paris.")
        gateway = ProviderGateway(
            make_settings(AI_ENABLED=True, PROVIDER_MAX_ATTEMPTS=1),
            generative_providers=[unconfigured, local],
        )

        result = await gateway.generate("capital of france")

        assert result.answer == "Paris."
        assert result.provider == "ollama"
        assert unconfigured.calls == []

    @pytest.mark.asyncio
    async def test_disabled(self):
        provider = FakeGenerator(answer="Paris.")
        gateway = ProviderGateway(make_settings(AI_ENABLED=False), generative_providers=[provider])

        assert gateway.ai_enabled is False
        assert await gateway.generate("q") is None


class TestFirstSuccess:
    """Tests for first_success()."""

    @pytest.mark.asyncio
    async def test_empty_provider_list(self):
        assert await first_success([], lambda p: p.search("q", 1.0), timeout=1.0, max_attempts=3) is None
