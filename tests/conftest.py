"""Shared fixtures: isolated settings, a fresh SQLite store per test, fake providers."""

import pytest
import pytest_asyncio

from knowledge_assistant.config import Settings
from knowledge_assistant.db.database import create_engine, create_session_maker, init_db
from knowledge_assistant.db.models import KnowledgeEntry
from knowledge_assistant.providers.base import (
    GeneratedAnswer,
    GenerativeProvider,
    SearchAnswer,
    SearchProvider,
)
from knowledge_assistant.providers.exceptions import ProviderNoAnswerError
from knowledge_assistant.providers.gateway import ProviderGateway


def make_settings(**overrides) -> Settings:
    """Settings that ignore the environment's .env file and never reach the network."""
    values = {
        "DATABASE_URL": "sqlite+aiosqlite:///:memory:",
        "STORE_RETRY_BACKOFF_SECONDS": 0.0,
        "WEB_SEARCH_ENABLED": False,
        "AI_ENABLED": False,
        "ADMIN_TOKEN": "test-admin-token",
        "DEBUG": True,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


async def add_entry(session_factory, normalized_query: str, response: str, **fields) -> KnowledgeEntry:
    """Insert a knowledge entry directly, bypassing the merge rule."""
    fields.setdefault("is_public", fields.get("owner_user_id") is None)
    async with session_factory() as session:
        entry = KnowledgeEntry(normalized_query=normalized_query, response=response, **fields)
        session.add(entry)
        await session.commit()
        return entry


class FakeSearch(SearchProvider):
    """Search provider returning canned answers, or raising the given error."""

    def __init__(self, name: str = "fake-search", answer: str | None = None, error: Exception | None = None):
        self.name = name
        self.answer = answer
        self.error = error
        self.calls: list[str] = []

    @property
    def provider_name(self) -> str:
        return self.name

    async def search(self, query: str, timeout: float) -> SearchAnswer:
        self.calls.append(query)
        if self.error is not None:
            raise self.error
        if not self.answer:
            raise ProviderNoAnswerError("nothing found", provider=self.name)
        return SearchAnswer(answer=self.answer, source=self.name, context="Fake context")


class FakeGenerator(GenerativeProvider):
    """Generative provider returning a canned completion, or raising the given error."""

    def __init__(
        self,
        name: str = "fake-ai",
        answer: str | None = None,
        error: Exception | None = None,
        available: bool = True,
    ):
        self.name = name
        self.answer = answer
        self.error = error
        self.available = available
        self.calls: list[str] = []

    @property
    def provider_name(self) -> str:
        return self.name

    async def is_available(self) -> bool:
        return self.available

    async def generate(self, query: str, timeout: float) -> GeneratedAnswer:
        self.calls.append(query)
        if self.error is not None:
            raise self.error
        if not self.answer:
            raise ProviderNoAnswerError("empty completion", provider=self.name)
        return GeneratedAnswer(answer=self.answer, source=self.name, provider=self.name)


@pytest.fixture
def settings():
    """Default test settings: no providers, no retry backoff."""
    return make_settings()


@pytest_asyncio.fixture(scope="function")
async def session_factory(tmp_path):
    """Session factory over a fresh file-backed SQLite database.

    Each test gets its own database file so that concurrent sessions
    behave like they do in production.
    """
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'assistant.db'}")
    await init_db(engine)
    yield create_session_maker(engine)
    await engine.dispose()


@pytest.fixture
def gateway(settings):
    """Gateway without any provider."""
    return ProviderGateway(settings)
