"""Provider capability interfaces."""

from abc import ABC, abstractmethod
from dataclasses import dataclass

DEFAULT_PROVIDER_CONFIDENCE = 0.85


@dataclass(frozen=True)
class SearchAnswer:
    """Answer returned by a web search provider."""

    answer: str
    source: str
    context: str | None = None
    confidence: float = DEFAULT_PROVIDER_CONFIDENCE


@dataclass(frozen=True)
class GeneratedAnswer:
    """Answer returned by a generative AI provider."""

    answer: str
    source: str
    confidence: float = DEFAULT_PROVIDER_CONFIDENCE
    provider: str = ""


class SearchProvider(ABC):
    """Base class for web search backends."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the provider name (e.g., 'duckduckgo', 'wikipedia')."""
        pass

    @abstractmethod
    async def search(self, query: str, timeout: float) -> SearchAnswer:
        """Look up an answer for a query.

        Raises:
            ProviderError: On any failure, including having no answer
        """
        pass

    async def is_available(self) -> bool:
        """Lightweight configuration check without network requests."""
        return True


class GenerativeProvider(ABC):
    """Base class for generative AI backends."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the provider name (e.g., 'claude', 'ollama')."""
        pass

    @abstractmethod
    async def generate(self, query: str, timeout: float) -> GeneratedAnswer:
        """Generate an answer for a query.

        Raises:
            ProviderError: On any failure, including an empty completion
        """
        pass

    async def is_available(self) -> bool:
        """Lightweight configuration check without network requests."""
        return True
