"""Provider factory with registry pattern."""

import logging
from typing import Callable, TypeVar

from knowledge_assistant.config import Settings
from knowledge_assistant.providers.base import GenerativeProvider, SearchProvider
from knowledge_assistant.providers.exceptions import ProviderNotConfiguredError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Registries: map provider names to factory functions taking the settings
_SEARCH_REGISTRY: dict[str, Callable[[Settings], SearchProvider]] = {}
_GENERATIVE_REGISTRY: dict[str, Callable[[Settings], GenerativeProvider]] = {}


def register_search_provider(
    name: str,
) -> Callable[[Callable[[Settings], T]], Callable[[Settings], T]]:
    """Decorator to register a web search provider factory.

    Usage:
        @register_search_provider("my_search")
        def _create_my_search(settings):
            from knowledge_assistant.providers.my_search import MySearch
            return MySearch(settings)
    """

    def decorator(factory: Callable[[Settings], T]) -> Callable[[Settings], T]:
        _SEARCH_REGISTRY[name.lower()] = factory
        logger.debug(f"Registered search provider: {name}")
        return factory

    return decorator


def register_generative_provider(
    name: str,
) -> Callable[[Callable[[Settings], T]], Callable[[Settings], T]]:
    """Decorator to register a generative AI provider factory."""

    def decorator(factory: Callable[[Settings], T]) -> Callable[[Settings], T]:
        _GENERATIVE_REGISTRY[name.lower()] = factory
        logger.debug(f"Registered generative provider: {name}")
        return factory

    return decorator


def get_available_providers() -> dict[str, list[str]]:
    """Get registered provider names per capability."""
    return {
        "search": list(_SEARCH_REGISTRY.keys()),
        "generative": list(_GENERATIVE_REGISTRY.keys()),
    }


def get_search_provider(name: str, settings: Settings) -> SearchProvider:
    """Get a search provider instance by name.

    Raises:
        ProviderNotConfiguredError: If provider is not registered
    """
    factory = _SEARCH_REGISTRY.get(name.lower())
    if factory is None:
        available = ", ".join(_SEARCH_REGISTRY)
        raise ProviderNotConfiguredError(
            f"Unknown search provider '{name}'. Available: {available}", provider=name
        )
    return factory(settings)


def get_generative_provider(name: str, settings: Settings) -> GenerativeProvider:
    """Get a generative provider instance by name.

    Raises:
        ProviderNotConfiguredError: If provider is not registered
    """
    factory = _GENERATIVE_REGISTRY.get(name.lower())
    if factory is None:
        available = ", ".join(_GENERATIVE_REGISTRY)
        raise ProviderNotConfiguredError(
            f"Unknown generative provider '{name}'. Available: {available}", provider=name
        )
    return factory(settings)


def build_search_providers(settings: Settings) -> list[SearchProvider]:
    """Instantiate the configured search providers in rotation order."""
    if not settings.WEB_SEARCH_ENABLED:
        return []
    providers = []
    for name in settings.search_provider_list:
        try:
            providers.append(get_search_provider(name, settings))
        except ProviderNotConfiguredError as e:
            logger.warning(f"Skipping search provider: {e}")
    return providers


def build_generative_providers(settings: Settings) -> list[GenerativeProvider]:
    """Instantiate the configured generative providers in rotation order."""
    if not settings.AI_ENABLED:
        return []
    providers = []
    for name in settings.ai_provider_list:
        try:
            providers.append(get_generative_provider(name, settings))
        except ProviderNotConfiguredError as e:
            logger.warning(f"Skipping generative provider: {e}")
    return providers


# Register default providers
@register_search_provider("duckduckgo")
def _create_duckduckgo(settings: Settings) -> SearchProvider:
    """Create DuckDuckGo instant answer provider."""
    from knowledge_assistant.providers.duckduckgo import DuckDuckGoSearch

    return DuckDuckGoSearch()


@register_search_provider("wikipedia")
def _create_wikipedia(settings: Settings) -> SearchProvider:
    """Create Wikipedia summary provider."""
    from knowledge_assistant.providers.wikipedia import WikipediaSearch

    return WikipediaSearch()


@register_generative_provider("claude")
def _create_claude(settings: Settings) -> GenerativeProvider:
    """Create Claude provider."""
    from knowledge_assistant.providers.claude import ClaudeProvider

    return ClaudeProvider(
        api_key=settings.ANTHROPIC_API_KEY,
        model=settings.ANTHROPIC_MODEL,
        max_tokens=settings.AI_MAX_TOKENS,
    )


@register_generative_provider("ollama")
def _create_ollama(settings: Settings) -> GenerativeProvider:
    """Create Ollama provider."""
    from knowledge_assistant.providers.ollama import OllamaProvider

    return OllamaProvider(base_url=settings.OLLAMA_BASE_URL, model=settings.OLLAMA_LLM_MODEL)
