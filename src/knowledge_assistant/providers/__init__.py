"""Web search and generative AI providers."""

from knowledge_assistant.providers.base import (
    GeneratedAnswer,
    GenerativeProvider,
    SearchAnswer,
    SearchProvider,
)
from knowledge_assistant.providers.exceptions import (
    ProviderAuthenticationError,
    ProviderConnectionError,
    ProviderError,
    ProviderNoAnswerError,
    ProviderNotConfiguredError,
    ProviderRateLimitError,
    ProviderResponseError,
)
from knowledge_assistant.providers.factory import (
    get_available_providers,
    get_generative_provider,
    get_search_provider,
    register_generative_provider,
    register_search_provider,
)
from knowledge_assistant.providers.gateway import ProviderGateway, first_success

__all__ = [
    # Interfaces
    "GeneratedAnswer",
    "GenerativeProvider",
    "SearchAnswer",
    "SearchProvider",
    # Gateway
    "ProviderGateway",
    "first_success",
    # Factory functions
    "get_available_providers",
    "get_generative_provider",
    "get_search_provider",
    "register_generative_provider",
    "register_search_provider",
    # Exceptions
    "ProviderError",
    "ProviderConnectionError",
    "ProviderAuthenticationError",
    "ProviderRateLimitError",
    "ProviderResponseError",
    "ProviderNoAnswerError",
    "ProviderNotConfiguredError",
]
