"""Provider gateway: ordered provider rotation with per-call timeouts.

A failing provider (error, timeout, empty answer) never raises out of the
gateway. The next configured provider is tried instead, up to the configured
number of attempts, and None means no usable answer.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Sequence, TypeVar

import httpx

from knowledge_assistant.config import Settings
from knowledge_assistant.providers.base import (
    GeneratedAnswer,
    GenerativeProvider,
    SearchAnswer,
    SearchProvider,
)
from knowledge_assistant.providers.exceptions import ProviderError, ProviderNoAnswerError
from knowledge_assistant.providers.factory import build_generative_providers, build_search_providers

logger = logging.getLogger(__name__)

P = TypeVar("P", SearchProvider, GenerativeProvider)
R = TypeVar("R")


async def first_success(
    providers: Sequence[P],
    call: Callable[[P], Awaitable[R]],
    timeout: float,
    max_attempts: int,
    capability: str = "provider",
) -> R | None:
    """Return the first successful result of call() across providers.

    Each provider is tried at most once, in order, and each call is bounded by
    timeout seconds. Unavailable providers are skipped without using an attempt.
    """
    attempts = 0
    for provider in providers:
        if attempts >= max_attempts:
            break
        name = provider.provider_name
        if not await provider.is_available():
            logger.debug(f"Skipping {capability} provider '{name}': not configured")
            continue

        attempts += 1
        try:
            logger.info(f"Trying {capability} provider '{name}' (attempt {attempts})")
            return await asyncio.wait_for(call(provider), timeout=timeout)
        except ProviderNoAnswerError as e:
            logger.info(f"{capability} provider had no answer: {e}")
        except ProviderError as e:
            logger.warning(f"{capability} provider failed: {e}")
        except asyncio.TimeoutError:
            logger.warning(f"{capability} provider '{name}' timed out after {timeout}s")
        except httpx.HTTPError as e:
            logger.warning(f"{capability} provider '{name}' HTTP error: {type(e).__name__}: {e}")
        except Exception as e:
            logger.error(
                f"{capability} provider '{name}' failed unexpectedly: {type(e).__name__}: {e}",
                exc_info=True,
            )
    return None


class ProviderGateway:
    """Web search and generative AI capabilities over configured providers."""

    def __init__(
        self,
        settings: Settings,
        search_providers: Sequence[SearchProvider] | None = None,
        generative_providers: Sequence[GenerativeProvider] | None = None,
    ):
        self.settings = settings
        self.search_providers = list(search_providers or [])
        self.generative_providers = list(generative_providers or [])

    @classmethod
    def from_settings(cls, settings: Settings) -> "ProviderGateway":
        """Build the gateway from the providers named in the settings."""
        return cls(
            settings,
            search_providers=build_search_providers(settings),
            generative_providers=build_generative_providers(settings),
        )

    @property
    def search_enabled(self) -> bool:
        return self.settings.WEB_SEARCH_ENABLED and bool(self.search_providers)

    @property
    def ai_enabled(self) -> bool:
        return self.settings.AI_ENABLED and bool(self.generative_providers)

    async def search(self, query: str) -> SearchAnswer | None:
        """Search the web, returning None when no provider has an answer."""
        if not self.search_enabled:
            return None
        timeout = self.settings.WEB_SEARCH_TIMEOUT_SECONDS
        return await first_success(
            self.search_providers,
            lambda provider: provider.search(query, timeout),
            timeout=timeout,
            max_attempts=self.settings.PROVIDER_MAX_ATTEMPTS,
            capability="search",
        )

    async def generate(self, query: str) -> GeneratedAnswer | None:
        """Ask the generative providers, returning None when none answers."""
        if not self.ai_enabled:
            return None
        timeout = self.settings.AI_TIMEOUT_SECONDS
        return await first_success(
            self.generative_providers,
            lambda provider: provider.generate(query, timeout),
            timeout=timeout,
            max_attempts=self.settings.PROVIDER_MAX_ATTEMPTS,
            capability="ai",
        )
