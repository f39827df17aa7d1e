"""Claude (Anthropic) generative provider using raw httpx."""

import logging

import httpx

from knowledge_assistant.providers.base import GeneratedAnswer, GenerativeProvider
from knowledge_assistant.providers.exceptions import (
    ProviderAuthenticationError,
    ProviderConnectionError,
    ProviderNoAnswerError,
    ProviderRateLimitError,
    ProviderResponseError,
)
from knowledge_assistant.providers.prompts import build_prompt, build_system_prompt, post_process_answer

logger = logging.getLogger(__name__)

ANTHROPIC_API_URL = "https://api.anthropic.com/v1/messages"
ANTHROPIC_VERSION = "2023-06-01"


class ClaudeProvider(GenerativeProvider):
    """Claude client using the Anthropic Messages API.

    Talks to the API over plain httpx. A failed call is not
    retried here; the gateway moves on to the next configured provider.
    """

    def __init__(
        self,
        api_key: str = "",
        model: str = "claude-3-5-haiku-latest",
        max_tokens: int = 300,
    ):
        self.api_key = api_key
        self.model = model
        self.max_tokens = max_tokens

        if not self.api_key:
            logger.warning("No Anthropic API key set, Claude provider is unavailable")

    @property
    def provider_name(self) -> str:
        return "claude"

    async def is_available(self) -> bool:
        """Claude can only be called with an API key."""
        return bool(self.api_key)

    def _get_headers(self) -> dict[str, str]:
        """Messages API headers."""
        return {
            "Content-Type": "application/json",
            "x-api-key": self.api_key,
            "anthropic-version": ANTHROPIC_VERSION,
        }

    async def generate(self, query: str, timeout: float) -> GeneratedAnswer:
        """Generate an answer using Claude.

        Raises:
            ProviderAuthenticationError: If API key is missing or invalid
            ProviderRateLimitError: If rate limit is exceeded
            ProviderConnectionError: If connection fails or times out
            ProviderResponseError: On other error statuses
            ProviderNoAnswerError: If Claude returns no text
        """
        if not self.api_key:
            raise ProviderAuthenticationError("API key not configured", provider=self.provider_name)

        async with httpx.AsyncClient(timeout=timeout) as client:
            try:
                response = await client.post(
                    ANTHROPIC_API_URL,
                    headers=self._get_headers(),
                    json={
                        "model": self.model,
                        "max_tokens": self.max_tokens,
                        "system": build_system_prompt(query),
                        "messages": [{"role": "user", "content": build_prompt(query)}],
                    },
                )
            except httpx.ConnectError as e:
                raise ProviderConnectionError(
                    f"Connection to Anthropic failed: {e}", provider=self.provider_name
                ) from e
            except httpx.TimeoutException as e:
                raise ProviderConnectionError(
                    f"Anthropic request timed out after {timeout}s: {e}", provider=self.provider_name
                ) from e

        if response.status_code == 401:
            raise ProviderAuthenticationError("Invalid API key", provider=self.provider_name)
        elif response.status_code == 429:
            retry_after = response.headers.get("retry-after")
            raise ProviderRateLimitError(
                "Anthropic rate limit reached",
                provider=self.provider_name,
                retry_after=float(retry_after) if retry_after else None,
            )
        elif response.status_code >= 400:
            raise ProviderResponseError(
                f"API returned status {response.status_code}", provider=self.provider_name
            )

        try:
            data = response.json()
        except ValueError as e:
            raise ProviderResponseError(f"Invalid JSON: {e}", provider=self.provider_name) from e

        # Only text blocks carry the answer
        text = "".join(
            block.get("text", "")
            for block in data.get("content", [])
            if block.get("type") == "text"
        )
        answer = post_process_answer(text)
        if not answer:
            raise ProviderNoAnswerError("Empty completion", provider=self.provider_name)

        return GeneratedAnswer(answer=answer, source=self.provider_name, provider=self.provider_name)
