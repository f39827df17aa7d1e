"""Ollama (local LLM) generative provider."""

import logging

import httpx

from knowledge_assistant.providers.base import GeneratedAnswer, GenerativeProvider
from knowledge_assistant.providers.exceptions import (
    ProviderConnectionError,
    ProviderNoAnswerError,
    ProviderResponseError,
)
from knowledge_assistant.providers.prompts import build_prompt, build_system_prompt, post_process_answer

logger = logging.getLogger(__name__)


class OllamaProvider(GenerativeProvider):
    """Ollama client using the /api/generate endpoint."""

    def __init__(
        self,
        base_url: str = "http://localhost:11434",
        model: str = "llama3.1:8b",
    ):
        self.base_url = base_url.rstrip("/")
        self.model = model

    @property
    def provider_name(self) -> str:
        """Return the provider name."""
        return "ollama"

    async def is_available(self) -> bool:
        """Check if Ollama is configured (URL exists)."""
        return bool(self.base_url)

    async def generate(self, query: str, timeout: float) -> GeneratedAnswer:
        """Generate an answer using the local model."""
        async with httpx.AsyncClient(timeout=timeout) as client:
            try:
                response = await client.post(
                    f"{self.base_url}/api/generate",
                    json={
                        "model": self.model,
                        "system": build_system_prompt(query),
                        "prompt": build_prompt(query),
                        "stream": False,
                    },
                )
                response.raise_for_status()
            except (httpx.ConnectError, httpx.TimeoutException) as e:
                raise ProviderConnectionError(str(e), provider=self.provider_name) from e
            except httpx.HTTPStatusError as e:
                raise ProviderResponseError(
                    f"API returned status {e.response.status_code}", provider=self.provider_name
                ) from e

        try:
            data = response.json()
        except ValueError as e:
            raise ProviderResponseError(f"Invalid JSON: {e}", provider=self.provider_name) from e

        answer = post_process_answer(data.get("response", ""))
        if not answer:
            raise ProviderNoAnswerError("Empty completion", provider=self.provider_name)
        return GeneratedAnswer(answer=answer, source=self.provider_name, provider=self.provider_name)
