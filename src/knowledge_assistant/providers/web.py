"""Shared HTTP and text helpers for web search providers."""

import html
import re
from typing import Any

import httpx

from knowledge_assistant.providers.exceptions import (
    ProviderConnectionError,
    ProviderRateLimitError,
    ProviderResponseError,
)

USER_AGENT = "knowledge-assistant/0.1 (+https://github.com/)"

_URL = re.compile(r"https?://\S+")
_TAG = re.compile(r"<[^>]+>")
_BOILERPLATE = re.compile(
    r"(?:for more information,?|click here to|visit our website|read more (?:at|on)|"
    r"more information:|terms and conditions).*?(?:\.|$)",
    re.IGNORECASE,
)
_SPACES = re.compile(r"[ \t]+")


async def get_json(
    client: httpx.AsyncClient,
    url: str,
    params: dict[str, Any],
    provider: str,
) -> dict[str, Any]:
    """GET a JSON document, mapping transport failures to provider errors."""
    try:
        response = await client.get(url, params=params, headers={"User-Agent": USER_AGENT})
    except (httpx.ConnectError, httpx.TimeoutException) as e:
        raise ProviderConnectionError(str(e) or type(e).__name__, provider=provider) from e
    except httpx.HTTPError as e:
        raise ProviderResponseError(str(e), provider=provider) from e

    if response.status_code == 429:
        raise ProviderRateLimitError("Rate limit exceeded", provider=provider)
    if response.status_code >= 400:
        raise ProviderResponseError(f"HTTP {response.status_code}", provider=provider)
    try:
        data = response.json()
    except ValueError as e:
        raise ProviderResponseError(f"Invalid JSON: {e}", provider=provider) from e
    if not isinstance(data, dict):
        raise ProviderResponseError("Unexpected payload shape", provider=provider)
    return data


def clean_web_answer(text: str) -> str:
    """Strip markup, bare URLs and boilerplate, and terminate the sentence."""
    if not text:
        return ""
    cleaned = html.unescape(_TAG.sub("", text))
    cleaned = _URL.sub("", cleaned)
    cleaned = _BOILERPLATE.sub("", cleaned)
    cleaned = _SPACES.sub(" ", cleaned).strip()
    if cleaned and cleaned[-1] not in ".!?":
        cleaned += "."
    return cleaned
