"""DuckDuckGo Instant Answer search provider."""

import logging

import httpx

from knowledge_assistant.providers.base import SearchAnswer, SearchProvider
from knowledge_assistant.providers.exceptions import ProviderNoAnswerError
from knowledge_assistant.providers.web import clean_web_answer, get_json

logger = logging.getLogger(__name__)

DUCKDUCKGO_API_URL = "https://api.duckduckgo.com/"


class DuckDuckGoSearch(SearchProvider):
    """Instant answers: abstract, direct answer, definition, then related topics."""

    def __init__(self, api_url: str = DUCKDUCKGO_API_URL, related_topics: int = 3):
        self.api_url = api_url
        self.related_topics = related_topics

    @property
    def provider_name(self) -> str:
        """Return the provider name."""
        return "duckduckgo"

    async def search(self, query: str, timeout: float) -> SearchAnswer:
        async with httpx.AsyncClient(timeout=timeout) as client:
            data = await get_json(
                client,
                self.api_url,
                {"q": query, "format": "json", "no_html": 1, "skip_disambig": 1},
                self.provider_name,
            )

        if data.get("AbstractText"):
            answer, context = data["AbstractText"], data.get("AbstractSource") or None
        elif data.get("Answer"):
            answer, context = str(data["Answer"]), "Direct answer"
        elif data.get("Definition"):
            answer, context = data["Definition"], data.get("DefinitionSource") or None
        else:
            topics = [
                topic.get("Text", "")
                for topic in data.get("RelatedTopics", [])[: self.related_topics]
                if isinstance(topic, dict) and topic.get("Text")
            ]
            answer, context = "\n\n".join(topics), "Related topics"

        answer = clean_web_answer(answer)
        if not answer:
            raise ProviderNoAnswerError(f"No instant answer for '{query}'", provider=self.provider_name)
        logger.debug(f"DuckDuckGo answered '{query}' ({context})")
        return SearchAnswer(answer=answer, source="DuckDuckGo", context=context)
