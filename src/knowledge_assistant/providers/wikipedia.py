"""Wikipedia search provider: best-titled search hit, then its intro extract."""

import logging

import httpx

from knowledge_assistant.providers.base import SearchAnswer, SearchProvider
from knowledge_assistant.providers.exceptions import ProviderNoAnswerError
from knowledge_assistant.providers.web import clean_web_answer, get_json

logger = logging.getLogger(__name__)

MAX_EXTRACT_LENGTH = 500


def pick_best_title(query: str, titles: list[str]) -> str:
    """Title sharing the most query words longer than three chars, else the first."""
    query_words = [w for w in query.lower().split() if len(w) > 3]
    best, best_score = titles[0], 0
    for title in titles:
        title_words = title.lower().split()
        score = sum(1 for w in query_words if any(w in t for t in title_words))
        if score > best_score:
            best, best_score = title, score
    return best


class WikipediaSearch(SearchProvider):
    """Wikipedia MediaWiki API client."""

    def __init__(self, language: str = "en", search_limit: int = 5):
        self.language = language
        self.search_limit = search_limit

    @property
    def provider_name(self) -> str:
        """Return the provider name."""
        return "wikipedia"

    @property
    def api_url(self) -> str:
        return f"https://{self.language}.wikipedia.org/w/api.php"

    async def search(self, query: str, timeout: float) -> SearchAnswer:
        async with httpx.AsyncClient(timeout=timeout) as client:
            found = await get_json(
                client,
                self.api_url,
                {
                    "action": "query",
                    "list": "search",
                    "srsearch": query,
                    "format": "json",
                    "utf8": 1,
                    "srlimit": self.search_limit,
                },
                self.provider_name,
            )
            hits = found.get("query", {}).get("search", [])
            titles = [hit["title"] for hit in hits if hit.get("title")]
            if not titles:
                raise ProviderNoAnswerError(f"No pages for '{query}'", provider=self.provider_name)

            title = pick_best_title(query, titles)
            extracts = await get_json(
                client,
                self.api_url,
                {
                    "action": "query",
                    "prop": "extracts",
                    "exintro": 1,
                    "explaintext": 1,
                    "titles": title,
                    "format": "json",
                    "utf8": 1,
                },
                self.provider_name,
            )

        pages = extracts.get("query", {}).get("pages", {})
        extract = next((p.get("extract", "") for key, p in pages.items() if key != "-1"), "")
        if not extract:
            raise ProviderNoAnswerError(f"No extract for '{title}'", provider=self.provider_name)
        if len(extract) > MAX_EXTRACT_LENGTH:
            extract = extract[:MAX_EXTRACT_LENGTH].rsplit(" ", 1)[0] + "..."

        logger.debug(f"Wikipedia answered '{query}' from page '{title}'")
        return SearchAnswer(answer=clean_web_answer(extract), source="Wikipedia", context=title)
