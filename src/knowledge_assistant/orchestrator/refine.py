"""Factual answer refinement: trims long answers to what the question asks."""

import re

_FACTUAL_PATTERNS = (
    re.compile(r"^(?:who|whom)\s+(?:is|are|was|were)\b"),
    re.compile(r"^(?:what|which)\s+(?:is|are|was|were)\b"),
    re.compile(r"^where\s+(?:is|are|was|were)\b"),
    re.compile(r"^when\s+(?:is|was|did|were)\b"),
    re.compile(r"^how\s+(?:many|much|does|do|is)\b"),
    re.compile(r"^why\s+(?:is|are|was|were|do|does)\b"),
    re.compile(r"\b(?:capital|president|population|currency|meaning|definition)\s+of\b"),
)

_DEFINITION = re.compile(r"^what\s+(?:is|are)\s+(?:an?\s+|the\s+)?(?P<term>.+?)\??$")
_PERSON = re.compile(r"^who\s+(?:is|was)\s+(?P<term>.+?)\??$")
_CAPITAL = re.compile(r"\bcapital\s+of\s+(?P<term>.+?)\??$")
_SENTENCE = re.compile(r"^[^.!?]+[.!?]")
_SENTENCE_SPLIT = re.compile(r"(?<=[.!?])\s+")

CATEGORY_MIN_LENGTH = 100
GENERAL_MIN_LENGTH = 150
MAX_SENTENCES = 3


def is_factual_question(query: str) -> bool:
    text = query.lower().strip()
    return any(p.search(text) for p in _FACTUAL_PATTERNS)


def truncate_to_first_sentence(text: str) -> str:
    match = _SENTENCE.match(text)
    if match:
        return match.group(0).strip()
    if len(text) > CATEGORY_MIN_LENGTH:
        return text[: CATEGORY_MIN_LENGTH - 3] + "..."
    return text


def truncate_to_relevant_content(text: str) -> str:
    """Keep the first three sentences of a long answer."""
    sentences = [s for s in _SENTENCE_SPLIT.split(text.strip()) if s]
    if len(sentences) <= 2:
        return text
    result = " ".join(sentences[:MAX_SENTENCES]).strip()
    if result[-1] not in ".!?":
        result += "."
    return result


def _sentence_about(term: str, text: str) -> str | None:
    pattern = re.compile(rf"\b{re.escape(term)}\b[^.!?]*?\b(?:is|are|was|were)\b[^.!?]+[.!?]", re.IGNORECASE)
    match = pattern.search(text)
    return match.group(0).strip() if match else None


def refine_factual_response(query: str, response: str) -> str:
    """Shorten an answer to a factual question.

    Short answers are returned unchanged. Definition, person and capital
    questions get the sentence about the subject; other factual questions
    keep their first three sentences.
    """
    if not query or not response:
        return response
    text = query.lower().strip()

    if len(response) > CATEGORY_MIN_LENGTH:
        for pattern in (_CAPITAL, _DEFINITION, _PERSON):
            match = pattern.search(text)
            if match:
                refined = _sentence_about(match.group("term"), response)
                if refined is None and pattern is not _CAPITAL:
                    refined = truncate_to_first_sentence(response)
                if refined and len(refined) < len(response):
                    return refined
                break

    if is_factual_question(text) and len(response) > GENERAL_MIN_LENGTH:
        shortened = truncate_to_relevant_content(response)
        if len(shortened) < len(response):
            return shortened
    return response
