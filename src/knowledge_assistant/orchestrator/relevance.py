"""Relevance check for web search answers."""

import logging
import re

from knowledge_assistant.orchestrator.refine import is_factual_question

logger = logging.getLogger(__name__)

_STOPWORDS = frozenset(
    """a an the of to in on at by for with from and or but is are was were be been
    being am do does did what which who whom whose when where why how that this these
    those it its as about into than then there their they them you your me my our we
    can could would should will shall may might must has have had not no yes""".split()
)
_PUNCTUATION = re.compile(r"[.,;:!?\"()]")

MIN_ANSWER_LENGTH = 20
GENERIC_ANSWER_LENGTH = 60


def query_keywords(query: str) -> list[str]:
    """Significant words of a query: longer than two characters, not stopwords."""
    words = _PUNCTUATION.sub(" ", query.lower()).split()
    return [w for w in words if len(w) > 2 and w not in _STOPWORDS]


def is_relevant_answer(query: str, answer: str) -> bool:
    """Whether a web answer plausibly addresses the query.

    Keyword coverage and adjacent keyword pairs found in the answer decide;
    factual questions need higher coverage. Very short or generic answers
    never pass.
    """
    if not query or not answer:
        return False
    keywords = query_keywords(query)
    if not keywords:
        logger.debug(f"No keywords to check relevance for '{query}'")
        return False

    text = answer.lower()
    matches = [w for w in keywords if w in text]
    ratio = len(matches) / len(keywords)
    phrase_match = any(
        f"{first} {second}" in text for first, second in zip(keywords, keywords[1:])
    )

    if len(text) < MIN_ANSWER_LENGTH:
        relevant = False
    elif len(text) < GENERIC_ANSWER_LENGTH and keywords[0] not in text and ratio < 0.4:
        relevant = False
    elif is_factual_question(query):
        relevant = ratio >= 0.6 or (phrase_match and ratio >= 0.4)
    elif phrase_match:
        relevant = ratio >= 0.3 or len(matches) >= 2
    else:
        relevant = ratio >= 0.5 or len(matches) >= 3

    logger.debug(
        f"Relevance for '{query}': {len(matches)}/{len(keywords)} keywords, "
        f"phrase={phrase_match}, relevant={relevant}"
    )
    return relevant
