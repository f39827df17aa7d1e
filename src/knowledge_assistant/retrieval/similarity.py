"""Trigram similarity and match classification for knowledge retrieval.

Similarity follows the PostgreSQL pg_trgm approach: each word is padded with
two leading blanks and one trailing blank and cut into character trigrams, and
the score is the Dice coefficient of the two trigram sets. Function words are
dropped first so that "what is the capital of france" and "paris is the
capital of france" are compared on the words that carry meaning.
"""

import re
from enum import IntEnum

from knowledge_assistant.text.normalizer import fold_accents

STOPWORDS = frozenset(
    """
    a an the and or but of to in on at by for with from as into about
    is are was were be been being am do does did has have had
    what who whom whose which when where why how
    this that these those it its there their his her he she they them we you your i me my
    can could would should will shall may might must
    """.split()
)

_WORD = re.compile(r"[^\W_]+")


class MatchType(IntEnum):
    """Discrete match bonus, higher is a stronger textual match."""

    NONE = 0
    SUBSTRING = 2
    PREFIX = 3
    SUFFIX = 3  # alias of PREFIX, both rank the same
    CASEFOLD = 4
    EXACT = 5


def words(text: str) -> list[str]:
    return _WORD.findall(text.lower())


def content_words(text: str) -> list[str]:
    """Words of text without stopwords, or all words if nothing is left."""
    all_words = words(text)
    meaningful = [w for w in all_words if w not in STOPWORDS]
    return meaningful or all_words


def trigrams(text: str) -> set[str]:
    """Padded character trigrams of the content words of text."""
    grams: set[str] = set()
    for word in content_words(text):
        padded = f"  {word} "
        grams.update(padded[i : i + 3] for i in range(len(padded) - 2))
    return grams


def similarity(a: str, b: str) -> float:
    """Dice coefficient over content-word trigrams, in [0, 1].

    Identical strings always score 1.0.
    """
    if a == b:
        return 1.0
    grams_a = trigrams(a)
    grams_b = trigrams(b)
    if not grams_a or not grams_b:
        return 0.0
    shared = len(grams_a & grams_b)
    return round(2.0 * shared / (len(grams_a) + len(grams_b)), 4)


def match_type(query: str, candidate: str) -> MatchType:
    """Classify how the candidate key textually matches the query."""
    if not query or not candidate:
        return MatchType.NONE
    if candidate == query:
        return MatchType.EXACT
    q = fold_accents(query).casefold()
    c = fold_accents(candidate).casefold()
    if c == q:
        return MatchType.CASEFOLD
    if c.startswith(q):
        return MatchType.PREFIX
    if c.endswith(q):
        return MatchType.SUFFIX
    if q in c:
        return MatchType.SUBSTRING
    return MatchType.NONE


def contains_either_way(query: str, candidate: str) -> bool:
    q = query.casefold()
    c = candidate.casefold()
    return bool(q and c) and (q in c or c in q)


def keyword_matches(query: str, candidate: str, min_length: int = 3) -> int:
    """Count query tokens of at least min_length chars found inside the candidate."""
    haystack = candidate.casefold()
    return sum(1 for token in query.casefold().split() if len(token) >= min_length and token in haystack)


def jaccard_similarity(a: str, b: str) -> float:
    """Jaccard similarity of the word sets of two texts."""
    set_a = set(words(a))
    set_b = set(words(b))
    if not set_a and not set_b:
        return 1.0
    union = set_a | set_b
    return len(set_a & set_b) / len(union)
