"""Candidate scoring, admission, ordering and relevance filtering."""

from dataclasses import dataclass, field

from knowledge_assistant.retrieval.similarity import (
    MatchType,
    contains_either_way,
    keyword_matches,
    match_type,
    similarity,
)

SHARED_TOKEN_MIN_LENGTH = 4
STRONG_SIMILARITY = 0.70
KEYWORD_SIMILARITY = 0.55
USAGE_SIMILARITY = 0.55


@dataclass
class Candidate:
    """Lightweight view of a stored entry used while ranking."""

    id: str
    normalized_query: str
    confidence: float = 1.0
    times_used: int = 0


@dataclass
class ScoredCandidate:
    """A candidate with its relevance signals against one query."""

    candidate: Candidate
    similarity: float
    match_type: MatchType
    keyword_matches: int
    admitted: bool = field(default=False)

    @property
    def sort_key(self) -> tuple:
        # A perfect similarity beats everything, then the documented order
        return (
            self.similarity >= 1.0,
            int(self.match_type),
            self.similarity,
            self.keyword_matches,
            self.candidate.confidence,
            self.candidate.times_used,
        )


def _shares_long_token(query: str, candidate: str) -> bool:
    query_tokens = {t for t in query.split() if len(t) >= SHARED_TOKEN_MIN_LENGTH}
    return any(t in query_tokens for t in candidate.split())


def score_candidate(query: str, candidate: Candidate, threshold: float) -> ScoredCandidate:
    """Compute similarity, match type and keyword overlap, then apply the admission gate."""
    key = candidate.normalized_query
    scored = ScoredCandidate(
        candidate=candidate,
        similarity=similarity(query, key),
        match_type=match_type(query, key),
        keyword_matches=keyword_matches(query, key),
    )
    scored.admitted = (
        scored.similarity > threshold
        or contains_either_way(query, key)
        or _shares_long_token(query, key)
    )
    return scored


def passes_relevance_filter(query: str, scored: ScoredCandidate) -> bool:
    """Secondary filter applied to the ordered shortlist."""
    if scored.similarity > STRONG_SIMILARITY:
        return True
    if scored.match_type >= MatchType.SUBSTRING:
        return True
    if scored.keyword_matches > 0 and scored.similarity > KEYWORD_SIMILARITY:
        return True
    tokens = query.split()
    return len(tokens) > 2 and scored.keyword_matches * 3 >= len(tokens)


def rank_candidates(
    query: str,
    candidates: list[Candidate],
    threshold: float,
    limit: int = 10,
) -> list[ScoredCandidate]:
    """Score, admit, order, truncate and filter candidates for a query.

    Args:
        query: Normalized query
        candidates: Entries already scoped to what the caller may see
        threshold: Similarity admission threshold
        limit: Shortlist size before the relevance filter

    Returns:
        Relevant candidates, best first
    """
    admitted = [
        scored
        for scored in (score_candidate(query, c, threshold) for c in candidates)
        if scored.admitted
    ]
    admitted.sort(key=lambda s: s.sort_key, reverse=True)
    return [s for s in admitted[:limit] if passes_relevance_filter(query, s)]
