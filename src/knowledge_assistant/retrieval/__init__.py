"""Knowledge retrieval and ranking."""

from knowledge_assistant.retrieval.ranking import Candidate, ScoredCandidate, rank_candidates
from knowledge_assistant.retrieval.retriever import KnowledgeRetriever, RankedEntry
from knowledge_assistant.retrieval.similarity import MatchType, similarity

__all__ = [
    "Candidate",
    "KnowledgeRetriever",
    "MatchType",
    "RankedEntry",
    "ScoredCandidate",
    "rank_candidates",
    "similarity",
]
