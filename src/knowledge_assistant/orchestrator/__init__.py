"""Fallback orchestration of query resolution."""

from knowledge_assistant.orchestrator.orchestrator import Orchestrator
from knowledge_assistant.orchestrator.results import (
    CacheHit,
    Canned,
    Clarification,
    Default,
    KnowledgeHit,
    Learned,
    ProviderHit,
    Rejected,
    Resolution,
)

__all__ = [
    "Orchestrator",
    "Resolution",
    "KnowledgeHit",
    "CacheHit",
    "ProviderHit",
    "Learned",
    "Canned",
    "Clarification",
    "Rejected",
    "Default",
]
