"""Resolution results: one variant per way a query can be answered."""

from dataclasses import dataclass, replace


@dataclass(frozen=True)
class Resolution:
    """Base result of resolving a query.

    source is the tag stored on the conversation record; kind names the
    variant for API consumers.
    """

    response: str
    source: str
    confidence: float
    knowledge_id: str | None = None
    conversation_id: str | None = None
    awaiting_confirmation: bool = False

    kind = "resolution"

    def with_conversation(self, conversation_id: str) -> "Resolution":
        return replace(self, conversation_id=conversation_id)


@dataclass(frozen=True)
class KnowledgeHit(Resolution):
    """Answer served from the knowledge store."""

    similarity: float = 0.0
    possibly_stale: bool = False

    kind = "knowledge"


@dataclass(frozen=True)
class CacheHit(Resolution):
    """Answer served from the response cache."""

    kind = "cache"


@dataclass(frozen=True)
class ProviderHit(Resolution):
    """Answer produced by a web search or generative provider."""

    provider_kind: str = "web"
    attribution: str | None = None

    kind = "provider"


@dataclass(frozen=True)
class Learned(Resolution):
    """Confirmation that a teach command was stored."""

    merged: bool = False

    kind = "learned"


@dataclass(frozen=True)
class Canned(Resolution):
    """Fixed or templated answer (greeting, identity, calculation, lookups)."""

    kind = "canned"


@dataclass(frozen=True)
class Clarification(Resolution):
    """The query looked like a teach command that could not be parsed."""

    kind = "clarification"


@dataclass(frozen=True)
class Rejected(Resolution):
    """Invalid input; never persisted."""

    kind = "rejected"


@dataclass(frozen=True)
class Default(Resolution):
    """No source could answer; invites the user to teach."""

    kind = "default"
