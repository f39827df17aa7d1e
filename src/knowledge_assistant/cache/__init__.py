"""Response cache for external provider answers."""

from knowledge_assistant.cache.response_cache import ResponseCache, cache_key

__all__ = ["ResponseCache", "cache_key"]
