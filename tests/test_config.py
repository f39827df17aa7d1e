"""Tests for settings validation and derived properties."""

import pytest
from pydantic import ValidationError

from conftest import make_settings


class TestSettings:
    """Tests for Settings."""

    def test_defaults(self):
        """Defaults match the documented thresholds."""
        settings = make_settings()
        assert settings.KNOWLEDGE_MATCH_THRESHOLD == 0.75
        assert settings.MERGE_SIMILARITY_THRESHOLD == 0.8
        assert settings.CACHE_TTL_DAYS == 7
        assert settings.LEARNED_CONFIDENCE == 0.95

    def test_provider_lists_are_normalized(self):
        """Provider names are trimmed, lowercased and empty items dropped."""
        settings = make_settings(SEARCH_PROVIDERS=" DuckDuckGo , wikipedia ,", AI_PROVIDERS="Claude")
        assert settings.search_provider_list == ["duckduckgo", "wikipedia"]
        assert settings.ai_provider_list == ["claude"]

    def test_ai_preferred_requires_ai_enabled(self):
        """Preferred priority only matters when AI is enabled."""
        assert make_settings(AI_ENABLED=True, AI_PRIORITY="preferred").ai_preferred is True
        assert make_settings(AI_ENABLED=False, AI_PRIORITY="preferred").ai_preferred is False
        assert make_settings(AI_ENABLED=True, AI_PRIORITY="fallback").ai_preferred is False

    def test_invalid_ai_priority(self):
        with pytest.raises(ValidationError, match="AI_PRIORITY"):
            make_settings(AI_PRIORITY="sometimes")

    def test_retention_shorter_than_ttl(self):
        """The sweep must never delete entries that are still live."""
        with pytest.raises(ValidationError, match="CACHE_RETENTION_DAYS"):
            make_settings(CACHE_TTL_DAYS=10, CACHE_RETENTION_DAYS=5)

    def test_frozen(self):
        """Settings cannot be changed after construction."""
        settings = make_settings()
        with pytest.raises(ValidationError):
            settings.LEARNING_ENABLED = False
