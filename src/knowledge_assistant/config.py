"""Configuration management using pydantic-settings."""

import logging

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Instances are frozen. Build one at startup and pass it to the components
    that need it instead of mutating it at runtime.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    # Application
    APP_NAME: str = "Knowledge Assistant"
    DEBUG: bool = False

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./knowledge_assistant.db"
    STORE_RETRY_ATTEMPTS: int = 3  # Attempts for transient connection errors
    STORE_RETRY_BACKOFF_SECONDS: float = 0.2  # Added to the wait after each failed attempt

    # Assistant identity (used by the canned creator / system info answers)
    ASSISTANT_NAME: str = "Atlas"
    CREATOR_NAME: str = "the Knowledge Assistant team"
    CREATOR_LOCATION: str = ""

    # Query handling
    MAX_QUERY_LENGTH: int = 500  # Normalized queries are truncated to this
    MAX_RAW_QUERY_LENGTH: int = 2000  # Raw input above this is rejected outright
    REQUEST_DEADLINE_SECONDS: float = 20.0

    # Knowledge retrieval
    MIN_CONFIDENCE_THRESHOLD: float = 0.6  # Similarity admission gate for candidates
    KNOWLEDGE_MATCH_THRESHOLD: float = 0.75  # Best match must exceed this to answer
    MERGE_SIMILARITY_THRESHOLD: float = 0.8  # Above this a write merges into the match
    RETRIEVAL_LIMIT: int = 10

    # Learning
    LEARNING_ENABLED: bool = True
    LEARNED_CONFIDENCE: float = 0.95
    EXTERNAL_CONFIDENCE: float = 0.85  # Confidence of accepted web / AI answers

    # Feedback
    FEEDBACK_POSITIVE_STEP: float = 0.05
    FEEDBACK_NEGATIVE_STEP: float = 0.1

    # Response cache
    CACHE_ENABLED: bool = True
    CACHE_TTL_DAYS: int = 7  # Older entries are treated as absent on read
    CACHE_RETENTION_DAYS: int = 30  # Older entries are deleted by the sweep

    # Web search
    WEB_SEARCH_ENABLED: bool = True
    SEARCH_PROVIDERS: str = "duckduckgo,wikipedia"  # Comma-separated, in rotation order
    WEB_SEARCH_TIMEOUT_SECONDS: float = 5.0

    # Generative AI
    AI_ENABLED: bool = False
    AI_PRIORITY: str = "fallback"  # 'preferred' or 'fallback'
    AI_PROVIDERS: str = "claude,ollama"  # Comma-separated, in rotation order
    AI_TIMEOUT_SECONDS: float = 8.0
    PROVIDER_MAX_ATTEMPTS: int = 2  # Providers tried per capability before giving up

    # Anthropic (Claude)
    ANTHROPIC_API_KEY: str = ""
    ANTHROPIC_MODEL: str = "claude-3-5-haiku-latest"
    AI_MAX_TOKENS: int = 300

    # Ollama (local LLM)
    OLLAMA_BASE_URL: str = "http://localhost:11434"
    OLLAMA_LLM_MODEL: str = "llama3.1:8b"

    # Bulk re-verification
    REVERIFY_AFTER_DAYS: int = 30
    REVERIFY_MIN_CONFIDENCE: float = 0.7
    REVERIFY_BATCH_SIZE: int = 5
    REVERIFY_LIMIT: int = 50
    REVERIFY_UNCHANGED_SIMILARITY: float = 0.8

    # Admin API
    ADMIN_TOKEN: str = "changeme"  # MUST be changed in production

    @property
    def search_provider_list(self) -> list[str]:
        """Get configured search providers as a list."""
        return [p.strip().lower() for p in self.SEARCH_PROVIDERS.split(",") if p.strip()]

    @property
    def ai_provider_list(self) -> list[str]:
        """Get configured AI providers as a list."""
        return [p.strip().lower() for p in self.AI_PROVIDERS.split(",") if p.strip()]

    @property
    def ai_preferred(self) -> bool:
        """Whether AI is consulted before web search for AI-suitable queries."""
        return self.AI_ENABLED and self.AI_PRIORITY.lower() == "preferred"

    @model_validator(mode="after")
    def check_settings(self) -> "Settings":
        """Validate cross-field settings."""
        if self.AI_PRIORITY.lower() not in ("preferred", "fallback"):
            raise ValueError(
                f"AI_PRIORITY must be 'preferred' or 'fallback', got '{self.AI_PRIORITY}'"
            )
        if self.CACHE_RETENTION_DAYS < self.CACHE_TTL_DAYS:
            raise ValueError("CACHE_RETENTION_DAYS must not be shorter than CACHE_TTL_DAYS")
        if not self.DEBUG and self.ADMIN_TOKEN == "changeme":
            logging.warning(
                "SECURITY WARNING: ADMIN_TOKEN is set to default 'changeme' in non-debug mode!"
            )
        return self


settings = Settings()
