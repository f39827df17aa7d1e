"""Provider exceptions for web search and generative AI backends."""


class ProviderError(Exception):
    """Base exception for provider operations."""

    def __init__(self, message: str, provider: str = "unknown"):
        self.provider = provider
        super().__init__(f"[{provider}] {message}")


class ProviderConnectionError(ProviderError):
    """Failed to connect to the provider or the request timed out."""

    pass


class ProviderRateLimitError(ProviderError):
    """Rate limit exceeded."""

    def __init__(
        self, message: str, provider: str, retry_after: float | None = None
    ):
        self.retry_after = retry_after
        super().__init__(message, provider)


class ProviderAuthenticationError(ProviderError):
    """Authentication failed (invalid or missing API key)."""

    pass


class ProviderResponseError(ProviderError):
    """Error status or malformed payload from the provider."""

    pass


class ProviderNoAnswerError(ProviderError):
    """Provider answered, but had nothing usable for the query."""

    pass


class ProviderNotConfiguredError(ProviderError):
    """Provider is not properly configured or not registered."""

    pass
