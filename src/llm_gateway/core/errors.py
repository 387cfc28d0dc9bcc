"""
Gateway error types.

Every vendor failure crosses the adapter boundary as a ProviderCallFailed
(or one of its subclasses); callers never see httpx or google-auth errors.
"""

from typing import Optional


class GatewayError(Exception):
    """Base exception for gateway errors."""

    def __init__(self, message: str, provider: Optional[str] = None):
        self.message = message
        self.provider = provider
        super().__init__(message)


class ConfigurationError(GatewayError):
    """Raised for an unknown provider, invalid settings or a missing credential."""
    pass


class InvalidRequestError(GatewayError, ValueError):
    """Raised when caller input is rejected before reaching a provider."""
    pass


class ProviderCallFailed(GatewayError):
    """
    Raised when a provider call fails for any transport, auth or parse reason.

    The message is prefixed with the provider name; the vendor's own text is
    kept in ``original_message``.
    """

    def __init__(self, provider: str, message: str):
        self.original_message = message
        super().__init__(f"{provider} call failed: {message}", provider=provider)


class ProviderAuthenticationError(ProviderCallFailed):
    """Raised when the provider rejects the credentials."""
    pass


class ProviderRateLimitError(ProviderCallFailed):
    """Raised when the provider reports a rate limit."""

    def __init__(self, provider: str, message: str, retry_after: Optional[float] = None):
        super().__init__(provider, message)
        self.retry_after = retry_after


class ProviderTimeoutError(ProviderCallFailed):
    """Raised when the provider does not answer within the call timeout."""
    pass


class MalformedResponse(ProviderCallFailed):
    """Raised when a provider response cannot be mapped to the unified shape."""

    def __init__(self, provider: str, note: str):
        self.note = note
        super().__init__(provider, f"malformed response: {note}")


class UnpricedModel(GatewayError, KeyError):
    """Raised by the pricing table for a model it has no entry for."""

    def __init__(self, model_id: str):
        self.model_id = model_id
        super().__init__(f"No pricing entry for model: {model_id}")

    def __str__(self) -> str:
        return self.message
