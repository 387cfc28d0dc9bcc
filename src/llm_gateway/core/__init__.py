"""
Core gateway components.
"""

from .errors import (
    GatewayError,
    ConfigurationError,
    InvalidRequestError,
    ProviderCallFailed,
    ProviderAuthenticationError,
    ProviderRateLimitError,
    ProviderTimeoutError,
    MalformedResponse,
    UnpricedModel,
)
from .config import GatewayConfig, OpenAISettings, GCPSettings, load_config
from .interface import AbstractProvider
from .registry import ProviderRegistry, get_registry

__all__ = [
    "AbstractProvider",
    "ProviderRegistry",
    "get_registry",
    "GatewayConfig",
    "OpenAISettings",
    "GCPSettings",
    "load_config",
    "GatewayError",
    "ConfigurationError",
    "InvalidRequestError",
    "ProviderCallFailed",
    "ProviderAuthenticationError",
    "ProviderRateLimitError",
    "ProviderTimeoutError",
    "MalformedResponse",
    "UnpricedModel",
]
