"""
LLM Gateway

One chat/embedding contract over several model vendors:
- Unified request/response models
- Provider adapters for OpenAI and Google Vertex AI
- Configuration-based provider selection
- Per-call cost estimation from a versioned pricing table
"""

from .core.config import GatewayConfig, load_config
from .core.errors import (
    GatewayError,
    ConfigurationError,
    InvalidRequestError,
    ProviderCallFailed,
    MalformedResponse,
    UnpricedModel,
)
from .core.interface import AbstractProvider
from .core.registry import ProviderRegistry, get_registry
from .gateway import LLMGateway, create_gateway
from .models.request import ChatRequest, Message, ToolSpec, ResponseShape
from .models.response import (
    ChatResult,
    EmbeddingResult,
    FinishReason,
    ToolInvocation,
    Usage,
)
from .pricing.table import PricingTable, load_pricing_table

__all__ = [
    "LLMGateway",
    "create_gateway",
    "AbstractProvider",
    "ProviderRegistry",
    "get_registry",
    "GatewayConfig",
    "load_config",
    "GatewayError",
    "ConfigurationError",
    "InvalidRequestError",
    "ProviderCallFailed",
    "MalformedResponse",
    "UnpricedModel",
    "ChatRequest",
    "Message",
    "ToolSpec",
    "ResponseShape",
    "ChatResult",
    "EmbeddingResult",
    "FinishReason",
    "ToolInvocation",
    "Usage",
    "PricingTable",
    "load_pricing_table",
]

__version__ = "1.0.0"
