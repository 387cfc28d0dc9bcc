"""
Gateway facade.

``LLMGateway`` is the only object application code talks to. It holds one
provider adapter, chosen when the gateway is built, and exposes chat
completion, embedding generation and cost estimation over it.
"""

import logging
from typing import Any, Mapping, Optional, Union

from opentelemetry import trace

from .core.config import GatewayConfig
from .core.errors import (
    ConfigurationError,
    GatewayError,
    InvalidRequestError,
    ProviderCallFailed,
)
from .core.interface import AbstractProvider
from .core.registry import ProviderRegistry, get_registry
from .models.request import ChatRequest
from .models.response import ChatResult, EmbeddingResult, Usage

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


class LLMGateway:
    """
    Unified entry point to the configured language-model provider.

    The active provider never changes over the lifetime of the gateway.
    The gateway holds no per-call state and can be shared by concurrent
    callers. Nothing is retried here; callers decide what to do with a
    ProviderCallFailed.

    Usage:
        async with LLMGateway() as gateway:
            result = await gateway.chat_completion(request)
            cost = gateway.estimate_cost(result.usage)
    """

    def __init__(
        self,
        provider: Optional[str] = None,
        config: Optional[GatewayConfig] = None,
        registry: Optional[ProviderRegistry] = None,
        adapter: Optional[AbstractProvider] = None,
        **adapter_kwargs: Any,
    ):
        """
        Initialize the gateway.

        Args:
            provider: Explicit provider identifier, wins over configuration
            config: Gateway configuration, read from the environment if omitted
            registry: Provider registry, defaults to the global one
            adapter: Ready-made adapter, bypasses provider selection
            **adapter_kwargs: Extra adapter arguments (e.g., an httpx transport)

        Raises:
            ConfigurationError: If the provider is unknown or the config invalid
        """
        if adapter is None:
            config = config or GatewayConfig.from_env()
            registry = registry or get_registry()
            provider_id = registry.select_provider(provider, config)
            adapter = registry.instantiate(provider_id, config, **adapter_kwargs)

        self._adapter = adapter

    @property
    def adapter(self) -> AbstractProvider:
        return self._adapter

    @property
    def provider(self) -> str:
        return self._adapter.provider_id

    @property
    def model(self) -> str:
        return self._adapter.model

    async def chat_completion(
        self,
        request: ChatRequest,
        timeout: Optional[float] = None,
    ) -> ChatResult:
        """
        Create a chat completion with the active provider.

        Args:
            request: Unified chat request
            timeout: Per-call ceiling in seconds

        Returns:
            Unified chat result

        Raises:
            InvalidRequestError: If the request has no messages, or none the
                active provider can send
            ProviderCallFailed: If the provider call fails in any way
            ConfigurationError: If a credential is missing
        """
        if not request.messages:
            raise InvalidRequestError("messages must not be empty")
        if request.max_output_tokens is not None and request.max_output_tokens <= 0:
            raise InvalidRequestError("max_output_tokens must be positive")

        with tracer.start_as_current_span("llm_gateway.chat_completion") as span:
            span.set_attribute("provider", self.provider)
            span.set_attribute("model", self.model)
            span.set_attribute("message_count", len(request.messages))

            result = await self._call("chat_completion", self._adapter.chat_completion(request, timeout))

            span.set_attribute("finish_reason", result.finish_reason.value)
            span.set_attribute("prompt_tokens", result.usage.prompt_tokens)
            span.set_attribute("completion_tokens", result.usage.completion_tokens)
            return result

    async def generate_embedding(
        self,
        text: str,
        timeout: Optional[float] = None,
    ) -> EmbeddingResult:
        """
        Generate an embedding with the active provider.

        Args:
            text: Input text, must not be blank
            timeout: Per-call ceiling in seconds

        Returns:
            Unified embedding result
        """
        if not text or not text.strip():
            raise InvalidRequestError("text must not be empty")

        with tracer.start_as_current_span("llm_gateway.generate_embedding") as span:
            span.set_attribute("provider", self.provider)
            span.set_attribute("model", self._adapter.embedding_model)

            result = await self._call("generate_embedding", self._adapter.generate_embedding(text, timeout))

            span.set_attribute("total_tokens", result.usage.total_tokens)
            span.set_attribute("dimensions", len(result.vector))
            return result

    def estimate_cost(self, usage: Union[Usage, Mapping[str, Any]]) -> float:
        """
        Estimate the USD cost of a call made with the active model.

        Args:
            usage: Token usage, a Usage or a mapping with prompt_tokens and
                completion_tokens

        Returns:
            Cost in USD, 0.0 for a model missing from the pricing table
        """
        if not isinstance(usage, Usage):
            usage = Usage.from_counts(
                usage.get("prompt_tokens"),
                usage.get("completion_tokens"),
                usage.get("total_tokens"),
            )
        return self._adapter.estimate_cost(usage)

    async def _call(self, operation: str, call):
        try:
            return await call
        except (ProviderCallFailed, ConfigurationError, InvalidRequestError):
            raise
        except GatewayError as e:
            raise ProviderCallFailed(self.provider, e.message) from e
        except Exception as e:
            logger.error(
                f"Unexpected {type(e).__name__} from {self._adapter.name} {operation}: {e}",
                extra={"provider": self.provider, "model": self.model},
            )
            raise ProviderCallFailed(self.provider, str(e) or type(e).__name__) from e

    async def aclose(self) -> None:
        """Release the adapter's HTTP client."""
        await self._adapter.disconnect()

    async def __aenter__(self) -> "LLMGateway":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    def __repr__(self) -> str:
        return f"LLMGateway(provider={self.provider!r}, model={self.model!r})"


def create_gateway(
    provider: Optional[str] = None,
    config: Optional[GatewayConfig] = None,
    **adapter_kwargs: Any,
) -> LLMGateway:
    """
    Create a gateway for the configured provider.

    Args:
        provider: Explicit provider identifier
        config: Gateway configuration, read from the environment if omitted

    Returns:
        Ready gateway
    """
    return LLMGateway(provider=provider, config=config, **adapter_kwargs)
