"""
Provider registry: resolves which adapter to build and builds it.
"""

import logging
from typing import Any, Dict, List, Optional, Type

from ..pricing.table import PricingTable, load_pricing_table
from .config import GatewayConfig
from .errors import ConfigurationError
from .interface import AbstractProvider

logger = logging.getLogger(__name__)


def _normalize(provider_id: str) -> str:
    return provider_id.strip().lower()


class ProviderRegistry:
    """
    Registry of provider adapter classes.

    The set of providers is closed once the registry is populated. The first
    provider registered is the fallback default.
    """

    def __init__(self):
        """Initialize the registry."""
        self._adapters: Dict[str, Type[AbstractProvider]] = {}

    def register_adapter(
        self,
        provider_id: str,
        adapter_class: Type[AbstractProvider]
    ) -> None:
        """
        Register a provider adapter class.

        Args:
            provider_id: Provider identifier (e.g., "openai", "gcp")
            adapter_class: Adapter class to register
        """
        self._adapters[_normalize(provider_id)] = adapter_class
        logger.debug(f"Registered provider adapter: {provider_id}")

    @property
    def default_provider(self) -> str:
        """The first registered provider."""
        if not self._adapters:
            raise ConfigurationError("No provider adapters registered")
        return next(iter(self._adapters))

    def list_providers(self) -> List[str]:
        """List registered provider identifiers in registration order."""
        return list(self._adapters)

    def select_provider(
        self,
        explicit: Optional[str] = None,
        config: Optional[GatewayConfig] = None,
    ) -> str:
        """
        Resolve the active provider identifier.

        Precedence: explicit argument, then the configured provider (which
        ``GatewayConfig.from_env`` reads from LLM_PROVIDER), then the default.

        Args:
            explicit: Provider requested by the caller
            config: Gateway configuration

        Returns:
            Normalized provider identifier

        Raises:
            ConfigurationError: If the resolved provider is not registered
        """
        if explicit:
            provider_id, source = _normalize(explicit), "explicit"
        elif config is not None and config.provider:
            provider_id, source = _normalize(config.provider), "configuration"
        else:
            provider_id, source = self.default_provider, "default"

        if provider_id not in self._adapters:
            raise ConfigurationError(
                f"Unknown LLM provider: {provider_id}. "
                f"Supported providers: {', '.join(self._adapters)}"
            )

        logger.info(f"Selected LLM provider: {provider_id} ({source})")
        return provider_id

    def instantiate(
        self,
        provider_id: str,
        config: GatewayConfig,
        pricing: Optional[PricingTable] = None,
        **adapter_kwargs: Any,
    ) -> AbstractProvider:
        """
        Create the adapter for a provider.

        No credential is read until the adapter's first call.

        Args:
            provider_id: Provider to create
            config: Gateway configuration
            pricing: Pricing table, defaults to ``config.pricing_path`` or the bundled one
            **adapter_kwargs: Extra adapter arguments (e.g., an httpx transport)

        Returns:
            Configured adapter instance

        Raises:
            ConfigurationError: If the provider is not registered
        """
        provider_id = _normalize(provider_id)
        if provider_id not in self._adapters:
            raise ConfigurationError(f"Unknown LLM provider: {provider_id}")

        if pricing is None:
            pricing = load_pricing_table(config.pricing_path)

        adapter_class = self._adapters[provider_id]
        adapter = adapter_class.from_config(config, pricing=pricing, **adapter_kwargs)

        logger.info(
            f"Initializing LLM provider: {provider_id} with model: {adapter.model}",
            extra={"provider": provider_id, "model": adapter.model},
        )
        return adapter


# Global registry instance
_registry: Optional[ProviderRegistry] = None


def get_registry() -> ProviderRegistry:
    """Get the global provider registry with the built-in adapters."""
    global _registry
    if _registry is None:
        from ..adapters import OpenAIAdapter, VertexAIAdapter

        registry = ProviderRegistry()
        registry.register_adapter("openai", OpenAIAdapter)
        registry.register_adapter("gcp", VertexAIAdapter)
        _registry = registry
    return _registry
