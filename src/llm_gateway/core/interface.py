"""
Abstract provider interface definition.

Defines the contract that every provider adapter implements, plus the
HTTP plumbing they share.
"""

import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

import httpx

from ..models.request import ChatRequest
from ..models.response import ChatResult, EmbeddingResult, Usage
from ..pricing.table import PricingTable, load_pricing_table
from .config import GatewayConfig
from .errors import (
    MalformedResponse,
    ProviderAuthenticationError,
    ProviderCallFailed,
    ProviderRateLimitError,
    ProviderTimeoutError,
    UnpricedModel,
)

logger = logging.getLogger(__name__)


class AbstractProvider(ABC):
    """
    Abstract base class for provider adapters.

    An adapter translates unified requests into one vendor's wire format,
    performs a single HTTP call and maps the answer back. Adapters hold no
    per-call state, so one instance can serve concurrent callers. No call is
    ever retried here.
    """

    # Published vector sizes per embedding model
    EMBEDDING_DIMENSIONS: Dict[str, int] = {}

    def __init__(
        self,
        model: str,
        embedding_model: str,
        base_url: str,
        max_output_tokens: int,
        temperature: float,
        timeout: float,
        pricing: Optional[PricingTable] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._model = model
        self._embedding_model = embedding_model
        self._base_url = base_url.rstrip("/")
        self._max_output_tokens = max_output_tokens
        self._temperature = temperature
        self._timeout = timeout
        self._pricing = pricing if pricing is not None else load_pricing_table()
        # No credentials are read here; see _headers()
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    @abstractmethod
    def from_config(
        cls,
        config: GatewayConfig,
        pricing: Optional[PricingTable] = None,
        **kwargs: Any,
    ) -> "AbstractProvider":
        """
        Build the adapter from gateway configuration.

        Args:
            config: Gateway configuration
            pricing: Pricing table to price calls with
            **kwargs: Extra constructor arguments (e.g., an httpx transport)
        """
        pass

    @property
    @abstractmethod
    def provider_id(self) -> str:
        """
        Identifier of the vendor (e.g., "openai", "gcp").

        Returns:
            Provider identifier
        """
        pass

    @property
    def name(self) -> str:
        """Adapter identity used in logs."""
        return f"{self.provider_id}:{self._model}"

    @property
    def model(self) -> str:
        return self._model

    @property
    def embedding_model(self) -> str:
        return self._embedding_model

    @property
    def pricing(self) -> PricingTable:
        return self._pricing

    @abstractmethod
    async def _headers(self) -> Dict[str, str]:
        """
        Request headers including credentials.

        Raises:
            ConfigurationError: If a required credential is missing
        """
        pass

    @abstractmethod
    async def chat_completion(
        self,
        request: ChatRequest,
        timeout: Optional[float] = None,
    ) -> ChatResult:
        """
        Create a chat completion.

        Args:
            request: Unified chat request
            timeout: Per-call ceiling in seconds, defaults to the configured one

        Returns:
            Unified chat result

        Raises:
            ProviderCallFailed: On any vendor failure
            ConfigurationError: If a required credential is missing
        """
        pass

    @abstractmethod
    async def generate_embedding(
        self,
        text: str,
        timeout: Optional[float] = None,
    ) -> EmbeddingResult:
        """
        Generate an embedding vector for a piece of text.

        Args:
            text: Input text
            timeout: Per-call ceiling in seconds, defaults to the configured one

        Returns:
            Unified embedding result
        """
        pass

    async def disconnect(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()
        logger.info(f"Disconnected from {self.provider_id}")

    def estimate_cost(self, usage: Usage) -> float:
        """
        Estimate the USD cost of a call made with the active chat model.

        Returns 0.0 and logs a warning when the model is not priced.
        """
        try:
            return self._pricing.estimate(self._model, usage).total_cost
        except UnpricedModel:
            logger.warning(
                f"Unknown pricing for model: {self._model}",
                extra={"provider": self.provider_id, "model": self._model},
            )
            return 0.0

    def _effective_temperature(self, request: ChatRequest) -> float:
        return request.temperature if request.temperature is not None else self._temperature

    def _effective_max_tokens(self, request: ChatRequest) -> int:
        if request.max_output_tokens is not None:
            return request.max_output_tokens
        return self._max_output_tokens

    async def _post(self, url: str, payload: Dict[str, Any], timeout: Optional[float]) -> Any:
        """Send one request and return the decoded JSON body."""
        headers = await self._headers()

        try:
            response = await self._client.post(
                url,
                json=payload,
                headers=headers,
                timeout=timeout if timeout is not None else self._timeout,
            )
        except httpx.TimeoutException as e:
            raise ProviderTimeoutError(self.provider_id, f"Request timed out: {e}") from e
        except httpx.RequestError as e:
            raise ProviderCallFailed(self.provider_id, str(e) or type(e).__name__) from e

        self._check_response_errors(response)

        try:
            return response.json()
        except ValueError as e:
            raise MalformedResponse(self.provider_id, f"invalid JSON body: {e}") from e

    def _check_response_errors(self, response: httpx.Response) -> None:
        """Check response for errors and raise appropriate exceptions."""
        if response.status_code == 200:
            return

        # Both vendors wrap errors as {"error": {"message": ...}}
        error_data: Any = response.text
        try:
            error_data = response.json()["error"]["message"]
        except (ValueError, KeyError, TypeError):
            pass

        if response.status_code in (401, 403):
            raise ProviderAuthenticationError(
                self.provider_id,
                f"Authentication failed: {error_data}",
            )

        if response.status_code == 429:
            raise ProviderRateLimitError(
                self.provider_id,
                f"Rate limit exceeded: {error_data}",
                retry_after=_parse_retry_after(response.headers.get("Retry-After")),
            )

        raise ProviderCallFailed(
            self.provider_id,
            f"Request failed: {response.status_code} - {error_data}",
        )

    @contextmanager
    def _response_mapping(self) -> Iterator[None]:
        """Turn lookup and type errors raised while mapping a vendor body into MalformedResponse."""
        try:
            yield
        except (TypeError, ValueError, KeyError, IndexError, AttributeError) as e:
            raise MalformedResponse(self.provider_id, f"unexpected field values: {e}") from e

    def _log_failure(self, operation: str, error: Exception) -> None:
        logger.error(
            f"{self.name} {operation} failed: {error}",
            extra={"provider": self.provider_id, "model": self._model},
        )

    def _check_dimensions(self, vector: List[Any]) -> None:
        """Reject vectors whose size does not match the model's published one."""
        if not vector:
            raise MalformedResponse(self.provider_id, "embedding vector is empty")
        expected = self.EMBEDDING_DIMENSIONS.get(self._embedding_model)
        if expected is None:
            logger.debug(f"No published dimensionality for {self._embedding_model}, skipping check")
            return
        if len(vector) != expected:
            raise MalformedResponse(
                self.provider_id,
                f"expected {expected} dimensions for {self._embedding_model}, got {len(vector)}",
            )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(provider={self.provider_id!r}, model={self._model!r})"


def _parse_retry_after(value: Optional[str]) -> Optional[float]:
    if not value:
        return None
    try:
        return float(value)
    except ValueError:
        return None
