"""
OpenAI API adapter.

OpenAI's chat format is close to the unified one: roles (including
``system``) and tool declarations pass through as a flat list.
"""

import logging
import json
from typing import Optional, List, Dict, Any
import httpx

from ..core.config import GatewayConfig
from ..core.interface import AbstractProvider
from ..core.errors import ConfigurationError, MalformedResponse, ProviderCallFailed
from ..models.request import ChatRequest, ResponseShape
from ..models.response import (
    ChatResult,
    EmbeddingResult,
    EmbeddingUsage,
    FinishReason,
    ToolInvocation,
    Usage,
)
from ..pricing.table import PricingTable

logger = logging.getLogger(__name__)


class OpenAIAdapter(AbstractProvider):
    """
    OpenAI API adapter.

    Talks to the chat completions and embeddings endpoints over httpx.
    """

    OPENAI_BASE_URL = "https://api.openai.com/v1"

    EMBEDDING_DIMENSIONS = {
        "text-embedding-3-large": 3072,
        "text-embedding-3-small": 1536,
        "text-embedding-ada-002": 1536,
    }

    def __init__(
        self,
        model: str = "gpt-4o",
        embedding_model: str = "text-embedding-3-large",
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        organization: Optional[str] = None,
        max_output_tokens: int = 4096,
        temperature: float = 0.7,
        timeout: float = 60.0,
        pricing: Optional[PricingTable] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize OpenAI adapter.

        Args:
            model: Chat model identifier
            embedding_model: Embedding model identifier
            api_key: OpenAI API key, checked on first call
            base_url: OpenAI API URL (defaults to api.openai.com)
            organization: OpenAI organization ID
            max_output_tokens: Default output ceiling
            temperature: Default sampling temperature
            timeout: Default per-call timeout in seconds
            pricing: Pricing table, defaults to the bundled one
            transport: Optional httpx transport
        """
        super().__init__(
            model=model,
            embedding_model=embedding_model,
            base_url=base_url or self.OPENAI_BASE_URL,
            max_output_tokens=max_output_tokens,
            temperature=temperature,
            timeout=timeout,
            pricing=pricing,
            transport=transport,
        )
        self._api_key = api_key
        self._organization = organization

    @classmethod
    def from_config(
        cls,
        config: GatewayConfig,
        pricing: Optional[PricingTable] = None,
        **kwargs,
    ) -> "OpenAIAdapter":
        settings = config.openai
        return cls(
            model=settings.model,
            embedding_model=settings.embedding_model,
            api_key=settings.api_key,
            base_url=settings.base_url,
            organization=settings.organization,
            max_output_tokens=config.max_output_tokens,
            temperature=config.temperature,
            timeout=config.timeout,
            pricing=pricing,
            **kwargs,
        )

    @property
    def provider_id(self) -> str:
        return "openai"

    async def _headers(self) -> Dict[str, str]:
        if not self._api_key:
            raise ConfigurationError("OPENAI_API_KEY is not set", provider=self.provider_id)

        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self._api_key}",
        }
        if self._organization:
            headers["OpenAI-Organization"] = self._organization
        return headers

    def build_chat_payload(self, request: ChatRequest) -> Dict[str, Any]:
        """Convert a unified request to the OpenAI chat completions body."""
        messages = []
        for m in request.messages:
            msg = {"role": m.role, "content": m.content}
            if m.tool_call_id is not None:
                msg["tool_call_id"] = m.tool_call_id
            messages.append(msg)

        payload: Dict[str, Any] = {
            "model": self._model,
            "messages": messages,
            "temperature": self._effective_temperature(request),
            "max_tokens": self._effective_max_tokens(request),
        }

        if request.tools:
            payload["tools"] = [
                {
                    "type": "function",
                    "function": {
                        "name": tool.name,
                        "description": tool.description,
                        "parameters": tool.parameters,
                    },
                }
                for tool in request.tools
            ]

        if request.response_shape == ResponseShape.JSON:
            payload["response_format"] = {"type": "json_object"}

        return payload

    def parse_chat_response(self, data: Any) -> ChatResult:
        """Convert an OpenAI chat completions body to a unified result."""
        with self._response_mapping():
            return self._parse_chat(data)

    def _parse_chat(self, data: Any) -> ChatResult:
        if not isinstance(data, dict):
            raise MalformedResponse(self.provider_id, "response body is not an object")

        choices = data.get("choices") or []
        if not choices or not isinstance(choices[0], dict):
            raise MalformedResponse(self.provider_id, "no choices in response")

        choice = choices[0]
        message = choice.get("message")
        if not isinstance(message, dict):
            raise MalformedResponse(self.provider_id, "choice has no message")

        tool_invocations = self._parse_tool_calls(message.get("tool_calls") or [])
        if "content" not in message and not tool_invocations:
            raise MalformedResponse(self.provider_id, "message has no content field")

        if tool_invocations:
            finish_reason = FinishReason.TOOL_CALLS
        elif choice.get("finish_reason") == "length":
            finish_reason = FinishReason.LENGTH
        else:
            finish_reason = FinishReason.STOP

        usage_data = data.get("usage") or {}

        return ChatResult(
            text_content=message.get("content") or "",
            tool_invocations=tool_invocations,
            finish_reason=finish_reason,
            usage=Usage.from_counts(
                usage_data.get("prompt_tokens"),
                usage_data.get("completion_tokens"),
                usage_data.get("total_tokens"),
            ),
            provider=self.provider_id,
            model=data.get("model") or self._model,
        )

    def _parse_tool_calls(self, tool_calls: List[Any]) -> List[ToolInvocation]:
        invocations = []
        for tc in tool_calls:
            function = tc.get("function") if isinstance(tc, dict) else None
            if not isinstance(function, dict) or not function.get("name"):
                raise MalformedResponse(self.provider_id, "tool call without a function name")

            arguments = function.get("arguments")
            if arguments is None:
                arguments = "{}"
            elif not isinstance(arguments, str):
                arguments = json.dumps(arguments)

            invocations.append(ToolInvocation(
                id=tc.get("id") or f"call_{len(invocations)}",
                tool_name=function["name"],
                arguments_json=arguments,
            ))
        return invocations

    async def chat_completion(
        self,
        request: ChatRequest,
        timeout: Optional[float] = None,
    ) -> ChatResult:
        """Create a chat completion via OpenAI API."""
        payload = self.build_chat_payload(request)
        try:
            data = await self._post("/chat/completions", payload, timeout)
            result = self.parse_chat_response(data)
        except ProviderCallFailed as e:
            self._log_failure("chat_completion", e)
            raise

        logger.debug(
            f"OpenAI completion finished ({result.finish_reason.value}, "
            f"{result.usage.total_tokens} tokens)",
            extra={"provider": self.provider_id, "model": self._model},
        )
        return result

    async def generate_embedding(
        self,
        text: str,
        timeout: Optional[float] = None,
    ) -> EmbeddingResult:
        """Generate an embedding via OpenAI API."""
        payload = {
            "model": self._embedding_model,
            "input": text,
            "encoding_format": "float",
        }
        try:
            data = await self._post("/embeddings", payload, timeout)
            return self.parse_embedding_response(data)
        except ProviderCallFailed as e:
            self._log_failure("generate_embedding", e)
            raise

    def parse_embedding_response(self, data: Any) -> EmbeddingResult:
        """Convert an OpenAI embeddings body to a unified result."""
        with self._response_mapping():
            return self._parse_embedding(data)

    def _parse_embedding(self, data: Any) -> EmbeddingResult:
        items = data.get("data") if isinstance(data, dict) else None
        if not items or not isinstance(items[0], dict) or "embedding" not in items[0]:
            raise MalformedResponse(self.provider_id, "no embedding in response")

        vector = items[0]["embedding"]
        if not isinstance(vector, list):
            raise MalformedResponse(self.provider_id, "embedding is not a list of floats")
        self._check_dimensions(vector)

        usage_data = data.get("usage") or {}
        return EmbeddingResult(
            vector=vector,
            usage=EmbeddingUsage(total_tokens=usage_data.get("total_tokens") or 0),
            provider=self.provider_id,
            model=data.get("model") or self._embedding_model,
        )
