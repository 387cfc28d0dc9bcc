"""
Google Vertex AI adapter.

Provides access to Gemini models through the Vertex AI REST API.

Gemini has no first-class system role. System messages are passed through
the ``systemInstruction`` side channel (joined in order with a blank line),
never folded into a user turn, so a request made only of system messages is
rejected before sending. Tool results are sent back as user turns.
Tools are grouped into a single ``functionDeclarations`` block.
"""

import asyncio
import json
import logging
from typing import Any, Dict, List, Optional

import httpx

from ..core.config import GatewayConfig
from ..core.interface import AbstractProvider
from ..core.errors import (
    ConfigurationError,
    InvalidRequestError,
    MalformedResponse,
    ProviderAuthenticationError,
    ProviderCallFailed,
)
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

CLOUD_PLATFORM_SCOPE = "https://www.googleapis.com/auth/cloud-platform"


class VertexAIAdapter(AbstractProvider):
    """
    Google Vertex AI adapter.

    Authentication uses a pre-obtained access token when one is configured,
    otherwise Google application default credentials (google-auth).
    """

    EMBEDDING_DIMENSIONS = {
        "text-embedding-004": 768,
        "text-embedding-005": 768,
        "text-multilingual-embedding-002": 768,
        "textembedding-gecko@003": 768,
    }

    ROLE_MAP = {
        "user": "user",
        "tool": "user",
        "assistant": "model",
    }

    def __init__(
        self,
        model: str = "gemini-1.5-pro",
        embedding_model: str = "text-embedding-004",
        project_id: Optional[str] = None,
        location: str = "us-central1",
        access_token: Optional[str] = None,
        base_url: Optional[str] = None,
        max_output_tokens: int = 4096,
        temperature: float = 0.7,
        timeout: float = 60.0,
        pricing: Optional[PricingTable] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize Vertex AI adapter.

        Args:
            model: Gemini model identifier
            embedding_model: Embedding model identifier
            project_id: Google Cloud project ID, checked on first call
            location: Vertex AI location (default: us-central1)
            access_token: Pre-obtained access token (optional)
            base_url: Override of the regional API URL
            max_output_tokens: Default output ceiling
            temperature: Default sampling temperature
            timeout: Default per-call timeout in seconds
            pricing: Pricing table, defaults to the bundled one
            transport: Optional httpx transport
        """
        super().__init__(
            model=model,
            embedding_model=embedding_model,
            base_url=base_url or f"https://{location}-aiplatform.googleapis.com/v1",
            max_output_tokens=max_output_tokens,
            temperature=temperature,
            timeout=timeout,
            pricing=pricing,
            transport=transport,
        )
        self._project_id = project_id
        self._location = location
        self._access_token = access_token
        self._credentials = None

    @classmethod
    def from_config(
        cls,
        config: GatewayConfig,
        pricing: Optional[PricingTable] = None,
        **kwargs,
    ) -> "VertexAIAdapter":
        settings = config.gcp
        return cls(
            model=settings.model,
            embedding_model=settings.embedding_model,
            project_id=settings.project_id,
            location=settings.location,
            access_token=settings.access_token,
            base_url=settings.base_url,
            max_output_tokens=config.max_output_tokens,
            temperature=config.temperature,
            timeout=config.timeout,
            pricing=pricing,
            **kwargs,
        )

    @property
    def provider_id(self) -> str:
        return "gcp"

    async def _get_access_token(self) -> str:
        """Get access token from configuration or application default credentials."""
        if self._access_token:
            return self._access_token

        if self._credentials is None or not self._credentials.valid:
            self._credentials = await asyncio.to_thread(self._load_default_credentials)
        return self._credentials.token

    def _load_default_credentials(self):
        import google.auth
        from google.auth.exceptions import (
            DefaultCredentialsError,
            GoogleAuthError,
            RefreshError,
            TransportError,
        )
        from google.auth.transport.requests import Request

        try:
            credentials, project = google.auth.default(scopes=[CLOUD_PLATFORM_SCOPE])
            credentials.refresh(Request())
        except DefaultCredentialsError as e:
            raise ConfigurationError(
                f"No usable Google Cloud credentials: {e}",
                provider=self.provider_id,
            ) from e
        except RefreshError as e:
            raise ProviderAuthenticationError(
                self.provider_id,
                f"Access token refresh rejected: {e}",
            ) from e
        except TransportError as e:
            raise ProviderCallFailed(self.provider_id, f"Access token request failed: {e}") from e
        except GoogleAuthError as e:
            raise ProviderAuthenticationError(self.provider_id, str(e)) from e

        if not self._project_id:
            self._project_id = project
        return credentials

    async def _headers(self) -> Dict[str, str]:
        token = await self._get_access_token()
        if not self._project_id:
            raise ConfigurationError("GCP_PROJECT_ID is not set", provider=self.provider_id)

        return {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }

    def _model_path(self, model_id: str, method: str) -> str:
        return (
            f"/projects/{self._project_id}/locations/{self._location}"
            f"/publishers/google/models/{model_id}:{method}"
        )

    def build_chat_payload(self, request: ChatRequest) -> Dict[str, Any]:
        """Convert a unified request to a Gemini generateContent body."""
        contents = []
        system_parts = []

        for msg in request.messages:
            if msg.role == "system":
                system_parts.append(msg.content)
            else:
                contents.append({
                    "role": self.ROLE_MAP[msg.role],
                    "parts": [{"text": msg.content}],
                })

        if not contents:
            raise InvalidRequestError(
                "Gemini needs at least one non-system message",
                provider=self.provider_id,
            )

        payload: Dict[str, Any] = {
            "contents": contents,
            "generationConfig": {
                "temperature": self._effective_temperature(request),
                "maxOutputTokens": self._effective_max_tokens(request),
            },
        }

        if system_parts:
            payload["systemInstruction"] = {"parts": [{"text": "\n\n".join(system_parts)}]}

        if request.response_shape == ResponseShape.JSON:
            payload["generationConfig"]["responseMimeType"] = "application/json"

        if request.tools:
            payload["tools"] = [{
                "functionDeclarations": [
                    {
                        "name": tool.name,
                        "description": tool.description,
                        "parameters": tool.parameters,
                    }
                    for tool in request.tools
                ]
            }]

        return payload

    def parse_chat_response(self, data: Any) -> ChatResult:
        """Convert a Gemini generateContent body to a unified result."""
        with self._response_mapping():
            return self._parse_chat(data)

    def _parse_chat(self, data: Any) -> ChatResult:
        if not isinstance(data, dict):
            raise MalformedResponse(self.provider_id, "response body is not an object")

        candidates = data.get("candidates") or []
        if not candidates:
            block_reason = (data.get("promptFeedback") or {}).get("blockReason")
            note = f"prompt blocked ({block_reason})" if block_reason else "no candidates in response"
            raise MalformedResponse(self.provider_id, note)

        candidate = candidates[0]
        vendor_reason = candidate.get("finishReason")
        content = candidate.get("content")

        if content is None and vendor_reason != "MAX_TOKENS":
            raise MalformedResponse(
                self.provider_id,
                f"candidate has no content (finishReason={vendor_reason})",
            )

        text_content = ""
        tool_invocations: List[ToolInvocation] = []

        for part in (content or {}).get("parts") or []:
            if "text" in part:
                text_content += part["text"]
            elif "functionCall" in part:
                call = part["functionCall"]
                if not call.get("name"):
                    raise MalformedResponse(self.provider_id, "function call without a name")
                tool_invocations.append(ToolInvocation(
                    id=f"call_{len(tool_invocations)}",
                    tool_name=call["name"],
                    arguments_json=json.dumps(call.get("args") or {}),
                ))

        if tool_invocations:
            finish_reason = FinishReason.TOOL_CALLS
        elif vendor_reason == "MAX_TOKENS":
            finish_reason = FinishReason.LENGTH
        else:
            finish_reason = FinishReason.STOP

        usage_metadata = data.get("usageMetadata") or {}

        return ChatResult(
            text_content=text_content,
            tool_invocations=tool_invocations,
            finish_reason=finish_reason,
            usage=Usage.from_counts(
                usage_metadata.get("promptTokenCount"),
                usage_metadata.get("candidatesTokenCount"),
                usage_metadata.get("totalTokenCount"),
            ),
            provider=self.provider_id,
            model=data.get("modelVersion") or self._model,
        )

    async def chat_completion(
        self,
        request: ChatRequest,
        timeout: Optional[float] = None,
    ) -> ChatResult:
        """Execute chat completion request."""
        payload = self.build_chat_payload(request)
        try:
            data = await self._post(self._model_path(self._model, "generateContent"), payload, timeout)
            result = self.parse_chat_response(data)
        except ProviderCallFailed as e:
            self._log_failure("chat_completion", e)
            raise

        logger.debug(
            f"Vertex AI completion finished ({result.finish_reason.value}, "
            f"{result.usage.total_tokens} tokens)",
            extra={"provider": self.provider_id, "model": self._model},
        )
        return result

    async def generate_embedding(
        self,
        text: str,
        timeout: Optional[float] = None,
    ) -> EmbeddingResult:
        """Generate an embedding via the Vertex AI predict endpoint."""
        payload = {"instances": [{"content": text}]}
        try:
            data = await self._post(self._model_path(self._embedding_model, "predict"), payload, timeout)
            return self.parse_embedding_response(data)
        except ProviderCallFailed as e:
            self._log_failure("generate_embedding", e)
            raise

    def parse_embedding_response(self, data: Any) -> EmbeddingResult:
        """Convert a Vertex AI predict body to a unified result."""
        with self._response_mapping():
            return self._parse_embedding(data)

    def _parse_embedding(self, data: Any) -> EmbeddingResult:
        predictions = data.get("predictions") if isinstance(data, dict) else None
        if not predictions:
            raise MalformedResponse(self.provider_id, "no predictions in response")

        if not isinstance(predictions[0], dict):
            raise MalformedResponse(self.provider_id, "prediction is not an object")

        embeddings = predictions[0].get("embeddings") or {}
        vector = embeddings.get("values")
        if not isinstance(vector, list):
            raise MalformedResponse(self.provider_id, "prediction has no embedding values")
        self._check_dimensions(vector)

        statistics = embeddings.get("statistics") or {}
        return EmbeddingResult(
            vector=vector,
            usage=EmbeddingUsage(total_tokens=int(statistics.get("token_count") or 0)),
            provider=self.provider_id,
            model=self._embedding_model,
        )
