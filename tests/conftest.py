"""
Shared fixtures: fake provider HTTP endpoints built on httpx.MockTransport.
"""

import json
from typing import Any, Callable, Dict, List

import httpx
import pytest

from llm_gateway.core.config import GatewayConfig, GCPSettings, OpenAISettings


class RecordingTransport(httpx.MockTransport):
    """MockTransport that answers with a fixed body and keeps every request."""

    def __init__(self, body: Any = None, status_code: int = 200, headers: Dict[str, str] = None,
                 handler: Callable[[httpx.Request], httpx.Response] = None):
        self.requests: List[httpx.Request] = []
        self._body = body
        self._status_code = status_code
        self._headers = headers or {}
        self._custom_handler = handler
        super().__init__(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self._custom_handler is not None:
            return self._custom_handler(request)
        if isinstance(self._body, (dict, list)):
            return httpx.Response(self._status_code, json=self._body, headers=self._headers)
        return httpx.Response(self._status_code, text=self._body or "", headers=self._headers)

    @property
    def last_json(self) -> Dict[str, Any]:
        return json.loads(self.requests[-1].content)


@pytest.fixture
def make_transport():
    """Factory for recording mock transports."""
    return RecordingTransport


@pytest.fixture
def config():
    """Gateway configuration with fake credentials for both providers."""
    return GatewayConfig(
        max_output_tokens=1024,
        temperature=0.2,
        timeout=5.0,
        openai=OpenAISettings(api_key="sk-test"),
        gcp=GCPSettings(project_id="test-project", access_token="ya29.test-token"),
    )


def _openai_chat_body(content="Hello!", finish_reason="stop", tool_calls=None, usage=None):
    message = {"role": "assistant", "content": content}
    if tool_calls is not None:
        message["tool_calls"] = tool_calls
    body = {
        "id": "chatcmpl-123",
        "object": "chat.completion",
        "model": "gpt-4o",
        "choices": [{"index": 0, "message": message, "finish_reason": finish_reason}],
    }
    if usage is not False:
        body["usage"] = usage or {"prompt_tokens": 10, "completion_tokens": 5, "total_tokens": 15}
    return body


def _gemini_chat_body(parts=None, finish_reason="STOP", usage=None):
    body = {
        "candidates": [{
            "content": {"role": "model", "parts": parts if parts is not None else [{"text": "Hello!"}]},
            "finishReason": finish_reason,
        }],
        "modelVersion": "gemini-1.5-pro-002",
    }
    if usage is not False:
        body["usageMetadata"] = usage or {
            "promptTokenCount": 12,
            "candidatesTokenCount": 3,
            "totalTokenCount": 15,
        }
    return body


@pytest.fixture
def openai_chat_body():
    """Builder for OpenAI chat completion bodies."""
    return _openai_chat_body


@pytest.fixture
def gemini_chat_body():
    """Builder for Gemini generateContent bodies."""
    return _gemini_chat_body
