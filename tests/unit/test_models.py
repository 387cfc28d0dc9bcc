"""
Unit tests for the unified request/response models.
"""
import pytest
from pydantic import ValidationError

from llm_gateway.models.request import ChatRequest, Message, ToolSpec, ResponseShape
from llm_gateway.models.response import ChatResult, FinishReason, Usage


class TestChatRequest:
    """Test ChatRequest model."""

    def test_create_request(self):
        """Test creating a chat request with defaults."""
        request = ChatRequest(messages=[Message(role="user", content="Hello")])
        assert len(request.messages) == 1
        assert request.tools is None
        assert request.temperature is None
        assert request.max_output_tokens is None
        assert request.response_shape == ResponseShape.TEXT

    def test_empty_messages_rejected(self):
        """Test a request needs at least one message."""
        with pytest.raises(ValidationError):
            ChatRequest(messages=[])

    def test_non_positive_max_output_tokens_rejected(self):
        """Test max_output_tokens must be positive."""
        with pytest.raises(ValidationError):
            ChatRequest(messages=[Message(role="user", content="Hi")], max_output_tokens=0)

    def test_unknown_role_rejected(self):
        """Test roles are limited to the unified vocabulary."""
        with pytest.raises(ValidationError):
            Message(role="model", content="Hi")

    def test_duplicate_tool_names_rejected(self):
        """Test tool names form a set."""
        tool = ToolSpec(name="lookup", description="Look up a node")
        with pytest.raises(ValidationError):
            ChatRequest(messages=[Message(role="user", content="Hi")], tools=[tool, tool])

    def test_message_order_preserved(self):
        """Test messages keep their order."""
        messages = [
            Message(role="system", content="s"),
            Message(role="user", content="u1"),
            Message(role="assistant", content="a1"),
            Message(role="tool", content="t1", tool_call_id="call_0"),
        ]
        request = ChatRequest(messages=messages)
        assert [m.content for m in request.messages] == ["s", "u1", "a1", "t1"]

    def test_response_shape_from_string(self):
        """Test the response shape accepts its string value."""
        request = ChatRequest(messages=[Message(role="user", content="Hi")], response_shape="json")
        assert request.response_shape == ResponseShape.JSON


class TestToolSpec:
    """Test ToolSpec model."""

    def test_tool_spec_is_immutable(self):
        """Test tool specs cannot be changed after creation."""
        tool = ToolSpec(name="lookup", description="Look up a node", parameters={"type": "object"})
        with pytest.raises(ValidationError):
            tool.name = "other"

    def test_default_parameters(self):
        """Test the default parameter schema is an empty object schema."""
        tool = ToolSpec(name="ping")
        assert tool.parameters == {"type": "object", "properties": {}}


class TestUsage:
    """Test Usage model."""

    def test_missing_counts_default_to_zero(self):
        """Test None counts become 0."""
        usage = Usage.from_counts(None, None, None)
        assert usage.prompt_tokens == 0
        assert usage.completion_tokens == 0
        assert usage.total_tokens == 0

    def test_reported_counts_kept(self):
        """Test reported counts pass through unchanged."""
        usage = Usage.from_counts(10, 5, 15)
        assert usage.total_tokens == usage.prompt_tokens + usage.completion_tokens

    def test_missing_total_is_not_derived(self):
        """Test a missing total defaults to 0 like any other field."""
        usage = Usage.from_counts(10, 5, None)
        assert usage.total_tokens == 0


class TestChatResult:
    """Test ChatResult model."""

    def test_defaults(self):
        """Test an empty result is a stop with zero usage."""
        result = ChatResult()
        assert result.text_content == ""
        assert result.tool_invocations == []
        assert result.finish_reason == FinishReason.STOP
        assert result.usage.total_tokens == 0

    def test_finish_reason_values(self):
        """Test finish reasons serialize to the unified vocabulary."""
        assert {r.value for r in FinishReason} == {"stop", "tool_calls", "length"}
