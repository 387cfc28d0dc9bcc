"""
Unified request models.

These shapes are the stable boundary application code builds against,
whichever provider is active.
"""

from enum import Enum
from typing import Optional, List, Dict, Any, Literal
from pydantic import BaseModel, ConfigDict, Field, field_validator


class ResponseShape(str, Enum):
    """Expected shape of the model's text output."""
    JSON = "json"
    TEXT = "text"


class ToolSpec(BaseModel):
    """A callable the model may invoke."""
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    description: str = ""
    parameters: Dict[str, Any] = Field(
        default_factory=lambda: {"type": "object", "properties": {}},
        description="JSON schema of the tool arguments",
    )


class Message(BaseModel):
    """
    Unified message format.

    Supports system, user, assistant and tool (result) messages. A tool
    message refers back to the invocation it answers via ``tool_call_id``.
    """
    role: Literal["system", "user", "assistant", "tool"]
    content: str
    tool_call_id: Optional[str] = None


class ChatRequest(BaseModel):
    """
    Unified chat completion request.

    ``temperature`` and ``max_output_tokens`` fall back to the gateway's
    configured defaults when left unset.
    """
    messages: List[Message] = Field(..., min_length=1, description="Conversation messages")
    tools: Optional[List[ToolSpec]] = None
    temperature: Optional[float] = Field(default=None, ge=0, le=2)
    max_output_tokens: Optional[int] = Field(default=None, ge=1)
    response_shape: ResponseShape = ResponseShape.TEXT

    @field_validator("tools")
    @classmethod
    def _unique_tool_names(cls, tools: Optional[List[ToolSpec]]) -> Optional[List[ToolSpec]]:
        if tools:
            names = [t.name for t in tools]
            duplicates = sorted({n for n in names if names.count(n) > 1})
            if duplicates:
                raise ValueError(f"duplicate tool names: {', '.join(duplicates)}")
        return tools
