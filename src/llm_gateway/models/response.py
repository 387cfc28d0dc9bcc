"""
Unified response models.
"""

from typing import Optional, List, Any
from pydantic import BaseModel, Field
from enum import Enum


class FinishReason(str, Enum):
    """Reasons for completion finishing."""
    STOP = "stop"
    LENGTH = "length"
    TOOL_CALLS = "tool_calls"


def _count(value: Any) -> int:
    return int(value) if value is not None else 0


class Usage(BaseModel):
    """Token usage information. Counts are never None."""
    prompt_tokens: int = Field(default=0, ge=0)
    completion_tokens: int = Field(default=0, ge=0)
    total_tokens: int = Field(default=0, ge=0)

    @classmethod
    def from_counts(
        cls,
        prompt_tokens: Any = None,
        completion_tokens: Any = None,
        total_tokens: Any = None,
    ) -> "Usage":
        """Build usage from vendor-reported counts, missing ones default to 0."""
        return cls(
            prompt_tokens=_count(prompt_tokens),
            completion_tokens=_count(completion_tokens),
            total_tokens=_count(total_tokens),
        )


class EmbeddingUsage(BaseModel):
    """Token usage for an embedding call."""
    total_tokens: int = Field(default=0, ge=0)


class ToolInvocation(BaseModel):
    """A tool call requested by the model."""
    id: str
    tool_name: str
    arguments_json: str = "{}"


class ChatResult(BaseModel):
    """
    Unified chat completion result.

    ``finish_reason`` is ``tool_calls`` whenever ``tool_invocations`` is
    non-empty, regardless of what the provider reported.
    """
    text_content: str = ""
    tool_invocations: List[ToolInvocation] = Field(default_factory=list)
    finish_reason: FinishReason = FinishReason.STOP
    usage: Usage = Field(default_factory=Usage)

    # Provider metadata
    provider: Optional[str] = None
    model: Optional[str] = None


class EmbeddingResult(BaseModel):
    """Unified embedding result."""
    vector: List[float]
    usage: EmbeddingUsage = Field(default_factory=EmbeddingUsage)

    provider: Optional[str] = None
    model: Optional[str] = None


class CostEstimate(BaseModel):
    """Cost of one call in USD, derived from usage and a pricing entry."""
    model_id: str
    input_cost: float = 0.0
    output_cost: float = 0.0
    total_cost: float = 0.0
    currency: str = "USD"
