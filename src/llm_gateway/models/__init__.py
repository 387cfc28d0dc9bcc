"""
Gateway data models.
"""

from .request import ChatRequest, Message, ToolSpec, ResponseShape
from .response import (
    ChatResult,
    CostEstimate,
    EmbeddingResult,
    EmbeddingUsage,
    FinishReason,
    ToolInvocation,
    Usage,
)

__all__ = [
    "ChatRequest",
    "Message",
    "ToolSpec",
    "ResponseShape",
    "ChatResult",
    "CostEstimate",
    "EmbeddingResult",
    "EmbeddingUsage",
    "FinishReason",
    "ToolInvocation",
    "Usage",
]
