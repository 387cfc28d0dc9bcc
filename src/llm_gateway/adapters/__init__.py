"""
Provider adapters for the supported model vendors.
"""

from .openai_adapter import OpenAIAdapter
from .vertex_ai_adapter import VertexAIAdapter

__all__ = [
    "OpenAIAdapter",
    "VertexAIAdapter",
]
