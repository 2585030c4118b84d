"""
Domain model module initialization
"""

from ollama_relay.domain.enums import CallKind, SurfaceProtocol, UpstreamStyle
from ollama_relay.domain.request import (
    ChatRequest,
    CompletionRequest,
    EmbeddingRequest,
    ModelDescriptor,
    StreamFrame,
)

__all__ = [
    "CallKind",
    "SurfaceProtocol",
    "UpstreamStyle",
    "ChatRequest",
    "CompletionRequest",
    "EmbeddingRequest",
    "ModelDescriptor",
    "StreamFrame",
]
