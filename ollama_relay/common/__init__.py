"""
Common utility module initialization
"""

from ollama_relay.common.errors import (
    AppError,
    MalformedChunkError,
    NotFoundError,
    UpstreamError,
    UpstreamRateLimitedError,
    ValidationError,
)

__all__ = [
    "AppError",
    "MalformedChunkError",
    "NotFoundError",
    "UpstreamError",
    "UpstreamRateLimitedError",
    "ValidationError",
]
