"""
Upstream provider client module initialization
"""

from ollama_relay.providers.base import (
    ProviderClient,
    ProviderResponse,
    UpstreamRequest,
    UpstreamStream,
)
from ollama_relay.providers.openai_client import OpenAIClient
from ollama_relay.providers.gemini_client import GeminiClient
from ollama_relay.providers.factory import get_provider_client

__all__ = [
    "ProviderClient",
    "ProviderResponse",
    "UpstreamRequest",
    "UpstreamStream",
    "OpenAIClient",
    "GeminiClient",
    "get_provider_client",
]
