"""
Provider Client Factory Module

Creates the provider client matching the configured upstream style.
"""

from typing import Optional

import httpx

from ollama_relay.config import RelayConfig
from ollama_relay.domain.enums import UpstreamStyle
from ollama_relay.providers.base import ProviderClient
from ollama_relay.providers.gemini_client import GeminiClient
from ollama_relay.providers.openai_client import OpenAIClient

_CLIENT_CLASSES: dict[UpstreamStyle, type[ProviderClient]] = {
    UpstreamStyle.OPENAI: OpenAIClient,
    UpstreamStyle.GEMINI: GeminiClient,
}


def get_provider_client(
    config: RelayConfig,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> ProviderClient:
    """
    Get the provider client for the configured upstream style

    Args:
        config: Runtime configuration
        transport: Optional httpx transport passed through to the client

    Returns:
        ProviderClient: Client instance

    Raises:
        ValueError: Unsupported upstream style
    """
    try:
        client_cls = _CLIENT_CLASSES[config.upstream_style]
    except KeyError:
        raise ValueError(f"Unsupported upstream style: {config.upstream_style}") from None
    return client_cls(config, transport=transport)
