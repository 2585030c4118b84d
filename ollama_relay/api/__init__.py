"""
API Router Module Initialization
"""

from ollama_relay.api.deps import get_model_service, get_relay_service

__all__ = [
    "get_model_service",
    "get_relay_service",
]
