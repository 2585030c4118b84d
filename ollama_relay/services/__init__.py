"""
Business service module initialization
"""

from ollama_relay.services.formatter import SurfaceFormatter
from ollama_relay.services.model_service import ModelService
from ollama_relay.services.relay_service import RelayService, StreamResult
from ollama_relay.services.retry_handler import RetryHandler

__all__ = [
    "SurfaceFormatter",
    "ModelService",
    "RelayService",
    "StreamResult",
    "RetryHandler",
]
