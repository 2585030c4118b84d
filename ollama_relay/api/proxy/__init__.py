"""
Proxy API Module Initialization
"""

from ollama_relay.api.proxy.ollama import router as ollama_router
from ollama_relay.api.proxy.openai import router as openai_router

__all__ = [
    "ollama_router",
    "openai_router",
]
