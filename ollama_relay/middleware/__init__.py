"""
Middleware Module Initialization
"""

from ollama_relay.middleware.request_logging import RequestLoggingMiddleware

__all__ = [
    "RequestLoggingMiddleware",
]
