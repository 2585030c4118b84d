"""
Request Logging Middleware Module

Logs one line per request with method, path, status code and elapsed time.
Request bodies are logged only when LOG_REQUEST_BODIES is enabled, and never
for embedding endpoints (vectors and batch inputs are too large).
"""

import logging
import time
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from ollama_relay.config import get_settings

logger = logging.getLogger(__name__)

# Bodies longer than this are cut in the log line
MAX_LOGGED_BODY_CHARS = 2000


def is_embedding_path(path: str) -> bool:
    return "embed" in path


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Request Logging Middleware

    For streaming responses the elapsed time covers the time until the
    response headers were sent, not the full stream.
    """

    def __init__(self, app: ASGIApp, log_bodies: bool | None = None) -> None:
        super().__init__(app)
        if log_bodies is None:
            log_bodies = get_settings().LOG_REQUEST_BODIES
        self.log_bodies = log_bodies

    async def _log_body(self, request: Request) -> None:
        if is_embedding_path(request.url.path):
            logger.debug("Body: [embedding request - body not logged]")
            return
        raw = await request.body()
        text = raw.decode("utf-8", errors="replace")
        if len(text) > MAX_LOGGED_BODY_CHARS:
            text = text[:MAX_LOGGED_BODY_CHARS] + "...(truncated)"
        logger.info("Request body: %s %s body=%s", request.method, request.url.path, text)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        started = time.perf_counter()
        if self.log_bodies and request.method in ("POST", "PUT", "PATCH"):
            await self._log_body(request)

        response = await call_next(request)

        elapsed_ms = int((time.perf_counter() - started) * 1000)
        logger.info(
            "%s %s -> %s (%sms)",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )
        return response
