"""
API Dependency Injection Module

Provides dependencies required by FastAPI routes.
"""

import json
import logging
from typing import Annotated, Any, Optional

import httpx
from fastapi import Depends, Request
from fastapi.responses import JSONResponse, Response, StreamingResponse

from ollama_relay.config import RelayConfig, get_relay_config
from ollama_relay.services import ModelService, RelayService, StreamResult, SurfaceFormatter

logger = logging.getLogger(__name__)


# ============ Global singletons ============

# Shared formatter; its metadata generator holds no per-request state
_global_formatter = SurfaceFormatter()


# ============ Config dependencies ============

def get_config() -> RelayConfig:
    """Get runtime configuration"""
    return get_relay_config()


def get_upstream_transport() -> Optional[httpx.AsyncBaseTransport]:
    """httpx transport for upstream calls (None = real network)"""
    return None


def get_formatter() -> SurfaceFormatter:
    """Get the surface formatter"""
    return _global_formatter


ConfigDep = Annotated[RelayConfig, Depends(get_config)]
TransportDep = Annotated[Optional[httpx.AsyncBaseTransport], Depends(get_upstream_transport)]
FormatterDep = Annotated[SurfaceFormatter, Depends(get_formatter)]


# ============ Service dependencies ============

def get_relay_service(
    config: ConfigDep,
    transport: TransportDep,
    formatter: FormatterDep,
) -> RelayService:
    """Get relay service"""
    return RelayService(config, formatter=formatter, transport=transport)


def get_model_service(config: ConfigDep, formatter: FormatterDep) -> ModelService:
    """Get model catalog service"""
    return ModelService(config, formatter=formatter)


# Dependency type aliases
RelayServiceDep = Annotated[RelayService, Depends(get_relay_service)]
ModelServiceDep = Annotated[ModelService, Depends(get_model_service)]


# ============ Request/response helpers ============

async def read_json_body(request: Request) -> dict[str, Any]:
    """
    Decode the request body as JSON regardless of Content-Type

    Many local-runner clients (and curl) omit the header. A body that is not
    a JSON object yields an empty dict, which then fails validation.
    """
    raw = await request.body()
    if not raw.strip():
        return {}
    try:
        body = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError):
        logger.debug("Request body is not JSON: path=%s", request.url.path)
        return {}
    return body if isinstance(body, dict) else {}


def to_http_response(result: Any) -> Response:
    """Render a service result as a JSON or streaming response"""
    if isinstance(result, StreamResult):
        headers = {"Cache-Control": "no-cache"}
        if result.media_type == "text/event-stream":
            headers["Connection"] = "keep-alive"
        return StreamingResponse(result.body, media_type=result.media_type, headers=headers)
    return JSONResponse(content=result)
