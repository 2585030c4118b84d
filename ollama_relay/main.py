"""
Ollama Relay Application Entry Point

FastAPI application main entry, including router registration and application configuration.
"""

import logging
import traceback
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ollama_relay import __version__
from ollama_relay.api.proxy import ollama_router, openai_router
from ollama_relay.common.errors import AppError
from ollama_relay.config import get_relay_config, get_settings
from ollama_relay.logging_config import setup_logging
from ollama_relay.middleware import RequestLoggingMiddleware

logger = logging.getLogger(__name__)

# Initialize logging configuration
setup_logging()

# Local-runner clients expect {"error": "<message>"}
LOCAL_RUNNER_PREFIX = "/api/"


def uses_flat_errors(path: str) -> bool:
    return path.startswith(LOCAL_RUNNER_PREFIX)


# Application Lifecycle Management
@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application Lifecycle Management

    Resolves the runtime configuration once on startup so a bad setting fails fast.
    """
    config = get_relay_config()
    logger.info(
        "Relay started: upstream=%s style=%s models=%s override=%s",
        config.base_url,
        config.upstream_style.value,
        len(config.models),
        config.model_override or "-",
    )
    yield
    logger.info("Relay stopped")


# Create FastAPI application
settings = get_settings()

app = FastAPI(
    title=settings.APP_NAME,
    description="Local-runner and OpenAI compatible relay for a single upstream provider",
    version=__version__,
    lifespan=lifespan,
)

# Configure CORS
# Parse ALLOWED_ORIGINS from comma-separated string to list
allowed_origins = [origin.strip() for origin in settings.ALLOWED_ORIGINS.split(",") if origin.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    # Credentials cannot be combined with a wildcard origin
    allow_credentials="*" not in allowed_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(RequestLoggingMiddleware)


# Global Exception Handler
@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    """
    Handle application custom exceptions

    In production mode, error details are hidden to prevent information leakage.
    """
    include_details = get_relay_config().debug
    if exc.status_code >= 500:
        logger.error("Request failed: path=%s error=%s", request.url.path, exc.message)
    if uses_flat_errors(request.url.path):
        content = exc.to_flat_dict(include_details=include_details)
    else:
        content = exc.to_dict(include_details=include_details)
    return JSONResponse(status_code=exc.status_code, content=content)


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """
    Handle uncaught exceptions

    In production mode, stack traces and error details are logged but not returned to clients.
    """
    debug = get_relay_config().debug
    # Log the full error for debugging
    logger.error(
        "Uncaught exception: %s\nPath: %s\nTraceback:\n%s",
        str(exc),
        request.url.path,
        traceback.format_exc(),
    )

    message = str(exc) if debug else "Internal server error"
    if uses_flat_errors(request.url.path):
        return JSONResponse(status_code=500, content={"error": message})

    error = {
        "message": message,
        "type": "internal_error",
        "code": "internal_error",
    }
    if debug:
        error["traceback"] = traceback.format_exc().split("\n")
    return JSONResponse(status_code=500, content={"error": error})


# Health Check Endpoint
@app.get("/health", tags=["Health"])
async def health_check():
    """
    Health Check

    Used for service liveness checks.
    """
    return {"status": "healthy"}


# Register Proxy Routers
app.include_router(ollama_router)
app.include_router(openai_router)


# Registered last so every known route matches first
@app.api_route(
    "/{path:path}",
    methods=["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD"],
    include_in_schema=False,
)
async def unsupported_endpoint(request: Request, path: str):
    logger.warning("Endpoint not supported: %s %s", request.method, request.url.path)
    return JSONResponse(status_code=404, content={"error": "Endpoint not supported"})


def run() -> None:
    """Console entry point (ollama-relay)."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "ollama_relay.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_config=None,
    )


if __name__ == "__main__":
    run()
