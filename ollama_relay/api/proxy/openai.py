"""
OpenAI Proxy API

Provides OpenAI-compatible API endpoints.
"""

from fastapi import APIRouter, Request

from ollama_relay.api.deps import (
    ModelServiceDep,
    RelayServiceDep,
    read_json_body,
    to_http_response,
)
from ollama_relay.domain import ChatRequest, CompletionRequest, EmbeddingRequest, SurfaceProtocol

router = APIRouter(tags=["Proxy - OpenAI"])


@router.get("/v1/models")
async def list_models(service: ModelServiceDep):
    """
    OpenAI Models API (List)

    Returns the configured catalog.
    """
    return service.list_openai_models()


@router.get("/v1/models/{model:path}")
async def get_model(model: str, service: ModelServiceDep):
    """
    OpenAI Models API (Retrieve)

    Model names may contain "/" and ":".
    """
    return service.get_openai_model(model)


@router.post("/v1/chat/completions")
async def chat_completions(request: Request, service: RelayServiceDep):
    """
    OpenAI Chat Completions API Proxy
    """
    body = await read_json_body(request)
    chat_request = ChatRequest.from_body(body, default_stream=False)
    result = await service.chat(chat_request, SurfaceProtocol.OPENAI)
    return to_http_response(result)


@router.post("/v1/completions")
async def completions(request: Request, service: RelayServiceDep):
    """
    OpenAI Completions API Proxy

    Served through the upstream chat endpoint.
    """
    body = await read_json_body(request)
    completion_request = CompletionRequest.from_body(body, default_stream=False)
    result = await service.complete(completion_request, SurfaceProtocol.OPENAI)
    return to_http_response(result)


async def _embeddings(request: Request, service: RelayServiceDep):
    body = await read_json_body(request)
    embedding_request = EmbeddingRequest.from_openai_body(body)
    return await service.embed(embedding_request, SurfaceProtocol.OPENAI)


@router.post("/v1/embeddings")
async def embeddings(request: Request, service: RelayServiceDep):
    """
    OpenAI Embeddings API Proxy
    """
    return await _embeddings(request, service)


@router.post("/v1/embed")
async def embed(request: Request, service: RelayServiceDep):
    return await _embeddings(request, service)
