"""
Local-runner (Ollama) Proxy API

Provides the /api/* endpoints local-runner clients talk to.
"""

from fastapi import APIRouter, Request

from ollama_relay import __version__
from ollama_relay.api.deps import (
    ModelServiceDep,
    RelayServiceDep,
    read_json_body,
    to_http_response,
)
from ollama_relay.common.ollama_params import ollama_params_to_openai
from ollama_relay.domain import ChatRequest, CompletionRequest, EmbeddingRequest, SurfaceProtocol

router = APIRouter(tags=["Proxy - Ollama"])


@router.get("/api/tags")
async def list_tags(service: ModelServiceDep):
    """
    Local models listing

    Returns the configured catalog with synthesized metadata.
    """
    return service.list_tags()


@router.get("/api/version")
async def version():
    return {"version": __version__}


@router.post("/api/chat")
async def chat(request: Request, service: RelayServiceDep):
    """
    Chat endpoint (streams by default)
    """
    body = await read_json_body(request)
    chat_request = ChatRequest.from_body(body, default_stream=True)
    chat_request.extra_params = ollama_params_to_openai(chat_request.extra_params)
    result = await service.chat(chat_request, SurfaceProtocol.OLLAMA)
    return to_http_response(result)


@router.post("/api/generate")
async def generate(request: Request, service: RelayServiceDep):
    """
    Single-prompt generation endpoint (streams by default)
    """
    body = await read_json_body(request)
    completion_request = CompletionRequest.from_body(body, default_stream=True)
    completion_request.extra_params = ollama_params_to_openai(completion_request.extra_params)
    result = await service.complete(completion_request, SurfaceProtocol.OLLAMA)
    return to_http_response(result)


async def _embed(request: Request, service: RelayServiceDep):
    body = await read_json_body(request)
    embedding_request = EmbeddingRequest.from_ollama_body(body)
    embedding_request.extra_params = ollama_params_to_openai(embedding_request.extra_params)
    return await service.embed(embedding_request, SurfaceProtocol.OLLAMA)


@router.post("/api/embeddings")
async def embeddings(request: Request, service: RelayServiceDep):
    """
    Embeddings endpoint (legacy name)
    """
    return await _embed(request, service)


@router.post("/api/embed")
async def embed(request: Request, service: RelayServiceDep):
    """
    Embeddings endpoint
    """
    return await _embed(request, service)
