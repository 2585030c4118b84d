"""
OpenAI Protocol Client

Implements request normalization and forwarding for OpenAI-compatible upstreams:
- {base}/chat/completions (chat and completion calls)
- {base}/embeddings
"""

import logging
from typing import Any

from ollama_relay.domain.request import ChatRequest, CompletionRequest, EmbeddingRequest
from ollama_relay.providers.base import ProviderClient, UpstreamRequest

logger = logging.getLogger(__name__)


class OpenAIClient(ProviderClient):
    """
    OpenAI Protocol Client

    Completion requests are sent as single-message chat completions, which
    every OpenAI-compatible upstream supports.
    """

    supports_streaming = True

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.config.api_key:
            headers["Authorization"] = f"Bearer {self.config.api_key}"
        return headers

    def _url(self, path: str) -> str:
        cleaned_base = self.config.base_url.rstrip("/")
        return f"{cleaned_base}{path}"

    def build_chat_request(self, model: str, request: ChatRequest, stream: bool) -> UpstreamRequest:
        """
        Chat payload: {model, messages, stream, max_tokens, **extra_params}.

        Extra parameters override the max_tokens default.
        """
        payload: dict[str, Any] = {
            "model": model,
            "messages": request.messages,
            "stream": stream,
            "max_tokens": self.config.chat_max_tokens,
        }
        payload.update(request.extra_params)
        payload["model"] = model
        payload["stream"] = stream
        return UpstreamRequest(
            method="POST",
            url=self._url("/chat/completions"),
            headers=self._headers(),
            json=payload,
        )

    def build_completion_request(
        self, model: str, request: CompletionRequest, stream: bool
    ) -> UpstreamRequest:
        messages: list[dict[str, Any]] = []
        if request.system:
            messages.append({"role": "system", "content": request.system})
        messages.append({"role": "user", "content": request.prompt})

        payload: dict[str, Any] = {
            "model": model,
            "messages": messages,
            "stream": stream,
            "max_tokens": self.config.completion_max_tokens,
        }
        payload.update(request.extra_params)
        payload["model"] = model
        payload["stream"] = stream
        return UpstreamRequest(
            method="POST",
            url=self._url("/chat/completions"),
            headers=self._headers(),
            json=payload,
        )

    def build_embedding_request(self, model: str, request: EmbeddingRequest) -> UpstreamRequest:
        """Batched (list) input is forwarded unchanged."""
        payload: dict[str, Any] = {"model": model, "input": request.input}
        payload.update(request.extra_params)
        payload["model"] = model
        return UpstreamRequest(
            method="POST",
            url=self._url("/embeddings"),
            headers=self._headers(),
            json=payload,
        )

    def to_chat_completion(self, body: Any, model: str) -> dict[str, Any]:
        if not isinstance(body, dict):
            logger.warning("Unexpected chat completion body type: %s", type(body).__name__)
            return {"object": "chat.completion", "model": model, "choices": []}
        return body

    def to_embedding_list(self, body: Any, model: str) -> dict[str, Any]:
        if not isinstance(body, dict):
            logger.warning("Unexpected embeddings body type: %s", type(body).__name__)
            return {"object": "list", "data": [], "model": model}
        return body
