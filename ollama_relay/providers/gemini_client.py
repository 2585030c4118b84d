"""
Google Gemini Native API Client

Implements request normalization for the Gemini content-generation protocol
(models/{model}:generateContent and models/{model}:embedContent) and maps
its replies back to OpenAI shapes.
"""

import json
import logging
import time
from typing import Any

from ollama_relay.common.errors import ValidationError
from ollama_relay.domain.request import ChatRequest, CompletionRequest, EmbeddingRequest
from ollama_relay.providers.base import ProviderClient, UpstreamRequest

logger = logging.getLogger(__name__)

DEFAULT_CHAT_MAX_OUTPUT_TOKENS = 2048
DEFAULT_COMPLETION_MAX_OUTPUT_TOKENS = 1024

# OpenAI parameter -> generationConfig field
GENERATION_CONFIG_MAP = {
    "temperature": "temperature",
    "top_p": "topP",
    "top_k": "topK",
    "stop": "stopSequences",
    "seed": "seed",
}

_ROLE_MAP = {
    # Gemini has no system role
    "system": "user",
    "user": "user",
    "assistant": "model",
    "model": "model",
}


def _content_to_text(content: Any) -> str:
    if isinstance(content, str):
        return content
    return json.dumps(content, ensure_ascii=False)


class GeminiClient(ProviderClient):
    """
    Google Gemini native API client.

    Never streams: callers asking for a stream get one synchronous call whose
    answer is framed as a single terminal frame.
    """

    supports_streaming = False

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.config.api_key:
            headers["x-goog-api-key"] = self.config.api_key
        return headers

    def _url(self, model: str, operation: str) -> str:
        cleaned_base = self.config.base_url.rstrip("/")
        # Accept both "gemini-2.0-flash" and "models/gemini-2.0-flash"
        if model.startswith("models/"):
            model = model[len("models/"):]
        return f"{cleaned_base}/models/{model}:{operation}"

    @staticmethod
    def _generation_config(extra_params: dict[str, Any], default_max_tokens: int) -> dict[str, Any]:
        config: dict[str, Any] = {
            "maxOutputTokens": extra_params.get("max_tokens") or default_max_tokens,
        }
        for source, target in GENERATION_CONFIG_MAP.items():
            value = extra_params.get(source)
            if value is None:
                continue
            if target == "stopSequences" and isinstance(value, str):
                value = [value]
            config[target] = value
        return config

    @staticmethod
    def to_contents(messages: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """
        Remap chat messages into Gemini `contents`.

        Example:
            >>> GeminiClient.to_contents([{"role": "system", "content": "be brief"}])
            [{'role': 'user', 'parts': [{'text': 'be brief'}]}]
        """
        contents = []
        for message in messages:
            role = _ROLE_MAP.get(str(message.get("role", "user")), "user")
            contents.append(
                {
                    "role": role,
                    "parts": [{"text": _content_to_text(message.get("content", ""))}],
                }
            )
        return contents

    def build_chat_request(self, model: str, request: ChatRequest, stream: bool) -> UpstreamRequest:
        payload = {
            "contents": self.to_contents(request.messages),
            "generationConfig": self._generation_config(
                request.extra_params, DEFAULT_CHAT_MAX_OUTPUT_TOKENS
            ),
        }
        return UpstreamRequest(
            method="POST",
            url=self._url(model, "generateContent"),
            headers=self._headers(),
            json=payload,
        )

    def build_completion_request(
        self, model: str, request: CompletionRequest, stream: bool
    ) -> UpstreamRequest:
        text = request.prompt
        if request.system:
            text = f"{request.system}\n\n{request.prompt}"
        payload = {
            "contents": [{"role": "user", "parts": [{"text": text}]}],
            "generationConfig": self._generation_config(
                request.extra_params, DEFAULT_COMPLETION_MAX_OUTPUT_TOKENS
            ),
        }
        return UpstreamRequest(
            method="POST",
            url=self._url(model, "generateContent"),
            headers=self._headers(),
            json=payload,
        )

    def build_embedding_request(self, model: str, request: EmbeddingRequest) -> UpstreamRequest:
        """
        embedContent takes one text.

        Raises:
            ValidationError: more than one input was supplied
        """
        value = request.input
        if isinstance(value, list):
            if len(value) != 1:
                raise ValidationError(
                    "Batched embedding input is not supported by the configured upstream",
                    code="batch_not_supported",
                )
            value = value[0]

        payload = {"content": {"parts": [{"text": _content_to_text(value)}]}}
        return UpstreamRequest(
            method="POST",
            url=self._url(model, "embedContent"),
            headers=self._headers(),
            json=payload,
        )

    @staticmethod
    def candidate_text(body: Any) -> str:
        """Concatenated text parts of the first candidate."""
        if not isinstance(body, dict):
            return ""
        candidates = body.get("candidates")
        if not isinstance(candidates, list) or not candidates or not isinstance(candidates[0], dict):
            return ""
        content = candidates[0].get("content")
        parts = content.get("parts") if isinstance(content, dict) else None
        if not isinstance(parts, list):
            return ""
        return "".join(part.get("text") or "" for part in parts if isinstance(part, dict))

    def to_chat_completion(self, body: Any, model: str) -> dict[str, Any]:
        text = self.candidate_text(body)
        if not text:
            logger.warning("Gemini reply carried no candidate text: model=%s", model)
        return {
            "id": f"gemini-{int(time.time() * 1000)}",
            "object": "chat.completion",
            "created": int(time.time()),
            "model": model,
            "choices": [
                {
                    "index": 0,
                    "message": {"role": "assistant", "content": text},
                    "finish_reason": "stop",
                }
            ],
            "usage": None,
        }

    def to_embedding_list(self, body: Any, model: str) -> dict[str, Any]:
        values: list[float] = []
        if isinstance(body, dict) and isinstance(body.get("embedding"), dict):
            raw = body["embedding"].get("values")
            if isinstance(raw, list):
                values = raw
        return {
            "object": "list",
            "data": [{"object": "embedding", "embedding": values, "index": 0}],
            "model": model,
        }
