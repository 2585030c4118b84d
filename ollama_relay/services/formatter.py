"""
Surface Response Formatter

Converts upstream answers (already normalized to OpenAI shapes by the
provider clients) into what each surface protocol's clients expect, filling
in the synthetic fields (timings, context, ids, catalog metadata) through a
MetadataGenerator.
"""

import json
from abc import abstractmethod
from typing import Any, Optional

from ollama_relay.common.stream_translator import DONE_SENTINEL, FrameEncoder
from ollama_relay.common.synthetic import MetadataGenerator, RandomMetadataGenerator
from ollama_relay.domain.enums import CallKind, SurfaceProtocol
from ollama_relay.domain.request import ModelDescriptor, StreamFrame

# Token id reported as the stop match on terminal OpenAI chunks
MATCHED_STOP_TOKEN = 128009

# Length of the synthetic `context` array on generate answers
CONTEXT_TOKEN_COUNT = 500

# prompt_eval_count reported for an empty prompt
EMPTY_PROMPT_EVAL_COUNT = 39

NDJSON_MEDIA_TYPE = "application/x-ndjson"
SSE_MEDIA_TYPE = "text/event-stream"


def _ndjson(payload: dict[str, Any]) -> bytes:
    return (json.dumps(payload, ensure_ascii=False) + "\n").encode("utf-8")


def _sse(payload: Any) -> bytes:
    data = payload if isinstance(payload, str) else json.dumps(payload, ensure_ascii=False)
    return f"data: {data}\n\n".encode("utf-8")


def first_choice_text(completion: Any) -> str:
    """
    Text of the first choice of a chat.completion (or legacy completion) object.

    Missing or mis-shaped fields yield an empty string.
    """
    if not isinstance(completion, dict):
        return ""
    choices = completion.get("choices")
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        return ""
    choice = choices[0]
    message = choice.get("message")
    if isinstance(message, dict) and isinstance(message.get("content"), str):
        return message["content"]
    text = choice.get("text")
    return text if isinstance(text, str) else ""


def first_embedding(embedding_list: Any) -> list[float]:
    if not isinstance(embedding_list, dict):
        return []
    data = embedding_list.get("data")
    if not isinstance(data, list) or not data or not isinstance(data[0], dict):
        return []
    vector = data[0].get("embedding")
    return vector if isinstance(vector, list) else []


def prompt_eval_count_for(prompt: str) -> int:
    return len(prompt) // 10 if prompt else EMPTY_PROMPT_EVAL_COUNT


# ============ Frame encoders ============


class OllamaChatEncoder(FrameEncoder):
    """NDJSON chat frames for local-runner clients."""

    media_type = NDJSON_MEDIA_TYPE

    def __init__(self, model: str, metadata: MetadataGenerator):
        self.model = model
        self.metadata = metadata

    def _frame(self, content: str, done: bool) -> dict[str, Any]:
        return {
            "model": self.model,
            "created_at": self.metadata.created_at(),
            "message": {"role": "assistant", "content": content},
            "done": done,
        }

    def encode_delta(self, frame: StreamFrame) -> bytes:
        return _ndjson(self._frame(frame.content, done=False))

    def _terminal(self, content: str) -> dict[str, Any]:
        payload = self._frame(content, done=True)
        payload["done_reason"] = "stop"
        payload.update(self.metadata.timings("stream"))
        return payload

    def encode_final(self) -> bytes:
        return _ndjson(self._terminal(""))

    def encode_single(self, text: str) -> bytes:
        return _ndjson(self._terminal(text))


class OllamaGenerateEncoder(FrameEncoder):
    """NDJSON generate frames for local-runner clients."""

    media_type = NDJSON_MEDIA_TYPE

    def __init__(self, model: str, metadata: MetadataGenerator):
        self.model = model
        self.metadata = metadata

    def _frame(self, response: str, done: bool) -> dict[str, Any]:
        return {
            "model": self.model,
            "created_at": self.metadata.created_at(),
            "response": response,
            "done": done,
        }

    def encode_delta(self, frame: StreamFrame) -> bytes:
        return _ndjson(self._frame(frame.content, done=False))

    def _terminal(self, response: str) -> dict[str, Any]:
        payload = self._frame(response, done=True)
        payload["done_reason"] = "stop"
        payload["context"] = self.metadata.context_tokens(CONTEXT_TOKEN_COUNT)
        payload.update(self.metadata.timings("stream"))
        return payload

    def encode_final(self) -> bytes:
        return _ndjson(self._terminal(""))

    def encode_single(self, text: str) -> bytes:
        return _ndjson(self._terminal(text))


class _OpenAIChunkEncoder(FrameEncoder):
    """
    Shared SSE framing for OpenAI surface streams.

    The chunk id is taken from the first upstream frame that carries one and
    kept for the rest of the stream. The closing [DONE] sentinel is written
    by the terminal frame only.
    """

    media_type = SSE_MEDIA_TYPE
    object_name = "chat.completion.chunk"
    id_prefix = "chatcmpl"

    def __init__(self, model: str, metadata: MetadataGenerator):
        self.model = model
        self.metadata = metadata
        self.created = metadata.created_unix()
        self._id: Optional[str] = None

    @property
    def chunk_id(self) -> str:
        if self._id is None:
            self._id = self.metadata.completion_id(self.id_prefix)
        return self._id

    @abstractmethod
    def _choice(
        self,
        content: str,
        role: Optional[str],
        finish_reason: Optional[str],
        matched_stop: Optional[int],
    ) -> dict[str, Any]:
        """One choices[0] entry."""

    def _chunk(self, choice: dict[str, Any]) -> dict[str, Any]:
        return {
            "id": self.chunk_id,
            "object": self.object_name,
            "created": self.created,
            "model": self.model,
            "choices": [choice],
            "usage": None,
        }

    def encode_delta(self, frame: StreamFrame) -> bytes:
        if self._id is None and frame.upstream_id:
            self._id = frame.upstream_id
        choice = self._choice(frame.content, frame.role, frame.finish_reason, None)
        return _sse(self._chunk(choice))

    def _terminal(self, content: str) -> bytes:
        choice = self._choice(content, None, "stop", MATCHED_STOP_TOKEN)
        return _sse(self._chunk(choice)) + _sse(DONE_SENTINEL)

    def encode_final(self) -> bytes:
        return self._terminal("")

    def encode_single(self, text: str) -> bytes:
        return self._terminal(text)


class OpenAIChatEncoder(_OpenAIChunkEncoder):
    def _choice(
        self,
        content: str,
        role: Optional[str],
        finish_reason: Optional[str],
        matched_stop: Optional[int],
    ) -> dict[str, Any]:
        return {
            "index": 0,
            "delta": {
                "role": role,
                "content": content,
                "reasoning_content": None,
                "tool_calls": None,
            },
            "logprobs": None,
            "finish_reason": finish_reason,
            "matched_stop": matched_stop,
        }


class OpenAICompletionEncoder(_OpenAIChunkEncoder):
    object_name = "text_completion"
    id_prefix = "cmpl"

    def _choice(
        self,
        content: str,
        role: Optional[str],
        finish_reason: Optional[str],
        matched_stop: Optional[int],
    ) -> dict[str, Any]:
        return {
            "index": 0,
            "text": content,
            "logprobs": None,
            "finish_reason": finish_reason,
            "matched_stop": matched_stop,
        }


_ENCODERS: dict[tuple[SurfaceProtocol, CallKind], type[FrameEncoder]] = {
    (SurfaceProtocol.OLLAMA, CallKind.CHAT): OllamaChatEncoder,
    (SurfaceProtocol.OLLAMA, CallKind.COMPLETION): OllamaGenerateEncoder,
    (SurfaceProtocol.OPENAI, CallKind.CHAT): OpenAIChatEncoder,
    (SurfaceProtocol.OPENAI, CallKind.COMPLETION): OpenAICompletionEncoder,
}


# ============ Formatter ============


class SurfaceFormatter:
    """
    Surface Response Formatter

    Builds every client-facing body. All synthetic values come from the
    injected MetadataGenerator.
    """

    def __init__(self, metadata: Optional[MetadataGenerator] = None):
        self.metadata = metadata or RandomMetadataGenerator()

    def encoder_for(self, surface: SurfaceProtocol, kind: CallKind, model: str) -> FrameEncoder:
        """Frame encoder for a streaming answer."""
        encoder_cls = _ENCODERS[(surface, kind)]
        return encoder_cls(model, self.metadata)  # type: ignore[call-arg]

    # ---- local-runner surface ----

    def ollama_chat(self, model: str, content: str, message_count: int) -> dict[str, Any]:
        timings = self.metadata.timings("chat")
        return {
            "model": model,
            "created_at": self.metadata.created_at(),
            "message": {"role": "assistant", "content": content},
            "done": True,
            "done_reason": "stop",
            "total_duration": timings["total_duration"],
            "load_duration": timings["load_duration"],
            "prompt_eval_count": message_count,
            "prompt_eval_duration": timings["prompt_eval_duration"],
            "eval_count": timings["eval_count"],
            "eval_duration": timings["eval_duration"],
        }

    def ollama_generate(self, model: str, response: str, prompt: str) -> dict[str, Any]:
        timings = self.metadata.timings("generate")
        return {
            "model": model,
            "created_at": self.metadata.created_at(),
            "response": response,
            "done": True,
            "done_reason": "stop",
            "context": self.metadata.context_tokens(CONTEXT_TOKEN_COUNT),
            "total_duration": timings["total_duration"],
            "load_duration": timings["load_duration"],
            "prompt_eval_count": prompt_eval_count_for(prompt),
            "prompt_eval_duration": timings["prompt_eval_duration"],
            "eval_count": timings["eval_count"],
            "eval_duration": timings["eval_duration"],
        }

    def ollama_embeddings(self, embedding_list: dict[str, Any]) -> dict[str, Any]:
        return {"embeddings": [first_embedding(embedding_list)]}

    def ollama_tags(self, descriptors: list[ModelDescriptor]) -> dict[str, Any]:
        return {"models": [descriptor.to_ollama_dict() for descriptor in descriptors]}

    # ---- OpenAI surface ----

    def openai_chat(self, completion: dict[str, Any], model: str) -> dict[str, Any]:
        body = dict(completion)
        body["model"] = model
        body.setdefault("object", "chat.completion")
        return body

    def openai_completion(self, completion: dict[str, Any], model: str) -> dict[str, Any]:
        """Re-shape a chat answer as a text_completion object."""
        finish_reason = "stop"
        choices = completion.get("choices") if isinstance(completion, dict) else None
        if isinstance(choices, list) and choices and isinstance(choices[0], dict):
            finish_reason = choices[0].get("finish_reason") or "stop"

        return {
            "id": self.metadata.completion_id("cmpl"),
            "object": "text_completion",
            "created": self.metadata.created_unix(),
            "model": model,
            "choices": [
                {
                    "index": 0,
                    "text": first_choice_text(completion),
                    "logprobs": None,
                    "finish_reason": finish_reason,
                }
            ],
            "usage": completion.get("usage") if isinstance(completion, dict) else None,
        }

    def openai_model(self, name: str) -> dict[str, Any]:
        return {
            "id": name,
            "object": "model",
            "created": self.metadata.created_unix(),
            "owned_by": "library",
        }

    def openai_models(self, names: list[str]) -> dict[str, Any]:
        return {"object": "list", "data": [self.openai_model(name) for name in names]}
