"""
Request/Response Domain Model

Defines the internal request records built from inbound bodies, plus the
per-delta stream frame and the synthetic catalog descriptor.
"""

from dataclasses import dataclass, field
from typing import Any, Optional, Union

from ollama_relay.common.errors import ValidationError

# Model used by local-runner embedding clients that do not name one
DEFAULT_EMBEDDING_MODEL = "all-minilm"


def _split_body(body: dict[str, Any], *known: str) -> dict[str, Any]:
    """Return the body without the explicitly handled keys."""
    return {key: value for key, value in body.items() if key not in known}


def _read_stream_flag(body: dict[str, Any], default: bool) -> bool:
    value = body.get("stream")
    if value is None:
        return default
    return bool(value)


def _read_model(body: dict[str, Any]) -> Optional[str]:
    model = body.get("model")
    if model is None:
        return None
    model = str(model).strip()
    return model or None


def _is_blank(value: Any) -> bool:
    return value is None or value == "" or value == []


@dataclass
class ChatRequest:
    """
    Chat Request Data Class

    Messages are kept as the client sent them ({role, content} dicts, content
    either a string or structured parts).
    """

    model: Optional[str]
    messages: list[dict[str, Any]]
    stream: bool = False
    extra_params: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_body(cls, body: dict[str, Any], default_stream: bool) -> "ChatRequest":
        """
        Build from an inbound JSON body.

        Raises:
            ValidationError: messages missing, empty or not a list
        """
        messages = body.get("messages")
        if not isinstance(messages, list) or not messages:
            raise ValidationError('Missing required parameter: "messages"')
        for message in messages:
            if not isinstance(message, dict):
                raise ValidationError('Invalid parameter: "messages" must contain objects')

        return cls(
            model=_read_model(body),
            messages=messages,
            stream=_read_stream_flag(body, default_stream),
            extra_params=_split_body(body, "model", "messages", "stream"),
        )


@dataclass
class CompletionRequest:
    """Completion Request Data Class (prompt is always a string)"""

    model: Optional[str]
    prompt: str
    stream: bool = False
    extra_params: dict[str, Any] = field(default_factory=dict)
    # Optional system prompt (local-runner generate)
    system: Optional[str] = None

    @classmethod
    def from_body(cls, body: dict[str, Any], default_stream: bool) -> "CompletionRequest":
        """
        Build from an inbound JSON body.

        Raises:
            ValidationError: prompt missing or not a string
        """
        prompt = body.get("prompt")
        if prompt is None:
            raise ValidationError('Missing required parameter: "prompt"')
        if not isinstance(prompt, str):
            raise ValidationError('Invalid parameter: "prompt" must be a string')
        system = body.get("system")

        return cls(
            model=_read_model(body),
            prompt=prompt,
            stream=_read_stream_flag(body, default_stream),
            extra_params=_split_body(body, "model", "prompt", "stream", "system"),
            system=system if isinstance(system, str) and system else None,
        )


@dataclass
class EmbeddingRequest:
    """Embedding Request Data Class"""

    model: str
    input: Union[str, list[Any]]
    extra_params: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_openai_body(cls, body: dict[str, Any]) -> "EmbeddingRequest":
        """
        OpenAI surface: both model and input are required.

        Raises:
            ValidationError: model or input missing
        """
        model = _read_model(body)
        if not model:
            raise ValidationError('Missing required parameter: "model"')
        value = body.get("input")
        if _is_blank(value):
            raise ValidationError('Missing required parameter: "input"')
        if not isinstance(value, (str, list)):
            value = str(value)

        return cls(
            model=model,
            input=value,
            extra_params=_split_body(body, "model", "input"),
        )

    @classmethod
    def from_ollama_body(cls, body: dict[str, Any]) -> "EmbeddingRequest":
        """
        Local-runner surface: text may arrive as input or prompt; model defaults.

        Raises:
            ValidationError: neither input nor prompt provided
        """
        value = body.get("input")
        if _is_blank(value):
            value = body.get("prompt")
        if _is_blank(value):
            raise ValidationError(
                'Missing required parameter: Either "prompt" or "input" must be provided'
            )
        if not isinstance(value, (str, list)):
            value = str(value)

        return cls(
            model=_read_model(body) or DEFAULT_EMBEDDING_MODEL,
            input=value,
            extra_params=_split_body(body, "model", "input", "prompt"),
        )


@dataclass(frozen=True)
class StreamFrame:
    """One upstream streaming delta."""

    content: str = ""
    role: Optional[str] = None
    finish_reason: Optional[str] = None
    upstream_id: Optional[str] = None


@dataclass(frozen=True)
class ModelDescriptor:
    """
    Synthetic catalog entry

    Regenerated on every catalog read; the randomized fields are cosmetic.
    """

    name: str
    size_bytes: int
    digest: str
    modified_at: str
    family: str
    parameter_size: str
    quantization_level: str

    def to_ollama_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "model": self.name,
            "modified_at": self.modified_at,
            "size": self.size_bytes,
            "digest": self.digest,
            "details": {
                "parent_model": "",
                "format": "gguf",
                "family": self.family,
                "families": [self.family],
                "parameter_size": self.parameter_size,
                "quantization_level": self.quantization_level,
            },
        }
