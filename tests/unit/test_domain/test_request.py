"""
Request Domain Model Unit Tests
"""

import pytest

from ollama_relay.common.errors import ValidationError
from ollama_relay.domain.request import (
    DEFAULT_EMBEDDING_MODEL,
    ChatRequest,
    CompletionRequest,
    EmbeddingRequest,
    ModelDescriptor,
)


class TestChatRequest:
    """ChatRequest Tests"""

    def test_from_body_splits_extra_params(self):
        request = ChatRequest.from_body(
            {"model": "m", "messages": [{"role": "user", "content": "hi"}], "temperature": 0.5},
            default_stream=True,
        )
        assert request.model == "m"
        assert request.stream is True
        assert request.extra_params == {"temperature": 0.5}

    def test_explicit_stream_flag_wins_over_default(self):
        request = ChatRequest.from_body(
            {"messages": [{"role": "user", "content": "hi"}], "stream": False},
            default_stream=True,
        )
        assert request.stream is False
        assert request.model is None

    @pytest.mark.parametrize("messages", [None, [], "hello", ["hello"]])
    def test_invalid_messages_rejected(self, messages):
        with pytest.raises(ValidationError):
            ChatRequest.from_body({"model": "m", "messages": messages}, default_stream=False)


class TestCompletionRequest:
    """CompletionRequest Tests"""

    def test_from_body_keeps_system_prompt(self):
        request = CompletionRequest.from_body(
            {"model": "m", "prompt": "Why?", "system": "Be brief"}, default_stream=False
        )
        assert request.prompt == "Why?"
        assert request.system == "Be brief"
        assert request.extra_params == {}

    def test_empty_prompt_is_allowed(self):
        assert CompletionRequest.from_body({"prompt": ""}, default_stream=False).prompt == ""

    def test_missing_prompt_rejected(self):
        with pytest.raises(ValidationError, match="prompt"):
            CompletionRequest.from_body({"model": "m"}, default_stream=False)

    def test_array_prompt_rejected(self):
        with pytest.raises(ValidationError):
            CompletionRequest.from_body({"prompt": ["a", "b"]}, default_stream=False)


class TestEmbeddingRequest:
    """EmbeddingRequest Tests"""

    def test_openai_body_requires_model_and_input(self):
        with pytest.raises(ValidationError, match="model"):
            EmbeddingRequest.from_openai_body({"input": "hello"})
        with pytest.raises(ValidationError, match="input"):
            EmbeddingRequest.from_openai_body({"model": "text-embedding"})

    def test_ollama_body_defaults_model_and_accepts_prompt(self):
        request = EmbeddingRequest.from_ollama_body({"prompt": "hello"})
        assert request.model == DEFAULT_EMBEDDING_MODEL
        assert request.input == "hello"

    def test_ollama_body_requires_text(self):
        with pytest.raises(ValidationError):
            EmbeddingRequest.from_ollama_body({"model": "nomic-embed-text"})

    def test_batch_input(self):
        request = EmbeddingRequest.from_openai_body({"model": "e", "input": ["a", "b"]})
        assert request.input == ["a", "b"]

    def test_falsy_but_present_input_is_kept(self):
        assert EmbeddingRequest.from_openai_body({"model": "e", "input": 0}).input == "0"
        assert EmbeddingRequest.from_openai_body({"model": "e", "input": False}).input == "False"
        assert EmbeddingRequest.from_ollama_body({"prompt": 0}).input == "0"
        assert EmbeddingRequest.from_ollama_body({"input": 0, "prompt": "ignored"}).input == "0"

    def test_empty_input_falls_back_to_prompt(self):
        request = EmbeddingRequest.from_ollama_body({"input": "", "prompt": "hello"})
        assert request.input == "hello"

    @pytest.mark.parametrize("value", [None, "", []])
    def test_empty_input_rejected(self, value):
        with pytest.raises(ValidationError, match="input"):
            EmbeddingRequest.from_openai_body({"model": "e", "input": value})
        with pytest.raises(ValidationError):
            EmbeddingRequest.from_ollama_body({"input": value, "prompt": value})


def test_model_descriptor_ollama_shape():
    descriptor = ModelDescriptor(
        name="deepseek-r1:7b",
        size_bytes=200_000_000,
        digest="b" * 64,
        modified_at="2025-01-01T00:00:00.000Z",
        family="deepseek-r1",
        parameter_size="7B",
        quantization_level="F16",
    )
    data = descriptor.to_ollama_dict()
    assert data["name"] == data["model"] == "deepseek-r1:7b"
    assert data["size"] == 200_000_000
    assert data["details"] == {
        "parent_model": "",
        "format": "gguf",
        "family": "deepseek-r1",
        "families": ["deepseek-r1"],
        "parameter_size": "7B",
        "quantization_level": "F16",
    }
