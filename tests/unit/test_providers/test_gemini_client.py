"""
Gemini Client Unit Tests
"""

import json

import httpx
import pytest

from ollama_relay.common.errors import ValidationError
from ollama_relay.domain.request import ChatRequest, CompletionRequest, EmbeddingRequest
from ollama_relay.providers.factory import get_provider_client
from ollama_relay.providers.gemini_client import GeminiClient
from ollama_relay.providers.openai_client import OpenAIClient


def test_factory_selects_client_by_style(relay_config, gemini_config):
    assert isinstance(get_provider_client(relay_config), OpenAIClient)
    assert isinstance(get_provider_client(gemini_config), GeminiClient)
    assert get_provider_client(gemini_config).supports_streaming is False


class TestGeminiPayloads:
    """Payload builder tests (no I/O)"""

    def test_chat_payload_maps_roles(self, gemini_config):
        client = GeminiClient(gemini_config)
        request = ChatRequest(
            model="gemini-2.0-flash",
            messages=[
                {"role": "system", "content": "Be brief"},
                {"role": "user", "content": "Hi"},
                {"role": "assistant", "content": "Hello"},
                {"role": "user", "content": [{"type": "text", "text": "More"}]},
            ],
        )

        upstream = client.build_chat_request("gemini-2.0-flash", request, stream=False)

        assert upstream.url == (
            "https://generativelanguage.googleapis.com/v1beta/models/gemini-2.0-flash:generateContent"
        )
        assert upstream.headers["x-goog-api-key"] == "sk-test"
        contents = upstream.json["contents"]
        assert [item["role"] for item in contents] == ["user", "user", "model", "user"]
        assert contents[0]["parts"] == [{"text": "Be brief"}]
        assert json.loads(contents[3]["parts"][0]["text"]) == [{"type": "text", "text": "More"}]
        assert upstream.json["generationConfig"] == {"maxOutputTokens": 2048}

    def test_generation_config_from_extra_params(self, gemini_config):
        client = GeminiClient(gemini_config)
        request = ChatRequest(
            model="g",
            messages=[{"role": "user", "content": "Hi"}],
            extra_params={"max_tokens": 100, "temperature": 0.3, "top_p": 0.8, "stop": "END"},
        )

        config = client.build_chat_request("g", request, stream=False).json["generationConfig"]

        assert config == {"maxOutputTokens": 100, "temperature": 0.3, "topP": 0.8, "stopSequences": ["END"]}

    def test_completion_payload(self, gemini_config):
        client = GeminiClient(gemini_config)
        request = CompletionRequest(model="g", prompt="Write a haiku")

        payload = client.build_completion_request("g", request, stream=True).json

        assert payload["contents"] == [{"role": "user", "parts": [{"text": "Write a haiku"}]}]
        assert payload["generationConfig"]["maxOutputTokens"] == 1024

    def test_embedding_payload_unwraps_single_item_list(self, gemini_config):
        client = GeminiClient(gemini_config)

        upstream = client.build_embedding_request("text-embedding-004", EmbeddingRequest(model="e", input=["hello"]))

        assert upstream.url.endswith("/models/text-embedding-004:embedContent")
        assert upstream.json == {"content": {"parts": [{"text": "hello"}]}}

    def test_embedding_batch_rejected(self, gemini_config):
        client = GeminiClient(gemini_config)
        with pytest.raises(ValidationError) as exc_info:
            client.build_embedding_request("e", EmbeddingRequest(model="e", input=["a", "b"]))
        assert exc_info.value.status_code == 400


class TestGeminiResponses:
    """Reply normalization tests"""

    def test_to_chat_completion_joins_parts(self, gemini_config):
        client = GeminiClient(gemini_config)
        body = {"candidates": [{"content": {"parts": [{"text": "Hel"}, {"text": "lo"}]}}]}

        completion = client.to_chat_completion(body, "g")

        assert completion["object"] == "chat.completion"
        assert completion["id"].startswith("gemini-")
        assert completion["model"] == "g"
        assert completion["choices"][0]["message"] == {"role": "assistant", "content": "Hello"}
        assert completion["choices"][0]["finish_reason"] == "stop"

    def test_to_chat_completion_without_candidates(self, gemini_config):
        completion = GeminiClient(gemini_config).to_chat_completion({"promptFeedback": {}}, "g")
        assert completion["choices"][0]["message"]["content"] == ""

    def test_to_embedding_list(self, gemini_config):
        body = {"embedding": {"values": [0.1, 0.2]}}
        assert GeminiClient(gemini_config).to_embedding_list(body, "e") == {
            "object": "list",
            "data": [{"object": "embedding", "embedding": [0.1, 0.2], "index": 0}],
            "model": "e",
        }

    @pytest.mark.asyncio
    async def test_send_uses_header_credential(self, gemini_config):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["key"] = request.headers.get("x-goog-api-key")
            seen["url"] = str(request.url)
            return httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": "ok"}]}}]})

        client = GeminiClient(gemini_config, transport=httpx.MockTransport(handler))
        request = ChatRequest(model="g", messages=[{"role": "user", "content": "Hi"}])

        response = await client.send(client.build_chat_request("g", request, stream=False))

        assert response.is_success
        assert seen["key"] == "sk-test"
        assert "key=" not in seen["url"]
