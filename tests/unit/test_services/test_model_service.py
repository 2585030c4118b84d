"""
Model Catalog Service Unit Tests
"""

import random

import pytest

from ollama_relay.common.errors import NotFoundError
from ollama_relay.common.synthetic import RandomMetadataGenerator
from ollama_relay.services.formatter import SurfaceFormatter
from ollama_relay.services.model_service import ModelService, split_model_name


@pytest.mark.parametrize(
    "name, family, size",
    [
        ("deepseek-r1:14b", "deepseek-r1", "14B"),
        ("qwen2.5:7b-instruct-fp16", "qwen2.5", "7B-INSTRUCT-FP16"),
        ("llama3:latest", "llama3", "latest"),
        ("mistral", "mistral", ""),
    ],
)
def test_split_model_name(name, family, size):
    assert split_model_name(name) == (family, size)


class TestModelService:
    """Model Service Tests"""

    def test_list_tags_describes_every_configured_model(self, make_config, formatter):
        service = ModelService(make_config(models=("a:1b", "b:7b")), formatter=formatter)

        body = service.list_tags()

        assert [item["name"] for item in body["models"]] == ["a:1b", "b:7b"]
        first = body["models"][0]
        assert first["size"] == 123_456_789
        assert first["digest"] == "a" * 64
        assert first["modified_at"].startswith("2025-03-01")
        assert first["details"]["parameter_size"] == "1B"
        assert first["details"]["format"] == "gguf"

    def test_descriptors_are_regenerated_on_every_read(self, make_config):
        formatter = SurfaceFormatter(RandomMetadataGenerator(random.Random(5)))
        service = ModelService(make_config(models=("a:1b",)), formatter=formatter)

        first = service.list_tags()["models"][0]["digest"]
        second = service.list_tags()["models"][0]["digest"]

        assert first != second

    def test_list_openai_models(self, relay_config, formatter):
        body = ModelService(relay_config, formatter=formatter).list_openai_models()
        assert [item["id"] for item in body["data"]] == list(relay_config.models)

    def test_get_known_model(self, relay_config, formatter):
        body = ModelService(relay_config, formatter=formatter).get_openai_model("deepseek-r1:7b")
        assert body["id"] == "deepseek-r1:7b"

    def test_get_unknown_model_raises_not_found(self, relay_config, formatter):
        with pytest.raises(NotFoundError) as exc_info:
            ModelService(relay_config, formatter=formatter).get_openai_model("unknown-model-xyz")

        assert exc_info.value.status_code == 404
        assert exc_info.value.error_type == "invalid_request_error"
        assert exc_info.value.message == "Model not found"
