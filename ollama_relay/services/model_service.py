"""
Model Catalog Service Module

Serves the synthetic model catalog for both surface protocols. Descriptors
are regenerated on every read; nothing is stored.
"""

from typing import Any, Optional

from ollama_relay.common.errors import NotFoundError
from ollama_relay.common.synthetic import MetadataGenerator
from ollama_relay.config import RelayConfig
from ollama_relay.domain.request import ModelDescriptor
from ollama_relay.services.formatter import SurfaceFormatter


def split_model_name(name: str) -> tuple[str, str]:
    """
    Split "family:size" into catalog family and parameter size.

    Example:
        >>> split_model_name("deepseek-r1:7b")
        ('deepseek-r1', '7B')
        >>> split_model_name("qwen2.5:7b-instruct-fp16")
        ('qwen2.5', '7B-INSTRUCT-FP16')
        >>> split_model_name("mistral")
        ('mistral', '')
    """
    family, _, size = name.partition(":")
    if "b" in size.lower():
        size = size.upper()
    return family, size


class ModelService:
    """
    Model Catalog Service

    Lists the configured model names as local-runner tags or OpenAI model
    objects.
    """

    def __init__(self, config: RelayConfig, formatter: Optional[SurfaceFormatter] = None):
        self.config = config
        self.formatter = formatter or SurfaceFormatter()

    @property
    def metadata(self) -> MetadataGenerator:
        return self.formatter.metadata

    def describe(self, name: str) -> ModelDescriptor:
        family, parameter_size = split_model_name(name)
        return ModelDescriptor(
            name=name,
            size_bytes=self.metadata.size_bytes(),
            digest=self.metadata.digest(),
            modified_at=self.metadata.modified_at(),
            family=family,
            parameter_size=parameter_size,
            quantization_level=self.metadata.quantization_level(),
        )

    def list_tags(self) -> dict[str, Any]:
        """Local-runner /api/tags body"""
        return self.formatter.ollama_tags([self.describe(name) for name in self.config.models])

    def list_openai_models(self) -> dict[str, Any]:
        """OpenAI /v1/models body"""
        return self.formatter.openai_models(list(self.config.models))

    def get_openai_model(self, model_id: str) -> dict[str, Any]:
        """
        Get one catalog entry

        Args:
            model_id: Model name as listed in the catalog

        Returns:
            dict: OpenAI model object

        Raises:
            NotFoundError: Model is not in the catalog
        """
        if model_id not in self.config.models:
            raise NotFoundError(
                message="Model not found",
                code="model_not_found",
                error_type="invalid_request_error",
                details={"model": model_id},
            )
        return self.formatter.openai_model(model_id)
