"""
Relay Service Module

Orchestrates one client call end to end: model resolution, request
normalization by the upstream client, the rate-limit retry policy, and
formatting for the calling surface (a JSON body or a frame stream).
"""

import logging
from dataclasses import dataclass
from typing import Any, AsyncGenerator, AsyncIterator, Optional, Union

import httpx

from ollama_relay.common.errors import ValidationError
from ollama_relay.common.model_resolver import ModelResolver
from ollama_relay.common.stream_translator import FrameEncoder, translate_stream
from ollama_relay.config import RelayConfig
from ollama_relay.domain.enums import CallKind, SurfaceProtocol
from ollama_relay.domain.request import ChatRequest, CompletionRequest, EmbeddingRequest
from ollama_relay.providers.base import ProviderClient, UpstreamRequest, UpstreamStream
from ollama_relay.providers.factory import get_provider_client
from ollama_relay.services.formatter import SurfaceFormatter, first_choice_text
from ollama_relay.services.retry_handler import RetryHandler

logger = logging.getLogger(__name__)


@dataclass
class StreamResult:
    """A streaming answer: encoded frames plus their media type."""

    body: AsyncIterator[bytes]
    media_type: str


RelayResult = Union[dict[str, Any], StreamResult]


class RelayService:
    """
    Relay Service

    Stateless apart from the injected collaborators; one instance may serve
    any number of concurrent calls.
    """

    def __init__(
        self,
        config: RelayConfig,
        provider: Optional[ProviderClient] = None,
        retry_handler: Optional[RetryHandler] = None,
        formatter: Optional[SurfaceFormatter] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            config: Runtime configuration
            provider: Upstream client (default chosen from config.upstream_style)
            retry_handler: Retry policy (default built from config)
            formatter: Surface formatter (default uses random metadata)
            transport: httpx transport for the default provider
        """
        self.config = config
        self.provider = provider or get_provider_client(config, transport=transport)
        self.retry_handler = retry_handler or RetryHandler.from_config(config)
        self.formatter = formatter or SurfaceFormatter()
        self.resolver = ModelResolver(override=config.model_override, default=config.default_model)

    def resolve_model(self, requested: Optional[str]) -> str:
        """
        Effective upstream model for a chat/completion call

        Raises:
            ValidationError: no model requested and none configured
        """
        model = self.resolver.resolve(requested)
        if not model:
            raise ValidationError('Missing required parameter: "model"')
        if requested and model != requested:
            logger.debug("Model resolved: requested=%s effective=%s", requested, model)
        return model

    async def chat(self, request: ChatRequest, surface: SurfaceProtocol) -> RelayResult:
        """
        Relay a chat call

        Args:
            request: Parsed chat request
            surface: Protocol of the calling client

        Returns:
            dict for a non-streaming answer, StreamResult otherwise

        Raises:
            ValidationError: no usable model
            UpstreamError: upstream failure (raised before any frame is sent)
        """
        model = self.resolve_model(request.model)
        stream = request.stream and self.provider.supports_streaming
        upstream = self.provider.build_chat_request(model, request, stream=stream)

        if stream:
            return await self._open_stream(upstream, surface, CallKind.CHAT, model)

        completion = await self._complete(upstream, model)
        if request.stream:
            return self._single_frame_stream(surface, CallKind.CHAT, model, first_choice_text(completion))
        if surface == SurfaceProtocol.OLLAMA:
            return self.formatter.ollama_chat(model, first_choice_text(completion), len(request.messages))
        return self.formatter.openai_chat(completion, model)

    async def complete(self, request: CompletionRequest, surface: SurfaceProtocol) -> RelayResult:
        """Relay a single-prompt completion call (see chat())."""
        model = self.resolve_model(request.model)
        stream = request.stream and self.provider.supports_streaming
        upstream = self.provider.build_completion_request(model, request, stream=stream)

        if stream:
            return await self._open_stream(upstream, surface, CallKind.COMPLETION, model)

        completion = await self._complete(upstream, model)
        if request.stream:
            return self._single_frame_stream(
                surface, CallKind.COMPLETION, model, first_choice_text(completion)
            )
        if surface == SurfaceProtocol.OLLAMA:
            return self.formatter.ollama_generate(model, first_choice_text(completion), request.prompt)
        return self.formatter.openai_completion(completion, model)

    async def embed(self, request: EmbeddingRequest, surface: SurfaceProtocol) -> dict[str, Any]:
        """
        Relay an embedding call. The model name is forwarded as requested.

        Raises:
            ValidationError: input the upstream style cannot accept
            UpstreamError: upstream failure
        """
        upstream = self.provider.build_embedding_request(request.model, request)
        response = await self.retry_handler.execute(lambda: self.provider.send(upstream))
        embedding_list = self.provider.to_embedding_list(response.body, request.model)
        if surface == SurfaceProtocol.OLLAMA:
            return self.formatter.ollama_embeddings(embedding_list)
        return embedding_list

    async def _complete(self, upstream: UpstreamRequest, model: str) -> dict[str, Any]:
        response = await self.retry_handler.execute(lambda: self.provider.send(upstream))
        logger.debug("Upstream answered: status_code=%s time_ms=%s", response.status_code, response.total_time_ms)
        return self.provider.to_chat_completion(response.body, model)

    async def _open_stream(
        self,
        upstream: UpstreamRequest,
        surface: SurfaceProtocol,
        kind: CallKind,
        model: str,
    ) -> StreamResult:
        # Retries end here; once returned, the body is relayed as-is
        opened = await self.retry_handler.execute(lambda: self.provider.open_stream(upstream))
        encoder = self.formatter.encoder_for(surface, kind, model)
        return StreamResult(body=self._relay(opened, encoder), media_type=encoder.media_type)

    @staticmethod
    async def _relay(opened: UpstreamStream, encoder: FrameEncoder) -> AsyncGenerator[bytes, None]:
        try:
            async for frame in translate_stream(opened.aiter_bytes(), encoder):
                yield frame
        finally:
            # Also runs when the client disconnects (generator closed early)
            await opened.aclose()

    def _single_frame_stream(
        self,
        surface: SurfaceProtocol,
        kind: CallKind,
        model: str,
        text: str,
    ) -> StreamResult:
        encoder = self.formatter.encoder_for(surface, kind, model)

        async def body() -> AsyncGenerator[bytes, None]:
            yield encoder.encode_single(text)

        return StreamResult(body=body(), media_type=encoder.media_type)
