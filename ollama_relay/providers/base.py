"""
Upstream Provider Client Base Class

Defines the abstract interface for provider clients. Each concrete client is
the strategy for one upstream style: it normalizes internal requests into the
exact upstream payload (pure, no I/O), performs the HTTP exchange, and maps
the upstream reply back to OpenAI shapes.
"""

import json
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Optional

import httpx

from ollama_relay.common.errors import UpstreamError
from ollama_relay.config import RelayConfig
from ollama_relay.domain.request import ChatRequest, CompletionRequest, EmbeddingRequest

logger = logging.getLogger(__name__)


@dataclass
class UpstreamRequest:
    """
    Upstream Request Data Class

    The fully normalized HTTP call for one upstream attempt.
    """

    method: str
    url: str
    headers: dict[str, str]
    json: dict[str, Any]
    params: dict[str, str] = field(default_factory=dict)


@dataclass
class ProviderResponse:
    """
    Provider Response Data Class

    Encapsulates response information from the upstream provider.
    """

    # HTTP status code
    status_code: int
    # Response headers
    headers: dict[str, str] = field(default_factory=dict)
    # Response body (parsed JSON when possible)
    body: Any = None
    # Total time (ms)
    total_time_ms: Optional[int] = None
    # Error message
    error: Optional[str] = None

    @property
    def is_success(self) -> bool:
        """Whether the response is successful"""
        return 200 <= self.status_code < 300

    @property
    def is_rate_limited(self) -> bool:
        return self.status_code == 429

    def describe_error(self) -> str:
        if self.error:
            return self.error
        if isinstance(self.body, (dict, list)):
            return json.dumps(self.body, ensure_ascii=False)[:500]
        return str(self.body or f"HTTP {self.status_code}")[:500]


class UpstreamStream:
    """
    An opened upstream streaming response.

    Owns the httpx client and response for one call. aclose() releases the
    connection without draining the remaining body.
    """

    def __init__(
        self,
        status_code: int,
        client: Optional[httpx.AsyncClient] = None,
        response: Optional[httpx.Response] = None,
        error: Optional[str] = None,
    ):
        self.status_code = status_code
        self.error = error
        self._client = client
        self._response = response
        self._closed = False

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def is_rate_limited(self) -> bool:
        return self.status_code == 429

    async def aiter_bytes(self) -> AsyncIterator[bytes]:
        """
        Raw body chunks as they arrive.

        Raises:
            UpstreamError: the connection failed mid-stream
        """
        if self._response is None:
            return
        try:
            async for chunk in self._response.aiter_bytes():
                yield chunk
        except httpx.HTTPError as exc:
            raise UpstreamError(f"Upstream stream failed: {exc}") from exc

    async def read_error(self) -> str:
        """Read a (non-streaming) error body for diagnostics."""
        if self.error:
            return self.error
        if self._response is None:
            return f"HTTP {self.status_code}"
        try:
            content = await self._response.aread()
        except httpx.HTTPError as exc:
            return f"HTTP {self.status_code} ({exc})"
        return content.decode("utf-8", errors="replace")[:500] or f"HTTP {self.status_code}"

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            if self._response is not None:
                await self._response.aclose()
        finally:
            if self._client is not None:
                await self._client.aclose()


def mask_headers(headers: dict[str, str]) -> dict[str, str]:
    """Copy of headers with credentials masked, for logging."""
    masked = {}
    for key, value in headers.items():
        if key.lower() in ("authorization", "x-goog-api-key", "x-api-key", "api-key"):
            masked[key] = "***"
        else:
            masked[key] = value
    return masked


class ProviderClient(ABC):
    """
    Upstream Provider Client Abstract Base Class

    Defines the common interface for provider clients: payload builders,
    normal requests and streaming requests.
    """

    # Whether the upstream can be asked for an incremental response
    supports_streaming: bool = True

    def __init__(
        self,
        config: RelayConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            config: Runtime configuration
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.config = config
        self.timeout = config.http_timeout
        self._transport = transport

    # ---- Request normalization (pure) ----

    @abstractmethod
    def build_chat_request(self, model: str, request: ChatRequest, stream: bool) -> UpstreamRequest:
        pass

    @abstractmethod
    def build_completion_request(
        self, model: str, request: CompletionRequest, stream: bool
    ) -> UpstreamRequest:
        pass

    @abstractmethod
    def build_embedding_request(self, model: str, request: EmbeddingRequest) -> UpstreamRequest:
        pass

    # ---- Response normalization ----

    @abstractmethod
    def to_chat_completion(self, body: Any, model: str) -> dict[str, Any]:
        """Map a non-streaming upstream reply to an OpenAI chat.completion object."""

    @abstractmethod
    def to_embedding_list(self, body: Any, model: str) -> dict[str, Any]:
        """Map an upstream embedding reply to an OpenAI embedding list object."""

    # ---- Transport ----

    def _new_client(self, timeout: httpx.Timeout) -> httpx.AsyncClient:
        if self._transport is not None:
            return httpx.AsyncClient(timeout=timeout, transport=self._transport)
        return httpx.AsyncClient(timeout=timeout)

    async def send(self, upstream: UpstreamRequest) -> ProviderResponse:
        """
        Perform one non-streaming upstream call.

        Transport failures are mapped to 504 (timeout) / 502 (network)
        responses so the retry policy sees a status code for every attempt.
        """
        logger.debug(
            "Upstream Request: method=%s url=%s headers=%s body=%s",
            upstream.method,
            upstream.url,
            mask_headers(upstream.headers),
            json.dumps(upstream.json, ensure_ascii=False)[:2000],
        )

        started = time.perf_counter()
        try:
            async with self._new_client(httpx.Timeout(self.timeout)) as client:
                response = await client.request(
                    method=upstream.method,
                    url=upstream.url,
                    headers=upstream.headers,
                    params=upstream.params or None,
                    json=upstream.json,
                )

                response_body: Any = response.text
                try:
                    response_body = response.json()
                except json.JSONDecodeError:
                    pass

                return ProviderResponse(
                    status_code=response.status_code,
                    headers=dict(response.headers),
                    body=response_body,
                    total_time_ms=int((time.perf_counter() - started) * 1000),
                )

        except httpx.TimeoutException as e:
            return ProviderResponse(status_code=504, error=f"Request timeout: {str(e)}")

        except httpx.RequestError as e:
            return ProviderResponse(status_code=502, error=f"Request error: {str(e)}")

    async def open_stream(self, upstream: UpstreamRequest) -> UpstreamStream:
        """
        Open a streaming upstream call and return once headers arrived.

        Only the connect phase is bounded; an established stream has no read
        timeout.
        """
        logger.debug(
            "Upstream Stream Request: method=%s url=%s headers=%s body=%s",
            upstream.method,
            upstream.url,
            mask_headers(upstream.headers),
            json.dumps(upstream.json, ensure_ascii=False)[:2000],
        )

        client = self._new_client(httpx.Timeout(None, connect=self.timeout))
        try:
            request = client.build_request(
                method=upstream.method,
                url=upstream.url,
                headers=upstream.headers,
                params=upstream.params or None,
                json=upstream.json,
            )
            response = await client.send(request, stream=True)
        except httpx.TimeoutException as e:
            await client.aclose()
            return UpstreamStream(status_code=504, error=f"Request timeout: {str(e)}")
        except httpx.RequestError as e:
            await client.aclose()
            return UpstreamStream(status_code=502, error=f"Request error: {str(e)}")

        return UpstreamStream(status_code=response.status_code, client=client, response=response)
