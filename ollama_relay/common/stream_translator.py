"""
Upstream Stream Translation

Turns the raw byte stream of an OpenAI-compatible streaming response into
surface frames:

- LineBuffer accumulates bytes and only releases complete lines, so a line
  split across any number of chunks is processed exactly once.
- parse_stream_line decodes one line into a StreamFrame, the end-of-stream
  marker, or nothing (heartbeats, comments, choice-less chunks).
- translate_stream drives both and hands frames to a FrameEncoder, which
  knows the client's wire shape.
"""

from __future__ import annotations

import codecs
import json
import logging
from abc import ABC, abstractmethod
from typing import AsyncGenerator, AsyncIterator, Union

from ollama_relay.common.errors import MalformedChunkError, UpstreamError
from ollama_relay.domain.request import StreamFrame

logger = logging.getLogger(__name__)

DONE_SENTINEL = "[DONE]"


class _EndOfStream:
    def __repr__(self) -> str:
        return "END_OF_STREAM"


END_OF_STREAM = _EndOfStream()

ParsedLine = Union[StreamFrame, _EndOfStream, None]


class LineBuffer:
    """
    Incremental line splitter.

    - Decodes UTF-8 incrementally, a multi-byte character split across chunks is kept intact
    - Supports CRLF (the trailing \\r is removed by the line parser's strip)
    - Keeps the unterminated tail until its newline arrives
    """

    def __init__(self) -> None:
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buf = ""

    def feed(self, chunk: bytes) -> list[str]:
        """
        Append bytes and return every line completed by them (without terminators).
        """
        if not chunk:
            return []

        self._buf += self._decoder.decode(chunk)
        if "\n" not in self._buf:
            return []

        lines = self._buf.split("\n")
        self._buf = lines.pop()  # Keep last incomplete line
        return lines

    def flush(self) -> list[str]:
        """Release the unterminated tail once the upstream has closed."""
        tail = self._buf + self._decoder.decode(b"", final=True)
        self._buf = ""
        return [tail] if tail.strip() else []

    @property
    def pending(self) -> str:
        return self._buf


def parse_stream_line(line: str) -> ParsedLine:
    """
    Decode one complete upstream line.

    Returns:
        StreamFrame for a delta chunk, END_OF_STREAM for the [DONE] marker,
        None for lines that carry nothing to emit

    Raises:
        MalformedChunkError: the payload is not a usable chunk object
    """
    text = line.strip()
    if not text or text.startswith(":"):
        return None

    if text.startswith("data:"):
        text = text[5:].strip()
    elif text.startswith(("event:", "id:", "retry:")):
        return None

    if text == DONE_SENTINEL:
        return END_OF_STREAM

    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise MalformedChunkError(f"Invalid JSON in stream chunk: {exc}", line=line) from exc

    if not isinstance(payload, dict):
        raise MalformedChunkError("Stream chunk is not a JSON object", line=line)
    if "error" in payload:
        raise MalformedChunkError(f"Upstream error chunk: {payload['error']}", line=line)

    choices = payload.get("choices")
    if not isinstance(choices, list) or not choices:
        # e.g. trailing usage-only chunks
        return None

    choice = choices[0]
    if not isinstance(choice, dict):
        raise MalformedChunkError("Stream chunk choice is not an object", line=line)

    delta = choice.get("delta")
    if not isinstance(delta, dict):
        delta = {}
    content = delta.get("content")
    if content is None:
        # Legacy completions stream shape
        content = choice.get("text")

    upstream_id = payload.get("id")
    return StreamFrame(
        content=content if isinstance(content, str) else "",
        role=delta.get("role") if isinstance(delta.get("role"), str) else None,
        finish_reason=choice.get("finish_reason"),
        upstream_id=upstream_id if isinstance(upstream_id, str) else None,
    )


class FrameEncoder(ABC):
    """Serializes frames for one surface protocol and call kind."""

    media_type: str = "application/json"

    @abstractmethod
    def encode_delta(self, frame: StreamFrame) -> bytes:
        """One outbound frame for one upstream delta."""

    @abstractmethod
    def encode_final(self) -> bytes:
        """Terminal frame, plus the closing sentinel where the surface uses one."""

    @abstractmethod
    def encode_single(self, text: str) -> bytes:
        """Whole answer as one terminal frame (upstream could not stream)."""


def _parse_or_skip(line: str) -> ParsedLine:
    try:
        return parse_stream_line(line)
    except MalformedChunkError as exc:
        logger.warning("Skipping malformed stream chunk: %s line=%r", exc.message, exc.line[:200])
        return None


async def translate_stream(
    chunks: AsyncIterator[bytes],
    encoder: FrameEncoder,
) -> AsyncGenerator[bytes, None]:
    """
    Re-frame an upstream byte stream for the client.

    Frames are yielded in upstream order, one per delta, and the next chunk is
    only pulled once the previous frames were consumed. The terminal frame is
    emitted exactly once: after the [DONE] marker, after the upstream closes,
    or after a transport failure (the stream is truncated, never retried).
    Anything the upstream sends after [DONE] is not read.
    """
    buffer = LineBuffer()
    saw_sentinel = False

    try:
        async for chunk in chunks:
            for line in buffer.feed(chunk):
                parsed = _parse_or_skip(line)
                if parsed is END_OF_STREAM:
                    saw_sentinel = True
                    break
                if parsed is not None:
                    yield encoder.encode_delta(parsed)
            if saw_sentinel:
                break
        else:
            for line in buffer.flush():
                parsed = _parse_or_skip(line)
                if isinstance(parsed, StreamFrame):
                    yield encoder.encode_delta(parsed)
    except UpstreamError as exc:
        logger.error(
            "Upstream stream interrupted, truncating: %s pending=%r",
            exc.message,
            buffer.pending[:200],
        )

    if not saw_sentinel:
        logger.debug("Upstream stream closed without %s", DONE_SENTINEL)
    yield encoder.encode_final()
