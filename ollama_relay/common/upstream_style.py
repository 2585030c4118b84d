"""
Upstream style detection.
"""

from __future__ import annotations

from urllib.parse import urlparse

from ollama_relay.domain.enums import UpstreamStyle

GEMINI_HOST = "generativelanguage.googleapis.com"


def detect_upstream_style(base_url: str | None) -> UpstreamStyle:
    """
    Classify the configured upstream base URL.

    Gemini hosts speak the content-generation protocol; everything else is
    treated as OpenAI-compatible.
    """
    raw = (base_url or "").strip().lower()
    host = urlparse(raw).hostname or ""
    if GEMINI_HOST in host or (not host and GEMINI_HOST in raw):
        return UpstreamStyle.GEMINI
    return UpstreamStyle.OPENAI
