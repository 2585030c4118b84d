"""
Protocol enumerations shared across the relay.
"""

from enum import Enum


class UpstreamStyle(str, Enum):
    """Wire protocol spoken by the configured upstream provider."""

    OPENAI = "openai"
    GEMINI = "gemini"


class SurfaceProtocol(str, Enum):
    """Wire protocol the inbound client speaks."""

    OLLAMA = "ollama"
    OPENAI = "openai"


class CallKind(str, Enum):
    """Streamable call kinds; each pairs with a surface to pick a frame encoder."""

    CHAT = "chat"
    COMPLETION = "completion"
