"""
Ollama Relay

Local-runner and OpenAI compatible API surfaces in front of a single
OpenAI-compatible or Gemini upstream.
"""

__version__ = "0.1.0"
