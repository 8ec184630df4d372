"""
OpenAI Adapter - Chat completions transport.

This is the ONLY place that calls the OpenAI API.
"""

from .client import OpenAIConfig, OpenAITransport

__all__ = ["OpenAITransport", "OpenAIConfig"]
