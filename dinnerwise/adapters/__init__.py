"""
Adapters - External service integrations.

All external API calls are wrapped here to isolate domains from third-party changes.
"""

from .ledger import InMemoryUsageLedger, LoggingUsageLedger
from .openai import OpenAIConfig, OpenAITransport

__all__ = [
    "OpenAITransport",
    "OpenAIConfig",
    "InMemoryUsageLedger",
    "LoggingUsageLedger",
]
