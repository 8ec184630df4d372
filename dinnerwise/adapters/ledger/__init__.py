"""
Ledger Adapters - Destinations for cost records.

Persistent billing storage lives outside this service; these adapters cover
tests, local runs and log-shipped deployments.
"""

from .memory import InMemoryUsageLedger, LoggingUsageLedger

__all__ = ["InMemoryUsageLedger", "LoggingUsageLedger"]
