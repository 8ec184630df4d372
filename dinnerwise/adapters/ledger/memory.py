"""
Usage ledgers that keep records in process or write them to the log.
"""

from __future__ import annotations

import asyncio
import logging

from dinnerwise.config.errors import LedgerWriteError
from dinnerwise.domains.inference.models import CostRecord

logger = logging.getLogger(__name__)

__all__ = ["InMemoryUsageLedger", "LoggingUsageLedger"]


class InMemoryUsageLedger:
    """Append-only list of cost records."""

    def __init__(self, max_records: int | None = None) -> None:
        self._records: list[CostRecord] = []
        self._max_records = max_records
        self._lock = asyncio.Lock()

    async def append(self, record: CostRecord) -> None:
        async with self._lock:
            if self._max_records is not None and len(self._records) >= self._max_records:
                raise LedgerWriteError(
                    "Ledger is full",
                    {"max_records": self._max_records},
                )
            self._records.append(record)

    @property
    def records(self) -> list[CostRecord]:
        return list(self._records)


class LoggingUsageLedger:
    """Emits each cost record as a structured log line for log shipping."""

    def __init__(self, logger_name: str = "dinnerwise.usage") -> None:
        self._log = logging.getLogger(logger_name)

    async def append(self, record: CostRecord) -> None:
        self._log.info("usage %s", record.model_dump_json())
