"""
Cost Accountant - Token usage to dollars, and the ledger write.

Costs use a single blended rate per model, which approximates provider
billing (prompt and completion tokens are priced alike). Amounts are
quantized to micro-dollars with ROUND_HALF_UP.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Mapping
from decimal import ROUND_HALF_UP, Decimal
from types import MappingProxyType

from dinnerwise.config.errors import ConfigurationError

from .contracts import UsageLedger
from .models import CostRecord, ModelId

logger = logging.getLogger(__name__)

__all__ = ["CostAccountant", "COST_QUANTUM"]

COST_QUANTUM = Decimal("0.000001")
_PER_TOKENS = Decimal("1000")


class CostAccountant:
    """Prices upstream calls and appends CostRecords to the usage ledger."""

    def __init__(
        self,
        rates: Mapping[ModelId, Decimal],
        ledger: UsageLedger,
        ledger_timeout: float = 0.5,
        required_models: Iterable[ModelId] = (),
    ) -> None:
        """
        Initialize accountant.

        Args:
            rates: USD per 1K tokens, per model
            ledger: Destination for cost records
            ledger_timeout: Seconds a ledger append may take. The append is
                awaited before the result is returned, so this bounds the
                latency a slow ledger adds to every uncached request.
            required_models: Models that must have a rate (the tiered models)

        Raises:
            ConfigurationError: A required model has no rate
        """
        self._rates: Mapping[ModelId, Decimal] = MappingProxyType(
            {ModelId(m): Decimal(r) for m, r in rates.items()}
        )
        missing = sorted(m.value for m in required_models if m not in self._rates)
        if missing:
            raise ConfigurationError(
                f"No cost rate configured for: {', '.join(missing)}",
                {"models": missing},
            )
        self._ledger = ledger
        self._ledger_timeout = ledger_timeout

    def cost(self, model: ModelId, tokens: int) -> Decimal:
        """Dollar cost of ``tokens`` on ``model``."""
        rate = self._rates[ModelId(model)]
        return (Decimal(tokens) / _PER_TOKENS * rate).quantize(
            COST_QUANTUM, rounding=ROUND_HALF_UP
        )

    async def record(
        self,
        tenant_id: str,
        model: ModelId,
        tokens: int,
        cost: Decimal,
    ) -> CostRecord:
        """
        Append a cost record. Never raises on ledger failure.

        Awaited inline: a slow ledger delays the caller by at most
        ``ledger_timeout`` before the write is abandoned.

        Returns:
            The record, whether or not the ledger accepted it
        """
        record = CostRecord(
            tenant_id=tenant_id,
            model_used=model,
            tokens_consumed=tokens,
            cost_usd=cost,
        )
        try:
            await asyncio.wait_for(self._ledger.append(record), self._ledger_timeout)
        except asyncio.TimeoutError:
            logger.warning(
                "Ledger append timed out after %.1fs: tenant=%s model=%s cost=%s",
                self._ledger_timeout,
                tenant_id,
                model.value,
                cost,
            )
        except Exception as e:
            logger.warning(
                "Ledger append failed: tenant=%s model=%s cost=%s error=%s",
                tenant_id,
                model.value,
                cost,
                e,
            )
        else:
            logger.debug("Recorded cost: tenant=%s model=%s cost=%s", tenant_id, model.value, cost)
        return record
