"""
Model Selector - Plan to model tier lookup.

The tier table is configuration: adding a plan means adding a row, nothing
else dispatches on plan identity.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from types import MappingProxyType

from dinnerwise.config.errors import ConfigurationError

from .models import ModelId, Plan

logger = logging.getLogger(__name__)

__all__ = ["ModelSelector"]


class ModelSelector:
    """
    Static plan -> ordered model tier table.

    Tiers are richest-first; the last model is the cheapest and most
    available. Order is never adjusted at runtime.
    """

    def __init__(self, tiers: Mapping[Plan, Sequence[ModelId]]) -> None:
        """
        Initialize selector.

        Args:
            tiers: Model list per plan, best quality first

        Raises:
            ConfigurationError: A plan is missing, empty or lists a model twice
        """
        table: dict[Plan, tuple[ModelId, ...]] = {}
        for plan in Plan:
            models = tuple(ModelId(m) for m in tiers.get(plan, ()))
            if not models:
                raise ConfigurationError(
                    f"No models configured for plan '{plan.value}'",
                    {"plan": plan.value},
                )
            if len(set(models)) != len(models):
                raise ConfigurationError(
                    f"Duplicate model in tier for plan '{plan.value}'",
                    {"plan": plan.value, "models": [m.value for m in models]},
                )
            table[plan] = models

        self._tiers: Mapping[Plan, tuple[ModelId, ...]] = MappingProxyType(table)
        logger.debug(
            "Model tiers: %s",
            {p.value: [m.value for m in ms] for p, ms in self._tiers.items()},
        )

    def models_for(self, plan: Plan) -> tuple[ModelId, ...]:
        """Ordered, non-empty model list for a plan."""
        return self._tiers[Plan(plan)]

    @property
    def models(self) -> frozenset[ModelId]:
        """Every model referenced by any tier."""
        return frozenset(m for ms in self._tiers.values() for m in ms)

    @property
    def tiers(self) -> Mapping[Plan, tuple[ModelId, ...]]:
        return self._tiers
