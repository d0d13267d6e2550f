"""
Score Calculator

Converts observed KPI values into point scores:
- Base score from the KPI's conversion rule (simple or tiered)
- KPI attributes applied in declaration order (modifiers add, multipliers multiply)
- Numeric log-entry attributes applied as multipliers
"""

import logging
from typing import Any, Iterable, Mapping, Optional

from ..core.entities import (
    AttributeKind,
    ConversionRule,
    KPIDefinition,
    LogEntry,
    SimpleRule,
    TieredRule
)
from ..core.exceptions import InvalidRuleKind

logger = logging.getLogger(__name__)


def is_numeric(value: Any) -> bool:
    """True for int and float values. Booleans are not numeric."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class ConversionEvaluator:
    """
    Calculates the score of a single observation.

    The evaluator holds no state; one instance can be shared freely.
    Scores are returned unrounded.
    """

    def score(
        self,
        kpi: KPIDefinition,
        observed_value: float,
        kpi_attributes: Optional[Iterable] = None,
        entry_attributes: Optional[Mapping[str, Any]] = None
    ) -> float:
        """
        Score one observed value for a KPI.

        When `kpi_attributes` is None the KPI's own attributes are used.
        Missing entry attributes are treated as empty. A non-numeric
        observed value scores 0 and no attributes are applied to it.

        Raises:
            InvalidRuleKind: the KPI's rule is neither simple nor tiered.
        """
        if not is_numeric(observed_value):
            logger.debug("KPI %s: non-numeric value %r scores 0", kpi.id, observed_value)
            return 0

        score = self.base_score(kpi.conversion_rule, observed_value)

        if kpi_attributes is None:
            kpi_attributes = kpi.attributes

        # Order matters once modifiers and multipliers are mixed
        for attr in kpi_attributes:
            if attr.kind == AttributeKind.MODIFIER:
                score += attr.value
            elif attr.kind == AttributeKind.MULTIPLIER:
                score *= attr.value

        for value in (entry_attributes or {}).values():
            if is_numeric(value):
                score *= value

        return score

    def score_entry(self, kpi: KPIDefinition, entry: LogEntry) -> float:
        """Score a log entry with the KPI's attributes and the entry's attributes."""
        return self.score(kpi, entry.value, kpi.attributes, entry.attributes)

    def base_score(self, rule: ConversionRule, observed_value: float) -> float:
        """Score before any attributes are applied."""
        if isinstance(rule, SimpleRule):
            points = 1 if rule.points_per_unit is None else rule.points_per_unit
            return observed_value * points

        if isinstance(rule, TieredRule):
            return self._tiered_score(rule, observed_value)

        kind = getattr(rule, "kind", type(rule).__name__)
        logger.warning("Rejecting conversion rule of kind %r", kind)
        raise InvalidRuleKind(kind)

    def _tiered_score(self, rule: TieredRule, observed_value: float) -> float:
        """
        Walk the tiers in declared order.

        Each tier consumes up to its threshold from the remaining value.
        Value left over after the last tier adds nothing.
        """
        score = 0
        remaining = observed_value

        for tier in rule.tiers:
            if remaining <= 0:
                break

            consumed = min(remaining, tier.threshold)
            score += consumed * tier.points_per_unit
            remaining -= consumed

        return score
