"""
Per-KPI Analysis

Helpers that look at a single KPI across many records:
- Ranking KPIs by accumulated score
- Value trend for one KPI
- Score comparison between two periods
"""

from dataclasses import dataclass
from typing import Iterable, Optional

from ..core.dates import FlexibleDate
from ..core.entities import KPIDefinition, LogRecord
from ..core.exceptions import UnknownKpi
from .aggregator import KPISet, index_kpis
from .calculator import ConversionEvaluator, is_numeric


@dataclass(frozen=True)
class KPIScore:
    """Accumulated score of one KPI."""
    kpi: KPIDefinition
    score: float


@dataclass(frozen=True)
class TrendPoint:
    """Observed value of one KPI in one record."""
    date: FlexibleDate
    value: float


@dataclass(frozen=True)
class PerformanceComparison:
    """Scores of one KPI over two periods."""
    period1_score: float
    period2_score: float
    percentage_change: Optional[float]  # None when period 1 scored zero

    def to_dict(self) -> dict:
        return {
            "period1Score": self.period1_score,
            "period2Score": self.period2_score,
            "percentageChange": self.percentage_change
        }


def kpi_score(
    kpi: KPIDefinition,
    records: Iterable[LogRecord],
    evaluator: Optional[ConversionEvaluator] = None
) -> float:
    """Sum of a KPI's entry scores across records."""
    evaluator = evaluator or ConversionEvaluator()
    total = 0
    for record in records:
        entry = record.get_entry(kpi.id)
        if entry is not None:
            total += evaluator.score_entry(kpi, entry)
    return total


def top_performing_kpis(
    kpis: KPISet,
    records: Iterable[LogRecord],
    count: int,
    evaluator: Optional[ConversionEvaluator] = None
) -> list[KPIScore]:
    """The `count` highest-scoring KPIs, best first."""
    records = list(records)
    scores = [
        KPIScore(kpi=kpi, score=kpi_score(kpi, records, evaluator))
        for kpi in index_kpis(kpis).values()
    ]
    scores.sort(key=lambda item: item.score, reverse=True)
    return scores[:count]


def kpi_trend(kpi_id: str, kpis: KPISet, records: Iterable[LogRecord]) -> list[TrendPoint]:
    """
    Observed values of one KPI, one point per record.

    Records without a numeric entry for the KPI contribute a value of 0.
    """
    if kpi_id not in index_kpis(kpis):
        raise UnknownKpi(kpi_id)

    points = []
    for record in records:
        entry = record.get_entry(kpi_id)
        points.append(TrendPoint(
            date=record.date,
            value=entry.value if entry is not None and is_numeric(entry.value) else 0
        ))
    return points


def compare_performance(
    kpi_id: str,
    kpis: KPISet,
    period1_records: Iterable[LogRecord],
    period2_records: Iterable[LogRecord],
    evaluator: Optional[ConversionEvaluator] = None
) -> PerformanceComparison:
    """Compare a KPI's accumulated score between two sets of records."""
    kpi = index_kpis(kpis).get(kpi_id)
    if kpi is None:
        raise UnknownKpi(kpi_id)

    period1_score = kpi_score(kpi, period1_records, evaluator)
    period2_score = kpi_score(kpi, period2_records, evaluator)

    percentage_change = None
    if period1_score:
        percentage_change = (period2_score - period1_score) / period1_score * 100

    return PerformanceComparison(
        period1_score=period1_score,
        period2_score=period2_score,
        percentage_change=percentage_change
    )
