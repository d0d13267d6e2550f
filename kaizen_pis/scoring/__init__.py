"""
Scoring and Aggregation

This module provides:
- Conversion of observed values into points
- Score aggregation by category and date range
- Per-KPI ranking, trends and period comparison
"""

from .calculator import ConversionEvaluator
from .aggregator import ScoreAggregator, DatedScore
from .analysis import (
    KPIScore,
    TrendPoint,
    PerformanceComparison,
    top_performing_kpis,
    kpi_trend,
    compare_performance
)

__all__ = [
    "ConversionEvaluator",
    "ScoreAggregator",
    "DatedScore",
    "KPIScore",
    "TrendPoint",
    "PerformanceComparison",
    "top_performing_kpis",
    "kpi_trend",
    "compare_performance"
]
