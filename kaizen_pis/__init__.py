"""
Kaizen-PIs

Versioned performance indicators with pluggable point conversion,
patch-based KPI evolution and score aggregation across categories
and time ranges.
"""

__version__ = "0.1.0"

from .core.dates import FlexibleDate, create_flexible_date, compare_flexible_dates
from .core.entities import (
    KPIDefinition,
    KPIAttribute,
    SimpleRule,
    TieredRule,
    Tier,
    LogEntry,
    LogRecord,
    Patch,
    PatchChange,
    PatchVersion
)
from .scoring.calculator import ConversionEvaluator
from .scoring.aggregator import ScoreAggregator
from .patching.applier import PatchApplier
from .library import KPILibrary

__all__ = [
    "FlexibleDate",
    "create_flexible_date",
    "compare_flexible_dates",
    "KPIDefinition",
    "KPIAttribute",
    "SimpleRule",
    "TieredRule",
    "Tier",
    "LogEntry",
    "LogRecord",
    "Patch",
    "PatchChange",
    "PatchVersion",
    "ConversionEvaluator",
    "ScoreAggregator",
    "PatchApplier",
    "KPILibrary"
]
