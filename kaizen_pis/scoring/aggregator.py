"""
Score Aggregation

Summarizes scores across log records:
- Total score per record
- Scores grouped by KPI category
- Per-date totals over an inclusive date range
- Per-category averages over a set of records
"""

import logging
from dataclasses import dataclass
from functools import cmp_to_key
from typing import Iterable, Mapping, Optional, Union

from ..core.dates import FlexibleDate, compare_flexible_dates
from ..core.entities import KPIDefinition, LogRecord
from .calculator import ConversionEvaluator

logger = logging.getLogger(__name__)

KPISet = Union[Mapping[str, KPIDefinition], Iterable[KPIDefinition]]


def index_kpis(kpis: KPISet) -> Mapping[str, KPIDefinition]:
    """Return an id-keyed view of a KPI set given as a mapping or an iterable."""
    if isinstance(kpis, Mapping):
        return kpis
    return {kpi.id: kpi for kpi in kpis}


@dataclass(frozen=True)
class DatedScore:
    """Total score of one log record."""
    date: FlexibleDate
    total_score: float

    def to_dict(self) -> dict:
        return {"date": self.date.to_dict(), "totalScore": self.total_score}


class ScoreAggregator:
    """
    Aggregates record scores by category and by date.

    All methods are read-only over the KPI set and records they are
    given. Entries whose KPI id is not in the set are skipped.
    """

    def __init__(self, evaluator: Optional[ConversionEvaluator] = None):
        self._evaluator = evaluator or ConversionEvaluator()

    def total_score(self, kpis: KPISet, record: LogRecord) -> float:
        """Sum of entry scores for a single record."""
        by_id = index_kpis(kpis)
        total = 0
        for kpi, entry in self._scored_entries(by_id, record):
            total += self._evaluator.score_entry(kpi, entry)
        return total

    def scores_by_category(self, kpis: KPISet, record: LogRecord) -> dict[str, float]:
        """
        Entry scores of a record grouped by KPI category.

        Categories with no contributing entries are absent from the result.
        """
        by_id = index_kpis(kpis)
        scores: dict[str, float] = {}
        for kpi, entry in self._scored_entries(by_id, record):
            score = self._evaluator.score_entry(kpi, entry)
            scores[kpi.category] = scores.get(kpi.category, 0) + score
        return scores

    def summarize_by_category(
        self,
        kpis: KPISet,
        records: Iterable[LogRecord]
    ) -> dict[str, float]:
        """Category totals accumulated across all records."""
        by_id = index_kpis(kpis)
        summary: dict[str, float] = {}
        for record in records:
            for category, score in self.scores_by_category(by_id, record).items():
                summary[category] = summary.get(category, 0) + score
        return summary

    def summarize_by_time_range(
        self,
        kpis: KPISet,
        records: Iterable[LogRecord],
        start: FlexibleDate,
        end: FlexibleDate
    ) -> list[DatedScore]:
        """
        Total score per record dated within [start, end], oldest first.

        Records sharing a date keep their input order.

        Raises:
            IncompatibleCalendar: a record date and a bound use different calendars.
        """
        by_id = index_kpis(kpis)
        in_range = [
            record for record in records
            if compare_flexible_dates(record.date, start) >= 0
            and compare_flexible_dates(record.date, end) <= 0
        ]

        results = [
            DatedScore(date=record.date, total_score=self.total_score(by_id, record))
            for record in in_range
        ]

        # sorted() is stable
        return sorted(
            results,
            key=cmp_to_key(lambda a, b: compare_flexible_dates(a.date, b.date))
        )

    def average_score_by_category(
        self,
        kpis: KPISet,
        records: Iterable[LogRecord]
    ) -> dict[str, float]:
        """
        Category totals divided by the total number of records.

        The divisor is the count of all records, not only those that
        contributed to a category.
        """
        records = list(records)
        summary = self.summarize_by_category(kpis, records)
        record_count = len(records)

        return {
            category: total / record_count
            for category, total in summary.items()
        }

    def _scored_entries(self, by_id: Mapping[str, KPIDefinition], record: LogRecord):
        """Yield (kpi, entry) pairs for entries that reference a known KPI."""
        for entry in record.entries:
            kpi = by_id.get(entry.kpi_id)
            if kpi is None:
                logger.debug(
                    "Skipping entry for unknown KPI %s in log %s", entry.kpi_id, record.id
                )
                continue
            yield kpi, entry
