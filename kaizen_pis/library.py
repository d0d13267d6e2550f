"""
KPI Library

High-level interface that wires the stores, patching and scoring
together:
- KPI definitions with creation-time validation
- Patch registration (applied atomically)
- Log records referencing known KPIs only
- Scores, aggregations and per-KPI analysis
- JSON export and import
"""

import json
import logging
from typing import Any, Optional, Union

from .config.settings import get_settings
from .core.dates import FlexibleDate
from .core.entities import KPIDefinition, LogEntry, LogRecord, Patch
from .core.exceptions import UnknownKpi
from .core.schemas import (
    ExportDocument,
    KPIPayload,
    LogEntryPayload,
    LogPayload,
    PatchPayload,
    validate_payload
)
from .patching.applier import PatchApplier
from .scoring.aggregator import DatedScore, ScoreAggregator
from .scoring.analysis import (
    KPIScore,
    PerformanceComparison,
    TrendPoint,
    compare_performance,
    kpi_trend,
    top_performing_kpis
)
from .scoring.calculator import ConversionEvaluator
from .storage import KPIStore, LogStore, PatchStore

logger = logging.getLogger(__name__)


class KPILibrary:
    """
    Main entry point for managing KPIs, logs and patches.

    The library owns its stores and hands the engine snapshots of
    them on every call.
    """

    def __init__(self):
        self._kpis = KPIStore()
        self._logs = LogStore()
        self._patches = PatchStore()
        self._evaluator = ConversionEvaluator()
        self._aggregator = ScoreAggregator(self._evaluator)
        self._applier = PatchApplier()

    # =========================================================================
    # KPIs
    # =========================================================================

    def create_kpi(self, data: Union[dict, KPIDefinition]) -> KPIDefinition:
        """
        Register a new KPI.

        A payload without a patch version is stamped with the current
        patch version, if any.
        """
        if isinstance(data, KPIDefinition):
            kpi = data
        else:
            current = self._patches.current()
            payload = validate_payload(KPIPayload, data)
            kpi = payload.to_definition(patch_version=current.version if current else None)
        return self._kpis.create(kpi)

    def get_kpi(self, kpi_id: str) -> Optional[KPIDefinition]:
        return self._kpis.get(kpi_id)

    def update_kpi(self, kpi_id: str, data: dict) -> KPIDefinition:
        return self._kpis.update(kpi_id, data)

    def delete_kpi(self, kpi_id: str) -> None:
        self._kpis.delete(kpi_id)

    def kpis(self) -> list[KPIDefinition]:
        return self._kpis.all()

    def kpis_by_category(self, category: str) -> list[KPIDefinition]:
        return [kpi for kpi in self._kpis.all() if kpi.category == category]

    def kpis_by_patch(self, patch_version: str) -> list[KPIDefinition]:
        return [kpi for kpi in self._kpis.all() if kpi.patch_version == patch_version]

    def categories(self, patch_version: Optional[str] = None) -> dict[str, list[str]]:
        return self._kpis.categories(patch_version)

    # =========================================================================
    # Patches
    # =========================================================================

    def create_patch(self, data: Union[dict, Patch]) -> Patch:
        """
        Register a patch and apply it to the KPI set.

        If any change fails, the patch is not recorded and the KPI set
        is left as it was.
        """
        patch = data if isinstance(data, Patch) else validate_payload(PatchPayload, data).to_patch()

        definitions = self._applier.apply_patch(self._kpis.snapshot(), patch)
        self._kpis.replace_all(definitions)
        return self._patches.create(patch)

    def get_patch(self, patch_id: str) -> Optional[Patch]:
        return self._patches.get(patch_id)

    def current_patch(self) -> Optional[Patch]:
        return self._patches.current()

    def patch_history(self) -> list[Patch]:
        return self._patches.history()

    # =========================================================================
    # Logs
    # =========================================================================

    def create_log(self, data: Union[dict, LogRecord]) -> LogRecord:
        """
        Register a log record.

        Raises:
            UnknownKpi: an entry references a KPI that does not exist.
            DuplicateRecord: a log with the same id is already stored.
        """
        record = data if isinstance(data, LogRecord) else validate_payload(LogPayload, data).to_record()
        self._check_entries(record.entries)
        return self._logs.create(record)

    def get_log(self, log_id: str) -> Optional[LogRecord]:
        return self._logs.get(log_id)

    def update_log(
        self,
        log_id: str,
        date: Optional[FlexibleDate] = None,
        patch_version: Optional[str] = None,
        entries: Optional[list] = None
    ) -> LogRecord:
        """Replace the given fields of a log record. Entries may be dicts or LogEntry."""
        if entries is not None:
            entries = [
                entry if isinstance(entry, LogEntry)
                else validate_payload(LogEntryPayload, entry).to_entry()
                for entry in entries
            ]
            self._check_entries(entries)
        return self._logs.update(log_id, date=date, patch_version=patch_version, entries=entries)

    def delete_log(self, log_id: str) -> None:
        self._logs.delete(log_id)

    def latest_log(self) -> Optional[LogRecord]:
        records = self._logs.all()
        return records[-1] if records else None

    def logs_by_date_range(self, start: FlexibleDate, end: FlexibleDate) -> list[LogRecord]:
        return self._logs.by_date_range(start, end)

    def _check_entries(self, entries: list, kpis: Optional[KPIStore] = None) -> None:
        kpis = self._kpis if kpis is None else kpis
        for entry in entries:
            if entry.kpi_id not in kpis:
                raise UnknownKpi(entry.kpi_id)

    # =========================================================================
    # Scoring
    # =========================================================================

    def calculate_score(self, kpi: KPIDefinition, entry: LogEntry) -> float:
        return self._evaluator.score_entry(kpi, entry)

    def calculate_total_score(self, record: LogRecord) -> float:
        return self._aggregator.total_score(self._kpis.snapshot(), record)

    def summarize_by_category(self, records: Optional[list] = None) -> dict[str, float]:
        """Category totals over `records`, or over every log when omitted."""
        if records is None:
            records = self._logs.all()
        return self._aggregator.summarize_by_category(self._kpis.snapshot(), records)

    def summarize_by_time_range(self, start: FlexibleDate, end: FlexibleDate) -> list[DatedScore]:
        records = self._logs.by_date_range(start, end)
        return self._aggregator.summarize_by_time_range(
            self._kpis.snapshot(), records, start, end
        )

    def average_score_by_category(self, records: Optional[list] = None) -> dict[str, float]:
        """Category averages over `records`, or over every log when omitted."""
        if records is None:
            records = self._logs.all()
        return self._aggregator.average_score_by_category(self._kpis.snapshot(), records)

    def top_performing_kpis(
        self,
        start: FlexibleDate,
        end: FlexibleDate,
        count: Optional[int] = None
    ) -> list[KPIScore]:
        if count is None:
            count = get_settings().top_kpi_count
        records = self._logs.by_date_range(start, end)
        return top_performing_kpis(self._kpis.snapshot(), records, count, self._evaluator)

    def trends(self, kpi_id: str, start: FlexibleDate, end: FlexibleDate) -> list[TrendPoint]:
        records = self._logs.by_date_range(start, end)
        return kpi_trend(kpi_id, self._kpis.snapshot(), records)

    def compare_performance(
        self,
        kpi_id: str,
        period1: tuple,
        period2: tuple
    ) -> PerformanceComparison:
        """Compare a KPI's score over two (start, end) periods."""
        return compare_performance(
            kpi_id,
            self._kpis.snapshot(),
            self._logs.by_date_range(*period1),
            self._logs.by_date_range(*period2),
            self._evaluator
        )

    # =========================================================================
    # Export / Import
    # =========================================================================

    def export_data(self, start: FlexibleDate, end: FlexibleDate) -> str:
        """Serialize KPIs, the full patch history and logs within [start, end]."""
        document: dict[str, Any] = {
            "kpis": [kpi.to_dict() for kpi in self._kpis.all()],
            "patches": [patch.to_dict() for patch in self._patches.history()],
            "logs": [record.to_dict() for record in self._logs.by_date_range(start, end)]
        }
        return json.dumps(document)

    def import_data(self, json_string: str) -> None:
        """
        Load an exported document.

        Exported KPIs already reflect their patches, so patches are
        recorded in the history without being applied again. The
        document is staged in full before anything is committed; if any
        KPI or log is rejected the library is left as it was.

        Raises:
            DuplicateKpi: a KPI id is already in use.
            DuplicateRecord: a log id is already in use.
            UnknownKpi: a log entry references a KPI that does not exist.
        """
        document = validate_payload(ExportDocument, json.loads(json_string))

        kpis = KPIStore(self._kpis.all())
        for payload in document.kpis:
            kpis.create(payload.to_definition())

        patches = [payload.to_patch() for payload in document.patches]

        logs = LogStore(self._logs.snapshot().values())
        for payload in document.logs:
            record = payload.to_record()
            self._check_entries(record.entries, kpis)
            logs.create(record)

        self._kpis = kpis
        self._logs = logs
        for patch in patches:
            self._patches.create(patch)

        logger.info(
            "Imported %d KPI(s), %d patch(es), %d log(s)",
            len(document.kpis), len(document.patches), len(document.logs)
        )
