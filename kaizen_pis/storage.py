"""
In-Memory Stores

Caller-owned, id-keyed arenas for KPIs, log records and patches.
The engine never holds these; callers pass snapshots into scoring
and patching calls.

Stores are single-writer objects with no locking.
"""

from functools import cmp_to_key
from typing import Iterable, Optional, Union

from .core.dates import FlexibleDate, compare_flexible_dates
from .core.entities import KPIDefinition, LogRecord, Patch, PatchVersion
from .core.exceptions import DuplicateKpi, DuplicateRecord, UnknownKpi, UnknownRecord
from .core.schemas import KPIUpdate, validate_payload
from .patching.history import find_patch_by_version, sort_patches

_by_date = cmp_to_key(lambda a, b: compare_flexible_dates(a.date, b.date))


class KPIStore:
    """KPI definitions keyed by id."""

    def __init__(self, kpis: Iterable[KPIDefinition] = ()):
        self._kpis: dict[str, KPIDefinition] = {}
        for kpi in kpis:
            self.create(kpi)

    def create(self, kpi: KPIDefinition) -> KPIDefinition:
        if kpi.id in self._kpis:
            raise DuplicateKpi(kpi.id)
        self._kpis[kpi.id] = kpi
        return kpi

    def get(self, kpi_id: str) -> Optional[KPIDefinition]:
        return self._kpis.get(kpi_id)

    def update(self, kpi_id: str, data: Union[dict, KPIUpdate]) -> KPIDefinition:
        """Replace the fields present in `data` (shallow, whole-field replacement)."""
        kpi = self._kpis.get(kpi_id)
        if kpi is None:
            raise UnknownKpi(kpi_id)
        if not isinstance(data, KPIUpdate):
            data = validate_payload(KPIUpdate, data)
        updated = data.apply_to(kpi)
        self._kpis[kpi_id] = updated
        return updated

    def delete(self, kpi_id: str) -> None:
        if kpi_id not in self._kpis:
            raise UnknownKpi(kpi_id)
        del self._kpis[kpi_id]

    def all(self) -> list[KPIDefinition]:
        return list(self._kpis.values())

    def snapshot(self) -> dict[str, KPIDefinition]:
        """A copy of the id-keyed definitions, safe to hand to the engine."""
        return dict(self._kpis)

    def replace_all(self, definitions: dict[str, KPIDefinition]) -> None:
        """Swap in a new definition set, e.g. the result of a patch."""
        self._kpis = dict(definitions)

    def categories(self, patch_version: Optional[str] = None) -> dict[str, list[str]]:
        """Category to sorted subcategories, optionally limited to one patch version."""
        categories: dict[str, set] = {}
        for kpi in self._kpis.values():
            if patch_version and kpi.patch_version != patch_version:
                continue
            subcategories = categories.setdefault(kpi.category, set())
            if kpi.subcategory:
                subcategories.add(kpi.subcategory)
        return {category: sorted(subs) for category, subs in categories.items()}

    def __len__(self) -> int:
        return len(self._kpis)

    def __contains__(self, kpi_id: str) -> bool:
        return kpi_id in self._kpis


class LogStore:
    """Log records keyed by id."""

    def __init__(self, records: Iterable[LogRecord] = ()):
        self._logs: dict[str, LogRecord] = {}
        for record in records:
            self.create(record)

    def create(self, record: LogRecord) -> LogRecord:
        if record.id in self._logs:
            raise DuplicateRecord("Log", record.id)
        self._logs[record.id] = record
        return record

    def get(self, log_id: str) -> Optional[LogRecord]:
        return self._logs.get(log_id)

    def update(
        self,
        log_id: str,
        date: Optional[FlexibleDate] = None,
        patch_version: Optional[str] = None,
        entries: Optional[list] = None
    ) -> LogRecord:
        """Replace the given fields of a record."""
        record = self._logs.get(log_id)
        if record is None:
            raise UnknownRecord("Log", log_id)
        if date is not None:
            record.date = date
        if patch_version is not None:
            record.patch_version = patch_version
        if entries is not None:
            record.entries = []
            for entry in entries:
                record.add_entry(entry)
        return record

    def delete(self, log_id: str) -> None:
        if log_id not in self._logs:
            raise UnknownRecord("Log", log_id)
        del self._logs[log_id]

    def snapshot(self) -> dict[str, LogRecord]:
        return dict(self._logs)

    def all(self) -> list[LogRecord]:
        """All records, oldest first."""
        return sorted(self._logs.values(), key=_by_date)

    def by_date_range(self, start: FlexibleDate, end: FlexibleDate) -> list[LogRecord]:
        """Records dated within [start, end], oldest first."""
        return [
            record for record in self.all()
            if compare_flexible_dates(record.date, start) >= 0
            and compare_flexible_dates(record.date, end) <= 0
        ]

    def __len__(self) -> int:
        return len(self._logs)


class PatchStore:
    """Registered patches; the most recently created one is current."""

    def __init__(self):
        self._patches: dict[str, Patch] = {}
        self._current: Optional[Patch] = None

    def create(self, patch: Patch) -> Patch:
        self._patches[patch.id] = patch
        self._current = patch
        return patch

    def get(self, patch_id: str) -> Optional[Patch]:
        return self._patches.get(patch_id)

    def current(self) -> Optional[Patch]:
        return self._current

    def history(self) -> list[Patch]:
        """All patches in version order."""
        return sort_patches(self._patches.values())

    def find_by_version(self, version: Union[str, PatchVersion]) -> Optional[Patch]:
        return find_patch_by_version(self._patches.values(), version)

    def __len__(self) -> int:
        return len(self._patches)
