"""
Error taxonomy for the scoring engine.

Errors are raised at the point of violation and propagate unchanged;
the engine performs no local recovery.
"""


class KaizenError(Exception):
    """Base class for all engine errors."""


class InvalidRuleKind(KaizenError, ValueError):
    """Conversion rule is neither simple nor tiered."""

    def __init__(self, kind):
        self.kind = kind
        super().__init__(f"Invalid conversion rule type: {kind!r}")


class DuplicateKpi(KaizenError):
    """A KPI with the same id already exists in the working set."""

    def __init__(self, kpi_id: str):
        self.kpi_id = kpi_id
        super().__init__(f"KPI with id {kpi_id} already exists")


class UnknownKpi(KaizenError):
    """No KPI with the given id exists in the working set."""

    def __init__(self, kpi_id: str):
        self.kpi_id = kpi_id
        super().__init__(f"KPI with id {kpi_id} not found")


class IncompatibleCalendar(KaizenError):
    """Two dates from different calendar systems were compared."""

    def __init__(self, first: str, second: str):
        self.calendars = (first, second)
        super().__init__(
            f"Cannot compare dates from different calendar systems: {first} and {second}"
        )


class InvalidChangeKind(KaizenError, ValueError):
    """Patch change kind is not add, remove or modify."""

    def __init__(self, kind):
        self.kind = kind
        super().__init__(f"Unknown change type: {kind!r}")


class InvalidPatchDetails(KaizenError, ValueError):
    """A KPI, patch or log payload failed validation."""


class UnknownRecord(KaizenError):
    """No log record or patch with the given id exists in its store."""

    def __init__(self, kind: str, record_id: str):
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind} with id {record_id} not found")


class DuplicateRecord(KaizenError):
    """A log record with the same id already exists in its store."""

    def __init__(self, kind: str, record_id: str):
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind} with id {record_id} already exists")
