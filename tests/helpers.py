"""Builders shared by the test modules."""

from kaizen_pis.core.dates import FlexibleDate
from kaizen_pis.core.entities import KPIDefinition, LogEntry, LogRecord, SimpleRule


def make_kpi(kpi_id, category="General", rule=None, attributes=(), **kwargs):
    return KPIDefinition(
        id=kpi_id,
        name=kwargs.pop("name", f"KPI {kpi_id}"),
        category=category,
        conversion_rule=rule or SimpleRule(),
        attributes=attributes,
        patch_version=kwargs.pop("patch_version", "1.0.0"),
        **kwargs
    )


def make_record(day, entries, month=7, year=2023, calendar="gregorian"):
    return LogRecord(
        date=FlexibleDate(year, month, day, calendar),
        patch_version="1.0.0",
        entries=[
            LogEntry(kpi_id=kpi_id, value=value)
            for kpi_id, value in entries
        ]
    )
