"""
Core Entities - KPI Definitions, Logs and Patches

This module defines the plain records the engine operates on. The
records are owned by the caller (see `kaizen_pis.storage`); the engine
only reads them for the duration of a call.

Entities:
- KPIDefinition: a categorized indicator with a conversion rule
- SimpleRule / TieredRule: the closed family of conversion rules
- KPIAttribute: modifier or multiplier attached to a KPI
- LogEntry / LogRecord: dated observations for one or more KPIs
- Patch / PatchChange / PatchVersion: versioned KPI changes
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Optional, Union
from uuid import uuid4

from .dates import FlexibleDate
from .exceptions import InvalidChangeKind


class ValueKind(Enum):
    """Declared kind of the values logged for a KPI."""
    NUMBER = "number"
    BOOLEAN = "boolean"
    STRING = "string"
    CUSTOM = "custom"


class AttributeKind(Enum):
    """How a KPI attribute combines with the running score."""
    MODIFIER = "modifier"
    MULTIPLIER = "multiplier"


class ChangeKind(Enum):
    """Kinds of change a patch can carry."""
    ADD = "add"
    REMOVE = "remove"
    MODIFY = "modify"


@dataclass(frozen=True)
class Tier:
    """A band of a tiered rule: up to `threshold` units at `points_per_unit`."""
    threshold: float
    points_per_unit: float

    def to_dict(self) -> dict:
        return {"threshold": self.threshold, "pointsPerUnit": self.points_per_unit}


@dataclass(frozen=True)
class SimpleRule:
    """Linear conversion: value times points per unit (1 when absent)."""
    kind: ClassVar[str] = "simple"

    points_per_unit: Optional[float] = None

    def to_dict(self) -> dict:
        payload = {"type": self.kind}
        if self.points_per_unit is not None:
            payload["pointsPerUnit"] = self.points_per_unit
        return payload


@dataclass(frozen=True)
class TieredRule:
    """
    Banded conversion.

    Tiers are consumed in the order given, never re-sorted by threshold.
    """
    kind: ClassVar[str] = "tiered"

    tiers: tuple = ()

    def __post_init__(self):
        object.__setattr__(self, "tiers", tuple(self.tiers))

    def to_dict(self) -> dict:
        return {"type": self.kind, "tiers": [tier.to_dict() for tier in self.tiers]}


ConversionRule = Union[SimpleRule, TieredRule]


@dataclass(frozen=True)
class KPIAttribute:
    """A modifier (additive) or multiplier applied to every score of a KPI."""
    name: str
    kind: AttributeKind
    value: float

    def __post_init__(self):
        if isinstance(self.kind, str):
            object.__setattr__(self, "kind", AttributeKind(self.kind))

    def to_dict(self) -> dict:
        return {"name": self.name, "type": self.kind.value, "value": self.value}


@dataclass(frozen=True)
class KPIDefinition:
    """
    A Kaizen performance indicator.

    Definitions are immutable; patches produce new definitions instead
    of editing existing ones in place. Only numeric values are scored,
    whatever `data_type` declares.
    """
    id: str
    name: str
    category: str
    conversion_rule: ConversionRule = field(default_factory=SimpleRule)
    data_type: ValueKind = ValueKind.NUMBER
    subcategory: Optional[str] = None
    custom_data_type: Any = None
    attributes: tuple = ()
    patch_version: str = ""

    def __post_init__(self):
        if not self.id:
            raise ValueError("KPI id must not be empty")
        if not self.category:
            raise ValueError(f"KPI {self.id} must have a category")
        if isinstance(self.data_type, str):
            object.__setattr__(self, "data_type", ValueKind(self.data_type))
        object.__setattr__(self, "attributes", tuple(self.attributes or ()))

    def to_dict(self) -> dict:
        payload = {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "dataType": self.data_type.value,
            "conversionRule": self.conversion_rule.to_dict(),
            "attributes": [attr.to_dict() for attr in self.attributes],
            "patchVersion": self.patch_version
        }
        if self.subcategory is not None:
            payload["subcategory"] = self.subcategory
        if self.custom_data_type is not None:
            payload["customDataType"] = self.custom_data_type
        return payload


@dataclass
class LogEntry:
    """An observed value for one KPI, with optional per-entry attributes."""
    kpi_id: str
    value: Any
    attributes: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        payload = {"kpiId": self.kpi_id, "value": self.value}
        if self.attributes:
            payload["attributes"] = dict(self.attributes)
        return payload


@dataclass
class LogRecord:
    """
    A dated set of observations.

    Entries hold at most one observation per KPI id; adding an entry for
    a KPI that is already present replaces it (last write wins).
    """
    date: FlexibleDate
    patch_version: str
    entries: list = field(default_factory=list)
    id: str = field(default_factory=lambda: str(uuid4()))

    def add_entry(self, entry: LogEntry) -> None:
        """Add an entry, replacing any existing entry for the same KPI."""
        for index, existing in enumerate(self.entries):
            if existing.kpi_id == entry.kpi_id:
                self.entries[index] = entry
                return
        self.entries.append(entry)

    def update_entry(self, kpi_id: str, value: Any, attributes: dict = None) -> None:
        """Set the value and attributes for a KPI, adding the entry if absent."""
        self.add_entry(LogEntry(kpi_id=kpi_id, value=value, attributes=attributes or {}))

    def delete_entry(self, kpi_id: str) -> bool:
        """Remove the entry for a KPI. Returns True if one was removed."""
        remaining = [e for e in self.entries if e.kpi_id != kpi_id]
        removed = len(remaining) != len(self.entries)
        self.entries = remaining
        return removed

    def get_entry(self, kpi_id: str) -> Optional[LogEntry]:
        return next((e for e in self.entries if e.kpi_id == kpi_id), None)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "date": self.date.to_dict(),
            "patchVersion": self.patch_version,
            "entries": [entry.to_dict() for entry in self.entries]
        }


@dataclass(frozen=True, order=True)
class PatchVersion:
    """
    Three-part patch version.

    Ordering compares season, major and minor as integers, so 1.0.10
    sorts after 1.0.9.
    """
    season: int
    major: int
    minor: int

    def __str__(self) -> str:
        return f"{self.season}.{self.major}.{self.minor}"

    @classmethod
    def parse(cls, label: str) -> "PatchVersion":
        """Parse a "season.major.minor" label."""
        parts = str(label).split(".")
        if len(parts) != 3:
            raise ValueError(f"Patch version '{label}' must have season.major.minor")
        try:
            season, major, minor = (int(part) for part in parts)
        except ValueError as exc:
            raise ValueError(f"Patch version '{label}' must contain integers") from exc
        return cls(season=season, major=major, minor=minor)


@dataclass
class PatchChange:
    """A single add, remove or modify operation against one KPI id."""
    kind: ChangeKind
    kpi_id: str
    details: dict = field(default_factory=dict)

    def __post_init__(self):
        if not isinstance(self.kind, ChangeKind):
            try:
                self.kind = ChangeKind(self.kind)
            except ValueError:
                raise InvalidChangeKind(self.kind) from None

    def to_dict(self) -> dict:
        return {"type": self.kind.value, "kpiId": self.kpi_id, "details": self.details}


@dataclass
class Patch:
    """A versioned bundle of KPI changes, applied in list order."""
    season: int
    major_version: int
    minor_version: int
    changes: list = field(default_factory=list)
    id: str = field(default_factory=lambda: str(uuid4()))

    @property
    def version_key(self) -> PatchVersion:
        return PatchVersion(self.season, self.major_version, self.minor_version)

    @property
    def version(self) -> str:
        """Version label in the form "season.major.minor"."""
        return str(self.version_key)

    def add_change(self, change: PatchChange) -> None:
        self.changes.append(change)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "season": self.season,
            "majorVersion": self.major_version,
            "minorVersion": self.minor_version,
            "changes": [change.to_dict() for change in self.changes],
            "version": self.version
        }
