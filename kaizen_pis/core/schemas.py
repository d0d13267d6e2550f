"""
Pydantic Schemas for KPI, Log and Patch Payloads

These schemas validate the loosely-typed payloads that arrive from
callers (patch details, imported JSON) before they become entities.
Both the camelCase keys of the exchange format and snake_case field
names are accepted.
"""

from dataclasses import replace
from typing import Any, List, Literal, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .dates import FlexibleDate
from .entities import (
    ConversionRule,
    KPIAttribute,
    KPIDefinition,
    LogEntry,
    LogRecord,
    Patch,
    PatchChange,
    SimpleRule,
    Tier,
    TieredRule
)
from .exceptions import InvalidPatchDetails, InvalidRuleKind

ModelT = TypeVar("ModelT", bound=BaseModel)


def validate_payload(model: Type[ModelT], payload: Any) -> ModelT:
    """Validate a payload, raising InvalidPatchDetails on failure."""
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise InvalidPatchDetails(f"Invalid {model.__name__}: {exc}") from exc


class _Payload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


# =============================================================================
# Conversion Rule Schemas
# =============================================================================

class TierPayload(_Payload):
    """One band of a tiered conversion rule."""
    threshold: float
    points_per_unit: float = Field(alias="pointsPerUnit")


class ConversionRulePayload(_Payload):
    """
    Conversion rule as exchanged.

    The `type` tag is checked when the rule is built rather than during
    validation, so an unknown tag surfaces as InvalidRuleKind.
    """
    type: str
    points_per_unit: Optional[float] = Field(default=None, alias="pointsPerUnit")
    tiers: Optional[List[TierPayload]] = None

    def to_rule(self) -> ConversionRule:
        if self.type == SimpleRule.kind:
            return SimpleRule(points_per_unit=self.points_per_unit)
        if self.type == TieredRule.kind:
            return TieredRule(tiers=[
                Tier(threshold=tier.threshold, points_per_unit=tier.points_per_unit)
                for tier in self.tiers or []
            ])
        raise InvalidRuleKind(self.type)


class AttributePayload(_Payload):
    name: str
    type: Literal["modifier", "multiplier"]
    value: float

    def to_attribute(self) -> KPIAttribute:
        return KPIAttribute(name=self.name, kind=self.type, value=self.value)


# =============================================================================
# KPI Schemas
# =============================================================================

class KPIPayload(_Payload):
    """Full KPI definition, used for creation and patch `add` changes."""
    id: Optional[str] = None
    name: str
    category: str = Field(min_length=1)
    subcategory: Optional[str] = None
    data_type: Literal["number", "boolean", "string", "custom"] = Field(
        default="number", alias="dataType"
    )
    custom_data_type: Any = Field(default=None, alias="customDataType")
    conversion_rule: ConversionRulePayload = Field(alias="conversionRule")
    attributes: List[AttributePayload] = Field(default_factory=list)
    patch_version: Optional[str] = Field(default=None, alias="patchVersion")

    def to_definition(
        self,
        kpi_id: Optional[str] = None,
        patch_version: Optional[str] = None
    ) -> KPIDefinition:
        """
        Build the definition.

        `kpi_id` and `patch_version` fill in values the payload omits.
        """
        resolved_id = self.id or kpi_id
        if not resolved_id:
            raise InvalidPatchDetails(f"KPI '{self.name}' has no id")
        return KPIDefinition(
            id=resolved_id,
            name=self.name,
            category=self.category,
            subcategory=self.subcategory,
            data_type=self.data_type,
            custom_data_type=self.custom_data_type,
            conversion_rule=self.conversion_rule.to_rule(),
            attributes=[attr.to_attribute() for attr in self.attributes],
            patch_version=self.patch_version or patch_version or ""
        )


class KPIUpdate(_Payload):
    """
    Field-level update descriptor for an existing KPI.

    Each field that is present replaces the corresponding field of the
    KPI entirely; nested values such as the conversion rule are not
    merged. Unknown fields, including `id`, are rejected.
    """
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    name: Optional[str] = None
    category: Optional[str] = Field(default=None, min_length=1)
    subcategory: Optional[str] = None
    data_type: Optional[Literal["number", "boolean", "string", "custom"]] = Field(
        default=None, alias="dataType"
    )
    custom_data_type: Any = Field(default=None, alias="customDataType")
    conversion_rule: Optional[ConversionRulePayload] = Field(
        default=None, alias="conversionRule"
    )
    attributes: Optional[List[AttributePayload]] = None
    patch_version: Optional[str] = Field(default=None, alias="patchVersion")

    def apply_to(self, kpi: KPIDefinition, patch_version: Optional[str] = None) -> KPIDefinition:
        """
        Return a copy of `kpi` with the provided fields replaced.

        `patch_version` stamps the copy unless the update sets its own.
        """
        changes = {}
        if patch_version and "patch_version" not in self.model_fields_set:
            changes["patch_version"] = patch_version
        for name in self.model_fields_set:
            value = getattr(self, name)
            if name == "conversion_rule":
                if value is None:
                    raise InvalidPatchDetails(f"KPI {kpi.id}: conversion rule cannot be removed")
                value = value.to_rule()
            elif name == "attributes":
                value = [attr.to_attribute() for attr in value or []]
            elif name in ("name", "category", "data_type", "patch_version") and value is None:
                raise InvalidPatchDetails(f"KPI {kpi.id}: {name} cannot be removed")
            changes[name] = value
        return replace(kpi, **changes)


# =============================================================================
# Log Schemas
# =============================================================================

class FlexibleDatePayload(_Payload):
    year: int
    month: int = Field(ge=1, le=12)
    day: int = Field(ge=1, le=31)
    calendar: str = "gregorian"

    def to_date(self) -> FlexibleDate:
        return FlexibleDate(
            year=self.year, month=self.month, day=self.day, calendar=self.calendar
        )


class LogEntryPayload(_Payload):
    kpi_id: str = Field(alias="kpiId")
    value: Any = None
    attributes: dict = Field(default_factory=dict)

    def to_entry(self) -> LogEntry:
        return LogEntry(kpi_id=self.kpi_id, value=self.value, attributes=dict(self.attributes))


class LogPayload(_Payload):
    id: Optional[str] = None
    date: FlexibleDatePayload
    patch_version: str = Field(alias="patchVersion", min_length=1)
    entries: List[LogEntryPayload]

    def to_record(self) -> LogRecord:
        record = LogRecord(date=self.date.to_date(), patch_version=self.patch_version)
        if self.id:
            record.id = self.id
        for entry in self.entries:
            record.add_entry(entry.to_entry())
        return record


# =============================================================================
# Patch Schemas
# =============================================================================

class PatchChangePayload(_Payload):
    type: str
    kpi_id: str = Field(alias="kpiId")
    details: dict = Field(default_factory=dict)

    def to_change(self) -> PatchChange:
        return PatchChange(kind=self.type, kpi_id=self.kpi_id, details=dict(self.details))


class PatchPayload(_Payload):
    id: Optional[str] = None
    season: int = Field(ge=0)
    major_version: int = Field(alias="majorVersion", ge=0)
    minor_version: int = Field(alias="minorVersion", ge=0)
    changes: List[PatchChangePayload] = Field(default_factory=list)

    def to_patch(self) -> Patch:
        patch = Patch(
            season=self.season,
            major_version=self.major_version,
            minor_version=self.minor_version,
            changes=[change.to_change() for change in self.changes]
        )
        if self.id:
            patch.id = self.id
        return patch


# =============================================================================
# Exchange Document
# =============================================================================

class ExportDocument(_Payload):
    """Library state as exported by `KPILibrary.export_data`."""
    kpis: List[KPIPayload] = Field(default_factory=list)
    patches: List[PatchPayload] = Field(default_factory=list)
    logs: List[LogPayload] = Field(default_factory=list)
