import pytest

from kaizen_pis.core.dates import FlexibleDate
from kaizen_pis.core.entities import (
    AttributeKind,
    KPIDefinition,
    LogEntry,
    LogRecord,
    Patch,
    PatchChange,
    PatchVersion,
    SimpleRule,
    Tier,
    TieredRule,
    ValueKind
)
from kaizen_pis.core.exceptions import InvalidPatchDetails, InvalidRuleKind
from kaizen_pis.core.schemas import (
    ConversionRulePayload,
    KPIPayload,
    LogPayload,
    PatchPayload,
    validate_payload
)


def _record():
    return LogRecord(
        date=FlexibleDate(2024, 3, 1),
        patch_version="1.0.0",
        entries=[LogEntry("pushups", 10), LogEntry("reading", 4)],
    )


def test_add_entry_replaces_existing_kpi_entry():
    record = _record()
    record.add_entry(LogEntry("pushups", 25, {"difficulty": 1.5}))
    record.add_entry(LogEntry("meditation", 15))

    assert [entry.kpi_id for entry in record.entries] == ["pushups", "reading", "meditation"]
    assert record.get_entry("pushups").value == 25


def test_update_and_delete_entry():
    record = _record()
    record.update_entry("reading", 9, {"note": "slow"})
    record.update_entry("walking", 3)

    assert record.get_entry("reading") == LogEntry("reading", 9, {"note": "slow"})
    assert record.get_entry("walking").attributes == {}
    assert record.delete_entry("reading") is True
    assert record.delete_entry("reading") is False
    assert record.get_entry("reading") is None


def test_records_get_unique_ids():
    assert _record().id != _record().id


def test_kpi_requires_category():
    with pytest.raises(ValueError):
        KPIDefinition(id="k", name="K", category="")


def test_kpi_coerces_kinds():
    kpi = KPIDefinition(id="k", name="K", category="C", data_type="boolean", attributes=[])
    assert kpi.data_type is ValueKind.BOOLEAN
    assert kpi.attributes == ()
    assert kpi.conversion_rule == SimpleRule()


def test_kpi_to_dict_uses_exchange_keys():
    kpi = KPIDefinition(
        id="reading",
        name="Pages",
        category="Learning",
        subcategory="Books",
        conversion_rule=TieredRule(tiers=[Tier(10, 2)]),
        patch_version="1.0.0",
    )
    assert kpi.to_dict() == {
        "id": "reading",
        "name": "Pages",
        "category": "Learning",
        "subcategory": "Books",
        "dataType": "number",
        "conversionRule": {"type": "tiered", "tiers": [{"threshold": 10, "pointsPerUnit": 2}]},
        "attributes": [],
        "patchVersion": "1.0.0",
    }


def test_patch_version_label_and_changes():
    patch = Patch(season=1, major_version=0, minor_version=0)
    patch.add_change(PatchChange(kind="modify", kpi_id="456", details={"name": "Modified KPI"}))

    assert patch.version == "1.0.0"
    assert patch.version_key == PatchVersion(1, 0, 0)
    assert len(patch.changes) == 1
    assert patch.to_dict()["changes"] == [
        {"type": "modify", "kpiId": "456", "details": {"name": "Modified KPI"}}
    ]


@pytest.mark.parametrize("label", ["1.0", "1.0.0.1", "1.x.0", ""])
def test_patch_version_parse_rejects_malformed_labels(label):
    with pytest.raises(ValueError):
        PatchVersion.parse(label)


def test_kpi_payload_accepts_camel_and_snake_case():
    camel = validate_payload(KPIPayload, {
        "id": "k",
        "name": "K",
        "category": "C",
        "conversionRule": {"type": "simple", "pointsPerUnit": 3},
        "attributes": [{"name": "bonus", "type": "modifier", "value": 1}],
    })
    snake = validate_payload(KPIPayload, {
        "id": "k",
        "name": "K",
        "category": "C",
        "conversion_rule": {"type": "simple", "points_per_unit": 3},
        "attributes": [{"name": "bonus", "type": "modifier", "value": 1}],
    })

    assert camel.to_definition() == snake.to_definition()
    assert camel.to_definition().attributes[0].kind is AttributeKind.MODIFIER


def test_kpi_payload_without_id_needs_one_supplied():
    payload = validate_payload(KPIPayload, {
        "name": "K", "category": "C", "conversionRule": {"type": "simple"}
    })
    assert payload.to_definition(kpi_id="given", patch_version="2.0.0").patch_version == "2.0.0"
    with pytest.raises(InvalidPatchDetails):
        payload.to_definition()


def test_unknown_rule_tag_raises_invalid_rule_kind():
    payload = validate_payload(ConversionRulePayload, {"type": "logarithmic"})
    with pytest.raises(InvalidRuleKind):
        payload.to_rule()


def test_invalid_attribute_type_fails_validation():
    with pytest.raises(InvalidPatchDetails):
        validate_payload(KPIPayload, {
            "id": "k",
            "name": "K",
            "category": "C",
            "conversionRule": {"type": "simple"},
            "attributes": [{"name": "bonus", "type": "exponent", "value": 2}],
        })


def test_log_payload_keeps_last_entry_per_kpi():
    record = validate_payload(LogPayload, {
        "date": {"year": 2024, "month": 3, "day": 1},
        "patchVersion": "1.0.0",
        "entries": [
            {"kpiId": "pushups", "value": 10},
            {"kpiId": "pushups", "value": 12},
        ],
    }).to_record()

    assert record.entries == [LogEntry("pushups", 12)]


def test_patch_payload_builds_changes():
    patch = validate_payload(PatchPayload, {
        "season": 2,
        "majorVersion": 1,
        "minorVersion": 3,
        "changes": [{"type": "remove", "kpiId": "pushups"}],
    }).to_patch()

    assert patch.version == "2.1.3"
    assert patch.changes[0].kpi_id == "pushups"
