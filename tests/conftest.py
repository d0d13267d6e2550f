import pytest

from kaizen_pis.config.settings import get_settings
from kaizen_pis.core.entities import KPIAttribute, SimpleRule, Tier, TieredRule

from tests.helpers import make_kpi, make_record


@pytest.fixture(autouse=True)
def _fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def kpis():
    return {
        "1": make_kpi("1", category="Category A", rule=SimpleRule(points_per_unit=1)),
        "2": make_kpi("2", category="Category B", rule=SimpleRule(points_per_unit=2)),
    }


@pytest.fixture
def records():
    return [
        make_record(1, [("1", 5), ("2", 3)]),
        make_record(2, [("1", 3), ("2", 4)]),
    ]


@pytest.fixture
def tiered_kpi():
    return make_kpi(
        "reading",
        category="Learning",
        rule=TieredRule(tiers=[Tier(5, 2), Tier(10, 1)]),
    )


@pytest.fixture
def bonus_kpi():
    return make_kpi(
        "bonus",
        rule=SimpleRule(points_per_unit=2),
        attributes=[
            KPIAttribute(name="streak", kind="modifier", value=5),
            KPIAttribute(name="season", kind="multiplier", value=1.5),
        ],
    )
