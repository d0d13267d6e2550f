import pytest

from tests.helpers import make_kpi, make_record
from kaizen_pis.core.dates import FlexibleDate
from kaizen_pis.core.entities import SimpleRule
from kaizen_pis.core.exceptions import IncompatibleCalendar
from kaizen_pis.scoring.aggregator import DatedScore, ScoreAggregator


@pytest.fixture
def aggregator():
    return ScoreAggregator()


def test_total_score_sums_entries(aggregator, kpis, records):
    assert aggregator.total_score(kpis, records[0]) == pytest.approx(5 + 3 * 2)


def test_total_score_skips_unknown_kpis(aggregator, kpis):
    record = make_record(1, [("1", 5), ("ghost", 100)])
    assert aggregator.total_score(kpis, record) == pytest.approx(5)


def test_kpis_can_be_given_as_a_list(aggregator, kpis, records):
    assert aggregator.total_score(list(kpis.values()), records[1]) == pytest.approx(3 + 4 * 2)


def test_scores_by_category_omits_empty_categories(aggregator, kpis):
    record = make_record(1, [("1", 5)])
    assert aggregator.scores_by_category(kpis, record) == {"Category A": 5}


def test_scores_by_category_groups_kpis_sharing_a_category(aggregator):
    kpis = {
        "a": make_kpi("a", category="Fitness"),
        "b": make_kpi("b", category="Fitness", rule=SimpleRule(3)),
    }
    record = make_record(1, [("a", 2), ("b", 2)])
    assert aggregator.scores_by_category(kpis, record) == {"Fitness": pytest.approx(8)}


def test_summarize_by_category(aggregator, kpis, records):
    summary = aggregator.summarize_by_category(kpis, records)
    assert summary == {"Category A": 8, "Category B": 14}


def test_summarize_by_time_range(aggregator, kpis, records):
    summary = aggregator.summarize_by_time_range(
        kpis, records, FlexibleDate(2023, 7, 1), FlexibleDate(2023, 7, 2)
    )
    assert summary == [
        DatedScore(date=FlexibleDate(2023, 7, 1), total_score=11),
        DatedScore(date=FlexibleDate(2023, 7, 2), total_score=11),
    ]
    assert summary[0].to_dict() == {
        "date": {"year": 2023, "month": 7, "day": 1, "calendar": "gregorian"},
        "totalScore": 11,
    }


def test_time_range_filters_inclusively_and_sorts(aggregator, kpis):
    records = [
        make_record(5, [("1", 5)]),
        make_record(1, [("1", 1)]),
        make_record(30, [("1", 99)], month=6),
        make_record(3, [("1", 3)]),
        make_record(10, [("1", 10)]),
    ]
    summary = aggregator.summarize_by_time_range(
        kpis, records, FlexibleDate(2023, 7, 1), FlexibleDate(2023, 7, 5)
    )
    assert [point.date.day for point in summary] == [1, 3, 5]
    assert [point.total_score for point in summary] == [1, 3, 5]


def test_time_range_keeps_input_order_for_equal_dates(aggregator, kpis):
    records = [
        make_record(2, [("1", 7)]),
        make_record(1, [("1", 1)]),
        make_record(2, [("1", 4)]),
    ]
    summary = aggregator.summarize_by_time_range(
        kpis, records, FlexibleDate(2023, 7, 1), FlexibleDate(2023, 7, 2)
    )
    assert [point.total_score for point in summary] == [1, 7, 4]


def test_time_range_of_no_records_is_empty(aggregator, kpis):
    assert aggregator.summarize_by_time_range(
        kpis, [], FlexibleDate(2023, 7, 1), FlexibleDate(2023, 7, 2)
    ) == []


def test_time_range_rejects_mixed_calendars(aggregator, kpis):
    records = [make_record(1, [("1", 1)], calendar="lunar")]
    with pytest.raises(IncompatibleCalendar):
        aggregator.summarize_by_time_range(
            kpis, records, FlexibleDate(2023, 7, 1), FlexibleDate(2023, 7, 2)
        )


def test_average_score_by_category(aggregator, kpis, records):
    averages = aggregator.average_score_by_category(kpis, records)
    assert averages == {"Category A": 4, "Category B": 7}


def test_average_divides_by_total_record_count(aggregator, kpis):
    records = [
        make_record(1, [("1", 5)]),
        make_record(2, [("2", 3)]),
    ]
    averages = aggregator.average_score_by_category(kpis, records)
    summary = aggregator.summarize_by_category(kpis, records)

    assert averages == {"Category A": pytest.approx(2.5), "Category B": pytest.approx(3)}
    for category, total in summary.items():
        assert averages[category] == pytest.approx(total / len(records))


def test_average_of_no_records_is_empty(aggregator, kpis):
    assert aggregator.average_score_by_category(kpis, []) == {}


@pytest.fixture
def mixed_kpis():
    return {
        "n": make_kpi("n", category="Fitness", rule=SimpleRule(2)),
        "s": make_kpi("s", category="Journal", data_type="string"),
    }


@pytest.mark.parametrize("text", ["felt great", "5"])
def test_total_score_ignores_non_numeric_values(aggregator, mixed_kpis, text):
    record = make_record(1, [("n", 5), ("s", text)])
    assert aggregator.total_score(mixed_kpis, record) == pytest.approx(10)


def test_scores_by_category_with_non_numeric_values(aggregator, mixed_kpis):
    record = make_record(1, [("n", 5), ("s", "5")])
    assert aggregator.scores_by_category(mixed_kpis, record) == {"Fitness": 10, "Journal": 0}


def test_summaries_with_non_numeric_values(aggregator, mixed_kpis):
    records = [
        make_record(1, [("n", 5), ("s", "rested")]),
        make_record(2, [("n", 1), ("s", "tired")]),
    ]
    assert aggregator.summarize_by_category(mixed_kpis, records) == {"Fitness": 12, "Journal": 0}
    assert aggregator.average_score_by_category(mixed_kpis, records) == {"Fitness": 6, "Journal": 0}
    summary = aggregator.summarize_by_time_range(
        mixed_kpis, records, FlexibleDate(2023, 7, 1), FlexibleDate(2023, 7, 2)
    )
    assert [point.total_score for point in summary] == [10, 2]
