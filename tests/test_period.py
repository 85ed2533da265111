from datetime import datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from stockboard.reports.period import Period, available_years, select_by_period

TZ = ZoneInfo("America/Sao_Paulo")


def test_all_is_order_preserving_identity(make_record, fixed_now):
    records = [make_record("B"), make_record("A", date=fixed_now), make_record("C")]
    assert select_by_period(records, Period.all(), now=fixed_now) == records


def test_today_keeps_only_same_day(make_record, fixed_now):
    morning = make_record("morning", date=datetime(2024, 3, 15, 0, 5, tzinfo=TZ))
    evening = make_record("evening", date=datetime(2024, 3, 15, 23, 55, tzinfo=TZ))
    yesterday = make_record("yesterday", date=datetime(2024, 3, 14, 18, 0, tzinfo=TZ))
    never = make_record("never", date=None)

    result = select_by_period([morning, yesterday, never, evening], Period.today(), now=fixed_now)
    assert [r.name for r in result] == ["morning", "evening"]


def test_today_compares_in_reporting_timezone(make_record, fixed_now):
    # 2024-03-16 01:00 UTC is still 2024-03-15 in Sao Paulo (UTC-3)
    late = make_record("late", date=datetime(2024, 3, 16, 1, 0, tzinfo=timezone.utc))
    # 2024-03-15 02:00 UTC is 2024-03-14 in Sao Paulo
    early = make_record("early", date=datetime(2024, 3, 15, 2, 0, tzinfo=timezone.utc))
    result = select_by_period([late, early], Period.today(), now=fixed_now)
    assert [r.name for r in result] == ["late"]


def test_this_month(make_record, fixed_now):
    march = make_record("march", date=datetime(2024, 3, 1, tzinfo=TZ))
    feb = make_record("feb", date=datetime(2024, 2, 29, tzinfo=TZ))
    last_year = make_record("last_year", date=datetime(2023, 3, 15, tzinfo=TZ))
    result = select_by_period([march, feb, last_year, make_record("never")], Period.this_month(), now=fixed_now)
    assert [r.name for r in result] == ["march"]


def test_year_and_month(make_record, fixed_now):
    jan = make_record("jan", date=datetime(2023, 1, 10, tzinfo=TZ))
    jun = make_record("jun", date=datetime(2023, 6, 10, tzinfo=TZ))
    other = make_record("other", date=datetime(2024, 6, 10, tzinfo=TZ))
    records = [jan, jun, other, make_record("never")]

    assert select_by_period(records, Period.for_year(2023, 6), now=fixed_now) == [jun]
    assert select_by_period(records, Period.for_year(2023), now=fixed_now) == [jan, jun]


def test_naive_now_is_read_in_reporting_timezone(make_record):
    r = make_record("x", date=datetime(2024, 3, 15, 10, 0, tzinfo=TZ))
    assert select_by_period([r], Period.today(), now=datetime(2024, 3, 15, 20, 0)) == [r]


def test_default_now_uses_clock(make_record):
    r = make_record("now", date=datetime.now(TZ))
    assert select_by_period([r], Period.today()) == [r]


def test_parse_and_labels():
    assert Period.parse("all") == Period.all()
    assert Period.parse("Today") == Period.today()
    assert Period.parse("month") == Period.this_month()
    assert Period.parse("2024") == Period.for_year(2024)
    assert Period.parse("2024-03") == Period.for_year(2024, 3)
    assert Period.for_year(2024, 3).label == "03/2024"
    assert Period.for_year(2024).label == "2024"
    assert Period.all().label == "All time"


@pytest.mark.parametrize("text", ["2024-13", "2024-0", "yesterday", ""])
def test_invalid_periods_raise(text):
    with pytest.raises(ValueError):
        Period.parse(text)


def test_available_years(fixed_now):
    assert available_years(fixed_now) == [2024, 2023, 2022, 2021, 2020]
    assert available_years(fixed_now, count=2) == [2024, 2023]
