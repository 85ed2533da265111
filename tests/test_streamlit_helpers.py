from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

from stockboard.main.streamlit_report_helpers import (
    RECORD_COLUMNS,
    changed_sale_date,
    profit_chart_frame,
    records_frame,
    revenue_cost_frame,
    sale_date_default,
)
from stockboard.reports.summary import rank_by_profit, revenue_cost_rows

TZ = ZoneInfo("America/Sao_Paulo")


def test_records_frame(make_record, fixed_now):
    milk = make_record("Milk", sale="10", purchase="4", sold=3, bought=5, date=fixed_now)
    soap = make_record("Soap", sale="20", purchase="15", bought=2)
    df = records_frame([milk, soap])

    assert list(df.columns) == list(RECORD_COLUMNS.values())
    assert list(df.index) == [milk.id, soap.id]
    assert df.loc[milk.id, "Stock"] == 2
    assert "18,00" in df.loc[milk.id, "Total Profit"]
    assert df.loc[milk.id, "Last Sale"] == "15/03/2024"
    assert df.loc[soap.id, "Last Sale"] == ""


def test_records_frame_empty():
    df = records_frame([])
    assert df.empty
    assert list(df.columns) == list(RECORD_COLUMNS.values())


def test_profit_chart_frame(make_record):
    a = make_record("A", sale=10, purchase=5, sold=2)
    b = make_record("B", sale=3000, purchase=1500, sold=1)
    df = profit_chart_frame(rank_by_profit([a, b]))
    assert list(df["name"]) == ["B", "A"]
    assert list(df["profit"]) == [1500.0, 10.0]
    assert df.loc[0, "label"] == "R$1.5k"
    assert "10,00" in df.loc[1, "label"]


def test_revenue_cost_frame_is_long_format(make_record):
    r = make_record("Milk", sale=10, purchase=4, sold=1, bought=2)
    df = revenue_cost_frame(revenue_cost_rows([r]))
    assert list(df.columns) == ["name", "series", "amount", "label"]
    assert df[["name", "series", "amount"]].to_dict("records") == [
        {"name": "Milk", "series": "Revenue", "amount": 10.0},
        {"name": "Milk", "series": "Cost", "amount": 8.0},
    ]


def test_revenue_cost_frame_empty():
    df = revenue_cost_frame([])
    assert df.empty
    assert len(df) == 0


def test_sale_date_default():
    existing = datetime(2024, 1, 5, 1, 30, tzinfo=timezone.utc)
    # 01:30 UTC is still Jan 4 in Sao Paulo
    assert sale_date_default(existing) == date(2024, 1, 4)
    assert sale_date_default(None) == datetime.now(TZ).date()


def test_changed_sale_date_keeps_unchanged_day():
    existing = datetime(2024, 1, 5, 14, 30, tzinfo=TZ)
    assert changed_sale_date(existing, date(2024, 1, 5)) is None
    assert changed_sale_date(existing, date(2024, 2, 1)) == datetime(2024, 2, 1, tzinfo=TZ)
    assert changed_sale_date(None, date(2024, 2, 1)) == datetime(2024, 2, 1, tzinfo=TZ)


def test_naive_sale_dates_are_read_in_the_report_zone():
    existing = datetime(2024, 1, 5, 23, 30)
    assert sale_date_default(existing) == date(2024, 1, 5)
    assert changed_sale_date(existing, date(2024, 1, 5)) is None
