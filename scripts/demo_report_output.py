"""Print a sample financial summary and write the report files for a demo inventory.

Usage: python scripts/demo_report_output.py [period]
"""
import logging
import sys
from datetime import datetime, timedelta

from stockboard.inventory.record_manager import RecordManager
from stockboard.inventory.record_store import InMemoryRecordStore
from stockboard.reports.export import write_report_files
from stockboard.reports.period import Period, select_by_period
from stockboard.reports.summary import compute_summary, format_summary_text, rank_by_profit
from stockboard.utils.time_zone import get_report_tz

logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

now = datetime.now(get_report_tz())
store = InMemoryRecordStore()
manager = RecordManager(store, "demo-owner", now_fn=lambda: now)

# seed products
manager.add_record("Milk", quantity_purchased=50, purchase_price="4.20", sale_price="6.50", quantity_sold=18)
manager.add_record("Soap", quantity_purchased=100, purchase_price="1.10", sale_price="2.00", quantity_sold=40,
                   last_sale_date=now - timedelta(days=40))
manager.add_record("Candy", quantity_purchased=200, purchase_price="0.35", sale_price="1.00")

records = manager.list_records()
# optional period argument: all, today, month, 2024 or 2024-03
period = Period.parse(sys.argv[1]) if len(sys.argv) > 1 else Period.this_month()
filtered = select_by_period(records, period, now=now)
summary = compute_summary(filtered, all_records=records)
ranking = rank_by_profit(filtered)

print(format_summary_text(summary, ranking, title=f"Financial Summary - {period.label}"))

paths = write_report_files(summary, records, period_label=period.label, ranking=ranking)
for kind, path in paths.items():
    print(f"{kind}: {path}")
