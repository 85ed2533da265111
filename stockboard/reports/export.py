# stockboard/reports/export.py
from __future__ import annotations

import csv
import io
import logging
from pathlib import Path
from typing import Dict, Iterable, Optional, Sequence, Union

from openpyxl import Workbook

from stockboard.inventory.record import InventoryRecord
from stockboard.config import get_settings
from stockboard.reports.summary import FinancialSummary, format_summary_text
from stockboard.utils.formatting import to_money
from stockboard.utils.io_utils import atomic_write_bytes, atomic_write_text

logger = logging.getLogger(__name__)

DEFAULT_ENCODING = "utf-8"
DEFAULT_CSV_NAME = "inventory.csv"

CSV_HEADERS = [
    "Name",
    "Qty Purchased",
    "Unit Purchase Price",
    "Unit Sale Price",
    "Qty Sold",
    "Current Stock",
    "Individual Profit",
    "Total Profit",
]


def record_row(r: InventoryRecord) -> list:
    return [
        r.name,
        r.quantity_purchased,
        str(r.purchase_price),
        str(r.sale_price),
        r.quantity_sold,
        r.current_stock,
        str(to_money(r.individual_profit)),
        str(to_money(r.total_profit)),
    ]


def to_delimited_text(records: Iterable[InventoryRecord], delimiter: str = ",") -> str:
    """
    Inventory as delimited text: one header line plus one line per record.
    Values containing the delimiter, quotes or line breaks are quoted.
    """
    buf = io.StringIO()
    writer = csv.writer(buf, delimiter=delimiter, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for r in records:
        writer.writerow(record_row(r))
    # no trailing newline: the line count equals len(records) + 1
    return buf.getvalue().rstrip("\n")


def export_records_csv(records: Iterable[InventoryRecord],
                       out_path: Union[str, Path] = DEFAULT_CSV_NAME,
                       encoding: str = DEFAULT_ENCODING) -> Path:
    """Write `to_delimited_text(records)` to a .csv file and return its path."""
    out = Path(out_path)
    atomic_write_text(out, to_delimited_text(records) + "\n", encoding=encoding)
    logger.info("Wrote inventory CSV: %s", out)
    return out


def summary_to_workbook(summary: FinancialSummary, records: Sequence[InventoryRecord],
                        period_label: Optional[str] = None) -> Workbook:
    """Workbook with a "Summary" sheet (totals) and a "Products" sheet (one row per record)."""
    wb = Workbook()
    ws_sum = wb.active
    if ws_sum is None:
        ws_sum = wb.create_sheet("Summary")
        wb.active = ws_sum
    ws_sum.title = "Summary"
    ws_sum.append(["Key", "Value"])
    if period_label:
        ws_sum.append(["period", period_label])
    ws_sum.append(["total_revenue", to_money(summary.total_revenue)])
    ws_sum.append(["total_cost_of_goods_sold", to_money(summary.total_cost_of_goods_sold)])
    ws_sum.append(["total_net_profit", to_money(summary.total_net_profit)])
    ws_sum.append(["total_inventory_cost", to_money(summary.total_inventory_cost)])
    ws_sum.append(["overall_balance", to_money(summary.overall_balance)])
    ws_sum.append(["unsold_products", len(summary.unsold_records)])

    ws_prod = wb.create_sheet("Products")
    ws_prod.append(CSV_HEADERS)
    for r in records:
        ws_prod.append([
            r.name,
            r.quantity_purchased,
            r.purchase_price,
            r.sale_price,
            r.quantity_sold,
            r.current_stock,
            to_money(r.individual_profit),
            to_money(r.total_profit),
        ])
    return wb


def export_summary_xlsx(summary: FinancialSummary, records: Sequence[InventoryRecord],
                        out_path: Union[str, Path], period_label: Optional[str] = None) -> Path:
    """Save `summary_to_workbook(...)` to `out_path` atomically."""
    buf = io.BytesIO()
    summary_to_workbook(summary, records, period_label).save(buf)
    out = Path(out_path)
    atomic_write_bytes(out, buf.getvalue())
    logger.info("Wrote summary workbook: %s", out)
    return out


def write_report_files(summary: FinancialSummary, records: Sequence[InventoryRecord],
                       out_dir: Optional[Union[str, Path]] = None,
                       period_label: Optional[str] = None,
                       ranking: Sequence = ()) -> Dict[str, Path]:
    """
    Write the inventory CSV, the summary workbook and a text summary into `out_dir`
    (default: the configured reports directory). Returns {"csv", "xlsx", "txt"} paths.
    """
    out = Path(out_dir) if out_dir else get_settings().reports_dir
    paths = {
        "csv": export_records_csv(records, out / DEFAULT_CSV_NAME),
        "xlsx": export_summary_xlsx(summary, records, out / "summary.xlsx", period_label=period_label),
    }
    title = f"Financial Summary - {period_label}" if period_label else "Financial Summary"
    txt_path = out / "summary.txt"
    atomic_write_text(txt_path, format_summary_text(summary, ranking, title=title) + "\n")
    paths["txt"] = txt_path
    return paths
