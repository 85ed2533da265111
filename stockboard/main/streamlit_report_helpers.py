from datetime import date, datetime, tzinfo
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

import pandas as pd

from stockboard.inventory.record import InventoryRecord
from stockboard.utils.formatting import format_currency, format_currency_compact
from stockboard.utils.time_zone import get_report_tz

RECORD_COLUMNS = {
    "name": "Product",
    "quantity_purchased": "Qty Purchased",
    "purchase_price": "Purchase Price",
    "sale_price": "Sale Price",
    "quantity_sold": "Qty Sold",
    "current_stock": "Stock",
    "total_profit": "Total Profit",
    "last_sale_date": "Last Sale",
}


def records_frame(records: Iterable[InventoryRecord], currency: Optional[str] = None,
                  locale: Optional[str] = None) -> pd.DataFrame:
    """Product table for st.dataframe, money already formatted, indexed by record id."""
    rows = []
    for r in records:
        rows.append({
            "id": r.id,
            "name": r.name,
            "quantity_purchased": r.quantity_purchased,
            "purchase_price": format_currency(r.purchase_price, currency, locale),
            "sale_price": format_currency(r.sale_price, currency, locale),
            "quantity_sold": r.quantity_sold,
            "current_stock": r.current_stock,
            "total_profit": format_currency(r.total_profit, currency, locale),
            "last_sale_date": r.last_sale_date.strftime("%d/%m/%Y") if r.last_sale_date else "",
        })
    df = pd.DataFrame(rows, columns=["id", *RECORD_COLUMNS])
    return df.set_index("id").rename(columns=RECORD_COLUMNS)


def profit_chart_frame(ranking: Sequence[Tuple[InventoryRecord, Decimal]],
                       currency: Optional[str] = None, locale: Optional[str] = None) -> pd.DataFrame:
    """Bar chart data: one row per product, highest profit first, with a short money label."""
    return pd.DataFrame(
        [{"name": r.name, "profit": float(profit), "label": format_currency_compact(profit, currency, locale)}
         for r, profit in ranking],
        columns=["name", "profit", "label"],
    )


def revenue_cost_frame(rows: List[Dict[str, Any]], currency: Optional[str] = None,
                       locale: Optional[str] = None) -> pd.DataFrame:
    """Long-format revenue/cost data (name, series, amount, label) for a two-line chart."""
    wide = pd.DataFrame(
        [{"name": row["name"], "Revenue": float(row["revenue"]), "Cost": float(row["cost"])} for row in rows],
        columns=["name", "Revenue", "Cost"],
    )
    long = wide.melt(id_vars="name", var_name="series", value_name="amount")
    long["label"] = [format_currency_compact(v, currency, locale) for v in long["amount"]]
    return long


# ---------------------------
# Edit form sale date
# ---------------------------
def _local_day(value: datetime, zone: tzinfo) -> date:
    # naive datetimes are already in the reporting zone
    if value.tzinfo is None:
        return value.date()
    return value.astimezone(zone).date()


def sale_date_default(existing: Optional[datetime], tz: Optional[tzinfo] = None) -> date:
    """Day shown in the date picker: the record's sale day, or today if it has none."""
    zone = tz or get_report_tz()
    if existing is None:
        return datetime.now(zone).date()
    return _local_day(existing, zone)


def changed_sale_date(existing: Optional[datetime], picked: date,
                      tz: Optional[tzinfo] = None) -> Optional[datetime]:
    """
    New sale date for an edit, or None when the picked day is the record's own
    sale day (so the stored time of day is kept).
    """
    zone = tz or get_report_tz()
    if existing is not None and _local_day(existing, zone) == picked:
        return None
    return datetime.combine(picked, datetime.min.time(), tzinfo=zone)
