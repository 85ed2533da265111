# stockboard/reports/summary.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from stockboard.inventory.record import InventoryRecord
from stockboard.utils.formatting import format_currency

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


@dataclass(frozen=True)
class FinancialSummary:
    """
    Totals for one report.

    total_revenue / total_cost_of_goods_sold / total_net_profit cover the records
    of the selected period. total_inventory_cost, overall_balance and
    unsold_records always cover every record of the owner.
    """
    total_revenue: Decimal = ZERO
    total_cost_of_goods_sold: Decimal = ZERO
    total_net_profit: Decimal = ZERO
    total_inventory_cost: Decimal = ZERO
    overall_balance: Decimal = ZERO
    unsold_records: Tuple[InventoryRecord, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly view: Decimals as strings, unsold records as ids."""
        return {
            "total_revenue": str(self.total_revenue),
            "total_cost_of_goods_sold": str(self.total_cost_of_goods_sold),
            "total_net_profit": str(self.total_net_profit),
            "total_inventory_cost": str(self.total_inventory_cost),
            "overall_balance": str(self.overall_balance),
            "unsold_records": [r.id for r in self.unsold_records],
        }


def compute_summary(records: Iterable[InventoryRecord],
                    all_records: Optional[Iterable[InventoryRecord]] = None) -> FinancialSummary:
    """
    Reduce records to a FinancialSummary.

    `records` is the (possibly period-filtered) set used for revenue, cost of goods
    sold and net profit. `all_records` is the owner's full set used for inventory
    cost, balance and unsold records; it defaults to `records`.

    Pure Decimal arithmetic, no rounding.
    """
    scoped = list(records)
    everything = scoped if all_records is None else list(all_records)

    total_revenue = sum((r.revenue for r in scoped), ZERO)
    total_cogs = sum((r.cost_of_goods_sold for r in scoped), ZERO)

    all_time_revenue = sum((r.revenue for r in everything), ZERO)
    total_inventory_cost = sum((r.inventory_cost for r in everything), ZERO)

    return FinancialSummary(
        total_revenue=total_revenue,
        total_cost_of_goods_sold=total_cogs,
        total_net_profit=total_revenue - total_cogs,
        total_inventory_cost=total_inventory_cost,
        overall_balance=all_time_revenue - total_inventory_cost,
        unsold_records=tuple(r for r in everything if r.quantity_sold == 0),
    )


def rank_by_profit(records: Iterable[InventoryRecord],
                   include_zero: bool = False) -> List[Tuple[InventoryRecord, Decimal]]:
    """
    (record, total_profit) pairs, highest profit first.
    The sort is stable so ties keep insertion order. Zero-profit rows are dropped
    unless include_zero is set.
    """
    rows = [(r, r.total_profit) for r in records]
    if not include_zero:
        rows = [row for row in rows if row[1] != 0]
    return sorted(rows, key=lambda row: row[1], reverse=True)


def revenue_cost_rows(records: Iterable[InventoryRecord]) -> List[Dict[str, Any]]:
    """Per product: revenue of sold units vs. cost of all purchased units. Empty rows skipped."""
    rows = []
    for r in records:
        revenue = r.revenue
        cost = r.inventory_cost
        if revenue > 0 or cost > 0:
            rows.append({"id": r.id, "name": r.name, "revenue": revenue, "cost": cost})
    return rows


def format_summary_text(summary: FinancialSummary,
                        ranking: Sequence[Tuple[InventoryRecord, Decimal]] = (),
                        *, title: str = "Financial Summary",
                        currency: Optional[str] = None, locale: Optional[str] = None) -> str:
    def money(val: Any) -> str:
        return format_currency(val, currency, locale)

    lines = [f"=== {title} ==="]
    lines.append(f"Total Revenue: {money(summary.total_revenue)}")
    lines.append(f"Cost of Goods Sold: {money(summary.total_cost_of_goods_sold)}")
    lines.append(f"Net Profit: {money(summary.total_net_profit)}")
    lines.append(f"Inventory Cost (all time): {money(summary.total_inventory_cost)}")
    lines.append(f"Overall Balance: {money(summary.overall_balance)}")
    lines.append("")
    lines.append("Profit by Product:")
    if not ranking:
        lines.append("- (no sales)")
    for record, profit in ranking:
        lines.append(f"- {record.name}: sold={record.quantity_sold} profit={money(profit)}")
    lines.append("")
    lines.append(f"Unsold Products ({len(summary.unsold_records)}):")
    for record in summary.unsold_records:
        lines.append(f"- {record.name} (stock={record.current_stock})")
    return "\n".join(lines)
