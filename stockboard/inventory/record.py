# stockboard/inventory/record.py
from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Optional

from stockboard.utils.validators import to_decimal, parse_iso_datetime, ensure_int

ZERO = Decimal("0")

# stored field name -> aliases accepted on input (the hosted backend used camelCase)
FIELD_ALIASES: Dict[str, tuple] = {
    "id": ("id", "record_id"),
    "name": ("name",),
    "quantity_purchased": ("quantity_purchased", "quantityPurchased", "quantityBought"),
    "purchase_price": ("purchase_price", "purchasePrice"),
    "sale_price": ("sale_price", "salePrice"),
    "quantity_sold": ("quantity_sold", "quantitySold"),
    "last_sale_date": ("last_sale_date", "lastSaleDate"),
    "owner_id": ("owner_id", "ownerId", "userId"),
}

EDITABLE_FIELDS = ("name", "quantity_purchased", "purchase_price", "sale_price", "quantity_sold", "last_sale_date")


def _pick(data: Dict[str, Any], field_name: str) -> Any:
    for key in FIELD_ALIASES[field_name]:
        if key in data:
            return data[key]
    return None


@dataclass(frozen=True)
class InventoryRecord:
    """
    One product line of an owner's inventory.

    Records are immutable snapshots: the store hands out new instances on every change.
    Numeric fields always hold real numbers; see `from_dict` for the zero-default policy.
    """
    id: str
    name: str
    quantity_purchased: int = 0
    purchase_price: Decimal = ZERO
    sale_price: Decimal = ZERO
    quantity_sold: int = 0
    last_sale_date: Optional[datetime] = None
    owner_id: str = ""

    def __post_init__(self) -> None:
        # frozen dataclass: normalize through object.__setattr__
        object.__setattr__(self, "id", str(self.id))
        object.__setattr__(self, "name", str(self.name) if self.name is not None else "")
        object.__setattr__(self, "owner_id", str(self.owner_id or ""))
        object.__setattr__(self, "quantity_purchased", ensure_int(self.quantity_purchased, default=0))
        object.__setattr__(self, "quantity_sold", ensure_int(self.quantity_sold, default=0))
        object.__setattr__(self, "purchase_price", to_decimal(self.purchase_price, default=ZERO))
        object.__setattr__(self, "sale_price", to_decimal(self.sale_price, default=ZERO))
        object.__setattr__(self, "last_sale_date", parse_iso_datetime(self.last_sale_date))

    # ---------- derived values ----------
    @property
    def current_stock(self) -> int:
        """Units on hand. Not clamped: selling more than was bought gives a negative stock."""
        return self.quantity_purchased - self.quantity_sold

    @property
    def individual_profit(self) -> Decimal:
        return self.sale_price - self.purchase_price

    @property
    def total_profit(self) -> Decimal:
        return self.individual_profit * self.quantity_sold

    @property
    def revenue(self) -> Decimal:
        return self.sale_price * self.quantity_sold

    @property
    def cost_of_goods_sold(self) -> Decimal:
        return self.purchase_price * self.quantity_sold

    @property
    def inventory_cost(self) -> Decimal:
        return self.purchase_price * self.quantity_purchased

    # ---------- (de)serialization ----------
    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "quantity_purchased": self.quantity_purchased,
            "purchase_price": str(self.purchase_price),
            "sale_price": str(self.sale_price),
            "quantity_sold": self.quantity_sold,
            "last_sale_date": self.last_sale_date.isoformat() if self.last_sale_date else None,
            "owner_id": self.owner_id,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "InventoryRecord":
        """
        Build a record from stored data.

        Missing or empty numeric fields default to zero, a missing sale date stays None.
        Values that are present but not numbers raise ValueError.
        """
        record_id = _pick(data, "id")
        if record_id is None or not str(record_id).strip():
            raise ValueError("Missing id in record data")

        return cls(
            id=str(record_id),
            name=str(_pick(data, "name") or ""),
            quantity_purchased=ensure_int(_pick(data, "quantity_purchased"), default=0),
            purchase_price=to_decimal(_pick(data, "purchase_price"), default=ZERO),
            sale_price=to_decimal(_pick(data, "sale_price"), default=ZERO),
            quantity_sold=ensure_int(_pick(data, "quantity_sold"), default=0),
            last_sale_date=parse_iso_datetime(_pick(data, "last_sale_date")),
            owner_id=str(_pick(data, "owner_id") or ""),
        )

    def with_changes(self, **changes: Any) -> "InventoryRecord":
        """Return a copy with `changes` applied (unknown field names raise ValueError)."""
        unknown = set(changes) - set(EDITABLE_FIELDS)
        if unknown:
            raise ValueError(f"Invalid field(s): {', '.join(sorted(unknown))}")
        return replace(self, **changes)
