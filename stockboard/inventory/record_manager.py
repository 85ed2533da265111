# stockboard/inventory/record_manager.py
from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional

from rapidfuzz import fuzz

from .record import InventoryRecord, EDITABLE_FIELDS
from .record_store import RecordStore
from stockboard.errors import ValidationError, WriteError
from stockboard.utils.time_zone import get_report_tz
from stockboard.utils.validators import ensure_int, is_blank, normalize_name, parse_iso_datetime, to_decimal

logger = logging.getLogger(__name__)

DEFAULT_FUZZY_THRESHOLD = 70

INT_FIELDS = ("quantity_purchased", "quantity_sold")
MONEY_FIELDS = ("purchase_price", "sale_price")


def validate_fields(fields: Dict[str, Any], partial: bool = False) -> Dict[str, Any]:
    """
    Check and normalize form input before it is sent to the store.

    partial=False: a full record (name required, missing numbers become 0).
    partial=True: only the given fields are checked.

    Returns the cleaned field dict.
    Raises:
        ValidationError on the first offending field.
    """
    unknown = set(fields) - set(EDITABLE_FIELDS)
    if unknown:
        field_name = sorted(unknown)[0]
        raise ValidationError(field_name, "Unknown field.")

    cleaned: Dict[str, Any] = {}

    if "name" in fields or not partial:
        name = fields.get("name")
        if is_blank(name):
            raise ValidationError("name", "Name is required.")
        cleaned["name"] = str(name).strip()

    for key in INT_FIELDS:
        if key not in fields and partial:
            continue
        try:
            value = ensure_int(fields.get(key), default=0)
        except ValueError:
            raise ValidationError(key, "Must be a whole number.")
        if value < 0:
            raise ValidationError(key, "Must be zero or positive.")
        cleaned[key] = value

    for key in MONEY_FIELDS:
        if key not in fields and partial:
            continue
        try:
            amount = to_decimal(fields.get(key), default=Decimal("0"))
        except ValueError:
            raise ValidationError(key, "Must be a number.")
        if amount < 0:
            raise ValidationError(key, "Must be zero or positive.")
        cleaned[key] = amount

    if "last_sale_date" in fields:
        try:
            cleaned["last_sale_date"] = parse_iso_datetime(fields["last_sale_date"])
        except ValueError:
            raise ValidationError("last_sale_date", "Invalid date.")

    return cleaned


class RecordManager:
    """
    Owner-scoped inventory operations on top of a RecordStore.

    Writes are fire-and-forget from the caller's point of view: nothing here keeps a
    local copy of the records, the store's next snapshot is the only source of truth.
    """

    def __init__(self, store: RecordStore, owner_id: str,
                 now_fn: Optional[Callable[[], datetime]] = None) -> None:
        if is_blank(owner_id):
            raise ValueError("owner_id must not be empty")
        self.store = store
        self.owner_id = str(owner_id)
        self._now = now_fn or (lambda: datetime.now(get_report_tz()))

    # ---------------------------
    # Queries
    # ---------------------------
    def list_records(self) -> List[InventoryRecord]:
        return list(self.store.list_records(self.owner_id))

    def get_record(self, record_id: str) -> InventoryRecord:
        record = self.store.get_record(self.owner_id, record_id)
        if record is None:
            raise ValueError("Record not found")
        return record

    def search_records(self, keyword: str, fuzzy: bool = True,
                       threshold: int = DEFAULT_FUZZY_THRESHOLD) -> List[InventoryRecord]:
        """
        Search by name, ignoring case and accents.
        Substring hits come first (in store order), then fuzzy hits by score.
        """
        kw = normalize_name(keyword, ascii_only=True)
        records = self.list_records()
        if not kw:
            return records

        exact: List[InventoryRecord] = []
        scored = []
        for r in records:
            name = normalize_name(r.name, ascii_only=True)
            if kw in name:
                exact.append(r)
            elif fuzzy:
                score = fuzz.partial_ratio(kw, name)
                if score >= threshold:
                    scored.append((score, r))
        scored.sort(key=lambda item: item[0], reverse=True)
        return exact + [r for _, r in scored]

    # ---------------------------
    # CRUD
    # ---------------------------
    def add_record(self, name: str, quantity_purchased: Any = 0, purchase_price: Any = 0,
                   sale_price: Any = 0, quantity_sold: Any = 0,
                   last_sale_date: Any = None) -> InventoryRecord:
        """Validate and create a record. A missing sale date defaults to now."""
        fields = validate_fields({
            "name": name,
            "quantity_purchased": quantity_purchased,
            "purchase_price": purchase_price,
            "sale_price": sale_price,
            "quantity_sold": quantity_sold,
            "last_sale_date": last_sale_date,
        })
        if fields.get("last_sale_date") is None:
            fields["last_sale_date"] = self._now()

        try:
            return self.store.create(self.owner_id, fields)
        except WriteError:
            logger.exception("Failed to create record %r for owner %s", fields["name"], self.owner_id)
            raise

    def update_record(self, record_id: str, **changes: Any) -> InventoryRecord:
        """
        Update some fields of a record.

        Without a new sale date the record keeps its current one; a record that
        never had a sale date gets now.
        """
        fields = validate_fields(changes, partial=True)
        if fields.get("last_sale_date") is None:
            fields.pop("last_sale_date", None)
            current = self.store.get_record(self.owner_id, record_id)
            if current is not None and current.last_sale_date is None:
                fields["last_sale_date"] = self._now()

        try:
            return self.store.update(self.owner_id, record_id, fields)
        except WriteError:
            logger.exception("Failed to update record %s for owner %s", record_id, self.owner_id)
            raise

    def delete_record(self, record_id: str) -> None:
        try:
            self.store.delete(self.owner_id, record_id)
        except WriteError:
            logger.exception("Failed to delete record %s for owner %s", record_id, self.owner_id)
            raise
