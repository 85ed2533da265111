# stockboard/reports/period.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, tzinfo
from typing import Iterable, List, Optional

from stockboard.inventory.record import InventoryRecord
from stockboard.utils.time_zone import get_report_tz

ALL = "all"
TODAY = "today"
MONTH = "month"
YEAR = "year"

DEFAULT_YEAR_CHOICES = 5


@dataclass(frozen=True)
class Period:
    """
    Date window used to scope reports.

    kind="year" carries `year` and optionally `month` (1-12, None = every month).
    """
    kind: str = ALL
    year: Optional[int] = None
    month: Optional[int] = None

    def __post_init__(self) -> None:
        if self.kind not in (ALL, TODAY, MONTH, YEAR):
            raise ValueError(f"Unknown period kind: {self.kind!r}")
        if self.kind == YEAR:
            if self.year is None:
                raise ValueError("A year period needs a year")
            if self.month is not None and not 1 <= int(self.month) <= 12:
                raise ValueError(f"Month must be between 1 and 12, got {self.month}")

    @classmethod
    def all(cls) -> "Period":
        return cls(ALL)

    @classmethod
    def today(cls) -> "Period":
        return cls(TODAY)

    @classmethod
    def this_month(cls) -> "Period":
        return cls(MONTH)

    @classmethod
    def for_year(cls, year: int, month: Optional[int] = None) -> "Period":
        return cls(YEAR, year=int(year), month=int(month) if month is not None else None)

    @classmethod
    def parse(cls, text: str) -> "Period":
        """Parse "all", "today", "month", "2024" or "2024-03"."""
        s = str(text or "").strip().lower()
        if s in (ALL, TODAY, MONTH):
            return cls(s)
        year, sep, month = s.partition("-")
        try:
            if sep:
                return cls.for_year(int(year), int(month))
            return cls.for_year(int(year))
        except ValueError:
            raise ValueError(f"Invalid period: {text!r}")

    @property
    def label(self) -> str:
        if self.kind == ALL:
            return "All time"
        if self.kind == TODAY:
            return "Today"
        if self.kind == MONTH:
            return "This month"
        if self.month is None:
            return str(self.year)
        return f"{self.month:02d}/{self.year}"

    def contains(self, when: Optional[datetime], now: datetime) -> bool:
        """True if `when` falls inside the window. `now` must be in the reporting timezone."""
        if self.kind == ALL:
            return True
        if when is None:
            return False
        local = when.astimezone(now.tzinfo) if when.tzinfo else when
        if self.kind == TODAY:
            return local.date() == now.date()
        if self.kind == MONTH:
            return (local.year, local.month) == (now.year, now.month)
        return local.year == self.year and (self.month is None or local.month == self.month)


def select_by_period(records: Iterable[InventoryRecord], period: Period,
                     now: Optional[datetime] = None, tz: Optional[tzinfo] = None) -> List[InventoryRecord]:
    """
    Keep the records whose last sale date falls in `period`, preserving order.

    Period.all() returns every record, including never-sold ones. Every other
    period drops records without a sale date.
    """
    if period.kind == ALL:
        return list(records)

    zone = tz or get_report_tz()
    if now is None:
        now = datetime.now(zone)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=zone)
    else:
        now = now.astimezone(zone)

    return [r for r in records if period.contains(r.last_sale_date, now)]


def available_years(now: Optional[datetime] = None, count: int = DEFAULT_YEAR_CHOICES) -> List[int]:
    """Years offered in the report selector, newest first."""
    year = (now or datetime.now(get_report_tz())).year
    return [year - i for i in range(count)]
