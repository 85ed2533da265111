# stockboard/utils/time_zone.py
from __future__ import annotations

from datetime import tzinfo
from zoneinfo import ZoneInfo

from stockboard.config import get_settings


def get_report_tz() -> tzinfo:
    """Timezone in which "today" and "this month" are evaluated."""
    return ZoneInfo(get_settings().timezone)
