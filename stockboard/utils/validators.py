from decimal import Decimal, InvalidOperation
from datetime import datetime, tzinfo
from typing import Any, Optional
import unicodedata
import re

from stockboard.utils.time_zone import get_report_tz


def normalize_name(name: Any, ascii_only: bool = False) -> str:
    """
    Normalize a string for comparison/search.
    - lower case
    - collapse repeated whitespace
    - ascii_only: also strip accents and punctuation ("Pão de Açúcar" -> "pao de acucar")
    """
    if name is None:
        return ""

    s = " ".join(str(name).strip().lower().split())

    if ascii_only:
        nfkd = unicodedata.normalize("NFKD", s)
        s = "".join([c for c in nfkd if not unicodedata.combining(c)])
        s = re.sub(r"[^a-z0-9\s]", "", s)

    return s


def is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def to_decimal(value: Any, default: Optional[Decimal] = None) -> Decimal:
    """
    Coerce value to Decimal. Accepts str with a comma decimal separator ("12,50").
    Floats go through str() so 0.1 stays 0.1 instead of its binary expansion.

    Args:
        value: number or string.
        default: returned when value is None or an empty string.

    Raises:
        ValueError: value cannot be parsed (or is empty and no default given).
    """
    if default is not None and is_blank(value):
        return default
    try:
        if isinstance(value, Decimal):
            return value
        if isinstance(value, bool):
            raise TypeError("bool is not a number")
        s = str(value).strip().replace(",", ".")
        result = Decimal(s)
    except (InvalidOperation, ValueError, TypeError):
        raise ValueError(f"Invalid decimal value: {value!r}")
    if not result.is_finite():
        raise ValueError(f"Invalid decimal value: {value!r}")
    return result


def ensure_int(value: Any, default: Optional[int] = None) -> int:
    """
    Coerce value to int. Integral decimals ("3.0") are accepted, fractions are not.

    Raises:
        ValueError: value is not an integer (or is empty and no default given).
    """
    if default is not None and is_blank(value):
        return default
    if isinstance(value, bool):
        raise ValueError(f"Expected an integer, got {value!r}")
    if isinstance(value, int):
        return value
    try:
        d = Decimal(str(value).strip())
    except (InvalidOperation, TypeError, ValueError):
        raise ValueError(f"Expected an integer, got {value!r}")
    if not d.is_finite() or d != d.to_integral_value():
        raise ValueError(f"Expected an integer, got {value!r}")
    return int(d)


def parse_iso_datetime(value: Optional[Any], tz: Optional[tzinfo] = None) -> Optional[datetime]:
    """
    Parse an ISO datetime into a timezone-aware datetime.

    Naive values are assumed to be in `tz` (default: reporting timezone).
    Empty values return None.

    Raises:
        ValueError: if the string is not ISO-8601.
    """
    if is_blank(value):
        return None

    zone = tz or get_report_tz()

    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=zone)

    try:
        parsed = datetime.fromisoformat(str(value).strip())
    except ValueError:
        raise ValueError(f"Invalid datetime format: {value!r}")
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=zone)
