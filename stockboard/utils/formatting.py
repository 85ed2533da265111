# stockboard/utils/formatting.py
from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Optional

from babel.numbers import format_currency as _babel_format_currency
from babel.numbers import get_currency_symbol

from stockboard.config import get_settings
from stockboard.utils.validators import to_decimal

CENTS = Decimal("0.01")


def to_money(value: Any) -> Decimal:
    """Round a monetary amount to 2 decimals. Only used at presentation time."""
    return to_decimal(value, default=Decimal("0")).quantize(CENTS, rounding=ROUND_HALF_UP)


def format_currency(value: Any, currency: Optional[str] = None, locale: Optional[str] = None) -> str:
    """
    Format a monetary value for display, e.g. 1234.5 -> "R$ 1.234,50" (pt_BR / BRL).

    Floats are converted through str() before rounding, so 0.1 + 0.2 renders as 0,30.
    """
    settings = get_settings()
    return _babel_format_currency(
        to_money(value),
        currency or settings.currency,
        locale=locale or settings.locale,
    )


def format_currency_compact(value: Any, currency: Optional[str] = None, locale: Optional[str] = None) -> str:
    """Short form for chart labels: 1500 -> "R$1.5k", -1500 -> "-R$1.5k"; small values use format_currency."""
    amount = to_money(value)
    if abs(amount) < 1000:
        return format_currency(amount, currency, locale)
    settings = get_settings()
    symbol = get_currency_symbol(currency or settings.currency, locale=locale or settings.locale)
    thousands = (abs(amount) / 1000).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol}{thousands}k"
