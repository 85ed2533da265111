from decimal import Decimal

from stockboard.utils.formatting import format_currency, format_currency_compact, to_money


def test_to_money_rounds_half_up():
    assert to_money("2.345") == Decimal("2.35")
    assert to_money(None) == Decimal("0.00")


def test_float_noise_is_not_shown():
    assert "0,30" in format_currency(0.1 + 0.2)


def test_brazilian_format():
    text = format_currency(1234.5)
    assert "R$" in text
    assert "1.234,50" in text


def test_explicit_currency_and_locale():
    assert format_currency(Decimal("1234.5"), "USD", "en_US") == "$1,234.50"


def test_compact_form():
    assert format_currency_compact(1500) == "R$1.5k"
    assert format_currency_compact(-1500) == "-R$1.5k"
    assert format_currency_compact("-2549.99") == "-R$2.5k"
    assert "999,00" in format_currency_compact(999)
