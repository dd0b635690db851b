from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

WHOLE_UNIT = Decimal("1")


def round_currency(value: float | int | Decimal) -> int:
    amount = Decimal(str(value))
    return int(amount.quantize(WHOLE_UNIT, rounding=ROUND_HALF_UP))


def round_percent(value: float | int | Decimal, precision: int = 1) -> float:
    amount = Decimal(str(value))
    return float(amount.quantize(Decimal(1).scaleb(-precision), rounding=ROUND_HALF_UP))


def format_amount(value: float | int | Decimal) -> str:
    """Whole-unit amount with thousands separators, e.g. ``$1,234``."""
    rounded = round_currency(value)
    sign = "-" if rounded < 0 else ""
    return f"{sign}${abs(rounded):,}"


def format_signed_amount(value: float | int | Decimal) -> str:
    rounded = round_currency(value)
    if rounded >= 0:
        return f"+${rounded:,}"
    return f"-${abs(rounded):,}"
