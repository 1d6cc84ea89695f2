# common/money.py

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0.00")
HUNDRED = Decimal("100")


def to_decimal(value, *, field: str = "value") -> Decimal:
    """
    Strict Decimal coercion.

    - None / "" -> 0.00
    - floats go through str() so 0.1 stays 0.1
    - anything unparsable raises ValueError naming the field
    """
    if value is None or value == "":
        return ZERO

    if isinstance(value, bool):
        raise ValueError(f"{field} must be a number")

    if isinstance(value, Decimal):
        amt = value
    else:
        try:
            amt = Decimal(str(value).strip())
        except (InvalidOperation, ValueError, TypeError) as exc:
            raise ValueError(f"{field} must be a number") from exc

    if not amt.is_finite():
        raise ValueError(f"{field} must be a finite number")

    return amt


def q2(value) -> Decimal:
    return to_decimal(value).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def percent_of(amount, percent) -> Decimal:
    """amount x percent / 100, rounded to 2dp."""
    return q2(to_decimal(amount) * to_decimal(percent) / HUNDRED)
