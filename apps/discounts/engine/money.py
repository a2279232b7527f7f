"""
Decimal helpers shared by the discount engine stages.

Every amount the engine emits is rounded to the currency's minor unit
(two decimal places, half-up) and is never negative.
"""

from decimal import ROUND_DOWN, ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Optional

ZERO = Decimal("0.00")
CENT = Decimal("0.01")
HUNDRED = Decimal("100")


def to_decimal(value: Any, default: Optional[Decimal] = None) -> Optional[Decimal]:
    """
    Coerce a JSON-ish number into a Decimal.

    Floats go through ``str`` so ``0.1`` becomes ``Decimal("0.1")``.
    Booleans, non-numeric strings, NaN and infinities yield ``default``.
    """
    if value is None or isinstance(value, bool):
        return default

    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except (InvalidOperation, ValueError, TypeError):
            return default

    if not result.is_finite():
        return default
    return result


def non_negative(value: Any) -> Decimal:
    """Coerce to Decimal, mapping negatives and garbage to zero."""
    amount = to_decimal(value, Decimal("0"))
    if amount < 0:
        return Decimal("0")
    return amount


def round_money(amount: Decimal) -> Decimal:
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def clamp_money(amount: Decimal, ceiling: Decimal) -> Decimal:
    """
    Round ``amount`` and bound it to ``[0, ceiling]``.

    ``ceiling`` may carry more than two decimals (fractional quantities); a
    result that would round past it is rounded down to the ceiling instead.
    """
    if amount <= 0 or ceiling <= 0:
        return ZERO
    rounded = round_money(amount)
    if rounded > ceiling:
        return ceiling.quantize(CENT, rounding=ROUND_DOWN)
    return rounded


def percentage_of(amount: Decimal, percent: Decimal) -> Decimal:
    return amount * percent / HUNDRED
