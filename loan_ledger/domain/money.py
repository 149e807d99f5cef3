"""Currency rounding and formatting helpers shared by every calculation"""

import math
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

TWO_PLACES = Decimal("0.01")
WHOLE = Decimal("1")

CURRENCY_SYMBOL = "₦"

# Keeps derived values such as income * multiplier finite
MAX_AMOUNT = 1e15


def to_amount(value: Any, default: float = 0.0) -> float:
    """
    Coerce loosely typed input (None, "", "1500", 1500) to a non-negative float.

    Unparseable, negative, non-finite or out-of-range values fall back to ``default``.
    """
    if value is None or value == "":
        return default
    try:
        amount = float(value)
    except (TypeError, ValueError, OverflowError):
        return default
    if not math.isfinite(amount) or amount < 0 or amount > MAX_AMOUNT:
        return default
    return amount


def round_half_up(value: float, places: int = 0) -> float:
    """Round half away from zero via Decimal, avoiding binary float artefacts"""
    if not math.isfinite(value):
        raise ValueError(f"Cannot round non-finite amount {value}")
    quantum = WHOLE if places == 0 else Decimal(1).scaleb(-places)
    try:
        rounded = Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP)
    except InvalidOperation as e:
        raise ValueError(f"Cannot round amount {value}") from e
    return float(rounded)


def round_whole(value: float) -> int:
    return int(round_half_up(value, 0))


def round_currency(value: float) -> float:
    """Round a monetary value to 2 decimal places"""
    return round_half_up(value, 2)


def format_number(value: float) -> str:
    """
    Group thousands and drop trailing zeros.

    Example:
        150000 -> "150,000"; 1234.5 -> "1,234.5"; 10661.85 -> "10,661.85"
    """
    text = f"{round_currency(value):,.2f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def format_currency(value: float, symbol: str = CURRENCY_SYMBOL) -> str:
    return f"{symbol}{format_number(value)}"
