"""
Formatting helpers for Indian currency and dates.
"""

from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Optional, Union

RUPEE = "₹"


def _group_indian(integer_part: str) -> str:
    # Last three digits, then groups of two: 1,25,000
    if len(integer_part) <= 3:
        return integer_part
    head, tail = integer_part[:-3], integer_part[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join(groups + [tail])


def _format(amount: Any, min_decimals: int, max_decimals: int) -> str:
    value = Decimal(str(amount or 0)).quantize(
        Decimal(1).scaleb(-max_decimals), rounding=ROUND_HALF_UP
    )
    sign = "-" if value < 0 else ""
    text = f"{abs(value):.{max_decimals}f}"
    integer_part, _, fraction = text.partition(".")
    fraction = fraction.rstrip("0")
    if len(fraction) < min_decimals:
        fraction = fraction.ljust(min_decimals, "0")
    result = sign + _group_indian(integer_part)
    return f"{result}.{fraction}" if fraction else result


def format_inr(amount: Any) -> str:
    """1,25,000 or 47,200.5 (no symbol, up to two decimals)"""
    return _format(amount, 0, 2)


def format_currency(amount: Any, show_decimals: bool = True) -> str:
    if amount is None:
        return f"{RUPEE}0"
    digits = 2 if show_decimals else 0
    try:
        formatted = _format(amount, digits, digits)
    except ArithmeticError:
        # not a number (including NaN)
        return f"{RUPEE}0"
    if formatted.startswith("-"):
        return f"-{RUPEE}{formatted[1:]}"
    return f"{RUPEE}{formatted}"


def format_currency_short(amount: Optional[float]) -> str:
    """Compact form for dashboard figures: 1.2Cr, 1.3L, 45.0K"""
    if amount is None:
        return f"{RUPEE}0"
    if amount >= 10_000_000:
        return f"{RUPEE}{amount / 10_000_000:.1f}Cr"
    if amount >= 100_000:
        return f"{RUPEE}{amount / 100_000:.1f}L"
    if amount >= 1_000:
        return f"{RUPEE}{amount / 1_000:.1f}K"
    return f"{RUPEE}{amount:g}"


def format_date_in(value: Union[str, date, datetime, None]) -> str:
    """12 Feb 2026"""
    if not value:
        return ""
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return ""
    return value.strftime("%d %b %Y")


def parse_positive_int(value: Any, fallback: int) -> int:
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return fallback
    return parsed if parsed > 0 else fallback
