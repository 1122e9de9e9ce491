"""
Amount to words using the Indian numbering system.

    53100   -> "Fifty Three Thousand One Hundred Rupees"
    47200.5 -> "Forty Seven Thousand Two Hundred Rupees and Fifty Paise"
    0       -> "Zero Rupees"
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Union

ONES = [
    "", "One", "Two", "Three", "Four", "Five", "Six", "Seven", "Eight", "Nine",
    "Ten", "Eleven", "Twelve", "Thirteen", "Fourteen", "Fifteen", "Sixteen",
    "Seventeen", "Eighteen", "Nineteen",
]

TENS = [
    "", "", "Twenty", "Thirty", "Forty", "Fifty",
    "Sixty", "Seventy", "Eighty", "Ninety",
]

# Largest first: Crore, Lakh, Thousand, Hundred
SCALES = [
    (10_000_000, "Crore"),
    (100_000, "Lakh"),
    (1_000, "Thousand"),
    (100, "Hundred"),
]


def number_to_words(num: int) -> str:
    """Convert a non-negative integer to English words (Indian scale)"""
    if num < 0:
        raise ValueError("num must be non-negative")
    if num == 0:
        return "Zero"

    words = []
    for size, name in SCALES:
        if num >= size:
            words.append(f"{number_to_words(num // size)} {name}")
            num %= size

    if num > 0:
        if num < 20:
            words.append(ONES[num])
        else:
            words.append(TENS[num // 10])
            if num % 10:
                words.append(ONES[num % 10])

    return " ".join(words)


def amount_to_words(amount: Union[int, float, Decimal, str]) -> str:
    """Convert a rupee amount (with optional paise) to words"""
    value = Decimal(str(amount)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    if value < 0:
        raise ValueError("amount must be non-negative")

    rupees = int(value)
    paise = int((value - rupees) * 100)

    result = f"{number_to_words(rupees)} Rupees"
    if paise > 0:
        result += f" and {number_to_words(paise)} Paise"
    return result
