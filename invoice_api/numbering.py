"""
Sequential invoice numbers: CI-001, CI-002, ..., CI-999, CI-1000.

Each user has an independent sequence. The next number is derived from the
user's most recently created invoice, so two concurrent creates can compute
the same number; InvoiceService.create retries on the unique violation.
"""

import re
from typing import Optional

DEFAULT_PREFIX = "CI"
MIN_DIGITS = 3


def next_invoice_number(last_number: Optional[str], prefix: str = DEFAULT_PREFIX) -> str:
    next_number = 1

    if last_number:
        match = re.search(rf"{re.escape(prefix)}-(\d+)", last_number)
        if match:
            next_number = int(match.group(1)) + 1

    return f"{prefix}-{next_number:0{MIN_DIGITS}d}"


def generate_invoice_number(db, user_id: str, prefix: str = DEFAULT_PREFIX) -> str:
    """Next number for user_id; database errors propagate"""
    return next_invoice_number(db.latest_invoice_number(user_id), prefix)
