"""
Derived invoice figures: line amounts, subtotal, tax and grand total.

The server always recomputes these before persisting an invoice; totals
submitted by a client are only compared against the computed values.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Iterable, NamedTuple, Optional

from .logs import logger

log = logger(__file__)

CENT = Decimal("0.01")
TOTAL_FIELDS = ("subtotal", "tax_amount", "total_amount")
FINANCIAL_FIELDS = ("services", "tax_enabled", "tax_percentage", "discount_amount")


class Totals(NamedTuple):
    subtotal: float
    tax_amount: float
    total: float


def _money(value: Any) -> Decimal:
    return Decimal(str(value or 0)).quantize(CENT, rounding=ROUND_HALF_UP)


def line_amount(quantity: Any, rate: Any) -> float:
    return float(_money(Decimal(str(quantity or 0)) * Decimal(str(rate or 0))))


def calculate_totals(services: Iterable[Any], tax_enabled: bool = False,
                     tax_percentage: Optional[float] = None,
                     discount_amount: Optional[float] = 0) -> Totals:
    subtotal = sum(
        (_money(line_amount(_get(s, "quantity"), _get(s, "rate"))) for s in services),
        Decimal("0"),
    )

    tax_amount = Decimal("0")
    if tax_enabled:
        tax_amount = _money(subtotal * Decimal(str(tax_percentage or 0)) / 100)

    total = max(subtotal + tax_amount - _money(discount_amount), Decimal("0"))
    return Totals(float(subtotal), float(tax_amount), float(total.quantize(CENT)))


def apply_totals(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Return a copy of payload with line amounts and totals recomputed"""
    result = dict(payload)
    services = [dict(s) for s in payload.get("services") or []]
    for service in services:
        service["amount"] = line_amount(service.get("quantity"), service.get("rate"))

    totals = calculate_totals(
        services,
        tax_enabled=bool(payload.get("tax_enabled")),
        tax_percentage=payload.get("tax_percentage"),
        discount_amount=payload.get("discount_amount") or 0,
    )

    computed = dict(zip(TOTAL_FIELDS, totals))
    submitted = {k: payload[k] for k in TOTAL_FIELDS if payload.get(k) is not None}
    mismatched = [
        k for k, v in submitted.items() if abs(_money(v) - _money(computed[k])) > CENT
    ]
    if mismatched:
        log.warning(
            "Submitted totals differ from computed values for %s: submitted=%s computed=%s",
            ", ".join(mismatched), submitted, computed,
        )

    result["services"] = services
    result.update(computed)
    if not result.get("tax_enabled"):
        result["tax_amount"] = 0.0
    result["discount_amount"] = float(_money(payload.get("discount_amount")))
    return result


def touches_financials(changes: Dict[str, Any]) -> bool:
    return any(field in changes for field in FINANCIAL_FIELDS + TOTAL_FIELDS)


def _get(item: Any, key: str) -> Any:
    if isinstance(item, dict):
        return item.get(key)
    return getattr(item, key, None)
