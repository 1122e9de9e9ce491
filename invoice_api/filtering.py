"""
In-memory filtering and sorting for an already fetched invoice list.

Mirrors the list view of the web client: search, type and status filters are
applied first, then a single sort order. No pagination.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List

SORT_ORDERS = ("newest", "oldest", "amount_high", "amount_low")

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


@dataclass
class InvoiceFilters:
    search: str = ""
    type: str = "all"
    status: str = "all"
    sort_by: str = "newest"


def _created_at(invoice: Dict[str, Any]) -> datetime:
    value = invoice.get("created_at")
    if not value:
        return _EPOCH
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def _total(invoice: Dict[str, Any]) -> float:
    return float(invoice.get("total_amount") or 0)


def _matches_search(invoice: Dict[str, Any], search: str) -> bool:
    return (
        search in (invoice.get("customer_name") or "").lower()
        or search in (invoice.get("invoice_number") or "").lower()
    )


def filter_invoices(invoices: Iterable[Dict[str, Any]], filters: InvoiceFilters) -> List[Dict[str, Any]]:
    filtered = list(invoices or [])

    if filters.search:
        search = filters.search.lower()
        filtered = [inv for inv in filtered if _matches_search(inv, search)]

    if filters.type and filters.type != "all":
        filtered = [inv for inv in filtered if inv.get("document_type") == filters.type]

    if filters.status and filters.status != "all":
        filtered = [inv for inv in filtered if inv.get("status") == filters.status]

    if filters.sort_by == "newest":
        filtered.sort(key=_created_at, reverse=True)
    elif filters.sort_by == "oldest":
        filtered.sort(key=_created_at)
    elif filters.sort_by == "amount_high":
        filtered.sort(key=_total, reverse=True)
    elif filters.sort_by == "amount_low":
        filtered.sort(key=_total)

    return filtered
