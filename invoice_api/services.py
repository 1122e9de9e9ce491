"""
Invoice Service: business rules between the routers and the database.

Responsibilities:
  - CRUD on the invoices table, always scoped to the authenticated user
  - sequential numbering and server-side totals on create/update
  - duplication with a new number and today's date
  - dashboard statistics
  - PDF rendering and storage upload
"""

import math
from datetime import date, datetime, timezone
from typing import Any, Dict, Optional

from .config import Settings, get_settings
from .errors import DatabaseError, InvoiceNotFoundError, InvoiceValidationError
from .logs import logger
from .numbering import generate_invoice_number
from .pdf import PdfService
from .totals import apply_totals, touches_financials

log = logger(__file__)

# Fields copied from the source invoice on duplicate
CONTENT_FIELDS = (
    "document_type",
    "customer_name",
    "customer_phone",
    "customer_address",
    "customer_email",
    "services",
    "subtotal",
    "tax_enabled",
    "tax_percentage",
    "tax_amount",
    "discount_amount",
    "total_amount",
    "notes",
)

PENDING_STATUSES = ("draft", "sent")
RECENT_INVOICES = 5
CREATE_ATTEMPTS = 3
DEFAULT_PAGE = 1
DEFAULT_LIMIT = 20


def _now() -> datetime:
    return datetime.now(timezone.utc)


class InvoiceService:
    def __init__(self, db, pdf: Optional[PdfService] = None, settings: Optional[Settings] = None):
        self.db = db
        self.settings = settings or get_settings()
        self.pdf = pdf or PdfService(self.settings)

    def create(self, user_id: str, invoice_data: Dict[str, Any]) -> Dict[str, Any]:
        """Create a draft invoice with the user's next invoice number"""
        row = apply_totals(invoice_data)
        row.update({
            "user_id": user_id,
            "status": "draft",
            "customer_address": invoice_data.get("customer_address") or None,
            "customer_email": invoice_data.get("customer_email") or None,
            "due_date": invoice_data.get("due_date") or None,
            "notes": invoice_data.get("notes") or None,
        })

        for attempt in range(1, CREATE_ATTEMPTS + 1):
            row["invoice_number"] = generate_invoice_number(
                self.db, user_id, self.settings.invoice_prefix
            )
            try:
                return self.db.insert_invoice(row)
            except DatabaseError as e:
                # Another create took the same number between read and insert
                if not e.is_unique_violation or attempt == CREATE_ATTEMPTS:
                    raise
                log.warning(
                    "Invoice number %s already taken for user %s, retrying",
                    row["invoice_number"], user_id,
                )

    def get_all(self, user_id: str, document_type: Optional[str] = None,
                status: Optional[str] = None, search: Optional[str] = None,
                sort: Optional[str] = None, page: int = DEFAULT_PAGE,
                limit: int = DEFAULT_LIMIT) -> Dict[str, Any]:
        invoices, total = self.db.list_invoices(
            user_id,
            document_type=document_type,
            status=status,
            search=search,
            sort=sort,
            page=page,
            limit=limit,
        )
        return {
            "invoices": invoices,
            "pagination": {
                "page": page,
                "limit": limit,
                "total": total,
                "total_pages": math.ceil(total / limit) if limit else 0,
            },
        }

    def get_by_id(self, user_id: str, invoice_id: str) -> Dict[str, Any]:
        invoice = self.db.get_invoice(user_id, invoice_id)
        if not invoice:
            raise InvoiceNotFoundError()
        return invoice

    def update(self, user_id: str, invoice_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        """Partial update; totals are recomputed whenever a financial field changes"""
        changes = dict(changes)

        if touches_financials(changes):
            current = self.get_by_id(user_id, invoice_id)
            merged = {**current, **changes}
            if merged.get("tax_enabled") and merged.get("tax_percentage") is None:
                raise InvoiceValidationError.for_field(
                    "tax_percentage", "tax_percentage is required when tax is enabled"
                )
            recomputed = apply_totals(merged)
            for field in ("services", "subtotal", "tax_amount", "discount_amount", "total_amount"):
                changes[field] = recomputed[field]

        changes["updated_at"] = _now().isoformat()
        invoice = self.db.update_invoice(user_id, invoice_id, changes)
        if not invoice:
            raise InvoiceNotFoundError()
        return invoice

    def update_status(self, user_id: str, invoice_id: str, status: str) -> Dict[str, Any]:
        return self.update(user_id, invoice_id, {"status": status})

    def delete(self, user_id: str, invoice_id: str) -> bool:
        if not self.db.delete_invoice(user_id, invoice_id):
            raise InvoiceNotFoundError()
        return True

    def duplicate(self, user_id: str, invoice_id: str, today: Optional[date] = None) -> Dict[str, Any]:
        """Copy an invoice as a new draft dated today, with no due date"""
        original = self.get_by_id(user_id, invoice_id)

        duplicated = {field: original.get(field) for field in CONTENT_FIELDS}
        duplicated["invoice_date"] = (today or date.today()).isoformat()
        duplicated["due_date"] = None

        return self.create(user_id, duplicated)

    def get_stats(self, user_id: str) -> Dict[str, Any]:
        now = _now()
        first_of_month = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)

        monthly = self.db.invoice_totals_since(user_id, first_of_month)
        pending = self.db.invoice_totals_with_status(user_id, PENDING_STATUSES)

        return {
            "invoices_this_month": len(monthly),
            "revenue_this_month": round(sum(monthly), 2),
            "total_invoices": self.db.count_invoices(user_id),
            "pending_amount": round(sum(pending), 2),
            "recent_invoices": self.db.recent_invoices(user_id, RECENT_INVOICES),
        }

    def render_pdf(self, user_id: str, invoice_id: str):
        """Return (invoice, pdf bytes)"""
        invoice = self.get_by_id(user_id, invoice_id)
        return invoice, self.pdf.generate_pdf(invoice)

    def upload_pdf(self, user_id: str, invoice_id: str) -> str:
        invoice, pdf_bytes = self.render_pdf(user_id, invoice_id)
        url = self.pdf.upload_pdf(self.db, invoice, pdf_bytes)
        log.info("Uploaded PDF for invoice %s to %s", invoice["invoice_number"], url)
        return url
