from supabase import create_client, Client
from postgrest.exceptions import APIError
from typing import List, Optional, Dict, Any, Iterable, Tuple
from datetime import datetime

from .config import Settings, get_settings
from .errors import DatabaseError
from .logs import logger

log = logger(__file__)

INVOICES_TABLE = "invoices"

SORT_COLUMNS = {
    "newest": ("created_at", True),
    "oldest": ("created_at", False),
    "amount_high": ("total_amount", True),
    "amount_low": ("total_amount", False),
}

RECENT_COLUMNS = (
    "id, invoice_number, document_type, status, customer_name, "
    "total_amount, invoice_date, created_at"
)

# Characters with meaning inside a PostgREST or=(...) filter
_FILTER_METACHARACTERS = str.maketrans("", "", ",()")


def _clean_search(term: str) -> str:
    return term.translate(_FILTER_METACHARACTERS).strip()


class DatabaseClient:
    """Invoice queries against Supabase, always scoped to one user"""

    def __init__(self, supabase: Optional[Client] = None, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        if supabase is None:
            url, key = self.settings.require_supabase()
            supabase = create_client(url, key)
        self.supabase: Client = supabase
        self.bucket = self.settings.storage_bucket

    def _execute(self, query):
        try:
            return query.execute()
        except APIError as e:
            log.error("Database error %s: %s", e.code, e.message)
            raise DatabaseError(e.code, e.message or str(e)) from e

    def _invoices(self):
        return self.supabase.table(INVOICES_TABLE)

    def latest_invoice_number(self, user_id: str) -> Optional[str]:
        """Number of the user's most recently created invoice"""
        result = self._execute(
            self._invoices()
            .select("invoice_number")
            .eq("user_id", user_id)
            .order("created_at", desc=True)
            .limit(1)
        )
        if result.data:
            return result.data[0]["invoice_number"]
        return None

    def insert_invoice(self, row: Dict[str, Any]) -> Dict[str, Any]:
        result = self._execute(self._invoices().insert(row))
        return result.data[0]

    def list_invoices(self,
                      user_id: str,
                      document_type: Optional[str] = None,
                      status: Optional[str] = None,
                      search: Optional[str] = None,
                      sort: Optional[str] = None,
                      page: int = 1,
                      limit: int = 20) -> Tuple[List[Dict[str, Any]], int]:
        """Filtered, sorted page of invoices plus the total matching count"""
        query = self._invoices().select("*", count="exact").eq("user_id", user_id)

        if document_type and document_type != "all":
            query = query.eq("document_type", document_type)
        if status and status != "all":
            query = query.eq("status", status)
        if search:
            term = _clean_search(search)
            if term:
                query = query.or_(
                    f"customer_name.ilike.%{term}%,invoice_number.ilike.%{term}%"
                )

        column, desc = SORT_COLUMNS.get(sort or "newest", SORT_COLUMNS["newest"])
        query = query.order(column, desc=desc)

        start = (page - 1) * limit
        query = query.range(start, start + limit - 1)

        result = self._execute(query)
        return result.data, result.count or 0

    def get_invoice(self, user_id: str, invoice_id: str) -> Optional[Dict[str, Any]]:
        result = self._execute(
            self._invoices().select("*").eq("id", invoice_id).eq("user_id", user_id).limit(1)
        )
        if result.data:
            return result.data[0]
        return None

    def update_invoice(self, user_id: str, invoice_id: str,
                       changes: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        result = self._execute(
            self._invoices().update(changes).eq("id", invoice_id).eq("user_id", user_id)
        )
        if result.data:
            return result.data[0]
        return None

    def delete_invoice(self, user_id: str, invoice_id: str) -> bool:
        result = self._execute(
            self._invoices().delete().eq("id", invoice_id).eq("user_id", user_id)
        )
        return bool(result.data)

    def invoice_totals_since(self, user_id: str, since: datetime) -> List[float]:
        result = self._execute(
            self._invoices()
            .select("total_amount")
            .eq("user_id", user_id)
            .gte("created_at", since.isoformat())
        )
        return [float(row["total_amount"]) for row in result.data]

    def count_invoices(self, user_id: str) -> int:
        result = self._execute(
            self._invoices().select("id", count="exact").eq("user_id", user_id).limit(1)
        )
        return result.count or 0

    def invoice_totals_with_status(self, user_id: str, statuses: Iterable[str]) -> List[float]:
        result = self._execute(
            self._invoices()
            .select("total_amount")
            .eq("user_id", user_id)
            .in_("status", list(statuses))
        )
        return [float(row["total_amount"]) for row in result.data]

    def recent_invoices(self, user_id: str, limit: int = 5) -> List[Dict[str, Any]]:
        result = self._execute(
            self._invoices()
            .select(RECENT_COLUMNS)
            .eq("user_id", user_id)
            .order("created_at", desc=True)
            .limit(limit)
        )
        return result.data

    def upload_pdf(self, path: str, pdf_bytes: bytes) -> str:
        """Store the PDF (overwriting) and return its public URL"""
        storage = self.supabase.storage.from_(self.bucket)
        storage.upload(
            path,
            pdf_bytes,
            {"content-type": "application/pdf", "upsert": "true"},
        )
        return storage.get_public_url(path)
