"""
HTTP client for the Invoice API.

Wraps every route, unwraps the {success, data} envelope and handles the two
recoverable failures:

  - 429 Too Many Requests: retried with exponential backoff, honouring
    Retry-After when the server sends it.
  - 401 Unauthorized: the access token is refreshed once and the request
    repeated. Concurrent callers share a single in-flight refresh.
"""

import threading
import time
from typing import Any, Callable, Dict, List, Optional, Tuple

import requests

from .filtering import InvoiceFilters, filter_invoices
from .logs import logger

log = logger(__file__)

MAX_RATE_LIMIT_RETRIES = 3
BACKOFF_BASE_SECONDS = 1.0
PAGE_SIZE = 100

# refresh(refresh_token) -> (access_token, refresh_token)
RefreshCallable = Callable[[Optional[str]], Tuple[str, Optional[str]]]


class InvoiceClientError(Exception):
    def __init__(self, status_code: int, error: str, details: Any = None):
        super().__init__(f"{status_code}: {error}")
        self.status_code = status_code
        self.error = error
        self.details = details


def supabase_refresh(supabase) -> RefreshCallable:
    """Build a refresh callable backed by a supabase client"""
    def refresh(refresh_token: Optional[str]) -> Tuple[str, Optional[str]]:
        response = supabase.auth.refresh_session(refresh_token)
        session = response.session
        return session.access_token, session.refresh_token
    return refresh


class InvoiceClient:
    def __init__(self, base_url: str, access_token: str,
                 refresh_token: Optional[str] = None,
                 refresh: Optional[RefreshCallable] = None,
                 session: Optional[requests.Session] = None,
                 timeout: float = 30,
                 sleep: Callable[[float], None] = time.sleep):
        self.base_url = base_url.rstrip("/")
        self.access_token = access_token
        self.refresh_token = refresh_token
        self.refresh = refresh
        self.session = session or requests.Session()
        self.timeout = timeout
        self.sleep = sleep
        self._refresh_lock = threading.Lock()

    # --- transport ---

    def _refresh_access_token(self, stale_token: str) -> bool:
        """Refresh unless another caller already replaced stale_token"""
        if self.refresh is None:
            return False
        with self._refresh_lock:
            if self.access_token != stale_token:
                # Someone else refreshed while we waited for the lock
                return True
            try:
                self.access_token, new_refresh = self.refresh(self.refresh_token)
            except Exception as e:
                log.warning("Token refresh failed: %s", e)
                return False
            if new_refresh:
                self.refresh_token = new_refresh
            return True

    def _backoff(self, response: requests.Response, attempt: int) -> float:
        retry_after = response.headers.get("Retry-After")
        if retry_after:
            try:
                return float(retry_after)
            except ValueError:
                pass
        return BACKOFF_BASE_SECONDS * (2 ** attempt)

    def request(self, method: str, path: str, raw: bool = False, **kwargs) -> Any:
        url = f"{self.base_url}{path}"
        refreshed = False
        rate_limit_attempt = 0

        while True:
            token = self.access_token
            headers = {"Authorization": f"Bearer {token}"}
            response = self.session.request(method, url, headers=headers,
                                            timeout=self.timeout, **kwargs)

            if response.status_code == 429 and rate_limit_attempt < MAX_RATE_LIMIT_RETRIES:
                delay = self._backoff(response, rate_limit_attempt)
                log.info("Rate limited on %s %s, retrying in %.1fs", method, path, delay)
                self.sleep(delay)
                rate_limit_attempt += 1
                continue

            if response.status_code == 401 and not refreshed:
                refreshed = True
                if self._refresh_access_token(token):
                    continue

            break

        if not response.ok:
            try:
                body = response.json()
            except ValueError:
                body = {}
            raise InvoiceClientError(
                response.status_code,
                body.get("error") or response.reason or "Request failed",
                body.get("details"),
            )

        if raw:
            return response.content
        return response.json().get("data")

    # --- invoices ---

    def list_invoices(self, type: str = "all", status: str = "all", search: Optional[str] = None,
                      sort: str = "newest", page: int = 1, limit: int = 20) -> Dict[str, Any]:
        params = {"type": type, "status": status, "sort": sort, "page": page, "limit": limit}
        if search:
            params["search"] = search
        return self.request("GET", "/api/invoices", params=params)

    def list_all_invoices(self) -> List[Dict[str, Any]]:
        invoices: List[Dict[str, Any]] = []
        page = 1
        while True:
            result = self.list_invoices(page=page, limit=PAGE_SIZE)
            invoices.extend(result["invoices"])
            if page >= result["pagination"]["total_pages"]:
                return invoices
            page += 1

    def filtered_invoices(self, filters: Optional[InvoiceFilters] = None) -> List[Dict[str, Any]]:
        """Fetch everything, then search/filter/sort locally"""
        return filter_invoices(self.list_all_invoices(), filters or InvoiceFilters())

    def get_stats(self) -> Dict[str, Any]:
        return self.request("GET", "/api/invoices/stats")

    def get_invoice(self, invoice_id: str) -> Dict[str, Any]:
        return self.request("GET", f"/api/invoices/{invoice_id}")

    def create_invoice(self, invoice: Dict[str, Any]) -> Dict[str, Any]:
        return self.request("POST", "/api/invoices", json=invoice)

    def update_invoice(self, invoice_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        return self.request("PUT", f"/api/invoices/{invoice_id}", json=changes)

    def delete_invoice(self, invoice_id: str) -> None:
        self.request("DELETE", f"/api/invoices/{invoice_id}")

    def duplicate_invoice(self, invoice_id: str) -> Dict[str, Any]:
        return self.request("POST", f"/api/invoices/{invoice_id}/duplicate")

    def update_status(self, invoice_id: str, status: str) -> Dict[str, Any]:
        return self.request("PUT", f"/api/invoices/{invoice_id}/status", json={"status": status})

    def download_pdf(self, invoice_id: str) -> bytes:
        return self.request("GET", f"/api/invoices/{invoice_id}/pdf", raw=True)

    def upload_pdf(self, invoice_id: str) -> str:
        return self.request("POST", f"/api/invoices/{invoice_id}/pdf/upload")["pdf_url"]
