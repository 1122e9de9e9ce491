"""
Shared FastAPI dependencies.

Clients are created lazily on first use so the app can be imported (and
tested) without Supabase credentials.
"""

from functools import lru_cache

from fastapi import Depends
from supabase import create_client, Client

from .config import Settings, get_settings
from .database import DatabaseClient
from .pdf import PdfService
from .services import InvoiceService


@lru_cache()
def get_supabase() -> Client:
    url, key = get_settings().require_supabase()
    return create_client(url, key)


def get_auth_client():
    return get_supabase().auth


def get_database() -> DatabaseClient:
    return DatabaseClient(get_supabase(), get_settings())


def get_pdf_service(settings: Settings = Depends(get_settings)) -> PdfService:
    return PdfService(settings)


def get_invoice_service(
    db: DatabaseClient = Depends(get_database),
    pdf: PdfService = Depends(get_pdf_service),
    settings: Settings = Depends(get_settings),
) -> InvoiceService:
    return InvoiceService(db, pdf, settings)
