from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator
from typing import List, Optional, Any
from datetime import date, datetime
from enum import Enum


class DocumentType(str, Enum):
    INVOICE = "invoice"
    ESTIMATE = "estimate"


class InvoiceStatus(str, Enum):
    DRAFT = "draft"
    SENT = "sent"
    PAID = "paid"
    # Shown by the client, never set through the status endpoint
    PENDING = "pending"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"


class StatusChange(str, Enum):
    DRAFT = "draft"
    SENT = "sent"
    PAID = "paid"


class SortOrder(str, Enum):
    NEWEST = "newest"
    OLDEST = "oldest"
    AMOUNT_HIGH = "amount_high"
    AMOUNT_LOW = "amount_low"


PHONE_PATTERN = r"^[+]?[0-9]{10,13}$"


class ServiceItem(BaseModel):
    description: str = Field(..., min_length=2, max_length=200)
    quantity: float = Field(..., ge=1, le=9999)
    rate: float = Field(..., ge=0, le=99999999)
    amount: float = Field(0, ge=0)


class _InvoiceFields(BaseModel):
    """Fields shared by create and update payloads"""

    @field_validator("customer_address", "customer_email", "notes", mode="before",
                     check_fields=False)
    @classmethod
    def blank_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("services", check_fields=False)
    @classmethod
    def has_billable_service(cls, services):
        if services is None:
            return services
        if not any(s.description.strip() and s.rate > 0 for s in services):
            raise ValueError("Add at least one service with a description and rate")
        return services


class InvoiceCreate(_InvoiceFields):
    document_type: DocumentType

    customer_name: str = Field(..., min_length=2, max_length=100)
    customer_phone: str = Field(..., pattern=PHONE_PATTERN)
    customer_address: Optional[str] = Field(None, max_length=300)
    customer_email: Optional[EmailStr] = None

    services: List[ServiceItem] = Field(..., min_length=1)

    # Totals are recomputed by the server; submitted values are only compared
    subtotal: Optional[float] = Field(None, ge=0)
    tax_enabled: bool
    tax_percentage: Optional[float] = Field(None, ge=0, le=100)
    tax_amount: Optional[float] = Field(None, ge=0)
    discount_amount: float = Field(0, ge=0)
    total_amount: Optional[float] = Field(None, ge=0)

    invoice_date: date
    due_date: Optional[date] = None

    notes: Optional[str] = Field(None, max_length=1000)

    @model_validator(mode="after")
    def tax_percentage_when_enabled(self):
        if self.tax_enabled and self.tax_percentage is None:
            raise ValueError("tax_percentage is required when tax is enabled")
        return self


class InvoiceUpdate(_InvoiceFields):
    document_type: Optional[DocumentType] = None

    customer_name: Optional[str] = Field(None, min_length=2, max_length=100)
    customer_phone: Optional[str] = Field(None, pattern=PHONE_PATTERN)
    customer_address: Optional[str] = Field(None, max_length=300)
    customer_email: Optional[EmailStr] = None

    services: Optional[List[ServiceItem]] = Field(None, min_length=1)

    subtotal: Optional[float] = Field(None, ge=0)
    tax_enabled: Optional[bool] = None
    tax_percentage: Optional[float] = Field(None, ge=0, le=100)
    tax_amount: Optional[float] = Field(None, ge=0)
    discount_amount: Optional[float] = Field(None, ge=0)
    total_amount: Optional[float] = Field(None, ge=0)

    invoice_date: Optional[date] = None
    due_date: Optional[date] = None

    notes: Optional[str] = Field(None, max_length=1000)

    # Columns that may be left out of an update but never cleared
    @field_validator("document_type", "customer_name", "customer_phone", "services",
                     "tax_enabled", "discount_amount", "invoice_date", mode="before")
    @classmethod
    def not_null(cls, value):
        if value is None:
            raise ValueError("Field cannot be null")
        return value


class InvoiceStatusUpdate(BaseModel):
    status: StatusChange


class Invoice(BaseModel):
    id: str
    user_id: str
    invoice_number: str
    document_type: DocumentType
    status: InvoiceStatus

    customer_name: str
    customer_phone: str
    customer_address: Optional[str] = None
    customer_email: Optional[str] = None

    services: List[ServiceItem]

    subtotal: float
    tax_enabled: bool = False
    tax_percentage: Optional[float] = None
    tax_amount: float = 0
    discount_amount: float = 0
    total_amount: float

    invoice_date: date
    due_date: Optional[date] = None
    notes: Optional[str] = None
    pdf_url: Optional[str] = None

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class RecentInvoice(BaseModel):
    id: str
    invoice_number: str
    document_type: DocumentType
    status: InvoiceStatus
    customer_name: str
    total_amount: float
    invoice_date: date
    created_at: Optional[datetime] = None


class InvoiceStats(BaseModel):
    invoices_this_month: int
    revenue_this_month: float
    total_invoices: int
    pending_amount: float
    recent_invoices: List[RecentInvoice]


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int


class InvoiceList(BaseModel):
    invoices: List[Invoice]
    pagination: Pagination


class APIResponse(BaseModel):
    success: bool = True
    data: Optional[Any] = None
    message: Optional[str] = None


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    details: Optional[Any] = None
