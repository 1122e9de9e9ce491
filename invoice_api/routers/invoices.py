from fastapi import APIRouter, Depends, Path, Query, Response, status
from typing import Optional
from ..models import (
    APIResponse,
    DocumentType,
    Invoice,
    InvoiceCreate,
    InvoiceList,
    InvoiceStats,
    InvoiceStatus,
    InvoiceStatusUpdate,
    InvoiceUpdate,
    SortOrder,
)
from ..auth import get_current_user_id
from ..dependencies import get_invoice_service
from ..pdf import pdf_filename
from ..formatting import parse_positive_int
from ..services import DEFAULT_LIMIT, DEFAULT_PAGE, InvoiceService

TYPE_FILTER = "^(all|" + "|".join(t.value for t in DocumentType) + ")$"
STATUS_FILTER = "^(all|" + "|".join(s.value for s in InvoiceStatus) + ")$"
MAX_LIMIT = 100

router = APIRouter(
    prefix="/api/invoices",
    tags=["invoices"],
    dependencies=[Depends(get_current_user_id)],
)


def _invoice(record) -> dict:
    return Invoice.model_validate(record).model_dump(mode="json")


# Static routes must be registered before /{invoice_id}
@router.get("/stats", response_model=APIResponse)
def get_invoice_stats(
    user_id: str = Depends(get_current_user_id),
    service: InvoiceService = Depends(get_invoice_service),
):
    stats = InvoiceStats.model_validate(service.get_stats(user_id))
    return APIResponse(data=stats.model_dump(mode="json"))


@router.get("", response_model=APIResponse)
def get_all_invoices(
    type: str = Query("all", pattern=TYPE_FILTER, description="invoice, estimate or all"),
    status_filter: str = Query("all", alias="status", pattern=STATUS_FILTER, description="Exact status or all"),
    search: Optional[str] = Query(None, max_length=100, description="Customer name or invoice number"),
    sort: SortOrder = Query(SortOrder.NEWEST, description="Sort order"),
    page: Optional[str] = Query(None, description="Page number (1-indexed)"),
    limit: Optional[str] = Query(None, description="Items per page (max 100)"),
    user_id: str = Depends(get_current_user_id),
    service: InvoiceService = Depends(get_invoice_service),
):
    result = service.get_all(
        user_id,
        document_type=type,
        status=status_filter,
        search=search,
        sort=sort.value,
        page=parse_positive_int(page, DEFAULT_PAGE),
        limit=min(parse_positive_int(limit, DEFAULT_LIMIT), MAX_LIMIT),
    )
    listing = InvoiceList.model_validate(result)
    return APIResponse(data=listing.model_dump(mode="json"))


@router.post("", response_model=APIResponse, status_code=status.HTTP_201_CREATED)
def create_invoice(
    payload: InvoiceCreate,
    user_id: str = Depends(get_current_user_id),
    service: InvoiceService = Depends(get_invoice_service),
):
    invoice = service.create(user_id, payload.model_dump(mode="json"))
    return APIResponse(data=_invoice(invoice), message="Invoice created successfully")


@router.get("/{invoice_id}", response_model=APIResponse)
def get_invoice(
    invoice_id: str = Path(..., description="Invoice UUID"),
    user_id: str = Depends(get_current_user_id),
    service: InvoiceService = Depends(get_invoice_service),
):
    return APIResponse(data=_invoice(service.get_by_id(user_id, invoice_id)))


@router.put("/{invoice_id}", response_model=APIResponse)
def update_invoice(
    payload: InvoiceUpdate,
    invoice_id: str = Path(..., description="Invoice UUID to update"),
    user_id: str = Depends(get_current_user_id),
    service: InvoiceService = Depends(get_invoice_service),
):
    changes = payload.model_dump(mode="json", exclude_unset=True)
    invoice = service.update(user_id, invoice_id, changes)
    return APIResponse(data=_invoice(invoice), message="Invoice updated successfully")


@router.delete("/{invoice_id}", response_model=APIResponse)
def delete_invoice(
    invoice_id: str = Path(..., description="Invoice UUID to delete"),
    user_id: str = Depends(get_current_user_id),
    service: InvoiceService = Depends(get_invoice_service),
):
    service.delete(user_id, invoice_id)
    return APIResponse(message="Invoice deleted successfully")


@router.post("/{invoice_id}/duplicate", response_model=APIResponse,
             status_code=status.HTTP_201_CREATED)
def duplicate_invoice(
    invoice_id: str = Path(..., description="Invoice UUID to copy"),
    user_id: str = Depends(get_current_user_id),
    service: InvoiceService = Depends(get_invoice_service),
):
    invoice = service.duplicate(user_id, invoice_id)
    return APIResponse(data=_invoice(invoice), message="Invoice duplicated successfully")


@router.put("/{invoice_id}/status", response_model=APIResponse)
def update_invoice_status(
    status_update: InvoiceStatusUpdate,
    invoice_id: str = Path(..., description="Invoice UUID to update"),
    user_id: str = Depends(get_current_user_id),
    service: InvoiceService = Depends(get_invoice_service),
):
    new_status = status_update.status.value
    invoice = service.update_status(user_id, invoice_id, new_status)
    return APIResponse(
        data=_invoice(invoice),
        message=f'Invoice status updated to "{new_status}"',
    )


@router.get("/{invoice_id}/pdf", response_class=Response)
def download_invoice_pdf(
    invoice_id: str = Path(..., description="Invoice UUID"),
    user_id: str = Depends(get_current_user_id),
    service: InvoiceService = Depends(get_invoice_service),
):
    invoice, pdf_bytes = service.render_pdf(user_id, invoice_id)
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{pdf_filename(invoice)}"'},
    )


@router.post("/{invoice_id}/pdf/upload", response_model=APIResponse)
def upload_invoice_pdf(
    invoice_id: str = Path(..., description="Invoice UUID"),
    user_id: str = Depends(get_current_user_id),
    service: InvoiceService = Depends(get_invoice_service),
):
    url = service.upload_pdf(user_id, invoice_id)
    return APIResponse(
        data={"pdf_url": url},
        message="PDF generated and uploaded successfully",
    )
