import pytest
from reportlab.platypus import Paragraph

from invoice_api.config import Settings
from invoice_api.pdf import PdfService, pdf_filename

from .fakes import FakeDatabase


@pytest.fixture
def invoice():
    return {
        "id": "inv-1",
        "user_id": "user-1",
        "invoice_number": "CI-042",
        "document_type": "invoice",
        "status": "draft",
        "customer_name": "Rajan & Sons <Interiors>",
        "customer_phone": "9876543210",
        "customer_address": "12 MG Road",
        "customer_email": None,
        "services": [
            {"description": "False ceiling", "quantity": 1, "rate": 45000, "amount": 45000},
            {"description": "Painting", "quantity": 2, "rate": 2500, "amount": 5000},
        ],
        "subtotal": 50000,
        "tax_enabled": True,
        "tax_percentage": 18,
        "tax_amount": 9000,
        "discount_amount": 0,
        "total_amount": 59000,
        "invoice_date": "2026-02-12",
        "due_date": None,
        "notes": "Payment within 15 days",
    }


@pytest.fixture
def service():
    return PdfService(Settings())


def paragraph_texts(story):
    return [flowable.getPlainText() for flowable in story if isinstance(flowable, Paragraph)]


def test_filename(invoice):
    assert pdf_filename(invoice) == "CI-042-invoice.pdf"


def test_generate_pdf_returns_pdf_bytes(service, invoice):
    data = service.generate_pdf(invoice)
    assert data.startswith(b"%PDF")
    assert len(data) > 1000


def test_story_contains_words_and_notes(service, invoice):
    texts = paragraph_texts(service.build_story(invoice))
    assert "Amount in words: Fifty Nine Thousand Rupees Only" in texts
    assert "Payment within 15 days" in texts
    assert "Rajan & Sons <Interiors>" in texts


def test_notes_omitted_when_empty(service, invoice):
    invoice["notes"] = None
    assert "Notes / Terms:" not in paragraph_texts(service.build_story(invoice))


def test_tax_split_into_cgst_and_sgst(service, invoice):
    rows = service.totals_rows(invoice)
    assert rows[0] == ["Subtotal", "Rs. 50,000"]
    assert ["CGST (9%)", "Rs. 4,500"] in rows
    assert ["SGST (9%)", "Rs. 4,500"] in rows
    assert rows[-1] == ["TOTAL", "Rs. 59,000"]
    assert not any(row[0] == "Discount" for row in rows)


def test_discount_row_without_tax(service, invoice):
    invoice.update({"tax_enabled": False, "tax_amount": 0, "discount_amount": 500.5,
                    "total_amount": 49499.5})
    rows = service.totals_rows(invoice)
    assert ["Discount", "- Rs. 500.5"] in rows
    assert not any(row[0].startswith("CGST") for row in rows)


def test_story_is_deterministic(service, invoice):
    first = paragraph_texts(service.build_story(invoice))
    second = paragraph_texts(service.build_story(invoice))
    assert first == second


def test_estimate_renders(service, invoice):
    invoice["document_type"] = "estimate"
    assert service.generate_pdf(invoice).startswith(b"%PDF")


def test_upload_records_url(service, invoice):
    db = FakeDatabase()
    stored = db.insert_invoice({k: v for k, v in invoice.items() if k != "id"})
    url = service.upload_pdf(db, stored, b"%PDF-1.4 test")
    assert url.endswith("pdfs/user-1/CI-042-invoice.pdf")
    assert db.uploads["pdfs/user-1/CI-042-invoice.pdf"] == b"%PDF-1.4 test"
    assert db.get_invoice("user-1", stored["id"])["pdf_url"] == url


def test_same_number_for_two_users_gets_two_files(service, invoice):
    db = FakeDatabase()
    mine = db.insert_invoice({k: v for k, v in invoice.items() if k != "id"})
    theirs = db.insert_invoice({**mine, "id": None, "user_id": "user-2", "customer_name": "Meera Nair"})

    url_mine = service.upload_pdf(db, mine, b"%PDF mine")
    url_theirs = service.upload_pdf(db, theirs, b"%PDF theirs")

    assert url_mine != url_theirs
    assert db.uploads["pdfs/user-1/CI-042-invoice.pdf"] == b"%PDF mine"
    assert db.uploads["pdfs/user-2/CI-042-invoice.pdf"] == b"%PDF theirs"
