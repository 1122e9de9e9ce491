import pytest

from invoice_api.filtering import InvoiceFilters, filter_invoices


@pytest.fixture
def invoices():
    return [
        {"invoice_number": "CI-001", "customer_name": "Rajan Kumar", "document_type": "invoice",
         "status": "paid", "total_amount": 5000, "created_at": "2026-01-05T10:00:00+00:00"},
        {"invoice_number": "CI-002", "customer_name": "Meera Nair", "document_type": "estimate",
         "status": "draft", "total_amount": 12000, "created_at": "2026-01-10T10:00:00+00:00"},
        {"invoice_number": "CI-003", "customer_name": "Arjun Rao", "document_type": "invoice",
         "status": "sent", "total_amount": 800, "created_at": "2026-02-01T09:30:00Z"},
        {"invoice_number": "CI-004", "customer_name": "Priya Rajan", "document_type": "invoice",
         "status": "paid", "total_amount": 22000, "created_at": "2026-02-03T12:00:00+00:00"},
    ]


def numbers(result):
    return [inv["invoice_number"] for inv in result]


def test_defaults_return_everything_newest_first(invoices):
    assert numbers(filter_invoices(invoices, InvoiceFilters())) == ["CI-004", "CI-003", "CI-002", "CI-001"]


def test_search_is_case_insensitive_on_customer_name(invoices):
    result = filter_invoices(invoices, InvoiceFilters(search="rajan"))
    assert set(numbers(result)) == {"CI-001", "CI-004"}
    assert "Rajan Kumar" in [inv["customer_name"] for inv in result]


def test_search_matches_invoice_number(invoices):
    assert numbers(filter_invoices(invoices, InvoiceFilters(search="ci-002"))) == ["CI-002"]


def test_type_and_status_combined(invoices):
    result = filter_invoices(invoices, InvoiceFilters(type="invoice", status="paid"))
    assert set(numbers(result)) == {"CI-001", "CI-004"}
    assert all(inv["document_type"] == "invoice" and inv["status"] == "paid" for inv in result)


def test_amount_high_sorts_by_descending_total(invoices):
    result = filter_invoices(invoices, InvoiceFilters(sort_by="amount_high"))
    totals = [inv["total_amount"] for inv in result]
    assert totals == sorted(totals, reverse=True)


def test_amount_low_and_oldest(invoices):
    assert numbers(filter_invoices(invoices, InvoiceFilters(sort_by="amount_low")))[0] == "CI-003"
    assert numbers(filter_invoices(invoices, InvoiceFilters(sort_by="oldest")))[0] == "CI-001"


def test_sort_applies_after_filtering(invoices):
    result = filter_invoices(invoices, InvoiceFilters(type="invoice", sort_by="amount_low"))
    assert numbers(result) == ["CI-003", "CI-001", "CI-004"]


def test_input_list_not_mutated(invoices):
    before = numbers(invoices)
    filter_invoices(invoices, InvoiceFilters(sort_by="amount_high"))
    assert numbers(invoices) == before


def test_handles_empty_input():
    assert filter_invoices(None, InvoiceFilters(search="x")) == []
