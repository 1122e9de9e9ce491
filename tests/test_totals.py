import pytest

from invoice_api.totals import apply_totals, calculate_totals, line_amount, touches_financials


def test_line_amount_rounds_to_cents():
    assert line_amount(3, 33.335) == 100.01
    assert line_amount(2, 2500.5) == 5001.0


def test_subtotal_without_tax():
    totals = calculate_totals([{"quantity": 2, "rate": 100}, {"quantity": 1, "rate": 50}])
    assert totals.subtotal == 250.0
    assert totals.tax_amount == 0.0
    assert totals.total == 250.0


def test_tax_ignored_when_disabled():
    totals = calculate_totals([{"quantity": 1, "rate": 1000}], tax_enabled=False, tax_percentage=18)
    assert totals.tax_amount == 0.0
    assert totals.total == 1000.0


def test_tax_and_discount():
    totals = calculate_totals(
        [{"quantity": 1, "rate": 1000}], tax_enabled=True, tax_percentage=18, discount_amount=100
    )
    assert totals == (1000.0, 180.0, 1080.0)


def test_total_never_negative():
    totals = calculate_totals(
        [{"quantity": 1, "rate": 100}], tax_enabled=True, tax_percentage=5, discount_amount=500
    )
    assert totals.total == 0.0


@pytest.mark.parametrize("services,tax,pct,discount", [
    ([{"quantity": 1, "rate": 99.99}], True, 12.5, 0),
    ([{"quantity": 3, "rate": 19.995}, {"quantity": 7, "rate": 0.01}], True, 28, 5),
    ([{"quantity": 9999, "rate": 99999999}], False, None, 1),
    ([{"quantity": 1, "rate": 10}], True, 100, 1000),
])
def test_total_identity(services, tax, pct, discount):
    totals = calculate_totals(services, tax, pct, discount)
    assert totals.total == max(round(totals.subtotal + totals.tax_amount - discount, 2), 0)
    assert totals.total >= 0


def test_apply_totals_overwrites_client_figures():
    payload = {
        "services": [{"description": "Door", "quantity": 2, "rate": 150, "amount": 1}],
        "subtotal": 1,
        "tax_enabled": True,
        "tax_percentage": 10,
        "tax_amount": 0,
        "discount_amount": 20,
        "total_amount": 99999,
    }
    result = apply_totals(payload)
    assert result["services"][0]["amount"] == 300.0
    assert result["subtotal"] == 300.0
    assert result["tax_amount"] == 30.0
    assert result["total_amount"] == 310.0
    # input untouched
    assert payload["services"][0]["amount"] == 1


def test_touches_financials():
    assert touches_financials({"discount_amount": 5})
    assert touches_financials({"services": []})
    assert not touches_financials({"status": "paid", "notes": "x"})
