import pytest

from invoice_api.amount_words import amount_to_words, number_to_words


@pytest.mark.parametrize("num,words", [
    (0, "Zero"),
    (7, "Seven"),
    (19, "Nineteen"),
    (20, "Twenty"),
    (45, "Forty Five"),
    (100, "One Hundred"),
    (1001, "One Thousand One"),
    (53100, "Fifty Three Thousand One Hundred"),
    (125000, "One Lakh Twenty Five Thousand"),
    (10000000, "One Crore"),
    (123456789, "Twelve Crore Thirty Four Lakh Fifty Six Thousand Seven Hundred Eighty Nine"),
])
def test_number_to_words(num, words):
    assert number_to_words(num) == words


def test_whole_rupees():
    assert amount_to_words(53100) == "Fifty Three Thousand One Hundred Rupees"


def test_zero():
    assert amount_to_words(0) == "Zero Rupees"


def test_paise_clause():
    assert amount_to_words(47200.5) == "Forty Seven Thousand Two Hundred Rupees and Fifty Paise"


def test_paise_not_lost_to_float_rounding():
    assert amount_to_words(0.29) == "Zero Rupees and Twenty Nine Paise"


def test_fraction_below_one_paisa_is_ignored():
    assert amount_to_words(10.001) == "Ten Rupees"


@pytest.mark.parametrize("amount", [0, 1, 99.99, 1500.05, 7654321.1, 10 ** 9])
def test_always_names_rupees(amount):
    words = amount_to_words(amount)
    assert "Rupees" in words
    has_paise = round(amount * 100) % 100 != 0
    assert ("Paise" in words) == has_paise
    if not has_paise:
        assert words.endswith("Rupees")


def test_negative_amount_rejected():
    with pytest.raises(ValueError):
        amount_to_words(-1)
