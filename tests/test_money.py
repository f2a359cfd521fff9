from decimal import Decimal

import pytest

from expense_portal.services.money import format_amount, from_minor_units, to_minor_units


def test_to_minor_units_rounds_half_up():
    assert to_minor_units(Decimal("45.00")) == 4500
    assert to_minor_units("12.345") == 1235
    assert to_minor_units("0.005") == 1
    assert to_minor_units(19.99) == 1999


def test_from_minor_units():
    assert from_minor_units(2540) == 25.40
    assert from_minor_units(0) == 0


def test_format_amount():
    assert format_amount(4500, "GBP") == "£45.00"
    assert format_amount(799, "gbp") == "£7.99"
    assert format_amount(12000, "EUR") == "€120.00"
    assert format_amount(5, "CHF") == "CHF 0.05"


@pytest.mark.parametrize(
    "amount, expected",
    [
        ("0.01", 0.01),
        ("19.99", 19.99),
        ("45.00", 45.0),
        ("12.345", 12.35),
        (Decimal("1000.5"), 1000.5),
    ],
)
def test_minor_units_round_trip_to_two_places(amount, expected):
    assert from_minor_units(to_minor_units(amount)) == expected
