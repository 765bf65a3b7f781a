"""
Tests for amount formatting.
"""
from decimal import Decimal

import pytest

from paylink.utils.formatting import format_amount, format_money


class TestFormatAmount:
    @pytest.mark.parametrize(
        "amount,expected",
        [
            (Decimal("25.5"), "25,50"),
            (Decimal("1234.5"), "1.234,50"),
            (1234567.891, "1.234.567,89"),
            ("0.005", "0,01"),
            (10, "10,00"),
            (Decimal("999999999999.99"), "999.999.999.999,99"),
        ],
    )
    def test_es_format(self, amount, expected):
        assert format_amount(amount) == expected

    @pytest.mark.parametrize(
        "amount", [None, "abc", Decimal("NaN"), Decimal("1e30"), "1e400", float("inf")]
    )
    def test_placeholder(self, amount):
        assert format_amount(amount) == "N/A"


class TestFormatMoney:
    def test_with_currency(self):
        assert format_money(Decimal("25.5"), "EUR") == "25,50 EUR"

    def test_missing_currency(self):
        assert format_money(None, None) == "N/A N/A"
