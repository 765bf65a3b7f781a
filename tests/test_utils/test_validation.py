"""
Tests for submission validation.
"""
from decimal import Decimal

import pytest

from paylink.core.exceptions import ValidationError
from paylink.utils.validation import parse_amount, parse_collection_submission


class TestParseAmount:
    """Test cases for amount parsing."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("25.50", Decimal("25.50")),
            (" 10 ", Decimal("10")),
            ("0.01", Decimal("0.01")),
            ("999999999999.99", Decimal("999999999999.99")),
        ],
    )
    def test_valid_amounts(self, raw, expected):
        assert parse_amount(raw) == expected

    @pytest.mark.parametrize(
        "raw",
        [None, "", "0", "-1", "abc", "NaN", "Infinity", "25,50", "1e30", "1e400", "1000000000000"],
    )
    def test_invalid_amounts(self, raw):
        with pytest.raises(ValidationError) as exc_info:
            parse_amount(raw)

        assert exc_info.value.detail == "Amount must be a number greater than 0"
        assert exc_info.value.field == "amount"


class TestParseCollectionSubmission:
    """Test cases for the ordered submission rules."""

    def test_valid_submission(self):
        request = parse_collection_submission(
            " payer@example.com ", "pay@example.com", "25.5", "usd", default_currency="EUR"
        )

        assert request.verification_email == "payer@example.com"
        assert request.payment_email == "pay@example.com"
        assert request.amount == Decimal("25.5")
        assert request.currency == "USD"

    @pytest.mark.parametrize("currency", [None, ""])
    def test_default_currency(self, currency):
        request = parse_collection_submission(
            "a@example.com", "b@example.com", "1", currency, default_currency="EUR"
        )

        assert request.currency == "EUR"

    def test_blank_currency_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_collection_submission(
                "a@example.com", "b@example.com", "1", "   ", default_currency="EUR"
            )

        assert exc_info.value.detail == "Currency not provided"

    @pytest.mark.parametrize(
        "fields,message",
        [
            ((None, None, None), "Verification email not provided"),
            (("a@example.com", "", "0"), "Payment email not provided"),
            (("a@example.com", "b@example.com", "0"), "Amount must be a number greater than 0"),
        ],
    )
    def test_first_failing_rule_reported(self, fields, message):
        with pytest.raises(ValidationError) as exc_info:
            parse_collection_submission(*fields, None, default_currency="EUR")

        assert exc_info.value.detail == message
