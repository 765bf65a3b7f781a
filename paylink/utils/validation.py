"""
Validation of payment-request submissions.

Rules run in a fixed order and the first failing rule is reported, so the
requester always sees a single, specific reason.
"""
from decimal import Decimal, InvalidOperation
from typing import Optional

from paylink.core.exceptions import ValidationError
from paylink.models.schemas import CollectionRequest

# Largest amount accepted on submission.
MAX_AMOUNT = Decimal("999999999999.99")
AMOUNT_ERROR = "Amount must be a number greater than 0"


def parse_amount(raw: Optional[str]) -> Decimal:
    """Parse a submitted amount, requiring a finite number above zero and at most ``MAX_AMOUNT``."""
    text = (raw or "").strip()
    try:
        amount = Decimal(text)
    except InvalidOperation:
        raise ValidationError(AMOUNT_ERROR, field="amount", value=text)

    if not amount.is_finite() or amount <= 0 or amount > MAX_AMOUNT:
        raise ValidationError(AMOUNT_ERROR, field="amount", value=text)
    return amount


def parse_collection_submission(
    email_verification: Optional[str],
    email_payment: Optional[str],
    amount: Optional[str],
    currency: Optional[str],
    default_currency: str,
) -> CollectionRequest:
    """
    Validate the raw form fields of a collection submission.

    Args:
        email_verification: Address that receives the verification link
        email_payment: Address that receives the payment link
        amount: Amount as typed by the payee
        currency: Currency code; the configured default applies when absent
        default_currency: Configured default currency

    Returns:
        The validated request

    Raises:
        ValidationError: For the first rule that fails
    """
    verification_email = (email_verification or "").strip()
    if not verification_email:
        raise ValidationError(
            "Verification email not provided", field="emailVerification"
        )

    payment_email = (email_payment or "").strip()
    if not payment_email:
        raise ValidationError("Payment email not provided", field="emailPayment")

    parsed_amount = parse_amount(amount)

    currency_code = (currency if currency else default_currency).strip().upper()
    if not currency_code:
        raise ValidationError("Currency not provided", field="currency")

    return CollectionRequest(
        verification_email=verification_email,
        payment_email=payment_email,
        amount=parsed_amount,
        currency=currency_code,
    )
