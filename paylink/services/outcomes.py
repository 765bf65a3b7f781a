"""
Outcome builders for every terminal point of the collection workflow.
"""
from decimal import Decimal
from typing import Optional

from paylink.models.schemas import (
    CollectionSession,
    ExtractedAccount,
    InfoRow,
    Outcome,
    PaymentDetail,
    StatusKind,
)
from paylink.utils.formatting import format_money

ICON_SUCCESS = "✓"
ICON_ERROR = "❌"
ICON_WARNING = "⚠️"
ICON_PENDING = "⏳"
ICON_EMAIL = "✉️"


def error_outcome(
    title: str,
    subtitle: str,
    error_detail: Optional[str] = None,
    message: Optional[str] = "Please try again",
    icon: str = ICON_ERROR,
) -> Outcome:
    return Outcome(
        icon=icon,
        title=title,
        subtitle=subtitle,
        status_kind=StatusKind.ERROR,
        status_label="Error",
        message=message,
        error_detail=error_detail,
    )


def callback_error(error_code: str, description: Optional[str] = None) -> Outcome:
    """Provider redirected back with an error (cancelled or failed flow)."""
    detail = f"Code: {error_code}"
    if description:
        detail = f"{detail} ({description})"
    return error_outcome(
        "Flow error", "Something went wrong", error_detail=detail, message="Cancelled"
    )


def invalid_parameters() -> Outcome:
    return error_outcome(
        "Invalid parameters",
        "Incomplete request",
        error_detail="Missing parameters",
        icon=ICON_WARNING,
    )


def session_expired() -> Outcome:
    return error_outcome(
        "Session expired",
        "Data not found",
        error_detail="Session expired",
        message="Please start again",
    )


def authentication_failed(error_detail: str, subtitle: str = "Could not obtain an access token") -> Outcome:
    return error_outcome(
        "Authentication error", subtitle, error_detail=error_detail, message="Server error"
    )


def report_failed(error_detail: str) -> Outcome:
    return error_outcome(
        "Verification error", "Could not retrieve verification data", error_detail=error_detail
    )


def missing_account_data() -> Outcome:
    return error_outcome(
        "IBAN not found",
        "Incomplete verification",
        error_detail="No IBAN in verification report",
        message="Please check your bank details",
    )


def payment_request_failed(error_detail: str) -> Outcome:
    return error_outcome(
        "Payment error", "Could not create the payment request", error_detail=error_detail
    )


def payment_detail_failed(payment_request_id: str, error_detail: str) -> Outcome:
    outcome = error_outcome(
        "Payment details unavailable",
        "Could not retrieve payment details",
        error_detail=error_detail,
    )
    outcome.info_rows.append(InfoRow(label="Payment ID", value=payment_request_id))
    return outcome


def verification_email_failed(error_detail: str) -> Outcome:
    return error_outcome(
        "Email not sent",
        "The verification email could not be delivered",
        error_detail=error_detail,
    )


def verification_email_sent(session: CollectionSession) -> Outcome:
    """Confirmation for an accepted submission."""
    return Outcome(
        icon=ICON_EMAIL,
        title="Verification email sent",
        subtitle="Waiting for the payer to verify their account",
        status_kind=StatusKind.PENDING,
        status_label="Awaiting verification",
        info_rows=[
            InfoRow(label="Email", value=session.verification_email),
            InfoRow(label="Amount", value=format_money(session.amount, session.currency)),
            InfoRow(label="Currency", value=session.currency),
            InfoRow(label="Session ID", value=session.id),
        ],
        message=f"A verification link was sent to {session.verification_email}",
    )


def account_verified(
    account: ExtractedAccount,
    amount: Decimal,
    currency: str,
    payment_request_id: str,
    payment_email: str,
) -> Outcome:
    return Outcome(
        icon=ICON_SUCCESS,
        title="Account verified",
        subtitle="Ready to pay",
        status_kind=StatusKind.SUCCESS,
        status_label=f"{ICON_SUCCESS} OK",
        info_rows=[
            InfoRow(label="IBAN", value=account.iban),
            InfoRow(label="Holder", value=account.holder_name),
            InfoRow(label="Amount to receive", value=format_money(amount, currency)),
            InfoRow(label="Currency", value=currency),
            InfoRow(label="Payment ID", value=payment_request_id),
        ],
        message=f"Payment request sent to {payment_email}",
    )


def payment_status(payment_request_id: str, detail: PaymentDetail) -> Outcome:
    """Completed payments are a success; every other status is pending."""
    status = detail.status or "UNKNOWN"
    if detail.is_completed:
        icon, title, kind = ICON_SUCCESS, "Payment completed", StatusKind.SUCCESS
    else:
        icon, title, kind = ICON_PENDING, "Payment in progress", StatusKind.PENDING

    rows = [
        InfoRow(label="Transfer amount", value=format_money(detail.amount, detail.currency)),
        InfoRow(label="Payment ID", value=payment_request_id),
    ]
    if detail.recipient and detail.recipient.account_number:
        rows.append(InfoRow(label="IBAN", value=detail.recipient.account_number))
    if detail.recipient_name:
        rows.append(InfoRow(label="Holder", value=detail.recipient_name))

    return Outcome(
        icon=icon,
        title=title,
        subtitle=f"Status: {status}",
        status_kind=kind,
        status_label=f"{icon} {status}",
        info_rows=rows,
        message=f"Payment {status}. Your request has been processed",
    )
