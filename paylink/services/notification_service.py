"""
Email notifications sent to the payer during a collection.
"""
from decimal import Decimal
from email.message import EmailMessage
from email.utils import formataddr

import aiosmtplib
import structlog

from paylink.core.exceptions import NotificationError
from paylink.core.templates import render_email

logger = structlog.get_logger(__name__)

VERIFICATION_SUBJECT = "Verify your account to receive the payment"
PAYMENT_SUBJECT = "Complete your pending payment"


class EmailNotificationService:
    """Renders workflow emails and submits them over SMTP."""

    def __init__(
        self,
        smtp_host: str,
        smtp_port: int,
        username: str,
        password: str,
        from_name: str,
        from_address: str,
        start_tls: bool = True,
        timeout_seconds: float = 60.0,
    ):
        self.smtp_host = smtp_host
        self.smtp_port = smtp_port
        self.username = username
        self.password = password
        self.from_name = from_name
        self.from_address = from_address
        self.start_tls = start_tls
        self.timeout = timeout_seconds

    @classmethod
    def from_settings(cls, settings) -> "EmailNotificationService":
        return cls(
            smtp_host=settings.smtp_host,
            smtp_port=settings.smtp_port,
            username=settings.smtp_username,
            password=settings.smtp_password,
            from_name=settings.mail_from_name,
            from_address=settings.mail_from_address,
            start_tls=settings.smtp_start_tls,
        )

    async def send_verification_email(
        self,
        to: str,
        account_check_url: str,
        amount: Decimal,
        currency: str,
    ) -> None:
        """
        Send the account verification link to the payer.

        Args:
            to: Verification email address
            account_check_url: Tink Link account-check URL
            amount: Amount being collected
            currency: Currency code

        Raises:
            NotificationError: If the email could not be sent
        """
        html_body = render_email(
            "email_verification.html",
            account_check_url=account_check_url,
            amount=amount,
            currency=currency,
        )
        await self.send_email(to, VERIFICATION_SUBJECT, html_body)

    async def send_payment_email(
        self,
        to: str,
        payment_url: str,
        account_holder: str,
        iban: str,
        amount: Decimal,
        currency: str,
    ) -> None:
        """
        Send the payment link for a created payment request.

        Args:
            to: Payment email address
            payment_url: Tink Link pay URL
            account_holder: Holder of the verified account
            iban: Verified IBAN
            amount: Amount being collected
            currency: Currency code

        Raises:
            NotificationError: If the email could not be sent
        """
        html_body = render_email(
            "email_payment.html",
            payment_url=payment_url,
            account_holder=account_holder,
            iban=iban,
            amount=amount,
            currency=currency,
        )
        await self.send_email(to, PAYMENT_SUBJECT, html_body)

    async def send_email(self, to: str, subject: str, html_body: str) -> None:
        """Submit one HTML email to the SMTP server."""
        message = EmailMessage()
        message["From"] = formataddr((self.from_name, self.from_address))
        message["To"] = to
        message["Subject"] = subject
        message.set_content("This message requires an HTML capable email client.")
        message.add_alternative(html_body, subtype="html")

        logger.info("Sending email", recipient=to, subject=subject)

        try:
            await aiosmtplib.send(
                message,
                hostname=self.smtp_host,
                port=self.smtp_port,
                username=self.username,
                password=self.password,
                start_tls=self.start_tls,
                timeout=self.timeout,
            )
        except (aiosmtplib.SMTPException, OSError) as e:
            logger.error(
                "Failed to send email",
                recipient=to,
                subject=subject,
                error_type=type(e).__name__,
                error=str(e),
            )
            raise NotificationError(str(e), recipient=to)

        logger.info("Email sent", recipient=to, subject=subject)
