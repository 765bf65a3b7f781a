"""
Collection orchestrator.

Drives one payment collection across its redirects:

    Created -> AwaitingVerification -> AwaitingPayment -> Completed

with any step able to end the flow in an error outcome. Each external call
is a single attempt; a failure is turned into its terminal outcome right
where it happens, so every entry point returns exactly one
``WorkflowResult``.
"""
import asyncio
from typing import Optional, Set

import structlog
from fastapi import status

from paylink.core.exceptions import (
    MissingAccountDataError,
    NotificationError,
    PaymentApiError,
    SessionNotFoundError,
)
from paylink.core.logging import correlation_context, log_business_event
from paylink.models.schemas import (
    AccessCredential,
    CallbackParams,
    CollectionRequest,
    CollectionSession,
    ExtractedAccount,
    GrantType,
    Outcome,
    VerificationReport,
    WorkflowResult,
)
from paylink.services import outcomes
from paylink.services.notification_service import EmailNotificationService
from paylink.services.payment_api import PaymentApiClient
from paylink.services.session_store import SessionStore
from paylink.utils.links import LinkBuilder, market_from_iban

logger = structlog.get_logger(__name__)

DEFAULT_HOLDER_NAME = "Account holder"


def extract_account(
    report: VerificationReport, report_id: str, session_id: Optional[str] = None
) -> ExtractedAccount:
    """
    Pick the account a payment request is created against.

    Only the first provider's first account is considered.

    Raises:
        MissingAccountDataError: If that account has no IBAN
    """
    account = report.primary_account()
    iban = (account.iban or "").strip() if account else ""
    if not iban:
        raise MissingAccountDataError(report_id, session_id=session_id)

    holder_name = account.holder_name or account.name or DEFAULT_HOLDER_NAME
    return ExtractedAccount(
        iban=iban,
        holder_name=holder_name,
        market=market_from_iban(iban),
    )


class CollectionOrchestrator:
    """Runs the collection workflow against injected collaborators."""

    def __init__(
        self,
        session_store: SessionStore,
        api_client: PaymentApiClient,
        notifier: EmailNotificationService,
        links: LinkBuilder,
    ):
        self.session_store = session_store
        self.api_client = api_client
        self.notifier = notifier
        self.links = links
        self._background_tasks: Set[asyncio.Task] = set()

    async def start_collection(self, request: CollectionRequest) -> WorkflowResult:
        """
        Create a session and email the verification link.

        A failed verification email ends the flow with an error outcome;
        the session is left in place and simply never resumed.
        """
        session = await self.session_store.create(request)

        with correlation_context(session_id=session.id):
            account_check_url = self.links.verification_link(session.id)
            logger.info("Verification link generated", url=account_check_url)

            try:
                await self.notifier.send_verification_email(
                    to=session.verification_email,
                    account_check_url=account_check_url,
                    amount=session.amount,
                    currency=session.currency,
                )
            except NotificationError as e:
                logger.error("Verification email failed", error=e.message)
                return self._result(
                    outcomes.verification_email_failed(e.message),
                    status.HTTP_500_INTERNAL_SERVER_ERROR,
                    session.id,
                )

            log_business_event(
                "verification_email_sent",
                session_id=session.id,
                amount=str(session.amount),
                currency=session.currency,
            )
            return self._result(outcomes.verification_email_sent(session), session_id=session.id)

    async def handle_callback(self, params: CallbackParams) -> WorkflowResult:
        """
        Dispatch a provider redirect.

        Precedence: ``error`` over ``account_verification_report_id`` over
        ``payment_request_id``.
        """
        logger.info(
            "Callback received",
            has_error=bool(params.error),
            has_report_id=bool(params.report_id),
            has_auth_code=bool(params.code),
            has_payment_request_id=bool(params.payment_request_id),
            session_id=params.session,
        )

        if params.error:
            logger.warning(
                "Provider returned an error",
                error=params.error,
                description=params.error_description,
            )
            return self._result(outcomes.callback_error(params.error, params.error_description))

        if params.report_id:
            return await self.resume_verification(
                report_id=params.report_id,
                session_id=params.session,
                authorization_code=params.code,
            )

        if params.payment_request_id:
            return await self.report_payment_status(params.payment_request_id)

        logger.warning("Callback without usable parameters")
        return self._result(outcomes.invalid_parameters(), status.HTTP_400_BAD_REQUEST)

    async def resume_verification(
        self,
        report_id: str,
        session_id: Optional[str],
        authorization_code: Optional[str] = None,
    ) -> WorkflowResult:
        """Turn a verification report into a payment request for the session."""
        try:
            session = await self.session_store.get(session_id)
        except SessionNotFoundError:
            logger.error("Session not found", session_id=session_id, report_id=report_id)
            return self._result(outcomes.session_expired(), status.HTTP_500_INTERNAL_SERVER_ERROR)

        with correlation_context(session_id=session.id):
            async with self.session_store.lock(session.id):
                return await self._verify_and_request_payment(
                    session, report_id, authorization_code
                )

    async def _verify_and_request_payment(
        self,
        session: CollectionSession,
        report_id: str,
        authorization_code: Optional[str],
    ) -> WorkflowResult:
        if authorization_code:
            try:
                report_credential = await self.api_client.fetch_user_token(authorization_code)
            except PaymentApiError as e:
                return self._failed(
                    "user_token",
                    e,
                    outcomes.authentication_failed(e.message, "Could not obtain a user token"),
                    session,
                )
        else:
            logger.warning("No authorization code in callback, using client credentials")
            try:
                report_credential = await self.api_client.fetch_client_token()
            except PaymentApiError as e:
                return self._failed(
                    "client_token", e, outcomes.authentication_failed(e.message), session
                )

        try:
            report = await self.api_client.fetch_verification_report(report_credential, report_id)
        except PaymentApiError as e:
            return self._failed("verification_report", e, outcomes.report_failed(e.message), session)

        logger.info("Verification report received", report_id=report_id)

        try:
            account = extract_account(report, report_id, session.id)
        except MissingAccountDataError as e:
            logger.error("IBAN not found", report_id=report_id, error=str(e))
            return self._result(
                outcomes.missing_account_data(),
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                session.id,
            )

        logger.info(
            "Account data extracted",
            iban=account.iban,
            holder=account.holder_name,
            market=account.market,
        )

        payment_credential = await self._payment_credential(report_credential, session)
        if isinstance(payment_credential, WorkflowResult):
            return payment_credential

        try:
            payment_request_id = await self.api_client.create_payment_request(
                payment_credential,
                iban=account.iban,
                holder_name=account.holder_name,
                market=account.market,
                amount=session.amount,
                currency=session.currency,
            )
        except PaymentApiError as e:
            return self._failed(
                "payment_request", e, outcomes.payment_request_failed(e.message), session
            )

        payment_url = self.links.payment_link(payment_request_id, account.market)
        logger.info("Payment link generated", url=payment_url)

        self._dispatch_payment_email(session, account, payment_url)

        log_business_event(
            "payment_request_created",
            session_id=session.id,
            payment_request_id=payment_request_id,
            market=account.market,
            amount=str(session.amount),
            currency=session.currency,
        )
        return self._result(
            outcomes.account_verified(
                account,
                session.amount,
                session.currency,
                payment_request_id,
                session.payment_email,
            ),
            session_id=session.id,
        )

    async def _payment_credential(
        self, report_credential: AccessCredential, session: CollectionSession
    ):
        """
        Credential allowed to create payment requests.

        A user-scoped token cannot, so a client token is fetched in that case.
        Returns a failed ``WorkflowResult`` instead when that fetch fails.
        """
        if report_credential.grant_type is GrantType.CLIENT_CREDENTIALS:
            return report_credential

        try:
            return await self.api_client.fetch_client_token()
        except PaymentApiError as e:
            return self._failed(
                "client_token", e, outcomes.authentication_failed(e.message), session
            )

    async def report_payment_status(self, payment_request_id: str) -> WorkflowResult:
        """Classify a payment request as completed or still in progress."""
        logger.info("Payment status requested", payment_request_id=payment_request_id)

        try:
            credential = await self.api_client.fetch_client_token()
        except PaymentApiError as e:
            return self._failed(
                "client_token",
                e,
                outcomes.authentication_failed(e.message, "Could not retrieve payment details"),
            )

        try:
            detail = await self.api_client.fetch_payment_detail(credential, payment_request_id)
        except PaymentApiError as e:
            return self._failed(
                "payment_detail", e, outcomes.payment_detail_failed(payment_request_id, e.message)
            )

        logger.info(
            "Payment status",
            payment_request_id=payment_request_id,
            payment_status=detail.status,
            amount=str(detail.amount) if detail.amount is not None else None,
            currency=detail.currency,
        )
        log_business_event(
            "payment_status_reported",
            payment_request_id=payment_request_id,
            completed=detail.is_completed,
        )
        return self._result(outcomes.payment_status(payment_request_id, detail))

    def _dispatch_payment_email(
        self,
        session: CollectionSession,
        account: ExtractedAccount,
        payment_url: str,
    ) -> None:
        """Send the payment email without holding up the callback response."""
        task = asyncio.create_task(self._send_payment_email(session, account, payment_url))
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)

    async def _send_payment_email(
        self,
        session: CollectionSession,
        account: ExtractedAccount,
        payment_url: str,
    ) -> None:
        with correlation_context(session_id=session.id):
            try:
                await self.notifier.send_payment_email(
                    to=session.payment_email,
                    payment_url=payment_url,
                    account_holder=account.holder_name,
                    iban=account.iban,
                    amount=session.amount,
                    currency=session.currency,
                )
            except NotificationError as e:
                # The payer is already verified; the callback still succeeds.
                logger.error("Payment email failed", recipient=session.payment_email, error=e.message)
                return

            log_business_event("payment_email_sent", session_id=session.id)

    async def wait_for_background_tasks(self) -> None:
        """Wait for outstanding payment emails."""
        if self._background_tasks:
            await asyncio.gather(*list(self._background_tasks), return_exceptions=True)

    def _failed(
        self,
        step: str,
        error: PaymentApiError,
        outcome: Outcome,
        session: Optional[CollectionSession] = None,
    ) -> WorkflowResult:
        logger.error(
            "Workflow step failed",
            step=step,
            status_code=error.status_code,
            error=error.message,
        )
        return self._result(
            outcome,
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            session.id if session else None,
        )

    @staticmethod
    def _result(
        outcome: Outcome,
        status_code: int = status.HTTP_200_OK,
        session_id: Optional[str] = None,
    ) -> WorkflowResult:
        return WorkflowResult(outcome=outcome, status_code=status_code, session_id=session_id)
