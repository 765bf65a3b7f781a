"""
Open-banking API client for tokens, verification reports and payment requests.
"""
import math
import time
from decimal import Decimal
from typing import Any, Iterable, Optional
from urllib.parse import quote

import httpx
import structlog
from pydantic import ValidationError as PydanticValidationError

from paylink.core.exceptions import PaymentApiError, PaymentApiParseError
from paylink.core.logging import log_api_exchange, mask_secret
from paylink.models.schemas import (
    AccessCredential,
    GrantType,
    PaymentDetail,
    VerificationReport,
)

logger = structlog.get_logger(__name__)

TOKEN_PATH = "/api/v1/oauth/token"
REPORT_PATH = "/api/v1/account-verification-reports/{report_id}"
PAYMENT_REQUESTS_PATH = "/api/v1/payments/requests"
PAYMENT_REQUEST_PATH = "/api/v1/payments/requests/{payment_request_id}"


class PaymentApiClient:
    """
    Client for the open-banking API.

    Every operation makes exactly one HTTP call. Failures are raised as
    ``PaymentApiError`` (``PaymentApiParseError`` for unusable 2xx bodies)
    and are never retried here.
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        api_host: str = "api.tink.com",
        timeout_seconds: float = 30.0,
        payment_scheme: str = "SEPA_CREDIT_TRANSFER",
        client_scope: Optional[str] = None,
        remittance_text: str = "Payment",
        source_message: str = "Payment confirmation",
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.base_url = f"https://{api_host}"
        self.timeout = timeout_seconds
        self.payment_scheme = payment_scheme
        self.client_scope = client_scope
        self.remittance_text = remittance_text
        self.source_message = source_message

    @classmethod
    def from_settings(cls, settings) -> "PaymentApiClient":
        return cls(
            client_id=settings.tink_client_id,
            client_secret=settings.tink_client_secret,
            api_host=settings.tink_api_host,
            timeout_seconds=settings.payment_api_timeout,
            payment_scheme=settings.payment_scheme,
            client_scope=settings.tink_client_scope,
            remittance_text=settings.payment_remittance_text,
            source_message=settings.payment_source_message,
        )

    async def fetch_client_token(self) -> AccessCredential:
        """Obtain an application-scoped credential (client credentials grant)."""
        form = {
            "grant_type": GrantType.CLIENT_CREDENTIALS.value,
            "client_id": self.client_id,
            "client_secret": self.client_secret,
        }
        if self.client_scope:
            form["scope"] = self.client_scope

        body = await self._call("POST", TOKEN_PATH, data=form)
        return self._credential_from(body, GrantType.CLIENT_CREDENTIALS)

    async def fetch_user_token(self, authorization_code: str) -> AccessCredential:
        """Exchange an authorization code for a user-scoped credential."""
        logger.info(
            "Exchanging authorization code",
            code=mask_secret(authorization_code, visible=20),
        )
        form = {
            "grant_type": GrantType.AUTHORIZATION_CODE.value,
            "code": authorization_code,
            "client_id": self.client_id,
            "client_secret": self.client_secret,
        }

        body = await self._call("POST", TOKEN_PATH, data=form)
        return self._credential_from(body, GrantType.AUTHORIZATION_CODE)

    async def fetch_verification_report(
        self, credential: AccessCredential, report_id: str
    ) -> VerificationReport:
        """Fetch an account verification report."""
        body = await self._call(
            "GET",
            REPORT_PATH.format(report_id=quote(report_id, safe="")),
            headers={"Authorization": credential.authorization_header},
        )

        try:
            return VerificationReport.model_validate(body)
        except PydanticValidationError as e:
            raise PaymentApiParseError(
                f"Malformed verification report: {e.error_count()} invalid field(s)",
                status_code=200,
            )

    async def create_payment_request(
        self,
        credential: AccessCredential,
        iban: str,
        holder_name: str,
        market: str,
        amount: Decimal,
        currency: str,
    ) -> str:
        """
        Create a payment request towards the given account.

        Returns:
            The payment request id
        """
        amount_value = float(amount)
        if not math.isfinite(amount_value):
            raise PaymentApiError(f"Amount out of range: {amount}")

        payload = {
            "recipient": {"accountNumber": iban, "accountType": "iban"},
            "amount": amount_value,
            "currency": currency,
            "market": market,
            "recipientName": holder_name,
            "sourceMessage": self.source_message,
            "remittanceInformation": {
                "type": "UNSTRUCTURED",
                "value": self.remittance_text,
            },
            "paymentScheme": self.payment_scheme,
        }

        body = await self._call(
            "POST",
            PAYMENT_REQUESTS_PATH,
            expected=(200, 201),
            headers={"Authorization": credential.authorization_header},
            json=payload,
        )

        payment_request_id = body.get("id") if isinstance(body, dict) else None
        if not payment_request_id:
            raise PaymentApiParseError(
                "Payment request response has no id", status_code=201
            )

        logger.info("Payment request created", payment_request_id=payment_request_id)
        return str(payment_request_id)

    async def fetch_payment_detail(
        self, credential: AccessCredential, payment_request_id: str
    ) -> PaymentDetail:
        """Fetch the current state of a payment request."""
        body = await self._call(
            "GET",
            PAYMENT_REQUEST_PATH.format(payment_request_id=quote(payment_request_id, safe="")),
            headers={"Authorization": credential.authorization_header},
        )

        try:
            return PaymentDetail.model_validate(body)
        except PydanticValidationError as e:
            raise PaymentApiParseError(
                f"Malformed payment detail: {e.error_count()} invalid field(s)",
                status_code=200,
            )

    def _credential_from(self, body: Any, grant_type: GrantType) -> AccessCredential:
        token = body.get("access_token") if isinstance(body, dict) else None
        if not token or not isinstance(token, str):
            raise PaymentApiParseError(
                "Token response has no access_token", status_code=200
            )

        logger.info("Access token obtained", grant_type=grant_type.value)
        return AccessCredential(access_token=token, grant_type=grant_type)

    async def _call(
        self,
        method: str,
        path: str,
        expected: Iterable[int] = (200,),
        **kwargs,
    ) -> Any:
        """
        Execute one API call and decode its JSON body.

        Args:
            method: GET or POST
            path: API path below the configured host
            expected: Status codes counted as success
            **kwargs: Passed through to httpx

        Returns:
            Decoded JSON body

        Raises:
            PaymentApiError: Transport failure or unexpected status
            PaymentApiParseError: Success status with a non-JSON body
        """
        url = f"{self.base_url}{path}"
        started_at = time.time()

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                if method == "GET":
                    response = await client.get(url, **kwargs)
                else:
                    response = await client.post(url, **kwargs)
        except httpx.HTTPError as e:
            logger.error(
                "Payment API request failed",
                method=method,
                path=path,
                error_type=type(e).__name__,
                error=str(e),
            )
            raise PaymentApiError(f"Request error: {e}", status_code=0)

        log_api_exchange(logger, method, path, response.status_code, started_at)

        if response.status_code not in tuple(expected):
            logger.error(
                "Payment API returned an error",
                method=method,
                path=path,
                status_code=response.status_code,
                body=_truncate(response.text),
            )
            raise PaymentApiError(
                f"HTTP {response.status_code}", status_code=response.status_code
            )

        try:
            return response.json()
        except ValueError as e:
            logger.error(
                "Payment API returned an unreadable body",
                method=method,
                path=path,
                error=str(e),
            )
            raise PaymentApiParseError(
                f"Parse error: {e}", status_code=response.status_code
            )


def _truncate(text: Optional[str], limit: int = 500) -> str:
    if not text:
        return ""
    return text if len(text) <= limit else f"{text[:limit]}..."
