"""
Tink Link URL construction.

The payer leaves through these links and comes back to ``/callback``. The
verification link carries the collection session in its redirect target;
the payment link relies on the payment request id alone.
"""
from typing import Optional
from urllib.parse import urlencode

import structlog

logger = structlog.get_logger(__name__)

CALLBACK_PATH = "/callback"


def market_from_iban(iban: str) -> str:
    """Country code of an IBAN, which is the market the API routes on."""
    return iban.strip()[:2].upper()


class LinkBuilder:
    """Builds verification and payment links for one deployment."""

    def __init__(
        self,
        client_id: str,
        link_host: str,
        locale: str,
        default_market: str,
        callback_url: str,
        input_provider: Optional[str] = None,
        pinned: bool = False,
    ):
        self.client_id = client_id
        self.link_host = link_host
        self.locale = locale
        self.default_market = default_market
        self.input_provider = input_provider
        self.callback_url = callback_url
        # A configured public URL wins over whatever Host header arrives.
        self.pinned = pinned

    @classmethod
    def from_settings(cls, settings) -> "LinkBuilder":
        if settings.public_base_url:
            callback_url = settings.public_base_url.rstrip("/") + CALLBACK_PATH
            pinned = True
        else:
            callback_url = f"http://localhost:{settings.port}{CALLBACK_PATH}"
            pinned = False

        return cls(
            client_id=settings.tink_client_id,
            link_host=settings.tink_link_host,
            locale=settings.link_locale,
            default_market=settings.default_market,
            callback_url=callback_url,
            input_provider=settings.input_provider,
            pinned=pinned,
        )

    def update_callback_from_host(self, host: Optional[str], scheme: str = "http") -> str:
        """
        Derive the callback URL from an inbound Host header.

        Returns:
            The callback URL in effect after the update
        """
        if self.pinned or not host:
            return self.callback_url

        callback_url = f"{scheme}://{host}{CALLBACK_PATH}"
        if callback_url != self.callback_url:
            logger.info(
                "Callback URL updated from Host header",
                previous=self.callback_url,
                callback_url=callback_url,
            )
            self.callback_url = callback_url
        return self.callback_url

    def verification_link(self, session_id: str) -> str:
        """Account-check link whose redirect target carries the session."""
        params = {
            "client_id": self.client_id,
            "redirect_uri": f"{self.callback_url}?{urlencode({'session': session_id})}",
            "market": self.default_market,
            "locale": self.locale,
        }
        if self.input_provider:
            params["input_provider"] = self.input_provider

        return f"https://{self.link_host}/1.0/account-check/?{urlencode(params)}"

    def payment_link(self, payment_request_id: str, market: str) -> str:
        """Pay link for a created payment request."""
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.callback_url,
            "market": market,
            "locale": self.locale,
            "payment_request_id": payment_request_id,
        }
        return f"https://{self.link_host}/1.0/pay/?{urlencode(params)}"
