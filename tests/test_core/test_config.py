"""
Tests for application settings.
"""
import pytest
from pydantic import ValidationError

from paylink.core.config import Settings

REQUIRED = {
    "tink_client_id": "cid",
    "tink_client_secret": "secret",
    "smtp_username": "user",
    "smtp_password": "pw",
    "mail_from_name": "Payments",
    "mail_from_address": "payments@example.com",
}


class TestSettings:
    """Test cases for Settings."""

    def test_defaults(self):
        settings = Settings(_env_file=None, **REQUIRED)

        assert settings.port == 3000
        assert settings.default_currency == "EUR"
        assert settings.default_market == "ES"
        assert settings.link_locale == "es_ES"
        assert settings.session_ttl_seconds == 86400

    def test_missing_credentials_fail(self, monkeypatch):
        monkeypatch.delenv("TINK_CLIENT_SECRET", raising=False)
        values = dict(REQUIRED)
        del values["tink_client_secret"]

        with pytest.raises(ValidationError):
            Settings(_env_file=None, **values)

    def test_codes_are_upper_cased(self):
        settings = Settings(
            _env_file=None, default_currency=" usd ", default_market="pt", **REQUIRED
        )

        assert settings.default_currency == "USD"
        assert settings.default_market == "PT"

    @pytest.mark.parametrize("market", ["ESP", "1A", ""])
    def test_invalid_market(self, market):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, default_market=market, **REQUIRED)

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, log_level="chatty", **REQUIRED)

    def test_blank_optional_values_become_none(self):
        settings = Settings(
            _env_file=None, input_provider="", public_base_url="  ", **REQUIRED
        )

        assert settings.input_provider is None
        assert settings.public_base_url is None
