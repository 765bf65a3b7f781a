"""Application configuration and settings."""

from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    # Service Configuration
    app_name: str = "Payment Collection Orchestrator"
    version: str = "1.0.0"
    host: str = "0.0.0.0"
    port: int = 3000
    debug: bool = False
    log_level: str = "INFO"

    # Open Banking API
    tink_client_id: str
    tink_client_secret: str
    tink_client_scope: Optional[str] = None
    tink_api_host: str = "api.tink.com"
    tink_link_host: str = "link.tink.com"
    payment_api_timeout: float = 30.0

    # Payment Defaults
    default_currency: str = "EUR"
    default_market: str = "ES"
    payment_scheme: str = "SEPA_CREDIT_TRANSFER"
    payment_remittance_text: str = "Payment"
    payment_source_message: str = "Payment confirmation"

    # Tink Link
    link_locale: str = "es_ES"
    input_provider: Optional[str] = "es-demobank-open-banking-embedded"
    public_base_url: Optional[str] = None

    # Outbound Email
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 587
    smtp_start_tls: bool = True
    smtp_username: str
    smtp_password: str
    mail_from_name: str
    mail_from_address: str

    # Sessions
    session_ttl_seconds: int = Field(default=86400, ge=0)

    @field_validator("default_currency", "default_market", "payment_scheme")
    @classmethod
    def upper_case_codes(cls, v: str) -> str:
        v = v.strip().upper()
        if not v:
            raise ValueError("Code values cannot be empty")
        return v

    @field_validator("default_market")
    @classmethod
    def validate_market(cls, v: str) -> str:
        if len(v) != 2 or not v.isalpha():
            raise ValueError("Market must be a two-letter country code")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        v = v.upper()
        if v not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return v

    @field_validator("input_provider", "public_base_url", "tink_client_scope")
    @classmethod
    def empty_as_none(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            return None
        return v

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


# Create global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get application settings."""
    return settings
