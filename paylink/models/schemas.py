"""Pydantic models for the collection workflow."""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class GrantType(str, Enum):
    """OAuth grant used to obtain an access credential."""
    CLIENT_CREDENTIALS = "client_credentials"
    AUTHORIZATION_CODE = "authorization_code"


class StatusKind(str, Enum):
    """Outcome status shown to the requester."""
    SUCCESS = "success"
    ERROR = "error"
    PENDING = "pending"


# Workflow Records
class CollectionRequest(BaseModel):
    """Validated payment-request submission."""
    verification_email: str = Field(..., min_length=1, description="Payer address for the verification link")
    payment_email: str = Field(..., min_length=1, description="Payer address for the payment link")
    amount: Decimal = Field(..., gt=0, description="Amount to collect")
    currency: str = Field(..., min_length=1, description="ISO currency code")


class CollectionSession(BaseModel):
    """Pending payment collection correlated through redirects."""
    model_config = ConfigDict(frozen=True)

    id: str
    verification_email: str
    payment_email: str
    amount: Decimal
    currency: str
    created_at: datetime
    expires_at: Optional[datetime] = None

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at is not None and now >= self.expires_at


class AccessCredential(BaseModel):
    """Bearer token and the exchange that produced it."""
    access_token: str
    grant_type: GrantType

    @property
    def authorization_header(self) -> str:
        return f"Bearer {self.access_token}"


# Open Banking API Payloads
def _list_or_empty(v):
    """Null lists become empty and null entries become empty objects, keeping positions."""
    if v is None:
        return []
    if isinstance(v, list):
        return [{} if item is None else item for item in v]
    return v


class ReportAccount(BaseModel):
    """Account proven by the payer during verification."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    iban: Optional[str] = None
    holder_name: Optional[str] = Field(None, alias="holderName")
    name: Optional[str] = None

    @field_validator("iban", "holder_name", "name", mode="before")
    @classmethod
    def non_text_as_none(cls, v):
        return v if isinstance(v, str) else None


class ProviderUserData(BaseModel):
    """Per-provider section of a verification report."""
    model_config = ConfigDict(extra="ignore")

    accounts: List[ReportAccount] = Field(default_factory=list)

    @field_validator("accounts", mode="before")
    @classmethod
    def null_as_empty(cls, v):
        return _list_or_empty(v)


class VerificationReport(BaseModel):
    """Account verification report returned by the API."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: Optional[str] = None
    user_data_by_provider: List[ProviderUserData] = Field(
        default_factory=list, alias="userDataByProvider"
    )

    @field_validator("user_data_by_provider", mode="before")
    @classmethod
    def null_as_empty(cls, v):
        return _list_or_empty(v)

    def primary_account(self) -> Optional[ReportAccount]:
        """First account of the first provider, the only one used."""
        if not self.user_data_by_provider:
            return None
        accounts = self.user_data_by_provider[0].accounts
        return accounts[0] if accounts else None


class ExtractedAccount(BaseModel):
    """Bank account data the payment request is created against."""
    iban: str
    holder_name: str
    market: str


class PaymentRecipient(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    account_number: Optional[str] = Field(None, alias="accountNumber")
    account_type: Optional[str] = Field(None, alias="accountType")


class PaymentDetail(BaseModel):
    """Payment request as reported by the API."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: Optional[str] = None
    status: Optional[str] = None
    amount: Optional[Decimal] = None
    currency: Optional[str] = None
    market: Optional[str] = None
    recipient: Optional[PaymentRecipient] = None
    recipient_name: Optional[str] = Field(None, alias="recipientName")

    @property
    def is_completed(self) -> bool:
        return (self.status or "").upper() == "COMPLETED"


# Outcomes
class InfoRow(BaseModel):
    label: str
    value: str


class Outcome(BaseModel):
    """Structured result of a workflow step, rendered for the requester."""
    icon: str
    title: str
    subtitle: str
    status_kind: StatusKind
    status_label: str
    info_rows: List[InfoRow] = Field(default_factory=list)
    message: Optional[str] = None
    error_detail: Optional[str] = None


class WorkflowResult(BaseModel):
    """Outcome plus the HTTP status it is served with."""
    outcome: Outcome
    status_code: int = 200
    session_id: Optional[str] = None


class CallbackParams(BaseModel):
    """Query parameters the provider redirects back with."""
    model_config = ConfigDict(extra="ignore")

    error: Optional[str] = None
    error_description: Optional[str] = None
    report_id: Optional[str] = Field(None, alias="account_verification_report_id")
    code: Optional[str] = None
    payment_request_id: Optional[str] = None
    session: Optional[str] = None
