"""
Models package for the payment collection orchestrator.
"""
from .schemas import (
    AccessCredential,
    CallbackParams,
    CollectionRequest,
    CollectionSession,
    ExtractedAccount,
    GrantType,
    InfoRow,
    Outcome,
    PaymentDetail,
    StatusKind,
    VerificationReport,
    WorkflowResult,
)

__all__ = [
    "AccessCredential",
    "CallbackParams",
    "CollectionRequest",
    "CollectionSession",
    "ExtractedAccount",
    "GrantType",
    "InfoRow",
    "Outcome",
    "PaymentDetail",
    "StatusKind",
    "VerificationReport",
    "WorkflowResult",
]
