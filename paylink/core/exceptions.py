"""
Custom exception classes for the payment collection orchestrator.

Only ``ValidationError`` reaches a route as an exception. Everything else is
raised by a collaborator and turned into an outcome by the orchestrator.
"""
from typing import Any, Dict, Optional

from fastapi import HTTPException, status

from paylink.core.logging import current_correlation_id


class BaseAPIException(HTTPException):
    """HTTP error tagged with a stable code and the request's correlation id."""

    def __init__(
        self,
        status_code: int,
        detail: str,
        error_code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(status_code=status_code, detail=detail)
        self.error_code = error_code
        self.correlation_id = current_correlation_id()
        self.context = context or {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error_code": self.error_code,
            "message": self.detail,
            "correlation_id": self.correlation_id,
            "context": self.context,
        }


class ValidationError(BaseAPIException):
    """Rejected collection submission; ``detail`` is shown to the requester as is."""

    def __init__(self, detail: str, field: Optional[str] = None, value: Optional[Any] = None):
        self.field = field
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            error_code=f"PAY_001_{field.upper()}" if field else "PAY_001",
            context={"field": field, "value": value},
        )


# External Service Exceptions
class ExternalServiceError(Exception):
    """Exception for external service call errors."""

    def __init__(
        self,
        service_name: str,
        message: str,
        status_code: Optional[int] = None,
        **context
    ):
        self.service_name = service_name
        self.status_code = status_code
        self.message = message
        self.context = context
        super().__init__(f"[{service_name}] {message}")


class PaymentApiError(ExternalServiceError):
    """Non-2xx response or transport failure from the open-banking API.

    ``status_code`` is 0 when no HTTP response was received.
    """

    def __init__(self, message: str, status_code: int = 0, **context):
        super().__init__(
            service_name="Payment API",
            message=message,
            status_code=status_code,
            **context
        )


class PaymentApiParseError(PaymentApiError):
    """A 2xx response whose body could not be used."""


class NotificationError(ExternalServiceError):
    """Email could not be handed to the mail server."""

    def __init__(self, message: str, recipient: Optional[str] = None, **context):
        self.recipient = recipient
        super().__init__(
            service_name="Email",
            message=message,
            recipient=recipient,
            **context
        )


# Workflow Exceptions
class WorkflowException(Exception):
    """Exception for workflow errors outside API context."""

    def __init__(self, detail: str, session_id: Optional[str] = None):
        self.session_id = session_id
        self.detail = detail
        message = detail
        if session_id:
            message = f"Session '{session_id}' error: {detail}"
        super().__init__(message)


class SessionNotFoundError(WorkflowException):
    """Collection session is unknown or has expired."""

    def __init__(self, session_id: Optional[str]):
        super().__init__("Session not found or expired", session_id=session_id)


class MissingAccountDataError(WorkflowException):
    """Verification report carries no usable IBAN."""

    def __init__(self, report_id: str, session_id: Optional[str] = None):
        self.report_id = report_id
        super().__init__(
            f"Verification report '{report_id}' has no IBAN",
            session_id=session_id,
        )
