"""
Error taxonomy for the upload relay.

Every failure the relay can report is an ``UploadError`` tagged with an
``ErrorKind``. The presentation layer maps the kind to an HTTP status once,
at the request boundary.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(Enum):
    """Error kind enumeration."""
    VALIDATION = "validation"
    AUTH = "auth"
    NOT_FOUND = "not_found"
    BACKEND = "backend"
    TIMEOUT = "timeout"


class UploadError(Exception):
    """Base class for all relay errors."""

    kind: ErrorKind = ErrorKind.BACKEND
    retryable: bool = False

    def __init__(self, message: str, details: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the error into the JSON error body."""
        body: Dict[str, Any] = {
            "error": self.message,
            "kind": self.kind.value,
        }
        if self.details:
            body["details"] = self.details
        if self.retryable:
            body["retryable"] = True
        return body


class ValidationError(UploadError):
    """Bad client input. Never retried server-side."""

    kind = ErrorKind.VALIDATION

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.field = field

    def to_dict(self) -> Dict[str, Any]:
        body = super().to_dict()
        if self.field:
            body["field"] = self.field
        return body


class AuthError(UploadError):
    """Shared-secret mismatch or credential refresh failure."""

    kind = ErrorKind.AUTH


class NotFoundError(UploadError):
    """Unknown session, or a session used in the wrong mode."""

    kind = ErrorKind.NOT_FOUND


class BackendError(UploadError):
    """Non-success response (or transport failure) from the storage backend."""

    kind = ErrorKind.BACKEND

    def __init__(
        self,
        message: str,
        backend_status: Optional[int] = None,
        details: Optional[str] = None
    ) -> None:
        super().__init__(message, details)
        self.backend_status = backend_status

    def to_dict(self) -> Dict[str, Any]:
        body = super().to_dict()
        if self.backend_status is not None:
            body["backendStatus"] = self.backend_status
        return body


class RelayTimeoutError(UploadError):
    """
    A relay call exceeded its deadline.

    The byte range was not acknowledged, so the caller may resend the
    identical range.
    """

    kind = ErrorKind.TIMEOUT
    retryable = True
