"""
Tests for the error taxonomy and its HTTP mapping.
"""

import pytest

from drive_relay.core.domain.errors import (
    AuthError, BackendError, ErrorKind, NotFoundError, RelayTimeoutError, UploadError,
    ValidationError
)
from drive_relay.presentation.api.errors import status_for


class TestErrorBodies:
    def test_validation_error(self) -> None:
        error = ValidationError("fileSize must be positive", "fileSize")

        assert error.kind is ErrorKind.VALIDATION
        assert error.to_dict() == {
            "error": "fileSize must be positive",
            "kind": "validation",
            "field": "fileSize",
        }

    def test_backend_error(self) -> None:
        error = BackendError("Chunk 1 upload failed: 400", backend_status=400, details="Invalid range")

        assert error.to_dict() == {
            "error": "Chunk 1 upload failed: 400",
            "kind": "backend",
            "details": "Invalid range",
            "backendStatus": 400,
        }

    def test_timeout_is_retryable(self) -> None:
        body = RelayTimeoutError("timed out").to_dict()

        assert body["kind"] == "timeout"
        assert body["retryable"] is True

    def test_all_errors_share_base(self) -> None:
        for cls in (ValidationError, AuthError, NotFoundError, BackendError, RelayTimeoutError):
            assert issubclass(cls, UploadError)


class TestStatusMapping:
    @pytest.mark.parametrize("error,expected", [
        (ValidationError("x"), 400),
        (AuthError("x"), 401),
        (NotFoundError("x"), 404),
        (BackendError("x"), 502),
        (BackendError("x", backend_status=500), 502),
        (BackendError("x", backend_status=308), 502),
        (BackendError("x", backend_status=403), 403),
        (BackendError("x", backend_status=400), 400),
        (RelayTimeoutError("x"), 504),
    ])
    def test_status_for(self, error: UploadError, expected: int) -> None:
        assert status_for(error) == expected
