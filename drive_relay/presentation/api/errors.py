"""
Mapping of relay errors to HTTP responses.

This is the only place where an ``ErrorKind`` becomes an HTTP status code.
"""

import logging
from typing import Any, Dict

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ...core.domain.errors import BackendError, ErrorKind, UploadError, ValidationError

logger = logging.getLogger(__name__)

KIND_STATUS: Dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.AUTH: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.BACKEND: status.HTTP_502_BAD_GATEWAY,
    ErrorKind.TIMEOUT: status.HTTP_504_GATEWAY_TIMEOUT,
}


def status_for(error: UploadError) -> int:
    """
    HTTP status for a relay error.

    Client errors reported by the backend (4xx) are passed through so the
    client sees e.g. a rejected range as such; every other backend failure
    is a 502.
    """
    if isinstance(error, BackendError) and error.backend_status is not None:
        if 400 <= error.backend_status < 500:
            return error.backend_status
    return KIND_STATUS.get(error.kind, status.HTTP_500_INTERNAL_SERVER_ERROR)


async def upload_error_handler(request: Request, exc: UploadError) -> JSONResponse:
    status_code = status_for(exc)

    if status_code >= 500:
        logger.warning(f"{request.method} {request.url.path} failed ({status_code}): {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected ({status_code}): {exc.message}")

    return JSONResponse(status_code=status_code, content=exc.to_dict())


def _field_name(error: Dict[str, Any]) -> str:
    loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path", "header")]
    return ".".join(loc) or "body"


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report framework validation failures in the relay's error format."""
    errors = exc.errors()
    field = _field_name(errors[0]) if errors else "body"
    message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"

    return await upload_error_handler(request, ValidationError(f"{field}: {message}", field))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(UploadError, upload_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, request_validation_handler)  # type: ignore[arg-type]
