"""
FastAPI dependency injection utilities.

This module provides dependency functions giving routes access to the
configuration, the upload manager and the shared-secret check.
"""

import secrets

from fastapi import Depends, HTTPException, Request, status

from ...application.startup import ApplicationStartup
from ...core.domain.errors import AuthError
from ...core.interfaces.upload import IUploadManager
from ...infrastructure.config.models import ApplicationConfig

BEARER_PREFIX = "bearer "


def get_config(request: Request) -> ApplicationConfig:
    """
    Get the application configuration from the request.

    Raises:
        HTTPException: If configuration is not available
    """
    if not hasattr(request.app.state, "config"):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Application configuration not available"
        )

    return request.app.state.config


def get_startup(request: Request) -> ApplicationStartup:
    if not hasattr(request.app.state, "startup"):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Application components not available"
        )

    return request.app.state.startup


def get_upload_manager(startup: ApplicationStartup = Depends(get_startup)) -> IUploadManager:
    return startup.upload_manager


def require_shared_secret(
    request: Request,
    config: ApplicationConfig = Depends(get_config)
) -> None:
    """
    Check the ``Authorization: Bearer <shared-secret>`` header.

    A server without a configured secret rejects every request.

    Raises:
        AuthError: If the secret is missing or does not match
    """
    expected = config.security.shared_secret
    if not expected:
        raise AuthError("Shared secret is not configured on the server")

    header = request.headers.get("Authorization", "")
    if not header.lower().startswith(BEARER_PREFIX):
        raise AuthError("Missing bearer credentials")

    provided = header[len(BEARER_PREFIX):].strip()
    if not secrets.compare_digest(provided.encode(), expected.encode()):
        raise AuthError("Invalid shared secret")
