"""
Upload session endpoints.

``POST /sessions`` opens a backend resumable session and returns an opaque
session handle; ``GET`` and ``DELETE`` on ``/sessions/{session_id}`` report
and abandon it.
"""

import logging

from fastapi import APIRouter, Depends

from ....core.interfaces.upload import IUploadManager
from ..dependencies import get_upload_manager, require_shared_secret
from ..schemas import (
    CreateSessionRequest, SessionCancelledResponse, SessionCreatedResponse,
    SessionStatusResponse
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/sessions",
    response_model=SessionCreatedResponse,
    response_model_exclude_none=True,
    dependencies=[Depends(require_shared_secret)]
)
async def create_session(
    request: CreateSessionRequest,
    upload_manager: IUploadManager = Depends(get_upload_manager)
) -> SessionCreatedResponse:
    """
    Open an upload session.

    Files above the single-shot threshold get a chunk plan and must be sent
    to ``/upload-chunk``; smaller files go to ``/upload`` in one request.
    """
    created = await upload_manager.create_session(
        request.file_name, request.file_size, request.mime_type
    )
    return SessionCreatedResponse.from_created(created)


@router.get(
    "/sessions/{session_id}",
    response_model=SessionStatusResponse,
    response_model_exclude_none=True
)
async def get_session(
    session_id: str,
    upload_manager: IUploadManager = Depends(get_upload_manager)
) -> SessionStatusResponse:
    """Progress snapshot of a live session."""
    return SessionStatusResponse.from_status(upload_manager.get_session_status(session_id))


@router.delete(
    "/sessions/{session_id}",
    response_model=SessionCancelledResponse,
    dependencies=[Depends(require_shared_secret)]
)
async def cancel_session(
    session_id: str,
    upload_manager: IUploadManager = Depends(get_upload_manager)
) -> SessionCancelledResponse:
    """
    Abandon a session.

    Only the local record is removed; the backend discards its own session
    when it expires.
    """
    upload_manager.cancel_session(session_id)
    return SessionCancelledResponse(session_id=session_id)
