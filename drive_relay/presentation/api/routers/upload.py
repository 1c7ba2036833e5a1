"""
Body relay endpoints.

Both endpoints take the raw request body as bytes and need no shared secret:
the unguessable session id issued by ``POST /sessions`` is the capability.
Chunk progress is read from the server-held session only; client-sent
progress headers are ignored.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from ....core.domain.errors import ValidationError
from ....core.interfaces.upload import IUploadManager
from ..dependencies import get_upload_manager
from ..schemas import ChunkUploadResponse, UploadCompleteResponse

logger = logging.getLogger(__name__)

router = APIRouter()


def _require_session_param(session: Optional[str]) -> str:
    if not session:
        raise ValidationError("Missing session parameter", "session")
    return session


@router.put(
    "/upload",
    response_model=UploadCompleteResponse,
    response_model_exclude_none=True
)
async def upload_single_shot(
    request: Request,
    session: Optional[str] = Query(None, description="Session id"),
    upload_manager: IUploadManager = Depends(get_upload_manager)
) -> UploadCompleteResponse:
    session_id = _require_session_param(session)
    body = await request.body()

    # The name is read before the relay: a completed session is deleted
    file_name = upload_manager.get_session_status(session_id).file_name
    descriptor = await upload_manager.relay_single_shot(session_id, body)
    return UploadCompleteResponse.from_descriptor(descriptor, file_name)


@router.put(
    "/upload-chunk",
    response_model=ChunkUploadResponse,
    response_model_exclude_none=True
)
async def upload_chunk(
    request: Request,
    session: Optional[str] = Query(None, description="Session id"),
    chunk: Optional[int] = Query(None, description="Zero-based chunk index"),
    upload_manager: IUploadManager = Depends(get_upload_manager)
) -> ChunkUploadResponse:
    session_id = _require_session_param(session)
    if chunk is None:
        raise ValidationError("Missing chunk parameter", "chunk")

    body = await request.body()
    result = await upload_manager.relay_chunk(session_id, chunk, body)
    return ChunkUploadResponse.from_result(result)
