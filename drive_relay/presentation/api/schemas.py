"""
Request and response models of the upload API.

All JSON keys are camelCase on the wire. None of these models has a field
for the backend capability URL.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr
from pydantic.alias_generators import to_camel

from ...core.domain.session import (
    ChunkProgress, ChunkRelayResult, FileDescriptor, SessionCreated, SessionStatus,
    UploadMode
)

UPLOAD_PATHS = {
    UploadMode.SINGLE: "/upload",
    UploadMode.CHUNKED: "/upload-chunk",
}


class ApiModel(BaseModel):
    """Base model serialising field names as camelCase."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CreateSessionRequest(ApiModel):
    """Upload session request."""
    file_name: StrictStr = Field(..., description="Name of the object to create")
    file_size: StrictInt = Field(..., description="Declared size in bytes")
    mime_type: StrictStr = Field(..., description="Content type of the file")


class ChunkPlanModel(ApiModel):
    chunk_size: int = Field(..., description="Bytes per chunk (last chunk may be shorter)")
    total_chunks: int = Field(..., description="Number of chunks to send")


class ChunkProgressModel(ChunkPlanModel):
    uploaded_chunks: int = Field(..., description="Chunks acknowledged by the backend")
    uploaded_bytes: int = Field(..., description="Bytes acknowledged by the backend")

    @classmethod
    def from_progress(cls, progress: ChunkProgress) -> "ChunkProgressModel":
        return cls(
            chunk_size=progress.chunk_size,
            total_chunks=progress.total_chunks,
            uploaded_chunks=progress.uploaded_chunks,
            uploaded_bytes=progress.uploaded_bytes
        )


class SessionCreatedResponse(ApiModel):
    """Session handle returned to the client."""
    session_id: str = Field(..., description="Opaque session identifier")
    mode: str = Field(..., description="'single' or 'chunked'")
    file_name: str
    file_size: int
    mime_type: str
    upload_path: str = Field(..., description="Endpoint the body must be sent to")
    expires_in: int = Field(..., description="Seconds until the session is swept")
    chunking: Optional[ChunkPlanModel] = None

    @classmethod
    def from_created(cls, created: SessionCreated) -> "SessionCreatedResponse":
        chunking = None
        if created.chunk_plan is not None:
            chunking = ChunkPlanModel(
                chunk_size=created.chunk_plan.chunk_size,
                total_chunks=created.chunk_plan.total_chunks
            )
        return cls(
            session_id=created.session_id,
            mode=created.mode.value,
            file_name=created.file_name,
            file_size=created.file_size,
            mime_type=created.mime_type,
            upload_path=UPLOAD_PATHS[created.mode],
            expires_in=created.expires_in,
            chunking=chunking
        )


class SessionStatusResponse(ApiModel):
    """Progress snapshot of a live session."""
    session_id: str
    mode: str
    file_name: str
    file_size: int
    mime_type: str
    upload_path: str
    created_at: float = Field(..., description="Epoch seconds")
    expires_at: float = Field(..., description="Epoch seconds")
    chunking: Optional[ChunkProgressModel] = None

    @classmethod
    def from_status(cls, status: SessionStatus) -> "SessionStatusResponse":
        return cls(
            session_id=status.session_id,
            mode=status.mode.value,
            file_name=status.file_name,
            file_size=status.file_size,
            mime_type=status.mime_type,
            upload_path=UPLOAD_PATHS[status.mode],
            created_at=status.created_at,
            expires_at=status.expires_at,
            chunking=ChunkProgressModel.from_progress(status.progress) if status.progress else None
        )


class UploadCompleteResponse(ApiModel):
    """Result of a single-shot upload."""
    success: bool = True
    file_id: str
    file_name: str
    view_url: Optional[str] = None
    download_url: Optional[str] = None
    message: str = "File uploaded successfully"

    @classmethod
    def from_descriptor(cls, descriptor: FileDescriptor, file_name: str) -> "UploadCompleteResponse":
        return cls(
            file_id=descriptor.file_id,
            file_name=file_name,
            view_url=descriptor.view_url,
            download_url=descriptor.download_url
        )


class ChunkUploadResponse(ApiModel):
    """Result of relaying one chunk."""
    success: bool = True
    chunk_index: int
    uploaded_chunks: int
    total_chunks: int
    uploaded_bytes: int
    total_bytes: int
    is_complete: bool
    message: str
    file_id: Optional[str] = None
    file_name: Optional[str] = None
    view_url: Optional[str] = None
    download_url: Optional[str] = None

    @classmethod
    def from_result(cls, result: ChunkRelayResult) -> "ChunkUploadResponse":
        response = cls(
            chunk_index=result.chunk_index,
            uploaded_chunks=result.uploaded_chunks,
            total_chunks=result.total_chunks,
            uploaded_bytes=result.uploaded_bytes,
            total_bytes=result.total_bytes,
            is_complete=result.is_complete,
            message=(
                "File uploaded successfully" if result.is_complete
                else f"Chunk {result.chunk_index + 1}/{result.total_chunks} uploaded"
            )
        )
        if result.is_complete:
            response.file_name = result.file_name
            if result.descriptor is not None:
                response.file_id = result.descriptor.file_id
                response.view_url = result.descriptor.view_url
                response.download_url = result.descriptor.download_url
        return response


class SessionCancelledResponse(ApiModel):
    success: bool = True
    session_id: str
    message: str = "Upload session cancelled"
