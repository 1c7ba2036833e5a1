"""
Upload session data model.

An ``UploadSession`` binds a client-visible opaque id to the backend's
capability URL and, for chunked uploads, to the server-held progress
counters.
"""

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class UploadMode(Enum):
    """How the client must send the file body."""
    SINGLE = "single"
    CHUNKED = "chunked"


@dataclass(frozen=True)
class ByteRange:
    """Inclusive byte range of one chunk."""
    start: int
    end: int

    @property
    def length(self) -> int:
        return self.end - self.start + 1

    def content_range(self, total_size: int) -> str:
        """Render the ``Content-Range`` header value for this range."""
        return f"bytes {self.start}-{self.end}/{total_size}"


@dataclass(frozen=True)
class ChunkPlan:
    """Chunk layout handed to the client."""
    chunk_size: int
    total_chunks: int


@dataclass
class ChunkProgress:
    """Server-authoritative progress of a chunked upload."""
    chunk_size: int
    total_chunks: int
    uploaded_chunks: int = 0
    uploaded_bytes: int = 0

    @property
    def is_complete(self) -> bool:
        return self.uploaded_chunks >= self.total_chunks

    def plan(self) -> ChunkPlan:
        return ChunkPlan(chunk_size=self.chunk_size, total_chunks=self.total_chunks)


@dataclass
class UploadSession:
    """
    Upload session record.

    ``backend_upload_url`` grants write access to the backend resource and
    must never leave the server; it is excluded from ``repr``.
    """
    session_id: str
    backend_upload_url: str = field(repr=False)
    file_name: str
    file_size: int
    mime_type: str
    created_at: float
    chunking: Optional[ChunkProgress] = None
    lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False, compare=False)

    @property
    def mode(self) -> UploadMode:
        return UploadMode.CHUNKED if self.chunking is not None else UploadMode.SINGLE

    def age(self, now: float) -> float:
        return now - self.created_at


@dataclass(frozen=True)
class FileDescriptor:
    """Object created by the backend once the last byte is acknowledged."""
    file_id: str
    view_url: Optional[str] = None
    download_url: Optional[str] = None


@dataclass(frozen=True)
class SessionCreated:
    """Result of opening a session; contains nothing sensitive."""
    session_id: str
    mode: UploadMode
    file_name: str
    file_size: int
    mime_type: str
    expires_in: int
    chunk_plan: Optional[ChunkPlan] = None


@dataclass(frozen=True)
class ChunkRelayResult:
    """Outcome of relaying one chunk."""
    chunk_index: int
    uploaded_chunks: int
    total_chunks: int
    uploaded_bytes: int
    total_bytes: int
    is_complete: bool
    file_name: str
    descriptor: Optional[FileDescriptor] = None


@dataclass(frozen=True)
class SessionStatus:
    """Progress snapshot of a live session."""
    session_id: str
    mode: UploadMode
    file_name: str
    file_size: int
    mime_type: str
    created_at: float
    expires_at: float
    progress: Optional[ChunkProgress] = None
