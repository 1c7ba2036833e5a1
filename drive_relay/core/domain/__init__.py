"""
Domain model of the upload relay.
"""

from .errors import (
    ErrorKind, UploadError, ValidationError, AuthError, NotFoundError,
    BackendError, RelayTimeoutError
)
from .session import (
    UploadMode, ByteRange, ChunkPlan, ChunkProgress, UploadSession,
    FileDescriptor, SessionCreated, ChunkRelayResult, SessionStatus
)

__all__ = [
    "ErrorKind",
    "UploadError",
    "ValidationError",
    "AuthError",
    "NotFoundError",
    "BackendError",
    "RelayTimeoutError",
    "UploadMode",
    "ByteRange",
    "ChunkPlan",
    "ChunkProgress",
    "UploadSession",
    "FileDescriptor",
    "SessionCreated",
    "ChunkRelayResult",
    "SessionStatus",
]
