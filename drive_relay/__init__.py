"""
Drive Relay - server-side proxy for Google Drive resumable uploads.

Browser clients open an upload session, then send the file body either in
one request or as ordered chunks; the relay holds the write credential and
the backend's capability URL, and tracks chunk progress on the server.
"""

__version__ = "0.1.0"

# Public API exports
from .core.domain.errors import (
    UploadError, ValidationError, AuthError, NotFoundError, BackendError, RelayTimeoutError
)
from .core.interfaces.lifecycle import IStartable, IStoppable, IHealthCheckable
from .core.interfaces.upload import (
    ISessionStore, ICredentialProvider, IStorageBackend, IUploadManager
)

__all__ = [
    "UploadError",
    "ValidationError",
    "AuthError",
    "NotFoundError",
    "BackendError",
    "RelayTimeoutError",
    "IStartable",
    "IStoppable",
    "IHealthCheckable",
    "ISessionStore",
    "ICredentialProvider",
    "IStorageBackend",
    "IUploadManager",
]
