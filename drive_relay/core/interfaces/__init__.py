"""
Service contracts.
"""

from .lifecycle import IStartable, IStoppable, IHealthCheckable, IComponent
from .upload import (
    ISessionStore, ICredentialProvider, IStorageBackend, IUploadManager, BackendReply
)

__all__ = [
    "IStartable",
    "IStoppable",
    "IHealthCheckable",
    "IComponent",
    "ISessionStore",
    "ICredentialProvider",
    "IStorageBackend",
    "IUploadManager",
    "BackendReply",
]
