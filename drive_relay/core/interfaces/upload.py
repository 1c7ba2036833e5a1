"""
Upload relay interfaces.

This module defines the contracts between the upload manager and its
collaborators: the session store, the credential provider and the storage
backend speaking the resumable-upload protocol.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from ..domain.session import (
    ChunkRelayResult, FileDescriptor, SessionCreated, SessionStatus, UploadSession
)
from .lifecycle import IComponent


class ISessionStore(ABC):
    """
    Keyed storage for upload sessions.

    Implementations scoped to one process are not safe for multi-instance
    deployments; a shared key-value store would be needed there.
    """

    @abstractmethod
    def get(self, session_id: str) -> Optional[UploadSession]:
        """Return the session or None."""
        pass

    @abstractmethod
    def set(self, session: UploadSession) -> None:
        """Insert or replace a session keyed by its id."""
        pass

    @abstractmethod
    def delete(self, session_id: str) -> bool:
        """Remove a session. Returns True if it existed."""
        pass

    @abstractmethod
    def sweep(self, max_age: float, now: Optional[float] = None) -> List[str]:
        """
        Remove every session older than ``max_age`` seconds.

        Completion state is ignored: abandoned sessions hold a capability URL
        and must not outlive their age limit.

        Returns:
            Ids of the removed sessions
        """
        pass

    @abstractmethod
    def __contains__(self, session_id: object) -> bool:
        pass

    @abstractmethod
    def __len__(self) -> int:
        pass


class ICredentialProvider(ABC):
    """Supplies a bearer token for the storage backend."""

    @abstractmethod
    async def get_access_token(self) -> str:
        """
        Return a token valid at the time of the call.

        Implementations may reuse a token only within its declared lifetime.

        Raises:
            AuthError: If no token can be obtained
        """
        pass


@dataclass(frozen=True)
class BackendReply:
    """Raw reply of a relayed write."""
    status: int
    body: str
    json: Optional[Dict[str, Any]] = None


class IStorageBackend(IComponent):
    """Resumable-upload protocol peer."""

    @abstractmethod
    async def open_resumable_session(
        self,
        access_token: str,
        file_name: str,
        file_size: int,
        mime_type: str
    ) -> str:
        """
        Pre-allocate a backend resource.

        Returns:
            Capability URL accepting the file body

        Raises:
            BackendError: On any non-success reply
        """
        pass

    @abstractmethod
    async def put_bytes(
        self,
        upload_url: str,
        access_token: str,
        body: bytes,
        mime_type: str,
        content_range: Optional[str] = None
    ) -> BackendReply:
        """
        Write bytes to a capability URL.

        The reply is returned whatever its status; interpreting it is the
        caller's job.

        Raises:
            RelayTimeoutError: If the deadline elapses
            BackendError: On transport failure
        """
        pass

    @abstractmethod
    def describe_file(self, file_id: str) -> FileDescriptor:
        """Build the view/download references of a created object."""
        pass


class IUploadManager(IComponent):
    """
    Upload session lifecycle manager.

    Opens backend sessions, relays bodies (whole or by chunk) and tracks
    per-session progress.
    """

    @abstractmethod
    async def create_session(
        self,
        file_name: Any,
        file_size: Any,
        mime_type: Any
    ) -> SessionCreated:
        """Validate the request and open a backend resumable session."""
        pass

    @abstractmethod
    async def relay_chunk(
        self,
        session_id: str,
        chunk_index: int,
        body: bytes
    ) -> ChunkRelayResult:
        """Relay chunk ``chunk_index`` of a chunked session."""
        pass

    @abstractmethod
    async def relay_single_shot(self, session_id: str, body: bytes) -> FileDescriptor:
        """Relay the whole body of a single-shot session."""
        pass

    @abstractmethod
    def get_session_status(self, session_id: str) -> SessionStatus:
        """Progress snapshot of a live session."""
        pass

    @abstractmethod
    def cancel_session(self, session_id: str) -> None:
        """Forget a session locally."""
        pass

    @abstractmethod
    def cleanup_expired_sessions(self) -> int:
        """Sweep sessions older than the configured maximum age."""
        pass

    @abstractmethod
    def get_upload_statistics(self) -> Dict[str, Any]:
        """Counters describing the manager's activity."""
        pass
