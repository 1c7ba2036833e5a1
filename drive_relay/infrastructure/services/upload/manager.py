"""
Upload manager implementation for the Drive Relay application.

The manager brokers the backend's resumable-upload protocol: it opens backend
sessions on behalf of browser clients, relays the file body either in one
write or as ordered byte-range chunks, and keeps the authoritative progress
of every chunked session.
"""

import dataclasses
import logging
import secrets
import time
from typing import Any, Callable, Dict, Optional

from ....core.domain.errors import (
    BackendError, NotFoundError, UploadError, ValidationError, RelayTimeoutError
)
from ....core.domain.session import (
    ChunkProgress, ChunkRelayResult, FileDescriptor, SessionCreated, SessionStatus,
    UploadMode, UploadSession
)
from ....core.interfaces.upload import (
    BackendReply, ICredentialProvider, ISessionStore, IStorageBackend, IUploadManager
)
from ...config.models import UploadConfig
from .chunking import chunk_range, total_chunks

logger = logging.getLogger(__name__)

RESUME_INCOMPLETE = 308
FINAL_STATUSES = (200, 201)

SESSION_ID_BYTES = 24


def _new_token() -> str:
    return secrets.token_urlsafe(SESSION_ID_BYTES)


class UploadManager(IUploadManager):
    """
    Upload session lifecycle manager.

    Sessions are created only by ``create_session``; chunk progress is
    mutated only by ``relay_chunk`` once the backend acknowledges a chunk.
    Relays on one session are serialised by the session's lock.
    """

    def __init__(
        self,
        store: ISessionStore,
        credentials: ICredentialProvider,
        backend: IStorageBackend,
        config: Optional[UploadConfig] = None,
        clock: Callable[[], float] = time.time,
        id_factory: Callable[[], str] = _new_token
    ) -> None:
        """
        Initialize upload manager.

        Args:
            store: Session store
            credentials: Bearer token source for the backend
            backend: Resumable-upload protocol peer
            config: Thresholds, chunk size and age limits
            clock: Time source (epoch seconds)
            id_factory: Session id generator
        """
        self._store = store
        self._credentials = credentials
        self._backend = backend
        self._config = config or UploadConfig()
        self._clock = clock
        self._id_factory = id_factory
        self._running = False

        self._stats = {
            "sessions_created": 0,
            "chunked_sessions": 0,
            "single_shot_sessions": 0,
            "chunks_relayed": 0,
            "bytes_relayed": 0,
            "uploads_completed": 0,
            "relay_failures": 0,
            "relay_timeouts": 0,
            "sessions_expired": 0,
            "sessions_cancelled": 0,
        }

    @property
    def name(self) -> str:
        return "UploadManager"

    @property
    def config(self) -> UploadConfig:
        return self._config

    async def start(self) -> None:
        if self._running:
            return
        self._running = True
        logger.info(
            f"Upload manager started (single-shot threshold {self._config.single_shot_threshold} bytes, "
            f"chunk size {self._config.chunk_size} bytes)")

    async def stop(self) -> None:
        if not self._running:
            return
        self._running = False
        logger.info(f"Upload manager stopped with {len(self._store)} sessions in memory")

    async def check_health(self) -> Dict[str, Any]:
        return {
            "healthy": self._running,
            "status": "running" if self._running else "stopped",
            "details": {
                "sessions_active": len(self._store),
                "statistics": self.get_upload_statistics(),
            }
        }

    # Session Initiator

    def _validate_request(self, file_name: Any, file_size: Any, mime_type: Any) -> None:
        if not isinstance(file_name, str) or not file_name.strip():
            raise ValidationError("fileName is required and must be a string", "fileName")

        if isinstance(file_size, bool) or not isinstance(file_size, int) or file_size <= 0:
            raise ValidationError(
                "fileSize is required and must be a positive integer", "fileSize")

        max_size = self._config.max_file_size
        if max_size is not None and file_size > max_size:
            raise ValidationError(
                f"fileSize exceeds the maximum of {max_size} bytes", "fileSize")

        if not isinstance(mime_type, str) or not mime_type.strip():
            raise ValidationError("mimeType is required and must be a string", "mimeType")

    def _new_session_id(self) -> str:
        session_id = self._id_factory()
        while session_id in self._store:
            session_id = self._id_factory()
        return session_id

    async def create_session(
        self,
        file_name: Any,
        file_size: Any,
        mime_type: Any
    ) -> SessionCreated:
        self._validate_request(file_name, file_size, mime_type)

        self.cleanup_expired_sessions()

        requires_chunking = file_size > self._config.single_shot_threshold

        access_token = await self._credentials.get_access_token()
        upload_url = await self._backend.open_resumable_session(
            access_token, file_name, file_size, mime_type
        )

        chunking: Optional[ChunkProgress] = None
        if requires_chunking:
            chunk_size = self._config.chunk_size
            chunking = ChunkProgress(
                chunk_size=chunk_size,
                total_chunks=total_chunks(file_size, chunk_size)
            )

        session = UploadSession(
            session_id=self._new_session_id(),
            backend_upload_url=upload_url,
            file_name=file_name,
            file_size=file_size,
            mime_type=mime_type,
            created_at=self._clock(),
            chunking=chunking
        )
        self._store.set(session)

        self._stats["sessions_created"] += 1
        if requires_chunking:
            self._stats["chunked_sessions"] += 1
        else:
            self._stats["single_shot_sessions"] += 1

        logger.info(
            f"Created {session.mode.value} upload session {session.session_id} "
            f"({file_name}, {file_size} bytes)")

        return SessionCreated(
            session_id=session.session_id,
            mode=session.mode,
            file_name=file_name,
            file_size=file_size,
            mime_type=mime_type,
            expires_in=self._config.session_max_age,
            chunk_plan=chunking.plan() if chunking else None
        )

    # Relays

    def _require_session(self, session_id: str, mode: UploadMode) -> UploadSession:
        session = self._store.get(session_id)
        if session is None:
            raise NotFoundError("Session not found or expired")
        if session.mode != mode:
            raise NotFoundError(f"Session is not a {mode.value} upload session")
        return session

    def _ensure_live(self, session: UploadSession) -> None:
        # The session may have been completed, cancelled or swept while this
        # relay waited for the lock.
        if self._store.get(session.session_id) is not session:
            raise NotFoundError("Session not found or expired")

    def _descriptor_from(self, reply: BackendReply) -> FileDescriptor:
        file_id = reply.json.get("id") if reply.json else None
        if not file_id:
            raise BackendError(
                "Backend completed the upload without an object id",
                backend_status=reply.status,
                details=reply.body or None
            )
        return self._backend.describe_file(str(file_id))

    def _rejected(self, reply: BackendReply, what: str) -> BackendError:
        return BackendError(
            f"{what} failed: {reply.status}",
            backend_status=reply.status,
            details=reply.body or None
        )

    async def relay_chunk(
        self,
        session_id: str,
        chunk_index: int,
        body: bytes
    ) -> ChunkRelayResult:
        session = self._require_session(session_id, UploadMode.CHUNKED)
        if not body:
            raise ValidationError("Request body is missing", "body")

        async with session.lock:
            self._ensure_live(session)
            progress = session.chunking
            if progress is None:
                raise NotFoundError("Session is not a chunked upload session")

            if not 0 <= chunk_index < progress.total_chunks:
                raise ValidationError(
                    f"Chunk index {chunk_index} is outside 0..{progress.total_chunks - 1}",
                    "chunk")
            if chunk_index < progress.uploaded_chunks:
                raise ValidationError(
                    f"Chunk {chunk_index} was already acknowledged", "chunk")

            byte_range = chunk_range(chunk_index, progress.chunk_size, session.file_size)
            if len(body) != byte_range.length:
                logger.warning(
                    f"Session {session_id} chunk {chunk_index}: body is {len(body)} bytes, "
                    f"range expects {byte_range.length}; forwarding as given")

            is_last = chunk_index == progress.total_chunks - 1

            access_token = await self._credentials.get_access_token()
            try:
                reply = await self._backend.put_bytes(
                    session.backend_upload_url,
                    access_token,
                    body,
                    session.mime_type,
                    content_range=byte_range.content_range(session.file_size)
                )
            except UploadError as e:
                self._record_failure(e)
                raise

            descriptor: Optional[FileDescriptor] = None
            if is_last and reply.status in FINAL_STATUSES:
                try:
                    descriptor = self._descriptor_from(reply)
                except BackendError:
                    # The backend resource is finalised either way
                    self._store.delete(session_id)
                    self._stats["relay_failures"] += 1
                    raise
            elif is_last or reply.status != RESUME_INCOMPLETE:
                self._stats["relay_failures"] += 1
                logger.warning(
                    f"Backend rejected chunk {chunk_index} of session {session_id}: {reply.status}")
                raise self._rejected(reply, f"Chunk {chunk_index} upload")

            progress.uploaded_chunks += 1
            progress.uploaded_bytes += byte_range.length
            self._stats["chunks_relayed"] += 1
            self._stats["bytes_relayed"] += len(body)

            is_complete = progress.is_complete
            if is_complete:
                self._store.delete(session_id)
                self._stats["uploads_completed"] += 1
                logger.info(f"Chunked upload {session_id} completed as file {descriptor.file_id if descriptor else None}")
            else:
                logger.debug(
                    f"Session {session_id}: chunk {chunk_index + 1}/{progress.total_chunks} acknowledged")

            return ChunkRelayResult(
                chunk_index=chunk_index,
                uploaded_chunks=progress.uploaded_chunks,
                total_chunks=progress.total_chunks,
                uploaded_bytes=progress.uploaded_bytes,
                total_bytes=session.file_size,
                is_complete=is_complete,
                file_name=session.file_name,
                descriptor=descriptor
            )

    async def relay_single_shot(self, session_id: str, body: bytes) -> FileDescriptor:
        session = self._require_session(session_id, UploadMode.SINGLE)
        if not body:
            raise ValidationError("Request body is missing", "body")

        async with session.lock:
            self._ensure_live(session)

            access_token = await self._credentials.get_access_token()
            try:
                reply = await self._backend.put_bytes(
                    session.backend_upload_url,
                    access_token,
                    body,
                    session.mime_type
                )
            except UploadError as e:
                self._record_failure(e)
                raise

            if reply.status not in FINAL_STATUSES:
                # The backend session is left to expire on its own schedule
                self._stats["relay_failures"] += 1
                logger.warning(f"Backend rejected single-shot upload {session_id}: {reply.status}")
                raise self._rejected(reply, "Upload")

            self._store.delete(session_id)
            descriptor = self._descriptor_from(reply)

            self._stats["bytes_relayed"] += len(body)
            self._stats["uploads_completed"] += 1
            logger.info(f"Single-shot upload {session_id} completed as file {descriptor.file_id}")
            return descriptor

    def _record_failure(self, error: UploadError) -> None:
        if isinstance(error, RelayTimeoutError):
            self._stats["relay_timeouts"] += 1
        else:
            self._stats["relay_failures"] += 1

    # Status, cancellation and cleanup

    def get_session_status(self, session_id: str) -> SessionStatus:
        session = self._store.get(session_id)
        if session is None:
            raise NotFoundError("Session not found or expired")

        return SessionStatus(
            session_id=session.session_id,
            mode=session.mode,
            file_name=session.file_name,
            file_size=session.file_size,
            mime_type=session.mime_type,
            created_at=session.created_at,
            expires_at=session.created_at + self._config.session_max_age,
            progress=dataclasses.replace(session.chunking) if session.chunking else None
        )

    def cancel_session(self, session_id: str) -> None:
        if not self._store.delete(session_id):
            raise NotFoundError("Session not found or expired")
        self._stats["sessions_cancelled"] += 1
        logger.info(f"Upload session {session_id} cancelled")

    def cleanup_expired_sessions(self) -> int:
        expired = self._store.sweep(self._config.session_max_age, now=self._clock())
        self._stats["sessions_expired"] += len(expired)
        return len(expired)

    def get_upload_statistics(self) -> Dict[str, Any]:
        return {
            **self._stats,
            "active_sessions": len(self._store),
        }
