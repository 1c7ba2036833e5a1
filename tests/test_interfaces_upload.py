"""
Tests for upload interfaces and the session data model.
"""

import pytest

from drive_relay.core.domain.session import (
    ByteRange, ChunkProgress, UploadMode, UploadSession
)
from drive_relay.core.interfaces.lifecycle import IComponent, IStartable, IStoppable
from drive_relay.core.interfaces.upload import (
    BackendReply, ICredentialProvider, ISessionStore, IStorageBackend, IUploadManager
)


class TestInterfaces:
    """Abstract contracts cannot be instantiated."""

    @pytest.mark.parametrize("interface", [
        ISessionStore, ICredentialProvider, IStorageBackend, IUploadManager
    ])
    def test_abstract(self, interface) -> None:
        with pytest.raises(TypeError):
            interface()

    def test_backend_and_manager_are_components(self) -> None:
        assert issubclass(IStorageBackend, IComponent)
        assert issubclass(IUploadManager, IComponent)
        assert issubclass(IComponent, IStartable)
        assert issubclass(IComponent, IStoppable)

    def test_backend_reply_defaults(self) -> None:
        reply = BackendReply(status=308, body="")
        assert reply.json is None


class TestUploadSession:
    """Test the session record."""

    def make(self, chunking=None) -> UploadSession:
        return UploadSession(
            session_id="sid",
            backend_upload_url="https://backend.example/upload?upload_id=secret",
            file_name="a.bin",
            file_size=10,
            mime_type="application/octet-stream",
            created_at=100.0,
            chunking=chunking
        )

    def test_mode(self) -> None:
        assert self.make().mode is UploadMode.SINGLE
        assert self.make(ChunkProgress(chunk_size=4, total_chunks=3)).mode is UploadMode.CHUNKED

    def test_age(self) -> None:
        assert self.make().age(160.0) == 60.0

    def test_repr_hides_upload_url(self) -> None:
        text = repr(self.make(ChunkProgress(chunk_size=4, total_chunks=3)))

        assert "sid" in text
        assert "secret" not in text

    def test_each_session_has_its_own_lock(self) -> None:
        assert self.make().lock is not self.make().lock


class TestChunkProgress:
    def test_completion(self) -> None:
        progress = ChunkProgress(chunk_size=4, total_chunks=2)
        assert progress.is_complete is False

        progress.uploaded_chunks = 2
        assert progress.is_complete is True

    def test_plan(self) -> None:
        plan = ChunkProgress(chunk_size=4, total_chunks=2, uploaded_chunks=1).plan()
        assert (plan.chunk_size, plan.total_chunks) == (4, 2)


class TestByteRange:
    def test_length_and_header(self) -> None:
        byte_range = ByteRange(start=4, end=6)

        assert byte_range.length == 3
        assert byte_range.content_range(7) == "bytes 4-6/7"
