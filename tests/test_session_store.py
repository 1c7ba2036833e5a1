"""
Tests for the in-memory session store.
"""

import pytest

from drive_relay.core.domain.session import ChunkProgress, UploadSession
from drive_relay.infrastructure.storage.memory import InMemorySessionStore


def make_session(session_id: str, created_at: float, chunked: bool = False) -> UploadSession:
    return UploadSession(
        session_id=session_id,
        backend_upload_url=f"https://backend.example/upload?upload_id={session_id}",
        file_name=f"{session_id}.bin",
        file_size=100,
        mime_type="application/octet-stream",
        created_at=created_at,
        chunking=ChunkProgress(chunk_size=40, total_chunks=3) if chunked else None
    )


class TestInMemorySessionStore:
    """Test basic store operations and sweeping."""

    @pytest.fixture
    def store(self) -> InMemorySessionStore:
        return InMemorySessionStore(clock=lambda: 1000.0)

    def test_set_get_delete(self, store: InMemorySessionStore) -> None:
        session = make_session("a", 0.0)
        store.set(session)

        assert store.get("a") is session
        assert "a" in store
        assert len(store) == 1

        assert store.delete("a") is True
        assert store.get("a") is None
        assert store.delete("a") is False
        assert len(store) == 0

    def test_set_replaces_existing(self, store: InMemorySessionStore) -> None:
        store.set(make_session("a", 0.0))
        replacement = make_session("a", 5.0)
        store.set(replacement)

        assert store.get("a") is replacement
        assert len(store) == 1

    def test_sweep_removes_only_old_sessions(self, store: InMemorySessionStore) -> None:
        store.set(make_session("old", 0.0))
        store.set(make_session("edge", 400.0))
        store.set(make_session("new", 900.0))

        removed = store.sweep(600, now=1000.0)

        assert removed == ["old"]
        assert "old" not in store
        assert "edge" in store
        assert "new" in store

    def test_sweep_ignores_completion_state(self, store: InMemorySessionStore) -> None:
        session = make_session("done", 0.0, chunked=True)
        session.chunking.uploaded_chunks = 3  # type: ignore[union-attr]
        session.chunking.uploaded_bytes = 100  # type: ignore[union-attr]
        store.set(session)

        assert store.sweep(10, now=1000.0) == ["done"]

    def test_sweep_is_idempotent(self, store: InMemorySessionStore) -> None:
        store.set(make_session("a", 0.0))
        store.set(make_session("b", 10.0))

        assert sorted(store.sweep(60)) == ["a", "b"]
        assert store.sweep(60) == []

    def test_sweep_uses_clock_by_default(self) -> None:
        store = InMemorySessionStore(clock=lambda: 50.0)
        store.set(make_session("a", 0.0))

        assert store.sweep(60) == []
        assert store.sweep(40) == ["a"]

    def test_session_repr_hides_upload_url(self) -> None:
        session = make_session("secret", 0.0)

        assert "backend.example" not in repr(session)
