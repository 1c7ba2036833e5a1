"""
In-memory session store.

Sessions live for the lifetime of the process only; a restart forgets every
in-flight upload.
"""

import logging
import time
from typing import Callable, Dict, List, Optional

from ...core.domain.session import UploadSession
from ...core.interfaces.upload import ISessionStore

logger = logging.getLogger(__name__)


class InMemorySessionStore(ISessionStore):
    """Dictionary-backed session store scoped to one process."""

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._sessions: Dict[str, UploadSession] = {}
        self._clock = clock

    def get(self, session_id: str) -> Optional[UploadSession]:
        return self._sessions.get(session_id)

    def set(self, session: UploadSession) -> None:
        self._sessions[session.session_id] = session

    def delete(self, session_id: str) -> bool:
        return self._sessions.pop(session_id, None) is not None

    def sweep(self, max_age: float, now: Optional[float] = None) -> List[str]:
        if now is None:
            now = self._clock()

        expired = [
            session_id for session_id, session in self._sessions.items()
            if session.age(now) > max_age
        ]

        for session_id in expired:
            del self._sessions[session_id]

        if expired:
            logger.info(f"Swept {len(expired)} expired upload sessions")

        return expired

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)
