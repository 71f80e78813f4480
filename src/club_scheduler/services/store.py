"""In-memory snapshot of the last full session fetch."""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date

from club_scheduler.domain.errors import DecodeWarning, SessionNotFound
from club_scheduler.domain.sessions import Session


@dataclass
class SessionStore:
    """Holds the reloaded session list; replaced wholesale, never patched."""

    _sessions: tuple[Session, ...] = ()
    _warnings: tuple[DecodeWarning, ...] = ()

    def replace_all(
        self,
        sessions: Iterable[Session],
        warnings: Iterable[DecodeWarning] = (),
    ) -> None:
        """Swap in a freshly fetched session list."""
        self._sessions = tuple(sessions)
        self._warnings = tuple(warnings)

    @property
    def sessions(self) -> tuple[Session, ...]:
        return self._sessions

    @property
    def warnings(self) -> tuple[DecodeWarning, ...]:
        return self._warnings

    def get(self, session_id: str) -> Session:
        for session in self._sessions:
            if session.id == session_id:
                return session
        raise SessionNotFound(session_id)

    def dates(self) -> set[date]:
        return {session.date for session in self._sessions}
