"""Session intents: organize, sign up, cancel, record results."""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Protocol
from zoneinfo import ZoneInfo

from club_scheduler.domain.errors import DecodeWarning, ValidationFailure
from club_scheduler.domain.results import ScoreSheet, TeamSheet, validate_results
from club_scheduler.domain.roster import join, leave, normalize_name
from club_scheduler.domain.schedule import (
    DEFAULT_CUTOFF_HOUR,
    WEEKDAY_NAMES,
    next_occurrences,
    partition_sessions,
)
from club_scheduler.domain.sessions import (
    RECEIPT_SLOTS,
    Session,
    SessionBatch,
    SessionDraft,
    SessionUpdate,
)
from club_scheduler.services.store import SessionStore

logger = logging.getLogger(__name__)

VALID_COURT_COUNTS = (1, 2)


class SessionRepository(Protocol):
    """Persistence interface for match sessions."""

    async def list_all(self) -> SessionBatch:
        """Return every stored session with any decode warnings."""

    async def create(self, draft: SessionDraft) -> str:
        """Create a session and return its id."""

    async def update(self, session_id: str, changes: SessionUpdate) -> None:
        """Write the named fields of a session."""

    async def delete(self, session_id: str) -> None:
        """Delete a session."""


@dataclass(frozen=True)
class SessionOverview:
    """Sessions split for display as of ``today``."""

    today: date
    current: list[Session]
    archived: list[Session]
    warnings: list[DecodeWarning]


@dataclass
class SessionService:
    """Runs user intents against the repository, then reloads everything.

    Mutations are serialized: each one rereads the store, applies its change
    to what is stored right now, writes, and reloads. Reads never wait.
    """

    repository: SessionRepository
    store: SessionStore
    weekday: int
    upcoming_count: int = 8
    cutoff_hour: int = DEFAULT_CUTOFF_HOUR
    timezone: str = "UTC"
    clock: Callable[[], datetime] | None = None
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, init=False, repr=False)

    def now(self) -> datetime:
        if self.clock is not None:
            return self.clock()
        return datetime.now(tz=ZoneInfo(self.timezone))

    def today(self) -> date:
        return self.now().date()

    async def refresh(self) -> SessionOverview:
        """Reload all sessions from the repository."""
        await self._reload()
        return self.overview()

    @property
    def busy(self) -> bool:
        """True while a mutation is being written."""
        return self._lock.locked()

    def overview(self) -> SessionOverview:
        """Partition the loaded sessions into current and archived."""
        today = self.today()
        current, archived = partition_sessions(self.store.sessions, today)
        return SessionOverview(
            today=today,
            current=current,
            archived=archived,
            warnings=list(self.store.warnings),
        )

    def available_dates(self) -> list[date]:
        """Upcoming weekday dates that have no session yet."""
        now = self.now()
        return list(
            next_occurrences(
                now.date(),
                self.weekday,
                self.upcoming_count,
                excluding=self.store.dates(),
                now=now,
                cutoff_hour=self.cutoff_hour,
            )
        )

    async def create_session(
        self, session_date: date, time: str, organizer: str, court_count: int = 2
    ) -> str:
        """Post a new session with the organizer as the first signup."""
        if session_date.weekday() != self.weekday:
            day_name = WEEKDAY_NAMES[self.weekday].capitalize()
            raise ValidationFailure(f"Sessions can only be organized on a {day_name}")
        if session_date < self.today():
            raise ValidationFailure("Sessions cannot be organized in the past")
        if court_count not in VALID_COURT_COUNTS:
            raise ValidationFailure("Court count must be 1 or 2")
        time_label = time.strip()
        if not time_label:
            raise ValidationFailure("Time is required")
        organizer_name = normalize_name(organizer)
        draft = SessionDraft(
            date=session_date,
            time=time_label,
            organizer=organizer_name,
            court_count=court_count,
            signups=(organizer_name,),
        )
        async with self._lock:
            await self._reload()
            if session_date in self.store.dates():
                raise ValidationFailure(
                    f"A session is already organized for {session_date.isoformat()}"
                )
            session_id = await self.repository.create(draft)
            logger.info("Created session %s for %s", session_id, session_date)
            await self._reload()
        return session_id

    async def sign_up(self, session_id: str, player: str) -> bool:
        """Add a player; returns False when they were already signed up."""

        def add(session: Session) -> SessionUpdate | None:
            signups = join(session.signups, player)
            if signups == session.signups:
                return None
            return SessionUpdate(signups=signups)

        changed = await self._update(session_id, add)
        if changed:
            logger.info("Signed up %s for session %s", player.strip(), session_id)
        return changed

    async def cancel_signup(self, session_id: str, player: str) -> bool:
        """Remove a player; returns False when they were not signed up."""

        def remove(session: Session) -> SessionUpdate | None:
            signups = leave(session.signups, player)
            if signups == session.signups:
                return None
            return SessionUpdate(signups=signups)

        changed = await self._update(session_id, remove)
        if changed:
            logger.info("Removed %s from session %s", player.strip(), session_id)
        return changed

    async def delete_session(self, session_id: str) -> None:
        async with self._lock:
            await self._reload()
            self.store.get(session_id)
            await self.repository.delete(session_id)
            logger.info("Deleted session %s", session_id)
            await self._reload()

    async def record_results(
        self, session_id: str, teams: TeamSheet, scores: ScoreSheet
    ) -> None:
        """Save teams and round-robin scores; signups are left untouched."""

        def results(session: Session) -> SessionUpdate:
            validate_results(session, teams, scores)
            return SessionUpdate(teams=teams, scores=scores)

        await self._update(session_id, results)
        logger.info("Recorded results for session %s", session_id)

    async def attach_receipt(self, session_id: str, court: int, encoded: str) -> None:
        """Store an encoded receipt document for one court."""

        def attach(session: Session) -> SessionUpdate:
            self._check_court(session, court)
            return SessionUpdate(receipts={court: encoded})

        await self._update(session_id, attach)
        logger.info("Attached receipt for court %s of session %s", court, session_id)

    async def remove_receipt(self, session_id: str, court: int) -> None:
        def detach(session: Session) -> SessionUpdate:
            self._check_court(session, court)
            return SessionUpdate(receipts={court: None})

        await self._update(session_id, detach)

    async def _update(
        self, session_id: str, change: Callable[[Session], SessionUpdate | None]
    ) -> bool:
        """Apply ``change`` to the session as currently stored, then reload.

        Returns False when ``change`` has nothing to write.
        """
        async with self._lock:
            await self._reload()
            changes = change(self.store.get(session_id))
            if changes is None:
                return False
            await self.repository.update(session_id, changes)
            await self._reload()
        return True

    async def _reload(self) -> None:
        batch = await self.repository.list_all()
        self.store.replace_all(batch.sessions, batch.warnings)

    @staticmethod
    def _check_court(session: Session, court: int) -> None:
        if not 1 <= court <= min(session.court_count, RECEIPT_SLOTS):
            raise ValidationFailure(
                f"Session {session.id} has no court {court} to attach a receipt to"
            )
