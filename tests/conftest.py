"""Shared test fixtures."""

import asyncio
from dataclasses import dataclass, field, replace
from datetime import UTC, date, datetime

import pytest

from club_scheduler.adapters.airtable_client import AirtableClient
from club_scheduler.config import Settings
from club_scheduler.containers import AppContainer
from club_scheduler.domain.errors import DecodeWarning
from club_scheduler.domain.sessions import (
    Receipt,
    Session,
    SessionBatch,
    SessionDraft,
    SessionUpdate,
)
from club_scheduler.services.access import AccessGate
from club_scheduler.services.receipts import ReceiptIntake
from club_scheduler.services.sessions import SessionRepository, SessionService
from club_scheduler.services.store import SessionStore

# Monday; the club plays on Wednesdays.
TODAY = date(2026, 10, 19)
NEXT_WEDNESDAY = date(2026, 10, 21)
WEDNESDAY = 2


def fixed_clock(hour: int = 9, day: date = TODAY):
    moment = datetime(day.year, day.month, day.day, hour, tzinfo=UTC)
    return lambda: moment


def make_session(
    session_id: str = "rec1",
    session_date: date = NEXT_WEDNESDAY,
    signups: tuple[str, ...] = ("Amy",),
    court_count: int = 2,
    **kwargs: object,
) -> Session:
    return Session(
        id=session_id,
        date=session_date,
        time="6:00 PM - 8:00 PM",
        organizer=signups[0] if signups else "Amy",
        court_count=court_count,
        signups=signups,
        **kwargs,
    )


@dataclass
class InMemorySessionRepository(SessionRepository):
    """In-memory session repository for tests."""

    sessions: dict[str, Session] = field(default_factory=dict)
    warnings: list[DecodeWarning] = field(default_factory=list)
    calls: list[str] = field(default_factory=list)
    failures: dict[str, Exception] = field(default_factory=dict)
    gate: asyncio.Event | None = None
    next_id: int = 1

    def add(self, session: Session) -> Session:
        self.sessions[session.id] = session
        return session

    async def list_all(self) -> SessionBatch:
        self._record("list_all")
        ordered = sorted(self.sessions.values(), key=lambda session: session.date)
        return SessionBatch(sessions=ordered, warnings=list(self.warnings))

    async def create(self, draft: SessionDraft) -> str:
        self._record("create")
        session_id = f"rec{self.next_id}"
        self.next_id += 1
        self.sessions[session_id] = Session(
            id=session_id,
            date=draft.date,
            time=draft.time,
            organizer=draft.organizer,
            court_count=draft.court_count,
            signups=draft.signups,
        )
        return session_id

    async def update(self, session_id: str, changes: SessionUpdate) -> None:
        self._record("update")
        if self.gate is not None:
            await self.gate.wait()
        current = self.sessions[session_id]
        receipts = list(current.receipts)
        for court, encoded in changes.receipts.items():
            receipts[court - 1] = (
                Receipt(kind="inline", value=encoded) if encoded else None
            )
        self.sessions[session_id] = replace(
            current,
            signups=current.signups if changes.signups is None else changes.signups,
            teams=current.teams if changes.teams is None else changes.teams,
            scores=current.scores if changes.scores is None else changes.scores,
            receipts=tuple(receipts),
        )

    async def delete(self, session_id: str) -> None:
        self._record("delete")
        self.sessions.pop(session_id, None)

    def _record(self, call: str) -> None:
        self.calls.append(call)
        failure = self.failures.get(call)
        if failure is not None:
            raise failure


@dataclass
class FakeAirtableClient(AirtableClient):
    """Fake Airtable client keeping raw records in memory."""

    records: list[dict[str, object]] = field(default_factory=list)
    updates: list[tuple[str, dict[str, object]]] = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)

    def add(self, record_id: str, **fields: object) -> None:
        self.records.append({"id": record_id, "fields": dict(fields)})

    async def list_records(self, sort_field: str) -> list[dict[str, object]]:
        return [
            {"id": record["id"], "fields": dict(record["fields"])}
            for record in self.records
        ]

    async def create_record(self, fields: dict[str, object]) -> dict[str, object]:
        record = {"id": f"rec{len(self.records) + 1}", "fields": dict(fields)}
        self.records.append(record)
        return record

    async def update_record(
        self, record_id: str, fields: dict[str, object]
    ) -> dict[str, object]:
        self.updates.append((record_id, fields))
        for record in self.records:
            if record["id"] == record_id:
                record["fields"].update(fields)
                return record
        raise KeyError(record_id)

    async def delete_record(self, record_id: str) -> None:
        self.deleted.append(record_id)
        self.records = [record for record in self.records if record["id"] != record_id]


@pytest.fixture
def settings() -> Settings:
    return Settings(
        airtable_api_key="airtable-key",
        airtable_base_id="appTEST",
        access_passphrase="tennis2025",
    )


@pytest.fixture
def session_repository() -> InMemorySessionRepository:
    return InMemorySessionRepository()


@pytest.fixture
def session_service(session_repository: InMemorySessionRepository) -> SessionService:
    return SessionService(
        repository=session_repository,
        store=SessionStore(),
        weekday=WEDNESDAY,
        clock=fixed_clock(),
    )


@pytest.fixture
def container(settings: Settings, session_service: SessionService) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        session_service=session_service,
        receipt_intake=ReceiptIntake(text_limit=settings.airtable_text_limit),
        access_gate=AccessGate(settings.access_passphrase),
        close_resources=close_resources,
    )
