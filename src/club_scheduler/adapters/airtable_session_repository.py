"""Airtable-backed session repository."""

import logging
from dataclasses import dataclass
from datetime import date

from pydantic import BaseModel, ConfigDict, ValidationError

from club_scheduler.adapters.airtable_client import AirtableClient
from club_scheduler.domain.errors import DecodeWarning, RepositoryError
from club_scheduler.domain.results import ScoreSheet, TeamSheet
from club_scheduler.domain.sessions import (
    RECEIPT_SLOTS,
    Receipt,
    Session,
    SessionBatch,
    SessionDraft,
    SessionUpdate,
)
from club_scheduler.services.sessions import SessionRepository

logger = logging.getLogger(__name__)

DEFAULT_COURTS = 2
AIRTABLE_TEXT_LIMIT = 100_000

Pair = tuple[str, str]


class TeamsField(BaseModel):
    """JSON layout of the ``Teams`` column."""

    model_config = ConfigDict(coerce_numbers_to_str=True)

    team1: Pair
    team2: Pair
    team3: Pair
    team4: Pair

    @classmethod
    def from_sheet(cls, sheet: TeamSheet) -> "TeamsField":
        team1, team2, team3, team4 = sheet.teams
        return cls(team1=team1, team2=team2, team3=team3, team4=team4)

    def to_sheet(self) -> TeamSheet:
        return TeamSheet(teams=(self.team1, self.team2, self.team3, self.team4))


class ScoresField(BaseModel):
    """JSON layout of the ``Scores`` column."""

    model_config = ConfigDict(coerce_numbers_to_str=True)

    set1: tuple[Pair, Pair]
    set2: tuple[Pair, Pair]
    set3: tuple[Pair, Pair]

    @classmethod
    def from_sheet(cls, sheet: ScoreSheet) -> "ScoresField":
        set1, set2, set3 = sheet.sets
        return cls(set1=set1, set2=set2, set3=set3)

    def to_sheet(self) -> ScoreSheet:
        return ScoreSheet(sets=(self.set1, self.set2, self.set3))


@dataclass
class AirtableSessionRepository(SessionRepository):
    """Airtable implementation for match sessions."""

    client: AirtableClient
    text_limit: int = AIRTABLE_TEXT_LIMIT

    async def list_all(self) -> SessionBatch:
        """Fetch every record and decode it, collecting field warnings."""
        records = await self.client.list_records(sort_field="Date")
        sessions: list[Session] = []
        warnings: list[DecodeWarning] = []
        for record in records:
            session, record_warnings = _decode_record(record, self.text_limit)
            for warning in record_warnings:
                logger.warning(
                    "Could not decode %s for record %s: %s",
                    warning.field,
                    warning.record_id,
                    warning.message,
                )
            warnings.extend(record_warnings)
            if session is not None:
                sessions.append(session)
        return SessionBatch(sessions=sessions, warnings=warnings)

    async def create(self, draft: SessionDraft) -> str:
        """Insert a session record and return its id."""
        record = await self.client.create_record(
            {
                "Date": draft.date.isoformat(),
                "Time": draft.time,
                "Organizer": draft.organizer,
                "Courts": draft.court_count,
                "Signups": "\n".join(draft.signups),
            }
        )
        record_id = record.get("id")
        if not record_id:
            raise RepositoryError(200, f"Created record has no id: {record}")
        return str(record_id)

    async def update(self, session_id: str, changes: SessionUpdate) -> None:
        """Write only the fields named in ``changes``."""
        fields = encode_update(changes)
        if fields:
            await self.client.update_record(session_id, fields)

    async def delete(self, session_id: str) -> None:
        """Delete a session record."""
        await self.client.delete_record(session_id)


def encode_update(changes: SessionUpdate) -> dict[str, object]:
    """Map a partial update onto Airtable column names."""
    fields: dict[str, object] = {}
    if changes.signups is not None:
        fields["Signups"] = "\n".join(changes.signups)
    if changes.teams is not None:
        fields["Teams"] = TeamsField.from_sheet(changes.teams).model_dump_json()
    if changes.scores is not None:
        fields["Scores"] = ScoresField.from_sheet(changes.scores).model_dump_json()
    for court, encoded in changes.receipts.items():
        fields[f"Receipt{court}"] = encoded
    return fields


def _decode_record(
    record: dict[str, object], text_limit: int
) -> tuple[Session | None, list[DecodeWarning]]:
    record_id = str(record.get("id", ""))
    fields = record.get("fields") or {}
    warnings: list[DecodeWarning] = []

    raw_date = fields.get("Date")
    try:
        session_date = date.fromisoformat(str(raw_date))
    except ValueError:
        warnings.append(DecodeWarning(record_id, "Date", f"invalid date {raw_date!r}"))
        return None, warnings

    court_count = DEFAULT_COURTS
    raw_courts = fields.get("Courts")
    if raw_courts not in (None, ""):
        try:
            court_count = int(raw_courts)
        except (TypeError, ValueError):
            message = f"invalid court count {raw_courts!r}"
            warnings.append(DecodeWarning(record_id, "Courts", message))

    teams = None
    raw_teams = fields.get("Teams")
    if raw_teams:
        try:
            teams = TeamsField.model_validate_json(str(raw_teams)).to_sheet()
        except ValidationError as exc:
            warnings.append(DecodeWarning(record_id, "Teams", _first_error(exc)))

    scores = None
    raw_scores = fields.get("Scores")
    if raw_scores:
        try:
            scores = ScoresField.model_validate_json(str(raw_scores)).to_sheet()
        except ValidationError as exc:
            warnings.append(DecodeWarning(record_id, "Scores", _first_error(exc)))

    receipts: list[Receipt | None] = []
    for court in range(1, RECEIPT_SLOTS + 1):
        name = f"Receipt{court}"
        receipt, problem = _decode_receipt(fields.get(name), text_limit)
        if problem:
            warnings.append(DecodeWarning(record_id, name, problem))
        receipts.append(receipt)

    session = Session(
        id=record_id,
        date=session_date,
        time=str(fields.get("Time") or ""),
        organizer=str(fields.get("Organizer") or ""),
        court_count=court_count,
        signups=_split_signups(fields.get("Signups")),
        teams=teams,
        scores=scores,
        receipts=tuple(receipts),
    )
    return session, warnings


def _split_signups(raw: object) -> tuple[str, ...]:
    if not raw:
        return ()
    return tuple(line.strip() for line in str(raw).split("\n") if line.strip())


def _decode_receipt(raw: object, text_limit: int) -> tuple[Receipt | None, str | None]:
    if not raw:
        return None, None
    if isinstance(raw, str):
        return (
            Receipt(kind="inline", value=raw, truncated=len(raw) >= text_limit),
            None,
        )
    if isinstance(raw, list):
        for item in raw:
            if isinstance(item, dict) and item.get("url"):
                filename = item.get("filename")
                return (
                    Receipt(
                        kind="url",
                        value=str(item["url"]),
                        filename=str(filename) if filename else None,
                    ),
                    None,
                )
    return None, f"unrecognized receipt value of type {type(raw).__name__}"


def _first_error(exc: ValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return str(exc)
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    return f"{location}: {first.get('msg')}" if location else str(first.get("msg"))
