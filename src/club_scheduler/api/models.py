"""Pydantic request and response models for the HTTP API."""

import datetime as dt
from dataclasses import asdict

from pydantic import BaseModel, ConfigDict, Field

from club_scheduler.domain.errors import DecodeWarning
from club_scheduler.domain.results import ScoreSheet, TeamSheet, available_players
from club_scheduler.domain.roster import (
    confirmed_of,
    is_full,
    spots_remaining,
    waiting_of,
)
from club_scheduler.domain.schedule import (
    format_long_date,
    format_short_date,
    is_archived,
)
from club_scheduler.domain.sessions import Receipt, Session

Pair = tuple[str, str]


class LoginRequest(BaseModel):
    """Shared passphrase submission."""

    passphrase: str


class CreateSessionRequest(BaseModel):
    """New session posted by an organizer."""

    date: dt.date
    time: str
    organizer: str
    courts: int = Field(default=2, ge=1, le=2)


class SignupRequest(BaseModel):
    """Player signing up for a session."""

    player: str


class TeamSheetPayload(BaseModel):
    """Four pairs of player names; empty strings are open slots."""

    teams: tuple[Pair, Pair, Pair, Pair] = (("", ""),) * 4

    def to_sheet(self) -> TeamSheet:
        return TeamSheet(
            teams=tuple((first.strip(), second.strip()) for first, second in self.teams)
        )


class AssignPlayerRequest(TeamSheetPayload):
    """Move a player into a team slot on a draft team sheet."""

    team: int = Field(ge=1, le=4)
    slot: int = Field(ge=1, le=2)
    player: str


class ResultsRequest(TeamSheetPayload):
    """Teams plus points for each round-robin matchup, by set."""

    model_config = ConfigDict(coerce_numbers_to_str=True)

    scores: tuple[tuple[Pair, Pair], tuple[Pair, Pair], tuple[Pair, Pair]] = (
        (("", ""), ("", "")),
    ) * 3

    def to_scores(self) -> ScoreSheet:
        sheet = ScoreSheet()
        for set_number, matches in enumerate(self.scores, 1):
            for match_number, (points_a, points_b) in enumerate(matches, 1):
                sheet = sheet.set_score(set_number, match_number, points_a, points_b)
        return sheet


class ReceiptRequest(BaseModel):
    """A receipt file encoded as base64 text by the client."""

    filename: str
    content_type: str | None = None
    data: str
    confirm: bool = False


class ReceiptView(BaseModel):
    court: int
    kind: str
    url: str | None = None
    data: str | None = None
    filename: str | None = None
    truncated: bool = False


class MatchupView(BaseModel):
    set_number: int
    match_number: int
    team_a: int
    team_b: int
    points_a: str
    points_b: str


class SessionView(BaseModel):
    """A session as shown to players."""

    id: str
    date: dt.date
    label: str
    short_label: str
    time: str
    organizer: str
    courts: int
    player_limit: int
    confirmed: list[str]
    waiting: list[str]
    spots_remaining: int
    is_full: bool
    archived: bool
    teams: list[Pair] | None = None
    available_players: list[str]
    matchups: list[MatchupView] | None = None
    receipts: list[ReceiptView]


class WarningView(BaseModel):
    record_id: str
    field: str
    message: str


class OverviewResponse(BaseModel):
    """Current and archived sessions after the latest reload."""

    today: dt.date
    current: list[SessionView]
    archived: list[SessionView]
    warnings: list[WarningView]
    changed: bool | None = None


class TeamSheetResponse(BaseModel):
    teams: list[Pair]
    available_players: list[str]


class AvailableDate(BaseModel):
    date: dt.date
    label: str


def session_view(session: Session, today: dt.date) -> SessionView:
    """Build the display model for a session."""
    sheet = session.teams or TeamSheet()
    return SessionView(
        id=session.id,
        date=session.date,
        label=format_long_date(session.date),
        short_label=format_short_date(session.date),
        time=session.time,
        organizer=session.organizer,
        courts=session.court_count,
        player_limit=session.player_limit,
        confirmed=list(confirmed_of(session)),
        waiting=list(waiting_of(session)),
        spots_remaining=spots_remaining(session),
        is_full=is_full(session),
        archived=is_archived(session.date, today),
        teams=list(session.teams.teams) if session.teams else None,
        available_players=available_players(session, sheet),
        matchups=(
            [MatchupView(**asdict(matchup)) for matchup in session.scores.matchups()]
            if session.scores
            else None
        ),
        receipts=[
            _receipt_view(court, receipt)
            for court, receipt in enumerate(session.receipts, 1)
            if receipt is not None
        ],
    )


def warning_view(warning: DecodeWarning) -> WarningView:
    return WarningView(
        record_id=warning.record_id, field=warning.field, message=warning.message
    )


def _receipt_view(court: int, receipt: Receipt) -> ReceiptView:
    if not receipt.is_inline:
        return ReceiptView(
            court=court, kind=receipt.kind, url=receipt.value, filename=receipt.filename
        )
    return ReceiptView(
        court=court,
        kind=receipt.kind,
        data=None if receipt.truncated else receipt.value,
        truncated=receipt.truncated,
    )
