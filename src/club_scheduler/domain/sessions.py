"""Domain models for organized match sessions."""

from dataclasses import dataclass, field
from datetime import date

from club_scheduler.domain.errors import DecodeWarning
from club_scheduler.domain.results import ScoreSheet, TeamSheet
from club_scheduler.domain.roster import player_limit

RECEIPT_SLOTS = 2


@dataclass(frozen=True)
class Receipt:
    """A court receipt, either hosted elsewhere or stored inline as text."""

    kind: str
    value: str
    filename: str | None = None
    truncated: bool = False

    @property
    def is_inline(self) -> bool:
        return self.kind == "inline"


@dataclass(frozen=True)
class Session:
    """Represents one organized match slot."""

    id: str
    date: date
    time: str
    organizer: str
    court_count: int = 2
    signups: tuple[str, ...] = ()
    teams: TeamSheet | None = None
    scores: ScoreSheet | None = None
    receipts: tuple[Receipt | None, ...] = (None,) * RECEIPT_SLOTS

    @property
    def player_limit(self) -> int:
        return player_limit(self.court_count)


@dataclass(frozen=True)
class SessionDraft:
    """Fields required to create a session."""

    date: date
    time: str
    organizer: str
    court_count: int = 2
    signups: tuple[str, ...] = ()


@dataclass(frozen=True)
class SessionUpdate:
    """Partial update; fields left as ``None`` keep their stored value.

    ``receipts`` maps a court number to encoded document text, or to ``None``
    to clear that court's receipt.
    """

    signups: tuple[str, ...] | None = None
    teams: TeamSheet | None = None
    scores: ScoreSheet | None = None
    receipts: dict[int, str | None] = field(default_factory=dict)

    def is_empty(self) -> bool:
        return (
            self.signups is None
            and self.teams is None
            and self.scores is None
            and not self.receipts
        )


@dataclass(frozen=True)
class SessionBatch:
    """Sessions decoded from one full fetch plus any per-field warnings."""

    sessions: list[Session]
    warnings: list[DecodeWarning] = field(default_factory=list)
