"""Signup rules: joining, leaving, and waiting-list placement."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from club_scheduler.domain.errors import ValidationFailure

if TYPE_CHECKING:
    from club_scheduler.domain.sessions import Session

SINGLE_COURT_LIMIT = 4
DOUBLE_COURT_LIMIT = 8


def player_limit(court_count: int) -> int:
    """Return how many players fit on the booked courts."""
    return SINGLE_COURT_LIMIT if court_count == 1 else DOUBLE_COURT_LIMIT


def normalize_name(name: str) -> str:
    """Trim a player name, rejecting blank input."""
    cleaned = name.strip()
    if not cleaned:
        raise ValidationFailure("Player name is required")
    return cleaned


def join(signups: Sequence[str], name: str) -> tuple[str, ...]:
    """Append a player to the roster unless already present.

    Capacity is not checked: anyone past the player limit is on the waiting
    list by position alone.
    """
    player = normalize_name(name)
    if player in signups:
        return tuple(signups)
    return (*signups, player)


def leave(signups: Sequence[str], name: str) -> tuple[str, ...]:
    """Remove the first exact occurrence of a player from the roster."""
    player = normalize_name(name)
    remaining = list(signups)
    if player in remaining:
        remaining.remove(player)
    return tuple(remaining)


def confirmed_of(session: Session) -> tuple[str, ...]:
    return session.signups[: session.player_limit]


def waiting_of(session: Session) -> tuple[str, ...]:
    return session.signups[session.player_limit :]


def spots_remaining(session: Session) -> int:
    return max(session.player_limit - len(session.signups), 0)


def is_full(session: Session) -> bool:
    return len(session.signups) >= session.player_limit
