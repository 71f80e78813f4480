"""Recurring-weekday calendar and archive rules."""

from __future__ import annotations

from collections.abc import Callable, Collection, Iterable, Iterator
from datetime import date, datetime, timedelta
from typing import TYPE_CHECKING, TypeVar

if TYPE_CHECKING:
    from club_scheduler.domain.sessions import Session

T = TypeVar("T")

WEEKDAY_NAMES = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)
DEFAULT_CUTOFF_HOUR = 12
MAX_WEEKLY_STEPS = 520
_ONE_DAY = timedelta(days=1)
_ONE_WEEK = timedelta(days=7)


def parse_weekday(value: str | int) -> int:
    """Parse a weekday name, prefix, or Monday=0 index into an index."""
    if isinstance(value, int):
        index = value
    else:
        cleaned = value.strip().lower()
        if cleaned.isdigit():
            index = int(cleaned)
        else:
            matches = [
                position
                for position, name in enumerate(WEEKDAY_NAMES)
                if len(cleaned) >= 3 and name.startswith(cleaned)
            ]
            if len(matches) != 1:
                raise ValueError(f"Unknown weekday: {value!r}")
            index = matches[0]
    if not 0 <= index < len(WEEKDAY_NAMES):
        raise ValueError(f"Weekday index out of range: {value!r}")
    return index


def first_occurrence(
    today: date,
    weekday: int,
    now: datetime | None = None,
    cutoff_hour: int = DEFAULT_CUTOFF_HOUR,
) -> date:
    """Return the first offerable date on ``weekday`` from ``today`` on.

    When ``today`` is already the target weekday and ``now`` is past the
    same-day cutoff, the slot has effectively started, so the following week
    is returned instead.
    """
    cursor = today
    while cursor.weekday() != weekday:
        cursor += _ONE_DAY
    if cursor == today and now is not None and now.hour > cutoff_hour:
        cursor += _ONE_WEEK
    return cursor


def next_occurrences(
    today: date,
    weekday: int,
    count: int,
    excluding: Collection[date] = (),
    *,
    now: datetime | None = None,
    cutoff_hour: int = DEFAULT_CUTOFF_HOUR,
) -> Iterator[date]:
    """Yield up to ``count`` upcoming ``weekday`` dates not in ``excluding``."""
    if count <= 0:
        return
    cursor = first_occurrence(today, weekday, now=now, cutoff_hour=cutoff_hour)
    produced = 0
    for _ in range(MAX_WEEKLY_STEPS):
        if cursor not in excluding:
            yield cursor
            produced += 1
            if produced >= count:
                return
        cursor += _ONE_WEEK


def is_archived(session_date: date, today: date) -> bool:
    """Return True once the whole session day has elapsed."""
    return today >= session_date + _ONE_DAY


def _identity(value: T) -> T:
    return value


def sort_by_proximity(
    items: Iterable[T],
    today: date,
    key: Callable[[T], date] = _identity,
) -> list[T]:
    """Order items by day distance from ``today``; ties go to the later date."""
    return sorted(
        items,
        key=lambda item: (abs((key(item) - today).days), -key(item).toordinal()),
    )


def partition_sessions(
    sessions: Iterable[Session], today: date
) -> tuple[list[Session], list[Session]]:
    """Split sessions into (current, archived), each sorted by proximity."""
    current: list[Session] = []
    archived: list[Session] = []
    for session in sessions:
        if is_archived(session.date, today):
            archived.append(session)
        else:
            current.append(session)
    return (
        sort_by_proximity(current, today, key=lambda session: session.date),
        sort_by_proximity(archived, today, key=lambda session: session.date),
    )


def format_long_date(value: date) -> str:
    """Format a date like ``Wednesday, October 21, 2026``."""
    weekday = WEEKDAY_NAMES[value.weekday()].capitalize()
    return f"{weekday}, {value:%B} {value.day}, {value.year}"


def format_short_date(value: date) -> str:
    """Format a date like ``Oct 21``."""
    return f"{value:%b} {value.day}"
