"""Team assignment and round-robin score recording."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING

from club_scheduler.domain.errors import ValidationFailure
from club_scheduler.domain.roster import confirmed_of

if TYPE_CHECKING:
    from club_scheduler.domain.sessions import Session

TEAM_COUNT = 4
SLOTS_PER_TEAM = 2
SET_COUNT = 3
MATCHES_PER_SET = 2

# (team_a, team_b) numbers for each matchup, by set.
ROUND_ROBIN: tuple[tuple[tuple[int, int], ...], ...] = (
    ((1, 2), (3, 4)),
    ((1, 3), (2, 4)),
    ((1, 4), (2, 3)),
)

Pair = tuple[str, str]


@dataclass(frozen=True)
class TeamSheet:
    """Four doubles teams; an empty string marks an open slot."""

    teams: tuple[Pair, ...] = (("", ""),) * TEAM_COUNT

    def __post_init__(self) -> None:
        if len(self.teams) != TEAM_COUNT or any(
            len(pair) != SLOTS_PER_TEAM for pair in self.teams
        ):
            raise ValueError("A team sheet holds exactly four pairs")

    def player_at(self, team: int, slot: int) -> str:
        _check_slot(team, slot)
        return self.teams[team - 1][slot - 1]

    def assign_player(self, team: int, slot: int, name: str) -> TeamSheet:
        """Place a player, first clearing them from any slot they occupy."""
        _check_slot(team, slot)
        player = name.strip()
        rows = [list(pair) for pair in self.teams]
        if player:
            for row in rows:
                for index, occupant in enumerate(row):
                    if occupant == player:
                        row[index] = ""
        rows[team - 1][slot - 1] = player
        return TeamSheet(teams=tuple((row[0], row[1]) for row in rows))

    def clear_slot(self, team: int, slot: int) -> TeamSheet:
        return self.assign_player(team, slot, "")

    def assigned_players(self) -> list[str]:
        return [player for pair in self.teams for player in pair if player]


@dataclass(frozen=True)
class Matchup:
    """One scheduled team-vs-team game within a set."""

    set_number: int
    match_number: int
    team_a: int
    team_b: int
    points_a: str
    points_b: str


@dataclass(frozen=True)
class ScoreSheet:
    """Point totals for every round-robin matchup, as entered."""

    sets: tuple[tuple[Pair, ...], ...] = ((("", ""),) * MATCHES_PER_SET,) * SET_COUNT

    def __post_init__(self) -> None:
        if len(self.sets) != SET_COUNT or any(
            len(matches) != MATCHES_PER_SET
            or any(len(points) != 2 for points in matches)  # noqa: PLR2004
            for matches in self.sets
        ):
            raise ValueError("A score sheet holds three sets of two matchups")

    def points(self, set_number: int, match_number: int) -> Pair:
        _check_matchup(set_number, match_number)
        return self.sets[set_number - 1][match_number - 1]

    def set_score(
        self, set_number: int, match_number: int, points_a: str, points_b: str
    ) -> ScoreSheet:
        """Return a copy with one matchup's totals replaced."""
        _check_matchup(set_number, match_number)
        entry = (_clean_points(points_a), _clean_points(points_b))
        rows = [list(matches) for matches in self.sets]
        rows[set_number - 1][match_number - 1] = entry
        return ScoreSheet(sets=tuple(tuple(matches) for matches in rows))

    def matchups(self) -> Iterator[Matchup]:
        for set_index, pairings in enumerate(ROUND_ROBIN):
            for match_index, (team_a, team_b) in enumerate(pairings):
                points_a, points_b = self.sets[set_index][match_index]
                yield Matchup(
                    set_number=set_index + 1,
                    match_number=match_index + 1,
                    team_a=team_a,
                    team_b=team_b,
                    points_a=points_a,
                    points_b=points_b,
                )

    def is_blank(self) -> bool:
        return all(
            not value for matches in self.sets for points in matches for value in points
        )


def is_points_text(value: str) -> bool:
    """Accept blank or non-negative integer text."""
    return value == "" or (value.isascii() and value.isdigit())


def available_players(session: Session, sheet: TeamSheet) -> list[str]:
    """Confirmed players not yet placed on a team."""
    assigned = set(sheet.assigned_players())
    return [player for player in confirmed_of(session) if player not in assigned]


def validate_results(session: Session, sheet: TeamSheet, scores: ScoreSheet) -> None:
    """Check a team sheet and scores against the session's confirmed roster."""
    confirmed = set(confirmed_of(session))
    assigned = sheet.assigned_players()
    outsiders = [player for player in assigned if player not in confirmed]
    if outsiders:
        raise ValidationFailure(
            "Only confirmed players can be placed on a team: " + ", ".join(outsiders)
        )
    repeated = [player for player, seen in Counter(assigned).items() if seen > 1]
    if repeated:
        raise ValidationFailure(
            "Players can only be on one team: " + ", ".join(repeated)
        )
    for matchup in scores.matchups():
        if not (is_points_text(matchup.points_a) and is_points_text(matchup.points_b)):
            raise ValidationFailure(
                f"Set {matchup.set_number} scores must be whole numbers"
            )


def _clean_points(value: str) -> str:
    cleaned = value.strip()
    if not is_points_text(cleaned):
        raise ValidationFailure(f"Score must be a whole number, got {value!r}")
    return cleaned


def _check_slot(team: int, slot: int) -> None:
    if not 1 <= team <= TEAM_COUNT or not 1 <= slot <= SLOTS_PER_TEAM:
        raise ValidationFailure(f"No slot {slot} on team {team}")


def _check_matchup(set_number: int, match_number: int) -> None:
    if not 1 <= set_number <= SET_COUNT or not 1 <= match_number <= MATCHES_PER_SET:
        raise ValidationFailure(f"No matchup {match_number} in set {set_number}")
