"""
Fluent assertion interface for testing tournament standings.

This module provides a clean, fluent way to assert points and standings for
testing purposes. It works with the pure Python points_core structures:

    assert_tournament(t).player("Alice").assert_().wins(2).total_points(7).rank(1)
"""

from dataclasses import dataclass
from typing import Dict, Optional

from pitchside.points_core.engine import Tournament, TournamentScoring
from pitchside.points_core.structure import StandingsEntry

# Use the built-in AssertionError for proper test framework integration


@dataclass
class StandingsAssertion:
    """Fluent interface for asserting tournament standings."""

    tournament: Tournament
    player_name: Optional[str] = None
    player_id: Optional[int] = None
    stage_id: Optional[int] = None
    _name_to_id: Optional[Dict[str, int]] = None
    _scoring: Optional[TournamentScoring] = None

    def __post_init__(self):
        """Calculate results once on initialization."""
        if self._scoring is None:
            self._scoring = self.tournament.calculate_results()
        if self._name_to_id is None:
            if self.tournament.name_to_id:
                self._name_to_id = self.tournament.name_to_id
            else:
                # treat player ids as names
                self._name_to_id = {
                    str(pid): pid for pid in self._scoring.player_order
                }

    def _standings(self):
        if self.stage_id is None:
            return self._scoring.standings
        return self._scoring.stage_standings(self.stage_id)

    def _get_player_id(self, name: str) -> int:
        if name not in self._name_to_id:
            raise AssertionError(f"Player '{name}' not found in tournament")
        return self._name_to_id[name]

    def _get_entry(self) -> StandingsEntry:
        if self.player_id is None:
            raise AssertionError("No player selected for assertion")
        for entry in self._standings():
            if entry.player_id == self.player_id:
                return entry
        raise AssertionError(f"{self.player_name} not found in standings")

    def _check(self, label: str, expected, actual):
        if actual != expected:
            raise AssertionError(
                f"{self.player_name} expected {expected} {label}, got {actual}"
            )
        return self

    def valid(self) -> "StandingsAssertion":
        """Assert that every match and the configuration passed validation."""
        if not self._scoring.ok:
            raise AssertionError(
                "Tournament has errors: "
                f"{self._scoring.match_errors or self._scoring.config_errors}"
            )
        return self

    def rejected_matches(self, expected: int) -> "StandingsAssertion":
        actual = len(self._scoring.match_errors)
        if actual != expected:
            raise AssertionError(f"expected {expected} rejected matches, got {actual}")
        return self

    def order(self, *names: str) -> "StandingsAssertion":
        """Assert the standings order of the named players, best first."""
        expected = [self._get_player_id(name) for name in names]
        actual = [e.player_id for e in self._standings()][: len(expected)]
        if actual != expected:
            id_to_name = {v: k for k, v in self._name_to_id.items()}
            raise AssertionError(
                f"expected order {list(names)}, "
                f"got {[id_to_name.get(pid, pid) for pid in actual]}"
            )
        return self

    def stage(self, stage_id: int) -> "StandingsAssertion":
        """Restrict the following assertions to one stage's matches."""
        return StandingsAssertion(
            tournament=self.tournament,
            stage_id=stage_id,
            _name_to_id=self._name_to_id,
            _scoring=self._scoring,
        )

    def player(self, name: str) -> "PlayerAssertion":
        """Select a player by name for assertions."""
        return PlayerAssertion(
            tournament=self.tournament,
            player_name=name,
            player_id=self._get_player_id(name),
            stage_id=self.stage_id,
            _name_to_id=self._name_to_id,
            _scoring=self._scoring,
        )


class PlayerAssertion(StandingsAssertion):
    """Assertions for a specific player."""

    def assert_(self) -> "PlayerResultAssertion":
        """Start a chain of assertions for this player."""
        return PlayerResultAssertion(
            tournament=self.tournament,
            player_name=self.player_name,
            player_id=self.player_id,
            stage_id=self.stage_id,
            _name_to_id=self._name_to_id,
            _scoring=self._scoring,
        )


class PlayerResultAssertion(StandingsAssertion):
    """Fluent interface for asserting a player's standings row."""

    def matches_played(self, expected: int) -> "PlayerResultAssertion":
        return self._check("matches played", expected, self._get_entry().matches_played)

    def wins(self, expected: int) -> "PlayerResultAssertion":
        return self._check("wins", expected, self._get_entry().wins)

    def draws(self, expected: int) -> "PlayerResultAssertion":
        return self._check("draws", expected, self._get_entry().draws)

    def losses(self, expected: int) -> "PlayerResultAssertion":
        return self._check("losses", expected, self._get_entry().losses)

    def goals_scored(self, expected: int) -> "PlayerResultAssertion":
        return self._check("goals scored", expected, self._get_entry().goals_scored)

    def goals_conceded(self, expected: int) -> "PlayerResultAssertion":
        return self._check(
            "goals conceded", expected, self._get_entry().goals_conceded
        )

    def goal_difference(self, expected: int) -> "PlayerResultAssertion":
        return self._check(
            "goal difference", expected, self._get_entry().goal_difference
        )

    def total_points(self, expected: int) -> "PlayerResultAssertion":
        """Assert the total points, including advancing bonuses."""
        return self._check("points", expected, self._get_entry().total_points)

    def conditional_points(self, expected: int) -> "PlayerResultAssertion":
        return self._check(
            "conditional points", expected, self._get_entry().conditional_points
        )

    def rank(self, expected: int) -> "PlayerResultAssertion":
        """Assert the rank; tied players share a rank."""
        return self._check("rank", expected, self._get_entry().rank)

    def position(self, expected: int) -> "PlayerResultAssertion":
        """Assert the 1-based position in the standings table."""
        for index, entry in enumerate(self._standings(), start=1):
            if entry.player_id == self.player_id:
                return self._check("position", expected, index)
        raise AssertionError(f"Could not determine position for {self.player_name}")


def assert_tournament(tournament: Tournament) -> StandingsAssertion:
    """Create a fluent assertion interface for a tournament."""
    return StandingsAssertion(tournament)
