"""
Data model for point calculation and standings.

This module provides a simple, immutable representation of:
- Point systems (base points per outcome and per goal, walkover points)
- Stage point configurations that replace the base points for staged matches
- Conditional rules applied on top of the base points
- Matches and their per-player results
- Manual overrides and the itemized point breakdown
- Standings entries derived from scored results
"""

from datetime import date
from typing import Dict, List, Optional, Tuple
from dataclasses import dataclass, field, replace
from enum import Enum


class Outcome(Enum):
    """Outcome of a match from one participant's point of view."""

    WIN = "WIN"
    DRAW = "DRAW"
    LOSS = "LOSS"


class ConditionType(Enum):
    """The measured value a conditional rule looks at."""

    GOALS_SCORED_THRESHOLD = "GOALS_SCORED_THRESHOLD"
    GOALS_CONCEDED_THRESHOLD = "GOALS_CONCEDED_THRESHOLD"
    GOAL_DIFFERENCE_THRESHOLD = "GOAL_DIFFERENCE_THRESHOLD"
    CLEAN_SHEET = "CLEAN_SHEET"


class ComparisonOperator(Enum):
    """How the measured value is compared with a rule threshold."""

    EQUALS = "EQUALS"
    GREATER_THAN = "GREATER_THAN"
    LESS_THAN = "LESS_THAN"
    GREATER_THAN_OR_EQUAL = "GREATER_THAN_OR_EQUAL"
    LESS_THAN_OR_EQUAL = "LESS_THAN_OR_EQUAL"


GOAL_BASED_CONDITIONS = (
    ConditionType.GOALS_SCORED_THRESHOLD,
    ConditionType.GOALS_CONCEDED_THRESHOLD,
    ConditionType.GOAL_DIFFERENCE_THRESHOLD,
)

# walkover_winner_id value meaning both participants forfeited
BOTH_FORFEITED = 0


@dataclass(frozen=True)
class ConditionalRule:
    """A bonus or penalty applied when a result meets a condition."""

    condition_type: ConditionType
    operator: ComparisonOperator
    threshold: int
    point_adjustment: int
    rule_id: Optional[int] = None

    @classmethod
    def clean_sheet(cls, point_adjustment: int, rule_id: Optional[int] = None):
        """Build a clean sheet rule, which always uses EQUALS with threshold 0."""
        return cls(
            ConditionType.CLEAN_SHEET,
            ComparisonOperator.EQUALS,
            0,
            point_adjustment,
            rule_id,
        )


@dataclass(frozen=True)
class PointSystem:
    """Base points for a tournament or a reusable template."""

    points_per_win: int = 3
    points_per_draw: int = 1
    points_per_loss: int = 0
    points_per_goal_scored: int = 0
    points_per_goal_conceded: int = 0
    points_for_walkover_win: Optional[int] = None
    points_for_walkover_loss: Optional[int] = None
    points_per_clean_sheet: Optional[int] = None
    conditional_rules: Tuple[ConditionalRule, ...] = ()
    name: str = ""

    def outcome_points(self, outcome: Outcome) -> int:
        """Get the base points for an outcome."""
        if outcome == Outcome.WIN:
            return self.points_per_win
        elif outcome == Outcome.DRAW:
            return self.points_per_draw
        return self.points_per_loss

    def with_rules(self, *rules: ConditionalRule) -> "PointSystem":
        """Return a new PointSystem with the rules appended (immutable pattern)."""
        return replace(self, conditional_rules=self.conditional_rules + tuple(rules))


@dataclass(frozen=True)
class StagePointConfig:
    """Point configuration for one named stage of a tournament.

    When a match is tagged with this stage its base points come from here
    instead of the tournament PointSystem. Goal overrides left as None
    contribute nothing in this stage. ``conditional_rules`` left as None means
    the PointSystem's rules apply; a tuple (possibly empty) restricts them.
    """

    stage_id: int
    stage_name: str
    stage_order: int
    points_per_win: int
    points_per_draw: int
    points_per_loss: int
    points_per_goal_scored: Optional[int] = None
    points_per_goal_conceded: Optional[int] = None
    points_for_advancing: int = 0
    conditional_rules: Optional[Tuple[ConditionalRule, ...]] = None


@dataclass(frozen=True)
class BaseConfig:
    """The single source of base points chosen for a match."""

    points_per_win: int
    points_per_draw: int
    points_per_loss: int
    points_per_goal_scored: int = 0
    points_per_goal_conceded: int = 0
    points_per_clean_sheet: Optional[int] = None
    stage_id: Optional[int] = None

    def outcome_points(self, outcome: Outcome) -> int:
        if outcome == Outcome.WIN:
            return self.points_per_win
        elif outcome == Outcome.DRAW:
            return self.points_per_draw
        return self.points_per_loss


@dataclass(frozen=True)
class MatchResult:
    """One participant's result in a match."""

    player_id: int
    outcome: Outcome
    goals_scored: int = 0
    goals_conceded: int = 0
    points_earned: Optional[int] = None
    custom_points: Optional[int] = None

    @property
    def goal_difference(self) -> int:
        return self.goals_scored - self.goals_conceded

    @property
    def final_points(self) -> int:
        """Points that count: the manual value if present, else the computed one."""
        if self.custom_points is not None:
            return self.custom_points
        return self.points_earned or 0


@dataclass(frozen=True)
class OverrideSpec:
    """A manual override of the computed points for one result.

    The override is one atomic value: the enabled components are summed with
    ``extra_points`` and the result replaces the computed total.
    """

    outcome_points_enabled: bool = True
    goal_scored_points_enabled: bool = True
    goal_conceded_points_enabled: bool = True
    extra_points: int = 0

    def custom_points(
        self, outcome_points: int, goal_scored_points: int, goal_conceded_points: int
    ) -> int:
        """Sum of the enabled components plus the extra points."""
        total = self.extra_points
        if self.outcome_points_enabled:
            total += outcome_points
        if self.goal_scored_points_enabled:
            total += goal_scored_points
        if self.goal_conceded_points_enabled:
            total += goal_conceded_points
        return total


@dataclass(frozen=True)
class AppliedRule:
    """A conditional rule that held for a result."""

    rule_id: Optional[int]
    condition_type: ConditionType
    point_adjustment: int


@dataclass(frozen=True)
class PointBreakdown:
    """Itemized points for one result, kept for audit and display."""

    outcome_points: int = 0
    goal_scored_points: int = 0
    goal_conceded_points: int = 0
    conditional_points: int = 0
    extra_points: int = 0
    total: int = 0
    applied_rules: Tuple[AppliedRule, ...] = ()
    is_walkover: bool = False
    is_override: bool = False
    outcome_points_enabled: bool = True
    goal_scored_points_enabled: bool = True
    goal_conceded_points_enabled: bool = True

    @property
    def base_points(self) -> int:
        return self.outcome_points + self.goal_scored_points + self.goal_conceded_points


@dataclass(frozen=True)
class Match:
    """A match between participants, with exactly one result per participant.

    ``walkover_winner_id`` is None for a normal match, ``BOTH_FORFEITED`` (0)
    when both participants forfeited, or the id of the player who won by
    walkover.
    """

    results: Tuple[MatchResult, ...]
    match_date: Optional[date] = None
    stage_id: Optional[int] = None
    walkover_winner_id: Optional[int] = None
    match_id: Optional[int] = None
    overrides: Dict[int, OverrideSpec] = field(default_factory=dict, hash=False)

    @property
    def player_ids(self) -> List[int]:
        return [r.player_id for r in self.results]

    @property
    def is_walkover(self) -> bool:
        return self.walkover_winner_id is not None

    @property
    def is_two_party(self) -> bool:
        return len(self.results) == 2

    def result_for(self, player_id: int) -> Optional[MatchResult]:
        for result in self.results:
            if result.player_id == player_id:
                return result
        return None

    def opponent_of(self, player_id: int) -> Optional[MatchResult]:
        """Return the other side's result in a two-party match."""
        if not self.is_two_party:
            return None
        for result in self.results:
            if result.player_id != player_id:
                return result
        return None


@dataclass(frozen=True)
class ScoredResult:
    """A result with its final points, ready for aggregation."""

    match_id: Optional[int]
    stage_id: Optional[int]
    result: MatchResult
    breakdown: PointBreakdown
    is_walkover: bool = False

    @property
    def player_id(self) -> int:
        return self.result.player_id

    @property
    def points_earned(self) -> int:
        return self.result.final_points


@dataclass(frozen=True)
class StandingsEntry:
    """A derived row of the standings table."""

    player_id: int
    matches_played: int = 0
    wins: int = 0
    draws: int = 0
    losses: int = 0
    goals_scored: int = 0
    goals_conceded: int = 0
    goal_difference: int = 0
    total_points: int = 0
    conditional_points: int = 0
    rank: int = 0

    def sort_key(self) -> Tuple[int, int, int]:
        return (self.total_points, self.goal_difference, self.goals_scored)
