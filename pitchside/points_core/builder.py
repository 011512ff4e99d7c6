"""
Builder for creating tournaments with a fluent API.

This module provides a builder class for assembling points_core tournaments
from player names and score strings, with both low-level and high-level
fluent APIs. It does not touch the database.
"""

from dataclasses import dataclass, field, replace
from datetime import date
from typing import Dict, List, Optional, Tuple, Union

from pitchside.points_core.engine import Tournament
from pitchside.points_core.scoring import STANDARD_POINTS, get_point_system
from pitchside.points_core.stages import TournamentFormat, generate_stages
from pitchside.points_core.structure import (
    BOTH_FORFEITED,
    ComparisonOperator,
    ConditionalRule,
    ConditionType,
    Match,
    MatchResult,
    Outcome,
    OverrideSpec,
    PointSystem,
    StagePointConfig,
)
from pitchside.points_core.validation import derive_outcomes
from pitchside.points_core.walkover import forced_outcomes

# (name, outcome, goals scored, goals conceded) for matches of three or more
MultiEntry = Tuple[str, Union[Outcome, str], int, int]


@dataclass
class TournamentMetadata:
    """Metadata for the tournament (not part of core structure)."""

    name: str = ""

    # For tracking players and stages by name
    players: Dict[str, int] = field(default_factory=dict)  # name -> player id
    stages: Dict[str, int] = field(default_factory=dict)  # name -> stage id


def parse_score(score: str) -> Tuple[int, int]:
    """Parse a score string like '2-1' into the goals of both sides."""
    parts = score.split("-")
    if len(parts) != 2:
        raise ValueError(f"Invalid score: {score}")
    try:
        goals = int(parts[0].strip()), int(parts[1].strip())
    except ValueError:
        raise ValueError(f"Invalid score: {score}")
    if goals[0] < 0 or goals[1] < 0:
        raise ValueError(f"Invalid score: {score}")
    return goals


class TournamentBuilder:
    """Builder for creating tournaments easily."""

    def __init__(
        self,
        competitors: Optional[List[int]] = None,
        point_system: PointSystem = STANDARD_POINTS,
    ):
        """Initialize with optional list of competitor IDs."""
        self.competitors = competitors or []
        self.tournament = Tournament(
            competitors=self.competitors, point_system=point_system
        )
        self.metadata = TournamentMetadata()
        self.current_stage: Optional[int] = None
        self._next_player_id = 1
        self._next_match_id = 1

    # High-level fluent API methods

    def named(self, name: str) -> "TournamentBuilder":
        self.metadata.name = name
        return self

    def points(self, **kwargs) -> "TournamentBuilder":
        """Change fields of the point system, e.g. points(points_per_win=2)."""
        self.tournament.point_system = replace(self.tournament.point_system, **kwargs)
        return self

    def template(self, name: str) -> "TournamentBuilder":
        """Start from a predefined point system, keeping any rules added so far."""
        rules = self.tournament.point_system.conditional_rules
        self.tournament.point_system = get_point_system(name).with_rules(*rules)
        return self

    def walkover_points(self, win: int, loss: int) -> "TournamentBuilder":
        return self.points(points_for_walkover_win=win, points_for_walkover_loss=loss)

    def rule(
        self,
        condition: Union[ConditionType, str],
        operator: Union[ComparisonOperator, str],
        threshold: int,
        adjustment: int,
        rule_id: Optional[int] = None,
    ) -> "TournamentBuilder":
        """Add a conditional rule to the point system."""
        rule = ConditionalRule(
            ConditionType(condition),
            ComparisonOperator(operator),
            threshold,
            adjustment,
            rule_id,
        )
        self.tournament.point_system = self.tournament.point_system.with_rules(rule)
        return self

    def clean_sheet(self, adjustment: int) -> "TournamentBuilder":
        rule = ConditionalRule.clean_sheet(adjustment)
        self.tournament.point_system = self.tournament.point_system.with_rules(rule)
        return self

    def stage(
        self,
        name: str,
        win: int = 3,
        draw: int = 1,
        loss: int = 0,
        goal_scored: Optional[int] = None,
        goal_conceded: Optional[int] = None,
        advancing: int = 0,
        rules: Optional[Tuple[ConditionalRule, ...]] = None,
    ) -> "TournamentBuilder":
        """Add a stage and make it current for the matches that follow."""
        if name in self.metadata.stages:
            raise ValueError(f"Stage already exists: {name}")
        order = len(self.tournament.stages) + 1
        self._add_stage(
            StagePointConfig(
                stage_id=order,
                stage_name=name,
                stage_order=order,
                points_per_win=win,
                points_per_draw=draw,
                points_per_loss=loss,
                points_per_goal_scored=goal_scored,
                points_per_goal_conceded=goal_conceded,
                points_for_advancing=advancing,
                conditional_rules=rules,
            )
        )
        return self

    def format(
        self,
        tournament_format: Union[TournamentFormat, str],
        participants: Optional[int] = None,
    ) -> "TournamentBuilder":
        """Generate the stages of a tournament format from the point system."""
        if self.tournament.stages:
            raise ValueError("Stages have already been added")
        if participants is None:
            participants = len(self.competitors)
        for stage in generate_stages(
            TournamentFormat(tournament_format),
            participants,
            self.tournament.point_system,
        ):
            self._add_stage(stage)
        self.current_stage = None
        return self

    def in_stage(self, name: Optional[str]) -> "TournamentBuilder":
        """Select the stage for the matches that follow (None for unstaged)."""
        self.current_stage = None if name is None else self._get_stage_id(name)
        return self

    def player(self, name: str) -> "TournamentBuilder":
        """Register a player."""
        player_id = self._get_or_create_player_id(name)
        if player_id not in self.competitors:
            self.competitors.append(player_id)
        return self

    def players(self, *names: str) -> "TournamentBuilder":
        for name in names:
            self.player(name)
        return self

    def match(
        self, home: str, away: str, score: str, match_date: Optional[date] = None
    ) -> "TournamentBuilder":
        """Play a match between two named players, e.g. match("A", "B", "2-1")."""
        home_id = self._get_competitor_id(home)
        away_id = self._get_competitor_id(away)
        home_goals, away_goals = parse_score(score)
        home_outcome, away_outcome = derive_outcomes(home_goals, away_goals)
        return self.add_match(
            [
                MatchResult(home_id, home_outcome, home_goals, away_goals),
                MatchResult(away_id, away_outcome, away_goals, home_goals),
            ],
            match_date=match_date,
        )

    def walkover(
        self, home: str, away: str, winner: Optional[str]
    ) -> "TournamentBuilder":
        """Record a walkover; a winner of None means both sides forfeited."""
        player_ids = [self._get_competitor_id(home), self._get_competitor_id(away)]
        winner_id = BOTH_FORFEITED if winner is None else self._get_competitor_id(winner)
        outcomes = forced_outcomes(winner_id, player_ids)
        return self.add_match(
            [MatchResult(pid, outcomes[pid]) for pid in player_ids],
            walkover_winner_id=winner_id,
        )

    def multi_match(self, *entries: MultiEntry) -> "TournamentBuilder":
        """Play a match with any number of participants and explicit outcomes."""
        return self.add_match(
            [
                MatchResult(
                    self._get_competitor_id(name), Outcome(outcome), scored, conceded
                )
                for name, outcome, scored, conceded in entries
            ]
        )

    def override(
        self,
        name: str,
        outcome: bool = True,
        goal_scored: bool = True,
        goal_conceded: bool = True,
        extra: int = 0,
    ) -> "TournamentBuilder":
        """Override a player's points in the most recent match."""
        match = self._last_match()
        player_id = self._get_competitor_id(name)
        if match.result_for(player_id) is None:
            raise ValueError(f"{name} did not play in the last match")
        overrides = dict(match.overrides)
        overrides[player_id] = OverrideSpec(outcome, goal_scored, goal_conceded, extra)
        self.tournament.matches[-1] = replace(match, overrides=overrides)
        return self

    def custom_points(self, name: str, points: int) -> "TournamentBuilder":
        """Store a manual points value for a player in the most recent match."""
        match = self._last_match()
        player_id = self._get_competitor_id(name)
        results = tuple(
            replace(r, custom_points=points) if r.player_id == player_id else r
            for r in match.results
        )
        self.tournament.matches[-1] = replace(match, results=results)
        return self

    def advance(self, stage: str, *names: str) -> "TournamentBuilder":
        """Mark players as advancing from a stage."""
        stage_id = self._get_stage_id(stage)
        advancing = self.tournament.advancing.setdefault(stage_id, [])
        for name in names:
            player_id = self._get_competitor_id(name)
            if player_id not in advancing:
                advancing.append(player_id)
        return self

    # Low-level API methods

    def add_match(
        self,
        results: List[MatchResult],
        walkover_winner_id: Optional[int] = None,
        match_date: Optional[date] = None,
    ) -> "TournamentBuilder":
        """Add a match from raw results to the current stage."""
        match = Match(
            results=tuple(results),
            match_date=match_date,
            stage_id=self.current_stage,
            walkover_winner_id=walkover_winner_id,
            match_id=self._next_match_id,
        )
        self._next_match_id += 1
        self.tournament.matches.append(match)
        return self

    def build(self) -> Tournament:
        """Return the built tournament."""
        tournament = self.tournament
        # Add name mappings to the tournament for assertion purposes
        tournament.name_to_id = self.metadata.players.copy()
        return tournament

    # Helper methods

    def _add_stage(self, stage: StagePointConfig):
        self.tournament.stages.append(stage)
        self.metadata.stages[stage.stage_name] = stage.stage_id
        self.current_stage = stage.stage_id

    def _last_match(self) -> Match:
        if not self.tournament.matches:
            raise ValueError("Must add a match first")
        return self.tournament.matches[-1]

    def _get_or_create_player_id(self, name: str) -> int:
        """Get or create a player ID for a named player."""
        if name not in self.metadata.players:
            self.metadata.players[name] = self._next_player_id
            self._next_player_id += 1
        return self.metadata.players[name]

    def _get_competitor_id(self, name: str) -> int:
        player_id = self.metadata.players.get(name)
        if player_id is None:
            raise ValueError(f"Player not found: {name}")
        return player_id

    def _get_stage_id(self, name: str) -> int:
        stage_id = self.metadata.stages.get(name)
        if stage_id is None:
            raise ValueError(f"Stage not found: {name}")
        return stage_id
