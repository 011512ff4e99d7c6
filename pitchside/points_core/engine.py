"""
Entry points for scoring matches and computing standings.

This is the boundary of points_core. Input problems never escape from here as
exceptions: they come back as structured values whose errors are keyed by the
input field they concern. Exceptions raised during calculation of validated
input are defects and are logged and re-raised.

Pipeline for one match:
    raw input -> validate_match -> resolve_walkover (walkovers only)
    -> resolve_base_config / resolve_rules -> calculate_points per result

Standings are a fold over the scored results of every valid match supplied.
The caller must pass a complete, consistent snapshot of a tournament's
matches; nothing here reads or caches state between calls.
"""

import logging
from dataclasses import dataclass, field, replace
from datetime import date
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from pitchside.points_core.exceptions import (
    PointsValidationError,
    ScoringDefect,
    combine_errors,
    errors_to_dict,
)
from pitchside.points_core.rules import point_system_errors, rule_errors
from pitchside.points_core.scoring import (
    STANDARD_POINTS,
    calculate_points,
    resolve_base_config,
    resolve_rules,
)
from pitchside.points_core.stages import stage_errors, stages_by_id
from pitchside.points_core.standings import aggregate_standings, filter_stage
from pitchside.points_core.structure import (
    Match,
    OverrideSpec,
    PointBreakdown,
    PointSystem,
    ScoredResult,
    StagePointConfig,
    StandingsEntry,
)
from pitchside.points_core.validation import ResultInput, validate_match
from pitchside.points_core.walkover import resolve_walkover

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MatchScoring:
    """The outcome of scoring one match: points per result, or errors."""

    match: Optional[Match] = None
    breakdowns: Dict[int, PointBreakdown] = field(default_factory=dict)
    errors: Tuple[PointsValidationError, ...] = ()
    walkover_reset: bool = False

    @property
    def ok(self) -> bool:
        return not self.errors

    @property
    def message_dict(self) -> Dict[str, List[str]]:
        return errors_to_dict(self.errors)

    def points_for(self, player_id: int) -> int:
        return self.breakdowns[player_id].total

    def scored_results(self) -> List[ScoredResult]:
        if not self.ok:
            return []
        return [
            ScoredResult(
                match_id=self.match.match_id,
                stage_id=self.match.stage_id,
                result=result,
                breakdown=self.breakdowns[result.player_id],
                is_walkover=self.match.is_walkover,
            )
            for result in self.match.results
        ]

    def raise_if_invalid(self) -> Match:
        if self.errors:
            raise combine_errors(self.errors)
        return self.match


@dataclass(frozen=True)
class TournamentScoring:
    """Scored matches plus the standings folded from them."""

    standings: List[StandingsEntry]
    matches: List[MatchScoring]
    player_order: Tuple[int, ...] = ()
    config_errors: Tuple[PointsValidationError, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.config_errors and all(m.ok for m in self.matches)

    @property
    def match_errors(self) -> Dict[int, Dict[str, List[str]]]:
        """Errors of the rejected matches, keyed by their position in the input."""
        return {
            index: scoring.message_dict
            for index, scoring in enumerate(self.matches)
            if not scoring.ok
        }

    def scored_results(self) -> List[ScoredResult]:
        scored = []
        for scoring in self.matches:
            scored.extend(scoring.scored_results())
        return scored

    def stage_standings(self, stage_id: Optional[int]) -> List[StandingsEntry]:
        """Standings over a single stage's matches, listing only its participants."""
        stage_results = filter_stage(self.scored_results(), stage_id)
        participants = {s.player_id for s in stage_results}
        return aggregate_standings(
            stage_results,
            player_order=[pid for pid in self.player_order if pid in participants],
        )

    def entry_for(self, player_id: int) -> Optional[StandingsEntry]:
        for entry in self.standings:
            if entry.player_id == player_id:
                return entry
        return None


def configuration_errors(
    point_system: PointSystem, stage_configs: Iterable[StagePointConfig] = ()
) -> List[PointsValidationError]:
    """Check a point system's rules and the stage configurations."""
    stage_configs = list(stage_configs or ())
    errors: List[PointsValidationError] = list(point_system_errors(point_system))
    errors.extend(stage_errors(stage_configs))
    for index, stage in enumerate(stage_configs):
        for rule_index, rule in enumerate(stage.conditional_rules or ()):
            for error in rule_errors(rule):
                error.field = (
                    f"stages.{index}.conditional_rules.{rule_index}.{error.field}"
                )
                errors.append(error)
    return errors


def _score_validated(
    match: Match,
    point_system: PointSystem,
    stages: Mapping[int, StagePointConfig],
) -> MatchScoring:
    forced = resolve_walkover(match.walkover_winner_id, match.player_ids, point_system)
    base = resolve_base_config(point_system, stages, match.stage_id)
    rules = resolve_rules(point_system, stages, match.stage_id)

    breakdowns = {}
    results = []
    for result in match.results:
        walkover = forced[result.player_id] if forced else None
        if walkover is not None:
            result = replace(result, outcome=walkover.outcome)
        breakdown = calculate_points(
            result,
            base,
            rules,
            override=match.overrides.get(result.player_id),
            walkover=walkover,
        )
        logger.debug(
            "Match %s player %s: %s points (%s)",
            match.match_id,
            result.player_id,
            breakdown.total,
            "walkover" if walkover else "computed",
        )
        breakdowns[result.player_id] = breakdown
        if breakdown.is_override:
            results.append(
                replace(
                    result,
                    points_earned=breakdown.total,
                    custom_points=breakdown.total,
                )
            )
        else:
            results.append(replace(result, points_earned=breakdown.total))

    return MatchScoring(
        match=replace(match, results=tuple(results)), breakdowns=breakdowns
    )


def score_match(
    results: Sequence[ResultInput],
    point_system: PointSystem,
    stage_configs: Iterable[StagePointConfig] = (),
    walkover_winner_id: Optional[int] = None,
    match_date: Optional[date] = None,
    stage_id: Optional[int] = None,
    match_id: Optional[int] = None,
    overrides: Optional[Mapping[int, OverrideSpec]] = None,
    reset_stale_walkover: bool = False,
) -> MatchScoring:
    """
    Validate and score one match.

    Args:
        results: Per-player inputs (MatchResult values or mappings)
        point_system: The tournament point system, including its rules
        stage_configs: The tournament's stage configurations
        walkover_winner_id: None, 0 (both forfeited) or the walkover winner
        match_date: Date the match was played
        stage_id: Stage the match belongs to
        match_id: Identifier supplied by the persistence layer
        overrides: Manual point overrides keyed by player id
        reset_stale_walkover: Reset a walkover winner who is no longer a
            participant instead of rejecting the match

    Returns:
        MatchScoring with the points for every result, or the errors found
    """
    stage_configs = list(stage_configs or ())
    config_problems = configuration_errors(point_system, stage_configs)
    if config_problems:
        return MatchScoring(errors=tuple(config_problems))

    validation = validate_match(
        results,
        walkover_winner_id=walkover_winner_id,
        match_date=match_date,
        stage_id=stage_id,
        match_id=match_id,
        overrides=overrides,
        reset_stale_walkover=reset_stale_walkover,
    )
    if not validation.is_valid:
        return MatchScoring(
            errors=validation.errors, walkover_reset=validation.walkover_reset
        )

    try:
        scoring = _score_validated(
            validation.match, point_system, stages_by_id(stage_configs)
        )
    except ScoringDefect:
        logger.exception("Defect while scoring match %s", match_id)
        raise
    if validation.walkover_reset:
        scoring = replace(scoring, walkover_reset=True)
    return scoring


def rescore_match(
    match: Match,
    point_system: PointSystem,
    stage_configs: Iterable[StagePointConfig] = (),
    results: Optional[Sequence[ResultInput]] = None,
) -> MatchScoring:
    """
    Score an existing match again, optionally with edited results.

    Editing the participants of a walkover match resets a walkover winner who
    is no longer in the match.
    """
    return score_match(
        match.results if results is None else results,
        point_system,
        stage_configs,
        walkover_winner_id=match.walkover_winner_id,
        match_date=match.match_date,
        stage_id=match.stage_id,
        match_id=match.match_id,
        overrides=match.overrides,
        reset_stale_walkover=True,
    )


def _registration_order(
    scorings: Sequence[MatchScoring], player_order: Optional[Sequence[int]]
) -> Tuple[int, ...]:
    # unregistered players only enter through matches that passed validation
    order = list(player_order or ())
    known = set(order)
    for scoring in scorings:
        if not scoring.ok:
            continue
        for pid in scoring.match.player_ids:
            if pid not in known:
                order.append(pid)
                known.add(pid)
    return tuple(order)


def score_tournament(
    matches: Sequence[Match],
    point_system: PointSystem,
    stage_configs: Iterable[StagePointConfig] = (),
    player_order: Optional[Sequence[int]] = None,
    advancing: Optional[Mapping[int, Iterable[int]]] = None,
) -> TournamentScoring:
    """
    Score every match of a tournament and fold the results into standings.

    Matches that fail validation are reported and excluded from the
    standings; they never abort the computation, and players who appear only
    in them get no row unless registered in player_order.

    Args:
        matches: The complete set of the tournament's matches
        point_system: The tournament point system, including its rules
        stage_configs: The tournament's stage configurations
        player_order: Registration order, used as the final tie-break
        advancing: Stage id to the players advancing from that stage

    Returns:
        TournamentScoring with standings and per-match scorings
    """
    stage_configs = list(stage_configs or ())
    config_problems = configuration_errors(point_system, stage_configs)
    if config_problems:
        order = _registration_order((), player_order)
        return TournamentScoring(
            standings=aggregate_standings((), player_order=order),
            matches=[],
            player_order=order,
            config_errors=tuple(config_problems),
        )

    scorings = [
        score_match(
            match.results,
            point_system,
            stage_configs,
            walkover_winner_id=match.walkover_winner_id,
            match_date=match.match_date,
            stage_id=match.stage_id,
            match_id=match.match_id,
            overrides=match.overrides,
        )
        for match in matches
    ]
    rejected = sum(1 for s in scorings if not s.ok)
    if rejected:
        logger.warning("%d of %d matches rejected by validation", rejected, len(matches))

    order = _registration_order(scorings, player_order)

    scored = []
    for scoring in scorings:
        scored.extend(scoring.scored_results())
    standings = aggregate_standings(
        scored,
        player_order=order,
        advancing=advancing,
        stage_configs=stages_by_id(stage_configs),
    )
    logger.info(
        "Recomputed standings for %d players from %d matches",
        len(standings),
        len(matches) - rejected,
    )
    return TournamentScoring(standings=standings, matches=scorings, player_order=order)


@dataclass
class Tournament:
    """A tournament's configuration together with a snapshot of its matches."""

    competitors: List[int]
    matches: List[Match] = field(default_factory=list)
    point_system: PointSystem = field(default_factory=lambda: STANDARD_POINTS)
    stages: List[StagePointConfig] = field(default_factory=list)
    advancing: Dict[int, List[int]] = field(default_factory=dict)
    name_to_id: Dict[str, int] = field(default_factory=dict)

    def calculate_results(self) -> TournamentScoring:
        """Score every match and compute the tournament standings."""
        return score_tournament(
            self.matches,
            self.point_system,
            self.stages,
            player_order=self.competitors,
            advancing=self.advancing,
        )

    def stage_standings(self, stage_id: Optional[int]) -> List[StandingsEntry]:
        return self.calculate_results().stage_standings(stage_id)
