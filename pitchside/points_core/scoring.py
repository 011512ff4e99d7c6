"""
Configurable point systems and per-result point calculation.

This module defines how a single participant's match result is converted to
points: base points for the outcome and goals, conditional rule adjustments,
walkover values and manual overrides.
"""

import logging
from typing import Dict, Iterable, Mapping, Optional, Sequence

from pitchside.points_core.conf import get_setting
from pitchside.points_core.exceptions import ScoringDefect
from pitchside.points_core.rules import evaluate_rules
from pitchside.points_core.structure import (
    AppliedRule,
    BaseConfig,
    ConditionalRule,
    ConditionType,
    MatchResult,
    Outcome,
    OverrideSpec,
    PointBreakdown,
    PointSystem,
    StagePointConfig,
)
from pitchside.points_core.walkover import ForcedResult

logger = logging.getLogger(__name__)


def resolve_base_config(
    point_system: PointSystem,
    stage_configs: Optional[Mapping[int, StagePointConfig]] = None,
    stage_id: Optional[int] = None,
) -> BaseConfig:
    """
    Pick exactly one source of base points for a match.

    A staged match uses its stage's points, which fully replace the tournament
    point system's (no merging). An unstaged match, or one whose stage is
    unknown, uses the tournament point system.
    """
    if stage_id is not None:
        stage = (stage_configs or {}).get(stage_id)
        if stage is not None:
            return BaseConfig(
                points_per_win=stage.points_per_win,
                points_per_draw=stage.points_per_draw,
                points_per_loss=stage.points_per_loss,
                points_per_goal_scored=stage.points_per_goal_scored or 0,
                points_per_goal_conceded=stage.points_per_goal_conceded or 0,
                points_per_clean_sheet=point_system.points_per_clean_sheet,
                stage_id=stage.stage_id,
            )
        logger.warning(
            "Stage %s not found, falling back to the tournament point system",
            stage_id,
        )
    return BaseConfig(
        points_per_win=point_system.points_per_win,
        points_per_draw=point_system.points_per_draw,
        points_per_loss=point_system.points_per_loss,
        points_per_goal_scored=point_system.points_per_goal_scored,
        points_per_goal_conceded=point_system.points_per_goal_conceded,
        points_per_clean_sheet=point_system.points_per_clean_sheet,
    )


def resolve_rules(
    point_system: PointSystem,
    stage_configs: Optional[Mapping[int, StagePointConfig]] = None,
    stage_id: Optional[int] = None,
) -> Sequence[ConditionalRule]:
    """Return the conditional rules that apply to a match."""
    if stage_id is not None:
        stage = (stage_configs or {}).get(stage_id)
        if stage is not None and stage.conditional_rules is not None:
            return stage.conditional_rules
    return point_system.conditional_rules


def _outcome_points(base: BaseConfig, outcome: Outcome) -> int:
    if not isinstance(outcome, Outcome):
        raise ScoringDefect(f"Unknown outcome: {outcome!r}")
    return base.outcome_points(outcome)


def calculate_points(
    result: MatchResult,
    base: BaseConfig,
    rules: Iterable[ConditionalRule] = (),
    override: Optional[OverrideSpec] = None,
    walkover: Optional[ForcedResult] = None,
) -> PointBreakdown:
    """
    Calculate the points for one participant's result.

    Args:
        result: The validated result
        base: The base configuration chosen by resolve_base_config
        rules: The conditional rules to evaluate
        override: Optional manual override; when given it replaces the computed
            total with the sum of its enabled components plus its extra points
        walkover: The forced result when the match is a walkover; the normal
            computation and the rules are skipped entirely

    Returns:
        A PointBreakdown whose total is the final points for the result
    """
    if walkover is not None:
        outcome_points = walkover.points
        goal_scored_points = 0
        goal_conceded_points = 0
        conditional_points = 0
        applied_rules = ()
    else:
        outcome_points = _outcome_points(base, result.outcome)
        goal_scored_points = result.goals_scored * base.points_per_goal_scored
        goal_conceded_points = result.goals_conceded * base.points_per_goal_conceded
        conditional_points, applied_rules = evaluate_rules(rules, result)
        if base.points_per_clean_sheet and result.goals_conceded == 0:
            conditional_points += base.points_per_clean_sheet
            applied_rules = applied_rules + (
                AppliedRule(None, ConditionType.CLEAN_SHEET, base.points_per_clean_sheet),
            )

    computed_total = (
        outcome_points + goal_scored_points + goal_conceded_points + conditional_points
    )

    if override is not None:
        total = override.custom_points(
            outcome_points, goal_scored_points, goal_conceded_points
        )
        return PointBreakdown(
            outcome_points=outcome_points,
            goal_scored_points=goal_scored_points,
            goal_conceded_points=goal_conceded_points,
            conditional_points=conditional_points,
            extra_points=override.extra_points,
            total=total,
            applied_rules=applied_rules,
            is_walkover=walkover is not None,
            is_override=True,
            outcome_points_enabled=override.outcome_points_enabled,
            goal_scored_points_enabled=override.goal_scored_points_enabled,
            goal_conceded_points_enabled=override.goal_conceded_points_enabled,
        )

    if result.custom_points is not None:
        # a stored manual value is authoritative over the computation
        return PointBreakdown(
            outcome_points=outcome_points,
            goal_scored_points=goal_scored_points,
            goal_conceded_points=goal_conceded_points,
            conditional_points=conditional_points,
            extra_points=result.custom_points - computed_total,
            total=result.custom_points,
            applied_rules=applied_rules,
            is_walkover=walkover is not None,
            is_override=True,
        )

    return PointBreakdown(
        outcome_points=outcome_points,
        goal_scored_points=goal_scored_points,
        goal_conceded_points=goal_conceded_points,
        conditional_points=conditional_points,
        total=computed_total,
        applied_rules=applied_rules,
        is_walkover=walkover is not None,
    )


# Pre-defined point systems
STANDARD_POINTS = PointSystem(name="standard")

TWO_ONE_ZERO_POINTS = PointSystem(
    points_per_win=2,
    points_per_draw=1,
    points_per_loss=0,
    name="two-one-zero",
)

# Rewards attacking play on top of the usual 3/1/0
GOAL_BONUS_POINTS = PointSystem(
    points_per_win=3,
    points_per_draw=1,
    points_per_loss=0,
    points_per_goal_scored=1,
    name="goal-bonus",
)

POINT_SYSTEM_TEMPLATES: Dict[str, PointSystem] = {
    ps.name: ps for ps in (STANDARD_POINTS, TWO_ONE_ZERO_POINTS, GOAL_BONUS_POINTS)
}


def get_point_system(name: Optional[str] = None) -> PointSystem:
    """Look up a predefined point system, defaulting to the configured one."""
    if name is None:
        name = get_setting("DEFAULT_POINT_SYSTEM")
    try:
        return POINT_SYSTEM_TEMPLATES[name]
    except KeyError:
        raise KeyError(
            f"Unknown point system {name!r}, expected one of: "
            + ", ".join(sorted(POINT_SYSTEM_TEMPLATES))
        )
