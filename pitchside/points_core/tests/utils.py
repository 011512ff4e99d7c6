import logging
from typing import Optional

from pitchside.points_core.structure import (
    MatchResult,
    Outcome,
    PointBreakdown,
    ScoredResult,
)


class Shush:
    def __enter__(self):
        logging.disable(logging.CRITICAL)
        return self

    def __exit__(self, exc_type, exc_value, exc_traceback):
        logging.disable(logging.NOTSET)
        return False


def scored(
    player_id: int,
    outcome: Outcome,
    goals_scored: int = 0,
    goals_conceded: int = 0,
    points: int = 0,
    stage_id: Optional[int] = None,
    conditional_points: int = 0,
    match_id: Optional[int] = None,
) -> ScoredResult:
    """A scored result as the engine would produce it."""
    return ScoredResult(
        match_id=match_id,
        stage_id=stage_id,
        result=MatchResult(
            player_id, outcome, goals_scored, goals_conceded, points_earned=points
        ),
        breakdown=PointBreakdown(conditional_points=conditional_points, total=points),
    )


def two_party(a: int, b: int, goals_a: int, goals_b: int):
    """Raw input rows for a two-party match, outcomes left to be derived."""
    return [
        {"player_id": a, "goals_scored": goals_a, "goals_conceded": goals_b},
        {"player_id": b, "goals_scored": goals_b, "goals_conceded": goals_a},
    ]
