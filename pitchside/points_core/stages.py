"""
Stage configuration helpers.

This module provides functionality for:
- Naming knockout stages from the number of participants remaining
- Generating an ordered set of stage point configurations for common
  tournament formats (league, knockout, groups, and combinations)
- Checking stage configurations for a tournament
"""

import math
from enum import Enum
from typing import Dict, Iterable, List, Optional

from pitchside.points_core.exceptions import PointsValidationError
from pitchside.points_core.structure import PointSystem, StagePointConfig

GROUP_SIZE = 4
KNOCKOUT_ADVANCING_POINTS = 5


class TournamentFormat(Enum):
    LEAGUE = "LEAGUE"
    KNOCKOUT = "KNOCKOUT"
    GROUP_STAGE = "GROUP_STAGE"
    GROUP_KNOCKOUT = "GROUP_KNOCKOUT"
    LEAGUE_KNOCKOUT = "LEAGUE_KNOCKOUT"
    MIXED = "MIXED"


def get_knockout_stage_name(teams_remaining: int) -> str:
    """Get the standard name for a knockout stage based on participants remaining."""
    stage_names = {
        2: "Final",
        4: "Semi-finals",
        8: "Quarter-finals",
    }
    return stage_names.get(teams_remaining, f"Round of {teams_remaining}")


def knockout_stage_names(participants: int) -> List[str]:
    """
    Names of the knockout stages from the first round to the final.

    The bracket is rounded up to a power of two; the extra slots are byes.
    """
    if participants < 2:
        return []
    names = []
    remaining = 2 ** math.ceil(math.log2(participants))
    while remaining >= 2:
        names.append(get_knockout_stage_name(remaining))
        remaining //= 2
    return names


def _stage(
    point_system: PointSystem,
    order: int,
    name: str,
    knockout: bool = False,
    advancing: int = 0,
) -> StagePointConfig:
    # knockout stages can not end in a draw
    return StagePointConfig(
        stage_id=order,
        stage_name=name,
        stage_order=order,
        points_per_win=point_system.points_per_win,
        points_per_draw=0 if knockout else point_system.points_per_draw,
        points_per_loss=point_system.points_per_loss,
        points_for_advancing=advancing,
    )


def _knockout_stages(
    point_system: PointSystem, participants: int, first_order: int, prefix: str = ""
) -> List[StagePointConfig]:
    names = knockout_stage_names(participants)
    stages = []
    for index, name in enumerate(names):
        is_last = index == len(names) - 1
        stages.append(
            _stage(
                point_system,
                first_order + index,
                f"{prefix}{name}",
                knockout=True,
                advancing=0 if is_last else KNOCKOUT_ADVANCING_POINTS,
            )
        )
    return stages


def _group_stages(
    point_system: PointSystem, groups: int, advancing: int
) -> List[StagePointConfig]:
    return [
        _stage(point_system, i + 1, f"Group {chr(ord('A') + i)}", advancing=advancing)
        for i in range(groups)
    ]


def generate_stages(
    tournament_format: TournamentFormat,
    number_of_participants: int,
    point_system: PointSystem,
) -> List[StagePointConfig]:
    """
    Generate ordered stage configurations for a tournament format.

    Stage ids equal stage orders. Every stage starts from the point system's
    win/draw/loss values; knockout stages award no draw points and give an
    advancing bonus to everyone who reaches the next round.

    Args:
        tournament_format: The format of the tournament
        number_of_participants: Number of participants entering the tournament
        point_system: Supplies the base win/draw/loss values

    Returns:
        List of StagePointConfig ordered by stage_order
    """
    if number_of_participants < 2:
        raise ValueError("Number of participants must be at least 2")

    if tournament_format == TournamentFormat.LEAGUE:
        return [_stage(point_system, 1, "League Stage")]

    elif tournament_format == TournamentFormat.KNOCKOUT:
        return _knockout_stages(point_system, number_of_participants, 1)

    elif tournament_format == TournamentFormat.GROUP_STAGE:
        groups = math.ceil(number_of_participants / GROUP_SIZE)
        return _group_stages(point_system, groups, advancing=0)

    elif tournament_format == TournamentFormat.GROUP_KNOCKOUT:
        groups = math.ceil(number_of_participants / GROUP_SIZE)
        stages = _group_stages(point_system, groups, advancing=3)
        # top two of each group qualify
        stages.extend(_knockout_stages(point_system, groups * 2, groups + 1))
        return stages

    elif tournament_format == TournamentFormat.LEAGUE_KNOCKOUT:
        stages = [_stage(point_system, 1, "League Stage", advancing=2)]
        playoff_participants = min(8, number_of_participants // 2)
        stages.extend(
            _knockout_stages(point_system, playoff_participants, 2, prefix="Playoff - ")
        )
        return stages

    elif tournament_format == TournamentFormat.MIXED:
        return [_stage(point_system, 1, "Stage 1")]

    raise ValueError(f"Unknown tournament format: {tournament_format!r}")


def stage_errors(stages: Iterable[StagePointConfig]) -> List[PointsValidationError]:
    """Check that stage ids and stage orders are unique within a tournament."""
    errors = []
    seen_ids = set()
    seen_orders = set()
    for index, stage in enumerate(stages):
        if stage.stage_id in seen_ids:
            errors.append(
                PointsValidationError(
                    "Stage id %(stage_id)s is used more than once",
                    field=f"stages.{index}.stage_id",
                    code="duplicate_stage",
                    params={"stage_id": stage.stage_id},
                )
            )
        if stage.stage_order in seen_orders:
            errors.append(
                PointsValidationError(
                    "Stage order %(order)s is used more than once",
                    field=f"stages.{index}.stage_order",
                    code="duplicate_stage_order",
                    params={"order": stage.stage_order},
                )
            )
        seen_ids.add(stage.stage_id)
        seen_orders.add(stage.stage_order)
    return errors


def stages_by_id(
    stages: Optional[Iterable[StagePointConfig]],
) -> Dict[int, StagePointConfig]:
    """Key stage configurations by stage id, in stage order."""
    return {s.stage_id: s for s in sorted(stages or (), key=lambda s: s.stage_order)}
