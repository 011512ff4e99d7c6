"""
Walkover and forfeit handling.

A walkover replaces the normal computation entirely: outcomes are forced, both
sides record zero goals, and the points are fixed by configuration. Walkovers
are only defined for matches with exactly two participants.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Sequence, Tuple

from pitchside.points_core.conf import get_setting
from pitchside.points_core.exceptions import InvalidWalkoverSelectionError
from pitchside.points_core.structure import (
    BOTH_FORFEITED,
    MatchResult,
    Outcome,
    PointSystem,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ForcedResult:
    """The outcome and points a walkover imposes on one participant."""

    player_id: int
    outcome: Outcome
    points: int

    def as_result(self) -> MatchResult:
        return MatchResult(
            player_id=self.player_id,
            outcome=self.outcome,
            goals_scored=0,
            goals_conceded=0,
            points_earned=self.points,
        )


def walkover_points(point_system: PointSystem) -> Tuple[int, int]:
    """Return (win_points, loss_points) for a single walkover."""
    win = point_system.points_for_walkover_win
    loss = point_system.points_for_walkover_loss
    if win is None:
        win = get_setting("WALKOVER_WIN_POINTS")
    if loss is None:
        loss = get_setting("WALKOVER_LOSS_POINTS")
    return win, loss


def check_walkover_selection(
    walkover_winner_id: Optional[int], player_ids: Sequence[int]
) -> None:
    """Raise InvalidWalkoverSelectionError if the selection does not fit the match."""
    if walkover_winner_id is None:
        return
    if len(player_ids) != 2:
        raise InvalidWalkoverSelectionError(
            "A walkover requires exactly two participants, got %(count)d",
            field="walkover_winner_id",
            params={"count": len(player_ids)},
        )
    if walkover_winner_id != BOTH_FORFEITED and walkover_winner_id not in player_ids:
        raise InvalidWalkoverSelectionError(
            "Walkover winner %(player_id)s is not a participant in this match",
            field="walkover_winner_id",
            params={"player_id": walkover_winner_id},
        )


def forced_outcomes(
    walkover_winner_id: int, player_ids: Sequence[int]
) -> Dict[int, Outcome]:
    """Return the outcome a walkover forces on each participant."""
    return {
        pid: Outcome.WIN if pid == walkover_winner_id else Outcome.LOSS
        for pid in player_ids
    }


def reconcile_walkover(
    walkover_winner_id: Optional[int], player_ids: Iterable[int]
) -> Optional[int]:
    """
    Drop a walkover selection that no longer matches the participants.

    When the participants of a match change after a walkover winner was chosen
    (e.g. a player was swapped out), the selection is reset to None so stale
    forced points are never attached to someone no longer in the match.
    """
    if walkover_winner_id is None or walkover_winner_id == BOTH_FORFEITED:
        return walkover_winner_id
    if walkover_winner_id in list(player_ids):
        return walkover_winner_id
    logger.info(
        "Walkover winner %s is no longer a participant, resetting walkover",
        walkover_winner_id,
    )
    return None


def resolve_walkover(
    walkover_winner_id: Optional[int],
    player_ids: Sequence[int],
    point_system: PointSystem,
) -> Optional[Dict[int, ForcedResult]]:
    """
    Compute the forced results of a walkover.

    Args:
        walkover_winner_id: None for a normal match, 0 when both forfeited,
            or the id of the player who won by walkover
        player_ids: The ids of the two participants
        point_system: Supplies the walkover win/loss points

    Returns:
        None for a normal match, else a dict mapping player id to ForcedResult
    """
    if walkover_winner_id is None:
        return None
    check_walkover_selection(walkover_winner_id, player_ids)

    outcomes = forced_outcomes(walkover_winner_id, player_ids)
    if walkover_winner_id == BOTH_FORFEITED:
        # flat zero for both sides, deliberately not points_for_walkover_loss
        return {pid: ForcedResult(pid, outcomes[pid], 0) for pid in player_ids}

    win_points, loss_points = walkover_points(point_system)
    forced = {}
    for pid in player_ids:
        points = win_points if outcomes[pid] == Outcome.WIN else loss_points
        forced[pid] = ForcedResult(pid, outcomes[pid], points)
    return forced
