"""
Standings aggregation.

Standings are always a pure fold over the complete set of scored results for a
tournament or a single stage. They are never patched incrementally, so
deleted or edited matches can not leave drift behind.

Ordering is total points, then goal difference, then goals scored, all
descending. Remaining ties keep the players' registration order (or order of
first appearance in the results when no registration order is given).

Ranks use standard competition ranking ("1224"): players tied on all three
keys share a rank and the next distinct rank skips by the number tied.
"""

from dataclasses import dataclass, replace
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from pitchside.points_core.structure import (
    Outcome,
    ScoredResult,
    StagePointConfig,
    StandingsEntry,
)


@dataclass
class _Tally:
    matches_played: int = 0
    wins: int = 0
    draws: int = 0
    losses: int = 0
    goals_scored: int = 0
    goals_conceded: int = 0
    total_points: int = 0
    conditional_points: int = 0

    def add(self, scored: ScoredResult):
        result = scored.result
        self.matches_played += 1
        if result.outcome == Outcome.WIN:
            self.wins += 1
        elif result.outcome == Outcome.DRAW:
            self.draws += 1
        else:
            self.losses += 1
        self.goals_scored += result.goals_scored
        self.goals_conceded += result.goals_conceded
        self.total_points += scored.points_earned
        # an override replaces the computed total, rule adjustments included
        if not scored.breakdown.is_override:
            self.conditional_points += scored.breakdown.conditional_points


def filter_stage(
    scored_results: Iterable[ScoredResult], stage_id: Optional[int]
) -> List[ScoredResult]:
    """Restrict scored results to a single stage (None selects unstaged matches)."""
    return [s for s in scored_results if s.stage_id == stage_id]


def assign_ranks(entries: Sequence[StandingsEntry]) -> List[StandingsEntry]:
    """Assign standard competition ranks to already-sorted entries."""
    ranked = []
    previous_key = None
    rank = 0
    for position, entry in enumerate(entries, start=1):
        key = entry.sort_key()
        if key != previous_key:
            rank = position
            previous_key = key
        ranked.append(replace(entry, rank=rank))
    return ranked


def aggregate_standings(
    scored_results: Iterable[ScoredResult],
    player_order: Optional[Sequence[int]] = None,
    advancing: Optional[Mapping[int, Iterable[int]]] = None,
    stage_configs: Optional[Mapping[int, StagePointConfig]] = None,
) -> List[StandingsEntry]:
    """
    Fold scored results into a ranked standings table.

    Args:
        scored_results: The complete snapshot of scored results in scope
        player_order: Registration order of the players; every listed player
            appears in the table, even without results
        advancing: Stage id to the ids of players advancing from that stage;
            each receives the stage's points_for_advancing once
        stage_configs: Stage configurations keyed by stage id

    Returns:
        StandingsEntry list, best first, with ranks assigned
    """
    tallies: Dict[int, _Tally] = {}
    for pid in player_order or ():
        tallies.setdefault(pid, _Tally())
    for scored in scored_results:
        tallies.setdefault(scored.player_id, _Tally()).add(scored)

    for stage_id, player_ids in (advancing or {}).items():
        stage = (stage_configs or {}).get(stage_id)
        if stage is None or not stage.points_for_advancing:
            continue
        for pid in dict.fromkeys(player_ids):
            tallies.setdefault(pid, _Tally()).total_points += stage.points_for_advancing

    # dicts keep insertion order, which is the tie-break order
    entries = [
        StandingsEntry(
            player_id=pid,
            matches_played=t.matches_played,
            wins=t.wins,
            draws=t.draws,
            losses=t.losses,
            goals_scored=t.goals_scored,
            goals_conceded=t.goals_conceded,
            goal_difference=t.goals_scored - t.goals_conceded,
            total_points=t.total_points,
            conditional_points=t.conditional_points,
        )
        for pid, t in tallies.items()
    ]
    entries.sort(key=lambda e: e.sort_key(), reverse=True)
    return assign_ranks(entries)
