"""
Per-player statistics derived from standings.
"""

from dataclasses import dataclass
from typing import Iterable, List

from pitchside.points_core.structure import StandingsEntry


@dataclass(frozen=True)
class PlayerStats:
    """Rates and averages for one player in a tournament."""

    player_id: int
    matches_played: int
    total_points: int
    goal_difference: int
    win_rate: float  # percentage, one decimal
    avg_points_per_match: float
    avg_goals_per_match: float


def player_stats(entry: StandingsEntry) -> PlayerStats:
    played = entry.matches_played
    if played:
        win_rate = round(entry.wins / played * 100, 1)
        avg_points = round(entry.total_points / played, 2)
        avg_goals = round(entry.goals_scored / played, 2)
    else:
        win_rate = avg_points = avg_goals = 0.0
    return PlayerStats(
        player_id=entry.player_id,
        matches_played=played,
        total_points=entry.total_points,
        goal_difference=entry.goal_difference,
        win_rate=win_rate,
        avg_points_per_match=avg_points,
        avg_goals_per_match=avg_goals,
    )


def tournament_player_stats(entries: Iterable[StandingsEntry]) -> List[PlayerStats]:
    """
    Statistics for every player who has played at least one match.

    Sorted by total points, then win rate, then goal difference.
    """
    stats = [player_stats(e) for e in entries if e.matches_played > 0]
    stats.sort(
        key=lambda s: (s.total_points, s.win_rate, s.goal_difference), reverse=True
    )
    return stats
