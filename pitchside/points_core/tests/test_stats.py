"""
Tests for per-player statistics.
"""

import unittest

from pitchside.points_core.stats import player_stats, tournament_player_stats
from pitchside.points_core.structure import StandingsEntry


class PlayerStatsTests(unittest.TestCase):
    def test_rates_and_averages(self):
        entry = StandingsEntry(
            1, matches_played=3, wins=2, goals_scored=7, total_points=7
        )
        stats = player_stats(entry)
        self.assertEqual(stats.win_rate, 66.7)
        self.assertEqual(stats.avg_points_per_match, 2.33)
        self.assertEqual(stats.avg_goals_per_match, 2.33)

    def test_no_matches(self):
        stats = player_stats(StandingsEntry(1))
        self.assertEqual(stats.win_rate, 0.0)
        self.assertEqual(stats.avg_points_per_match, 0.0)

    def test_tournament_stats_order(self):
        entries = [
            StandingsEntry(1, matches_played=2, wins=1, total_points=4, goal_difference=3),
            StandingsEntry(2, matches_played=2, wins=2, total_points=4, goal_difference=1),
            StandingsEntry(3, matches_played=1, wins=0, total_points=4, goal_difference=5),
            StandingsEntry(4),
        ]
        stats = tournament_player_stats(entries)
        # players without matches are left out
        self.assertEqual([s.player_id for s in stats], [2, 1, 3])


if __name__ == "__main__":
    unittest.main()
