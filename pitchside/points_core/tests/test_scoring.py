"""
Tests for base config resolution, per-result point calculation and the
predefined point systems.
"""

import unittest

from django.test import SimpleTestCase, override_settings

from pitchside.points_core.exceptions import ScoringDefect
from pitchside.points_core.scoring import (
    GOAL_BONUS_POINTS,
    STANDARD_POINTS,
    TWO_ONE_ZERO_POINTS,
    calculate_points,
    get_point_system,
    resolve_base_config,
    resolve_rules,
)
from pitchside.points_core.structure import (
    ConditionalRule,
    ConditionType,
    ComparisonOperator,
    MatchResult,
    Outcome,
    OverrideSpec,
    PointSystem,
    StagePointConfig,
)
from pitchside.points_core.walkover import ForcedResult

CLEAN_SHEET_BONUS = ConditionalRule.clean_sheet(2)


def stage(stage_id=1, win=2, draw=1, loss=0, **kwargs):
    return StagePointConfig(
        stage_id=stage_id,
        stage_name=f"Stage {stage_id}",
        stage_order=stage_id,
        points_per_win=win,
        points_per_draw=draw,
        points_per_loss=loss,
        **kwargs,
    )


class CalculatePointsTests(unittest.TestCase):
    def setUp(self):
        self.base = resolve_base_config(STANDARD_POINTS)

    def test_outcome_points(self):
        for outcome, expected in (
            (Outcome.WIN, 3),
            (Outcome.DRAW, 1),
            (Outcome.LOSS, 0),
        ):
            breakdown = calculate_points(MatchResult(1, outcome, 1, 1), self.base)
            self.assertEqual(breakdown.outcome_points, expected)
            self.assertEqual(breakdown.total, expected)

    def test_goal_points(self):
        base = resolve_base_config(
            PointSystem(points_per_goal_scored=1, points_per_goal_conceded=-1)
        )
        breakdown = calculate_points(MatchResult(1, Outcome.WIN, 3, 1), base)
        self.assertEqual(breakdown.goal_scored_points, 3)
        self.assertEqual(breakdown.goal_conceded_points, -1)
        self.assertEqual(breakdown.base_points, 5)
        self.assertEqual(breakdown.total, 5)

    def test_clean_sheet_rule(self):
        winner = calculate_points(
            MatchResult(1, Outcome.WIN, 2, 0), self.base, [CLEAN_SHEET_BONUS]
        )
        self.assertEqual(winner.outcome_points, 3)
        self.assertEqual(winner.conditional_points, 2)
        self.assertEqual(winner.total, 5)
        self.assertEqual(len(winner.applied_rules), 1)

        loser = calculate_points(
            MatchResult(2, Outcome.LOSS, 0, 2), self.base, [CLEAN_SHEET_BONUS]
        )
        self.assertEqual(loser.conditional_points, 0)
        self.assertEqual(loser.total, 0)

    def test_rule_can_take_total_below_zero(self):
        rule = ConditionalRule(
            ConditionType.GOALS_CONCEDED_THRESHOLD,
            ComparisonOperator.GREATER_THAN_OR_EQUAL,
            5,
            -2,
        )
        breakdown = calculate_points(MatchResult(1, Outcome.LOSS, 0, 5), self.base, [rule])
        self.assertEqual(breakdown.total, -2)

    def test_points_per_clean_sheet(self):
        base = resolve_base_config(PointSystem(points_per_clean_sheet=1))
        breakdown = calculate_points(MatchResult(1, Outcome.DRAW, 0, 0), base)
        self.assertEqual(breakdown.conditional_points, 1)
        self.assertEqual(breakdown.total, 2)
        self.assertIsNone(breakdown.applied_rules[0].rule_id)

    def test_walkover_skips_goals_and_rules(self):
        breakdown = calculate_points(
            MatchResult(1, Outcome.WIN, 0, 0),
            self.base,
            [CLEAN_SHEET_BONUS],
            walkover=ForcedResult(1, Outcome.WIN, 3),
        )
        self.assertTrue(breakdown.is_walkover)
        self.assertEqual(breakdown.conditional_points, 0)
        self.assertEqual(breakdown.total, 3)

    def test_override_sums_enabled_components(self):
        base = resolve_base_config(PointSystem(points_per_goal_scored=1))
        override = OverrideSpec(
            outcome_points_enabled=True,
            goal_scored_points_enabled=False,
            goal_conceded_points_enabled=True,
            extra_points=4,
        )
        breakdown = calculate_points(
            MatchResult(1, Outcome.WIN, 2, 0), base, [CLEAN_SHEET_BONUS], override
        )
        self.assertTrue(breakdown.is_override)
        self.assertFalse(breakdown.goal_scored_points_enabled)
        self.assertEqual(breakdown.extra_points, 4)
        # rule adjustments are not part of an override
        self.assertEqual(breakdown.total, 7)

    def test_override_with_nothing_enabled(self):
        override = OverrideSpec(False, False, False, extra_points=-1)
        breakdown = calculate_points(
            MatchResult(1, Outcome.WIN, 2, 0), self.base, override=override
        )
        self.assertEqual(breakdown.total, -1)

    def test_stored_custom_points_are_authoritative(self):
        breakdown = calculate_points(
            MatchResult(1, Outcome.WIN, 1, 0, custom_points=10), self.base
        )
        self.assertTrue(breakdown.is_override)
        self.assertEqual(breakdown.total, 10)
        self.assertEqual(breakdown.extra_points, 7)

    def test_same_input_gives_the_same_breakdown(self):
        base = resolve_base_config(PointSystem(points_per_goal_scored=1))
        rules = [CLEAN_SHEET_BONUS]
        result = MatchResult(1, Outcome.WIN, 3, 0)
        first = calculate_points(result, base, rules)
        second = calculate_points(result, base, rules)
        self.assertEqual(first, second)
        self.assertEqual(first.total, 8)

    def test_unknown_outcome_is_a_defect(self):
        with self.assertRaises(ScoringDefect):
            calculate_points(MatchResult(1, "WIN", 1, 0), self.base)


class ResolveBaseConfigTests(unittest.TestCase):
    def setUp(self):
        self.point_system = PointSystem(
            points_per_goal_scored=1, points_per_clean_sheet=2
        )

    def test_unstaged_match_uses_point_system(self):
        base = resolve_base_config(self.point_system, {1: stage()}, None)
        self.assertEqual(base.points_per_win, 3)
        self.assertEqual(base.points_per_goal_scored, 1)
        self.assertIsNone(base.stage_id)

    def test_stage_replaces_point_system(self):
        base = resolve_base_config(self.point_system, {1: stage()}, 1)
        self.assertEqual(base.points_per_win, 2)
        # no goal points unless the stage sets them
        self.assertEqual(base.points_per_goal_scored, 0)
        self.assertEqual(base.points_per_clean_sheet, 2)
        self.assertEqual(base.stage_id, 1)

    def test_stage_goal_points(self):
        base = resolve_base_config(
            self.point_system, {1: stage(points_per_goal_conceded=-1)}, 1
        )
        self.assertEqual(base.points_per_goal_conceded, -1)

    def test_unknown_stage_falls_back(self):
        with self.assertLogs("pitchside.points_core.scoring", level="WARNING"):
            base = resolve_base_config(self.point_system, {1: stage()}, 99)
        self.assertEqual(base.points_per_win, 3)
        self.assertIsNone(base.stage_id)

    def test_stage_rules(self):
        rule = ConditionalRule.clean_sheet(1)
        point_system = PointSystem().with_rules(CLEAN_SHEET_BONUS)
        stages = {
            1: stage(1),
            2: stage(2, conditional_rules=()),
            3: stage(3, conditional_rules=(rule,)),
        }
        self.assertEqual(resolve_rules(point_system, stages, None), (CLEAN_SHEET_BONUS,))
        self.assertEqual(resolve_rules(point_system, stages, 1), (CLEAN_SHEET_BONUS,))
        self.assertEqual(resolve_rules(point_system, stages, 2), ())
        self.assertEqual(resolve_rules(point_system, stages, 3), (rule,))


class PointSystemTemplateTests(SimpleTestCase):
    def test_lookup_by_name(self):
        self.assertIs(get_point_system("standard"), STANDARD_POINTS)
        self.assertIs(get_point_system("two-one-zero"), TWO_ONE_ZERO_POINTS)
        self.assertIs(get_point_system("goal-bonus"), GOAL_BONUS_POINTS)

    def test_default_comes_from_settings(self):
        with override_settings(POINTS_CORE={"DEFAULT_POINT_SYSTEM": "two-one-zero"}):
            self.assertIs(get_point_system(), TWO_ONE_ZERO_POINTS)
        with override_settings(POINTS_CORE={}):
            self.assertIs(get_point_system(), STANDARD_POINTS)

    def test_unknown_name(self):
        with self.assertRaises(KeyError):
            get_point_system("nonsense")


if __name__ == "__main__":
    unittest.main()
