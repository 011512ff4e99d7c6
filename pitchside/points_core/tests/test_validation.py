"""
Tests for match validation.
"""

import unittest

from django.core.exceptions import ValidationError

from pitchside.points_core.exceptions import (
    DuplicatePlayerError,
    EmptyMatchError,
    InconsistentOutcomeError,
    InvalidGoalsError,
    InvalidOutcomeError,
    InvalidPlayerError,
    InvalidWalkoverSelectionError,
)
from pitchside.points_core.structure import MatchResult, Outcome, OverrideSpec
from pitchside.points_core.tests.utils import Shush, two_party
from pitchside.points_core.validation import (
    derive_outcomes,
    update_goals_scored,
    validate_match,
)


class ValidateMatchTests(unittest.TestCase):
    def test_goals_conceded_follow_the_opponent(self):
        validation = validate_match(
            [
                {"player_id": 1, "goals_scored": 2, "goals_conceded": 5},
                {"player_id": 2, "goals_scored": 1},
            ]
        )
        self.assertTrue(validation.is_valid)
        first, second = validation.match.results
        self.assertEqual(first.goals_conceded, 1)
        self.assertEqual(second.goals_conceded, 2)

    def test_outcomes_are_derived_when_missing(self):
        match = validate_match(two_party(1, 2, 0, 0)).match
        self.assertEqual([r.outcome for r in match.results], [Outcome.DRAW] * 2)

        match = validate_match(two_party(1, 2, 1, 3)).match
        self.assertEqual(
            [r.outcome for r in match.results], [Outcome.LOSS, Outcome.WIN]
        )

    def test_outcome_strings_are_accepted(self):
        rows = two_party(1, 2, 2, 1)
        rows[0]["outcome"] = "win"
        rows[1]["outcome"] = "LOSS"
        validation = validate_match(rows)
        self.assertTrue(validation.is_valid)
        self.assertEqual(validation.match.results[0].outcome, Outcome.WIN)

    def test_duplicate_players(self):
        validation = validate_match(
            [MatchResult(5, Outcome.WIN, 1, 0), MatchResult(5, Outcome.LOSS, 0, 1)]
        )
        self.assertFalse(validation.is_valid)
        self.assertIsNone(validation.match)
        self.assertTrue(validation.has_error(DuplicatePlayerError))
        self.assertIn("results", validation.message_dict)
        self.assertIn("5", validation.message_dict["results"][0])

    def test_empty_match(self):
        validation = validate_match([])
        self.assertEqual(validation.error_codes(), ["empty_match"])
        self.assertTrue(validation.has_error(EmptyMatchError))

    def test_negative_goals(self):
        validation = validate_match(two_party(1, 2, -1, 0))
        self.assertTrue(validation.has_error(InvalidGoalsError))
        self.assertEqual(
            validation.message_dict["results.0.goals_scored"],
            ["Goals scored must be non-negative"],
        )

    def test_non_integer_goals(self):
        rows = two_party(1, 2, 1, 0)
        rows[0]["goals_scored"] = "1"
        rows[1]["goals_scored"] = True
        validation = validate_match(rows)
        self.assertIn("results.0.goals_scored", validation.message_dict)
        self.assertIn("results.1.goals_scored", validation.message_dict)

    def test_invalid_player_id(self):
        rows = two_party(0, 2, 1, 0)
        validation = validate_match(rows)
        self.assertTrue(validation.has_error(InvalidPlayerError))
        self.assertIn("results.0.player_id", validation.message_dict)

    def test_unhashable_player_ids_are_reported(self):
        rows = [
            {"player_id": [1], "goals_scored": 1, "goals_conceded": 0},
            {"player_id": [1], "goals_scored": 0, "goals_conceded": 1},
        ]
        with Shush():
            validation = validate_match(
                rows, walkover_winner_id=2, reset_stale_walkover=True
            )
        self.assertFalse(validation.has_error(DuplicatePlayerError))
        self.assertIn("results.0.player_id", validation.message_dict)
        self.assertIn("results.1.player_id", validation.message_dict)

    def test_invalid_outcome(self):
        rows = two_party(1, 2, 1, 0)
        rows[0]["outcome"] = "VICTORY"
        validation = validate_match(rows)
        self.assertTrue(validation.has_error(InvalidOutcomeError))

    def test_outcome_must_match_the_score(self):
        validation = validate_match(
            [MatchResult(1, Outcome.WIN, 0, 1), MatchResult(2, Outcome.LOSS, 1, 0)]
        )
        self.assertTrue(validation.has_error(InconsistentOutcomeError))
        self.assertEqual(
            sorted(validation.message_dict),
            ["results.0.outcome", "results.1.outcome"],
        )
        self.assertEqual(
            validation.message_dict["results.0.outcome"],
            ["Outcome WIN does not match the score 0-1"],
        )

    def test_every_problem_is_reported(self):
        rows = [
            {"player_id": 1, "goals_scored": -1, "goals_conceded": 0},
            {"player_id": "two", "goals_scored": 0, "goals_conceded": 0},
        ]
        validation = validate_match(rows)
        self.assertEqual(
            sorted(validation.error_codes()), ["invalid_goals", "invalid_player"]
        )

    def test_multi_party_requires_outcomes(self):
        rows = [
            {"player_id": 1, "goals_scored": 3, "goals_conceded": 1},
            {"player_id": 2, "goals_scored": 1, "goals_conceded": 2},
            {"player_id": 3, "goals_scored": 1, "goals_conceded": 2},
        ]
        validation = validate_match(rows)
        self.assertEqual(validation.error_codes(), ["invalid_outcome"] * 3)

        for row, outcome in zip(rows, ("WIN", "LOSS", "LOSS")):
            row["outcome"] = outcome
        validation = validate_match(rows)
        self.assertTrue(validation.is_valid)
        # goals conceded are kept as given outside two-party matches
        self.assertEqual(validation.match.results[1].goals_conceded, 2)

    def test_walkover_forces_outcomes_and_clears_goals(self):
        validation = validate_match(two_party(1, 2, 3, 1), walkover_winner_id=2)
        self.assertTrue(validation.is_valid)
        first, second = validation.match.results
        self.assertEqual((first.outcome, second.outcome), (Outcome.LOSS, Outcome.WIN))
        self.assertEqual((first.goals_scored, second.goals_conceded), (0, 0))

    def test_walkover_winner_must_be_a_participant(self):
        validation = validate_match(two_party(1, 2, 0, 0), walkover_winner_id=9)
        self.assertTrue(validation.has_error(InvalidWalkoverSelectionError))
        self.assertIn("walkover_winner_id", validation.message_dict)
        self.assertFalse(validation.walkover_reset)

    def test_stale_walkover_is_reset_on_request(self):
        with Shush():
            validation = validate_match(
                two_party(1, 3, 2, 0), walkover_winner_id=2, reset_stale_walkover=True
            )
        self.assertTrue(validation.is_valid)
        self.assertTrue(validation.walkover_reset)
        self.assertIsNone(validation.match.walkover_winner_id)
        self.assertEqual(validation.match.results[0].outcome, Outcome.WIN)

    def test_overrides_only_for_participants(self):
        validation = validate_match(
            two_party(1, 2, 1, 0),
            overrides={1: OverrideSpec(extra_points=2), 8: OverrideSpec()},
        )
        self.assertEqual(list(validation.match.overrides), [1])

    def test_custom_points_must_be_an_integer(self):
        rows = two_party(1, 2, 1, 0)
        rows[0]["custom_points"] = "lots"
        validation = validate_match(rows)
        self.assertIn("results.0.custom_points", validation.message_dict)

    def test_raise_if_invalid(self):
        validation = validate_match(two_party(1, 1, 0, 0))
        with self.assertRaises(ValidationError) as cm:
            validation.raise_if_invalid()
        self.assertIn("results", cm.exception.message_dict)

        match = validate_match(two_party(1, 2, 0, 0)).raise_if_invalid()
        self.assertEqual(match.player_ids, [1, 2])

    def test_derive_outcomes(self):
        self.assertEqual(derive_outcomes(2, 1), (Outcome.WIN, Outcome.LOSS))
        self.assertEqual(derive_outcomes(1, 2), (Outcome.LOSS, Outcome.WIN))
        self.assertEqual(derive_outcomes(0, 0), (Outcome.DRAW, Outcome.DRAW))


class UpdateGoalsScoredTests(unittest.TestCase):
    def setUp(self):
        self.match = validate_match(two_party(1, 2, 2, 1), match_id=7).match

    def test_opponent_conceded_follows(self):
        match = update_goals_scored(self.match, 2, 3)
        first, second = match.results
        self.assertEqual(first.goals_conceded, 3)
        self.assertEqual(second.goals_scored, 3)
        self.assertEqual((first.outcome, second.outcome), (Outcome.LOSS, Outcome.WIN))
        self.assertEqual(match.match_id, 7)

    def test_unknown_player(self):
        with self.assertRaises(InvalidPlayerError):
            update_goals_scored(self.match, 5, 1)

    def test_negative_goals(self):
        with self.assertRaises(InvalidGoalsError):
            update_goals_scored(self.match, 1, -2)

    def test_walkover_has_no_goals(self):
        match = validate_match(two_party(1, 2, 0, 0), walkover_winner_id=1).match
        with self.assertRaises(InvalidWalkoverSelectionError):
            update_goals_scored(match, 1, 1)


if __name__ == "__main__":
    unittest.main()
