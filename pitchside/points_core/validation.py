"""
Validation of match submissions before any points are calculated.

The validator is the required gate in front of the calculator. It never raises
for bad input; it returns a ValidationResult carrying either the normalized
Match or every problem it found, each tied to the input field it concerns.

For matches with exactly two participants outside a walkover, each side's
goals conceded is derived from the other side's goals scored and the outcome
must agree with the goal comparison. Other participant counts only get the
duplicate and goal checks.
"""

from dataclasses import dataclass, field, replace
from datetime import date
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from django.core.exceptions import ValidationError

from pitchside.points_core.exceptions import (
    DuplicatePlayerError,
    EmptyMatchError,
    InconsistentOutcomeError,
    InvalidGoalsError,
    InvalidOutcomeError,
    InvalidPlayerError,
    InvalidWalkoverSelectionError,
    PointsValidationError,
    combine_errors,
    errors_to_dict,
)
from pitchside.points_core.structure import (
    Match,
    MatchResult,
    Outcome,
    OverrideSpec,
)
from pitchside.points_core.walkover import (
    check_walkover_selection,
    forced_outcomes,
    reconcile_walkover,
)

ResultInput = Union[MatchResult, Mapping[str, Any]]


@dataclass(frozen=True)
class ValidationResult:
    """Either a validated match or the list of problems found."""

    match: Optional[Match] = None
    errors: Tuple[PointsValidationError, ...] = ()
    walkover_reset: bool = False

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @property
    def message_dict(self) -> Dict[str, List[str]]:
        return errors_to_dict(self.errors)

    def error_codes(self) -> List[str]:
        return [error.code for error in self.errors]

    def has_error(self, error_class) -> bool:
        return any(isinstance(error, error_class) for error in self.errors)

    def raise_if_invalid(self) -> Match:
        """Return the match, or raise one ValidationError keyed by field."""
        if self.errors:
            raise combine_errors(self.errors)
        return self.match


@dataclass
class _Row:
    """A result row while it is being checked."""

    index: int
    player_id: Any
    outcome: Optional[Outcome]
    goals_scored: Any
    goals_conceded: Any
    custom_points: Optional[int] = None
    errors: List[PointsValidationError] = field(default_factory=list)


def derive_outcomes(goals_a: int, goals_b: int) -> Tuple[Outcome, Outcome]:
    """Return the outcomes of both sides implied by a two-party score."""
    if goals_a > goals_b:
        return (Outcome.WIN, Outcome.LOSS)
    elif goals_a < goals_b:
        return (Outcome.LOSS, Outcome.WIN)
    return (Outcome.DRAW, Outcome.DRAW)


def _field(row_index: int, name: str) -> str:
    return f"results.{row_index}.{name}"


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _parse_outcome(value) -> Optional[Outcome]:
    if value is None or value == "":
        return None
    if isinstance(value, Outcome):
        return value
    return Outcome(str(value).upper())


def _read_row(index: int, raw: ResultInput) -> _Row:
    if isinstance(raw, MatchResult):
        data = {
            "player_id": raw.player_id,
            "outcome": raw.outcome,
            "goals_scored": raw.goals_scored,
            "goals_conceded": raw.goals_conceded,
            "custom_points": raw.custom_points,
        }
    else:
        data = raw

    row = _Row(
        index=index,
        player_id=data.get("player_id"),
        outcome=None,
        goals_scored=data.get("goals_scored", 0),
        goals_conceded=data.get("goals_conceded", 0),
        custom_points=data.get("custom_points"),
    )

    if not _is_int(row.player_id) or row.player_id <= 0:
        row.errors.append(
            InvalidPlayerError(
                "Player ID must be a positive integer",
                field=_field(index, "player_id"),
            )
        )

    try:
        row.outcome = _parse_outcome(data.get("outcome"))
    except ValueError:
        row.errors.append(
            InvalidOutcomeError(
                "Outcome must be WIN, DRAW, or LOSS",
                field=_field(index, "outcome"),
            )
        )

    for name, label in (
        ("goals_scored", "Goals scored"),
        ("goals_conceded", "Goals conceded"),
    ):
        value = getattr(row, name)
        if not _is_int(value):
            row.errors.append(
                InvalidGoalsError(
                    "%(label)s must be an integer",
                    field=_field(index, name),
                    params={"label": label},
                )
            )
        elif value < 0:
            row.errors.append(
                InvalidGoalsError(
                    "%(label)s must be non-negative",
                    field=_field(index, name),
                    params={"label": label},
                )
            )

    if row.custom_points is not None and not _is_int(row.custom_points):
        row.errors.append(
            PointsValidationError(
                "Custom points must be an integer",
                field=_field(index, "custom_points"),
            )
        )
    return row


def _duplicate_errors(rows: Sequence[_Row]) -> List[PointsValidationError]:
    seen = set()
    duplicates = []
    for row in rows:
        if any(isinstance(e, InvalidPlayerError) for e in row.errors):
            continue
        if row.player_id in seen and row.player_id not in duplicates:
            duplicates.append(row.player_id)
        seen.add(row.player_id)
    if not duplicates:
        return []
    return [
        DuplicatePlayerError(
            "Duplicate player IDs are not allowed in match results: %(ids)s",
            field="results",
            params={"ids": ", ".join(str(pid) for pid in duplicates)},
        )
    ]


def _check_two_party(rows: Sequence[_Row]) -> List[PointsValidationError]:
    """Derive goals conceded and check outcomes for a normal two-party match."""
    first, second = rows
    first.goals_conceded = second.goals_scored
    second.goals_conceded = first.goals_scored

    errors = []
    expected = derive_outcomes(first.goals_scored, second.goals_scored)
    for row, outcome in zip(rows, expected):
        if row.outcome is None:
            row.outcome = outcome
        elif row.outcome != outcome:
            errors.append(
                InconsistentOutcomeError(
                    "Outcome %(given)s does not match the score %(score)s",
                    field=_field(row.index, "outcome"),
                    params={
                        "given": row.outcome.value,
                        "score": f"{row.goals_scored}-{row.goals_conceded}",
                    },
                )
            )
    return errors


def validate_match(
    results: Sequence[ResultInput],
    walkover_winner_id: Optional[int] = None,
    match_date: Optional[date] = None,
    stage_id: Optional[int] = None,
    match_id: Optional[int] = None,
    overrides: Optional[Mapping[int, OverrideSpec]] = None,
    reset_stale_walkover: bool = False,
) -> ValidationResult:
    """
    Validate a candidate match.

    Args:
        results: Per-player inputs, either MatchResult values or mappings with
            player_id, outcome, goals_scored and goals_conceded keys
        walkover_winner_id: None, 0 (both forfeited) or the walkover winner
        match_date: Date the match was played
        stage_id: Stage the match belongs to, if any
        match_id: Identifier supplied by the persistence layer
        overrides: Manual point overrides keyed by player id
        reset_stale_walkover: Reset a walkover winner who is no longer a
            participant instead of reporting InvalidWalkoverSelectionError

    Returns:
        A ValidationResult with the normalized Match or every error found
    """
    if not results:
        return ValidationResult(
            errors=(
                EmptyMatchError(
                    "At least one match result is required", field="results"
                ),
            )
        )

    rows = [_read_row(i, raw) for i, raw in enumerate(results)]
    errors: List[PointsValidationError] = []
    for row in rows:
        errors.extend(row.errors)
    errors.extend(_duplicate_errors(rows))

    player_ids = [row.player_id for row in rows]
    walkover_reset = False
    if reset_stale_walkover:
        reconciled = reconcile_walkover(walkover_winner_id, player_ids)
        walkover_reset = reconciled != walkover_winner_id
        walkover_winner_id = reconciled

    if walkover_winner_id is not None:
        try:
            check_walkover_selection(walkover_winner_id, player_ids)
        except InvalidWalkoverSelectionError as error:
            errors.append(error)

    if errors:
        return ValidationResult(errors=tuple(errors), walkover_reset=walkover_reset)

    if walkover_winner_id is not None:
        outcomes = forced_outcomes(walkover_winner_id, player_ids)
        for row in rows:
            row.outcome = outcomes[row.player_id]
            row.goals_scored = 0
            row.goals_conceded = 0
    elif len(rows) == 2:
        errors.extend(_check_two_party(rows))
    else:
        for row in rows:
            if row.outcome is None:
                errors.append(
                    InvalidOutcomeError(
                        "Outcome must be WIN, DRAW, or LOSS",
                        field=_field(row.index, "outcome"),
                    )
                )

    if errors:
        return ValidationResult(errors=tuple(errors), walkover_reset=walkover_reset)

    match = Match(
        results=tuple(
            MatchResult(
                player_id=row.player_id,
                outcome=row.outcome,
                goals_scored=row.goals_scored,
                goals_conceded=row.goals_conceded,
                custom_points=row.custom_points,
            )
            for row in rows
        ),
        match_date=match_date,
        stage_id=stage_id,
        walkover_winner_id=walkover_winner_id,
        match_id=match_id,
        overrides={
            pid: spec for pid, spec in (overrides or {}).items() if pid in player_ids
        },
    )
    return ValidationResult(match=match, walkover_reset=walkover_reset)


def update_goals_scored(match: Match, player_id: int, goals_scored: int) -> Match:
    """
    Change one side's goals scored in a two-party match, keeping both sides in
    lockstep: the opponent's goals conceded follows, and both outcomes are
    re-derived from the new score.
    """
    if not match.is_two_party:
        raise ValidationError(
            "Goals can only be kept in lockstep for two-party matches",
            code="not_two_party",
        )
    if match.is_walkover:
        raise InvalidWalkoverSelectionError(
            "Goals are not recorded for walkover matches",
            field="walkover_winner_id",
        )
    if match.result_for(player_id) is None:
        raise InvalidPlayerError(
            "Player %(player_id)s is not a participant in this match",
            field="player_id",
            params={"player_id": player_id},
        )
    if not _is_int(goals_scored) or goals_scored < 0:
        raise InvalidGoalsError(
            "Goals scored must be non-negative", field="goals_scored"
        )

    updated = []
    for result in match.results:
        if result.player_id == player_id:
            updated.append(replace(result, goals_scored=goals_scored))
        else:
            updated.append(replace(result, goals_conceded=goals_scored))
    first, second = updated
    first_outcome, second_outcome = derive_outcomes(
        first.goals_scored, second.goals_scored
    )
    return replace(
        match,
        results=(
            replace(first, outcome=first_outcome, points_earned=None),
            replace(second, outcome=second_outcome, points_earned=None),
        ),
    )
