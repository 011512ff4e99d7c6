"""
Errors raised while validating matches and point configuration.

Validation errors are Django ``ValidationError`` subclasses so that callers can
render them field by field: each error knows the input field it belongs to,
and a list of errors collapses into a ``{field: [messages]}`` dictionary.
"""

from typing import Dict, Iterable, List

from django.core.exceptions import ValidationError


class PointsValidationError(ValidationError):
    """Base class for every recoverable input problem."""

    default_code = "invalid"

    def __init__(self, message, field="__all__", code=None, params=None):
        super().__init__(message, code=code or self.default_code, params=params)
        self.field = field


class EmptyMatchError(PointsValidationError):
    default_code = "empty_match"


class InvalidPlayerError(PointsValidationError):
    default_code = "invalid_player"


class DuplicatePlayerError(PointsValidationError):
    default_code = "duplicate_player"


class InvalidGoalsError(PointsValidationError):
    default_code = "invalid_goals"


class InvalidOutcomeError(PointsValidationError):
    default_code = "invalid_outcome"


class InconsistentOutcomeError(PointsValidationError):
    default_code = "inconsistent_outcome"


class InvalidWalkoverSelectionError(PointsValidationError):
    default_code = "invalid_walkover"


class InvalidRuleConfigurationError(PointsValidationError):
    default_code = "invalid_rule"


class ScoringDefect(RuntimeError):
    """Raised when calculation meets input that validation should have rejected."""


def errors_to_dict(errors: Iterable[PointsValidationError]) -> Dict[str, List[str]]:
    """Group error messages by the field they belong to."""
    grouped: Dict[str, List[str]] = {}
    for error in errors:
        grouped.setdefault(error.field, []).extend(error.messages)
    return grouped


def combine_errors(errors: Iterable[PointsValidationError]) -> ValidationError:
    """Build one Django ValidationError keyed by field from a list of errors."""
    by_field: Dict[str, List[ValidationError]] = {}
    for error in errors:
        by_field.setdefault(error.field, []).append(error)
    return ValidationError(by_field)
