"""
Conditional rule evaluation.

Rules are plain data: a condition type, a comparison operator, a threshold and
a point adjustment. The set of condition types is small and fixed, so rules
are interpreted with explicit dispatch rather than pluggable handlers.

Every rule in a point system is evaluated independently against a result and
all matching adjustments are summed.
"""

from typing import Iterable, List, Tuple

from pitchside.points_core.exceptions import (
    InvalidRuleConfigurationError,
    ScoringDefect,
)
from pitchside.points_core.structure import (
    GOAL_BASED_CONDITIONS,
    AppliedRule,
    ComparisonOperator,
    ConditionalRule,
    ConditionType,
    MatchResult,
    PointSystem,
)


def measured_value(rule: ConditionalRule, result: MatchResult) -> int:
    """Return the value of the result that the rule's condition looks at."""
    if rule.condition_type == ConditionType.GOALS_SCORED_THRESHOLD:
        return result.goals_scored
    elif rule.condition_type == ConditionType.GOALS_CONCEDED_THRESHOLD:
        return result.goals_conceded
    elif rule.condition_type == ConditionType.GOAL_DIFFERENCE_THRESHOLD:
        return result.goals_scored - result.goals_conceded
    elif rule.condition_type == ConditionType.CLEAN_SHEET:
        return result.goals_conceded
    raise ScoringDefect(f"Unknown condition type: {rule.condition_type!r}")


def compare(value: int, operator: ComparisonOperator, threshold: int) -> bool:
    """Apply ``value <operator> threshold``."""
    if operator == ComparisonOperator.EQUALS:
        return value == threshold
    elif operator == ComparisonOperator.GREATER_THAN:
        return value > threshold
    elif operator == ComparisonOperator.LESS_THAN:
        return value < threshold
    elif operator == ComparisonOperator.GREATER_THAN_OR_EQUAL:
        return value >= threshold
    elif operator == ComparisonOperator.LESS_THAN_OR_EQUAL:
        return value <= threshold
    raise ScoringDefect(f"Unknown comparison operator: {operator!r}")


def rule_holds(rule: ConditionalRule, result: MatchResult) -> bool:
    """Check whether a rule's condition holds for a result."""
    if rule.condition_type == ConditionType.CLEAN_SHEET:
        # operator and threshold are fixed to EQUALS / 0 for clean sheets
        return result.goals_conceded == 0
    return compare(measured_value(rule, result), rule.operator, rule.threshold)


def evaluate_rule(rule: ConditionalRule, result: MatchResult) -> int:
    """
    Evaluate one conditional rule against one (non-walkover) result.

    Args:
        rule: The conditional rule
        result: The participant's match result

    Returns:
        The rule's point adjustment if its condition holds, else 0
    """
    if rule_holds(rule, result):
        return rule.point_adjustment
    return 0


def evaluate_rules(
    rules: Iterable[ConditionalRule], result: MatchResult
) -> Tuple[int, Tuple[AppliedRule, ...]]:
    """
    Evaluate every rule against a result.

    No rule suppresses another: the adjustments of all matching rules are
    summed.

    Returns:
        Tuple of (conditional_points, applied_rules)
    """
    total = 0
    applied: List[AppliedRule] = []
    for rule in rules:
        if rule_holds(rule, result):
            total += rule.point_adjustment
            applied.append(
                AppliedRule(rule.rule_id, rule.condition_type, rule.point_adjustment)
            )
    return total, tuple(applied)


def rule_errors(rule: ConditionalRule) -> List[InvalidRuleConfigurationError]:
    """Collect every configuration problem of a rule."""
    errors = []
    if not isinstance(rule.condition_type, ConditionType):
        errors.append(
            InvalidRuleConfigurationError(
                "Condition type must be one of: %(choices)s",
                field="condition_type",
                params={"choices": ", ".join(c.value for c in ConditionType)},
            )
        )
        return errors
    if not isinstance(rule.operator, ComparisonOperator):
        errors.append(
            InvalidRuleConfigurationError(
                "Operator must be one of: %(choices)s",
                field="operator",
                params={"choices": ", ".join(o.value for o in ComparisonOperator)},
            )
        )
        return errors
    for field_name in ("threshold", "point_adjustment"):
        value = getattr(rule, field_name)
        if isinstance(value, bool) or not isinstance(value, int):
            errors.append(
                InvalidRuleConfigurationError(
                    "%(field)s must be an integer",
                    field=field_name,
                    params={"field": field_name.replace("_", " ").capitalize()},
                )
            )
    if errors:
        return errors

    if rule.condition_type in GOAL_BASED_CONDITIONS and rule.threshold < 0:
        errors.append(
            InvalidRuleConfigurationError(
                "Threshold must be non-negative for goal-based conditions",
                field="threshold",
            )
        )
    if rule.condition_type == ConditionType.CLEAN_SHEET and (
        rule.operator != ComparisonOperator.EQUALS or rule.threshold != 0
    ):
        errors.append(
            InvalidRuleConfigurationError(
                "Clean sheet condition must use EQUALS operator with threshold 0",
                field="operator",
            )
        )
    return errors


def validate_rule(rule: ConditionalRule) -> ConditionalRule:
    """Raise the first configuration problem of a rule, or return it unchanged."""
    errors = rule_errors(rule)
    if errors:
        raise errors[0]
    return rule


def point_system_errors(
    point_system: PointSystem,
) -> List[InvalidRuleConfigurationError]:
    """Collect the configuration problems of every rule in a point system."""
    errors = []
    for index, rule in enumerate(point_system.conditional_rules):
        for error in rule_errors(rule):
            error.field = f"conditional_rules.{index}.{error.field}"
            errors.append(error)
    return errors


def validate_point_system(point_system: PointSystem) -> PointSystem:
    errors = point_system_errors(point_system)
    if errors:
        raise errors[0]
    return point_system
