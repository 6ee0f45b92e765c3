"""Condition evaluation against a course context.

Every operator fails closed: a missing context value, a malformed stored
value or an unknown operator makes the condition a non-match instead of an
error, so a broken rule never blocks scheduling; it just does not apply.
"""

from __future__ import annotations

import math
from typing import Any, Callable, Mapping

from ...core.enums import ConditionOperator
from ...core.logging import get_logger
from ..model import RuleCondition

logger = get_logger(__name__)

CourseContext = Mapping[str, Any]


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def strict_equals(actual: Any, expected: Any) -> bool:
    """Equality without type coercion: "1" != 1 and True != 1, but 1 == 1.0."""

    if _is_number(actual) and _is_number(expected):
        return actual == expected
    return type(actual) is type(expected) and actual == expected


def to_number(value: Any) -> float:
    """Numeric coercion for ordering operators; NaN when not numeric."""

    if isinstance(value, (bool, int, float)):
        try:
            return float(value)
        except OverflowError:
            # ints beyond float range; JSON parses large integer literals to int.
            return math.inf if value > 0 else -math.inf
    if value is None:
        return 0.0
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0.0
        try:
            return float(text)
        except ValueError:
            return math.nan
    return math.nan


def _is_list(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def _in(actual: Any, expected: Any) -> bool:
    return _is_list(expected) and any(strict_equals(actual, item) for item in expected)


def _not_in(actual: Any, expected: Any) -> bool:
    # No valid set means no match, not a pass.
    return _is_list(expected) and not any(strict_equals(actual, item) for item in expected)


def _between(actual: Any, expected: Any) -> bool:
    if not _is_list(expected) or len(expected) != 2:
        return False
    value = to_number(actual)
    return to_number(expected[0]) <= value <= to_number(expected[1])


_OPERATORS: dict[ConditionOperator, Callable[[Any, Any], bool]] = {
    ConditionOperator.EQ: strict_equals,
    ConditionOperator.NE: lambda a, b: not strict_equals(a, b),
    ConditionOperator.IN: _in,
    ConditionOperator.NOT_IN: _not_in,
    ConditionOperator.GT: lambda a, b: to_number(a) > to_number(b),
    ConditionOperator.GTE: lambda a, b: to_number(a) >= to_number(b),
    ConditionOperator.LT: lambda a, b: to_number(a) < to_number(b),
    ConditionOperator.LTE: lambda a, b: to_number(a) <= to_number(b),
    ConditionOperator.BETWEEN: _between,
}


class ConditionEvaluator:
    def evaluate(self, condition: RuleCondition, context: CourseContext) -> bool:
        actual = context.get(condition.dimension)
        if actual is None:
            return False

        operator = ConditionOperator.parse(condition.operator)
        if operator is None:
            logger.warning(
                "unknown_condition_operator",
                operator=condition.operator,
                condition_id=condition.condition_id,
                rule_id=condition.rule_id,
            )
            return False

        return _OPERATORS[operator](actual, condition.value)
