from __future__ import annotations

from typing import Optional, Sequence

from ...core.enums import GroupConnector
from ..model import PeriodRule, RuleCondition
from .evaluator import ConditionEvaluator, CourseContext


def group_conditions(conditions: Sequence[RuleCondition]) -> list[list[RuleCondition]]:
    """Partition by group_no, groups in the order they are first seen."""

    groups: dict[int, list[RuleCondition]] = {}
    for condition in conditions:
        groups.setdefault(condition.group_no, []).append(condition)
    return list(groups.values())


def is_rule_active(rule: PeriodRule, today: str) -> bool:
    """Enabled and inside the effective date range (YYYY-MM-DD, inclusive)."""

    if not rule.enabled:
        return False
    if rule.effective_start_date and today < rule.effective_start_date:
        return False
    if rule.effective_end_date and today > rule.effective_end_date:
        return False
    return True


class RuleMatcher:
    """Decides whether a rule applies to a course context on a given day.

    Conditions sharing a group_no form one group; the first member's
    connector decides how the group combines (AND when unset). Groups are
    OR-ed together, so the rule matches as soon as one group matches. A rule
    without conditions matches unconditionally.
    """

    def __init__(self, evaluator: Optional[ConditionEvaluator] = None):
        self._evaluator = evaluator or ConditionEvaluator()

    def matches(
        self,
        rule: PeriodRule,
        conditions: Sequence[RuleCondition],
        context: CourseContext,
        today: str,
    ) -> bool:
        if not is_rule_active(rule, today):
            return False

        if not conditions:
            return True

        for group in group_conditions(conditions):
            if self._group_matches(group, context):
                return True
        return False

    def _group_matches(self, group: Sequence[RuleCondition], context: CourseContext) -> bool:
        connector = group[0].group_connector or GroupConnector.AND.value
        results = (self._evaluator.evaluate(c, context) for c in group)
        if connector == GroupConnector.AND.value:
            return all(results)
        return any(results)
