from __future__ import annotations

from src.course_periods.course_periods.periods.matching.evaluator import ConditionEvaluator
from src.course_periods.course_periods.periods.matching.matcher import RuleMatcher, group_conditions
from tests.fakes import make_condition, make_rule

TODAY = "2024-10-15"


def test_disabled_rule_never_matches():
    rule = make_rule(enabled=False)
    assert RuleMatcher().matches(rule, [], {}, TODAY) is False


def test_rule_not_yet_effective_does_not_match():
    rule = make_rule(effective_start_date="2024-09-01")
    always = [make_condition("campus", "=", "A")]

    assert RuleMatcher().matches(rule, always, {"campus": "A"}, "2024-08-31") is False
    assert RuleMatcher().matches(rule, [], {}, "2024-08-31") is False
    assert RuleMatcher().matches(rule, [], {}, "2024-09-01") is True


def test_rule_past_end_date_does_not_match():
    rule = make_rule(effective_start_date="2024-09-01", effective_end_date="2024-12-31")

    assert RuleMatcher().matches(rule, [], {}, "2024-12-31") is True
    assert RuleMatcher().matches(rule, [], {}, "2025-01-01") is False


def test_rule_without_conditions_matches():
    assert RuleMatcher().matches(make_rule(), [], {}, TODAY) is True


def test_and_group_requires_every_condition():
    rule = make_rule()
    conditions = [
        make_condition("campus", "=", "A", condition_id=1),
        make_condition("grade", ">=", 2022, condition_id=2),
    ]
    matcher = RuleMatcher()

    assert matcher.matches(rule, conditions, {"campus": "A", "grade": 2023}, TODAY) is True
    assert matcher.matches(rule, conditions, {"campus": "A", "grade": 2021}, TODAY) is False
    assert matcher.matches(rule, conditions, {"campus": "A"}, TODAY) is False


def test_or_group_needs_one_condition():
    rule = make_rule()
    conditions = [
        make_condition("campus", "=", "A", connector="OR", condition_id=1),
        make_condition("campus", "=", "B", connector="OR", condition_id=2),
    ]

    assert RuleMatcher().matches(rule, conditions, {"campus": "B"}, TODAY) is True
    assert RuleMatcher().matches(rule, conditions, {"campus": "C"}, TODAY) is False


def test_groups_are_or_combined():
    rule = make_rule()
    conditions = [
        # group 1: AND, both false
        make_condition("campus", "=", "X", group_no=1, connector="AND", condition_id=1),
        make_condition("grade", "=", 1999, group_no=1, connector="AND", condition_id=2),
        # group 2: OR, one true
        make_condition("class_id", "=", "nope", group_no=2, connector="OR", condition_id=3),
        make_condition("teaching_week", "between", [1, 8], group_no=2, connector="OR", condition_id=4),
    ]
    context = {"campus": "A", "grade": 2023, "class_id": "C01", "teaching_week": 3}

    assert RuleMatcher().matches(rule, conditions, context, TODAY) is True


def test_no_group_matching_means_no_match():
    rule = make_rule()
    conditions = [
        make_condition("campus", "=", "X", group_no=1),
        make_condition("campus", "=", "Y", group_no=2),
    ]
    assert RuleMatcher().matches(rule, conditions, {"campus": "A"}, TODAY) is False


def test_first_member_connector_wins():
    rule = make_rule()
    conditions = [
        make_condition("campus", "=", "A", connector="OR", condition_id=1),
        make_condition("grade", "=", 2000, connector="AND", condition_id=2),
    ]

    # OR from the first member: campus alone is enough
    assert RuleMatcher().matches(rule, conditions, {"campus": "A", "grade": 2023}, TODAY) is True


def test_missing_connector_defaults_to_and():
    rule = make_rule()
    conditions = [
        make_condition("campus", "=", "A", connector=None, condition_id=1),
        make_condition("grade", "=", 2000, connector=None, condition_id=2),
    ]
    assert RuleMatcher().matches(rule, conditions, {"campus": "A", "grade": 2023}, TODAY) is False


def test_groups_keep_discovery_order():
    conditions = [
        make_condition("a", "=", 1, group_no=3, condition_id=1),
        make_condition("b", "=", 1, group_no=1, condition_id=2),
        make_condition("c", "=", 1, group_no=3, condition_id=3),
    ]

    groups = group_conditions(conditions)

    assert [[c.condition_id for c in g] for g in groups] == [[1, 3], [2]]


class RecordingEvaluator(ConditionEvaluator):
    def __init__(self):
        self.seen: list[int] = []

    def evaluate(self, condition, context):
        self.seen.append(condition.condition_id)
        return super().evaluate(condition, context)


def test_matching_stops_at_first_matching_group_in_discovery_order():
    rule = make_rule()
    conditions = [
        make_condition("campus", "=", "A", group_no=2, condition_id=1),
        make_condition("campus", "=", "A", group_no=1, condition_id=2),
    ]
    evaluator = RecordingEvaluator()

    assert RuleMatcher(evaluator).matches(rule, conditions, {"campus": "A"}, TODAY) is True
    assert evaluator.seen == [1]
