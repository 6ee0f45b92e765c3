from __future__ import annotations

from datetime import time

import pytest

from src.course_periods.course_periods.core.enums import ErrorCode
from src.course_periods.course_periods.core.exceptions import NotFoundError, ValidationError
from src.course_periods.course_periods.periods.resolver import PeriodTimeResolver
from src.course_periods.course_periods.periods.service import CoursePeriodService


@pytest.fixture
def service(periods_repo, rules_repo, conditions_repo, terms_repo):
    resolver = PeriodTimeResolver(periods_repo, rules_repo, conditions_repo, clock=lambda: "2024-10-15")
    return CoursePeriodService(periods_repo, rules_repo, conditions_repo, terms_repo, resolver=resolver)


RULE = {
    "period_id": 1,
    "rule_name": "Winter schedule",
    "priority": 200,
    "start_time": "08:30",
    "end_time": "09:15",
}


def test_create_period_parses_times(service):
    period = service.create_period(
        {"term_id": 1, "period_no": 3, "default_start_time": "10:00", "default_end_time": "10:45:00"}
    )

    assert period.period_no == 3
    assert period.default_start_time == time(10, 0)
    assert period.default_end_time == time(10, 45)


@pytest.mark.parametrize(
    "payload",
    [
        {"term_id": 1, "period_no": 3, "default_start_time": "10:45", "default_end_time": "10:00"},
        {"term_id": 1, "period_no": 3, "default_start_time": "25:00", "default_end_time": "26:00"},
        {"term_id": 1, "period_no": 0, "default_start_time": "10:00", "default_end_time": "10:45"},
        {"term_id": 1, "period_no": 1, "default_start_time": "10:00", "default_end_time": "10:45"},
        {"term_id": 1, "period_no": 7, "default_start_time": 800, "default_end_time": "10:45"},
        {"term_id": 1, "period_no": 7, "default_start_time": "08:00", "default_end_time": ["10:45"]},
    ],
)
def test_create_period_rejects_invalid_payload(service, payload):
    with pytest.raises(ValidationError):
        service.create_period(payload)


def test_create_period_in_unknown_term(service):
    with pytest.raises(NotFoundError):
        service.create_period({"term_id": 9, "period_no": 1, "default_start_time": "08:00", "default_end_time": "08:45"})


def test_update_period_checks_window_against_current_values(service):
    with pytest.raises(ValidationError):
        service.update_period(1, {"default_end_time": "07:00"})

    updated = service.update_period(1, {"default_end_time": "08:50", "period_name": "Tiết một"})
    assert updated.default_end_time == time(8, 50)
    assert updated.period_name == "Tiết một"


def test_delete_missing_period(service):
    with pytest.raises(NotFoundError):
        service.delete_period(77)


def test_batch_create_periods_rejects_duplicates(service):
    items = [
        {"term_id": 2, "period_no": 1, "default_start_time": "08:00", "default_end_time": "08:45"},
        {"term_id": 2, "period_no": 1, "default_start_time": "09:00", "default_end_time": "09:45"},
    ]
    with pytest.raises(ValidationError):
        service.batch_create_periods(items)

    assert service.batch_create_periods(items[:1]) == 1
    assert len(service.get_periods_by_term(2)) == 1


def test_copy_periods_to_term(service):
    assert service.copy_periods_to_term(1, 2) == 2
    assert [p.period_no for p in service.get_periods_by_term(2)] == [1, 2]
    # already present periods are not copied again
    assert service.copy_periods_to_term(1, 2) == 0


def test_copy_periods_to_same_term_is_rejected(service):
    with pytest.raises(ValidationError):
        service.copy_periods_to_term(1, 1)


def test_create_rule_with_conditions(service):
    created = service.create_rule(
        RULE,
        [
            {"dimension": "class_location", "operator": "in", "value": ["Cơ sở 2"]},
            {"dimension": "grade", "operator": ">=", "value": 2023, "group_no": 2, "group_connector": "OR"},
        ],
    )

    assert created.rule.rule_name == "Winter schedule"
    assert created.rule.enabled is True
    assert [c.group_no for c in created.conditions] == [1, 2]
    assert created.conditions[0].group_connector == "AND"


@pytest.mark.parametrize(
    "condition",
    [
        {"dimension": "grade", "operator": "like", "value": "20%"},
        {"dimension": "", "operator": "=", "value": 1},
        {"dimension": "grade", "operator": "between", "value": [1]},
        {"dimension": "grade", "operator": "in", "value": "2023"},
        {"dimension": "grade", "operator": "=", "value": 1, "group_connector": "XOR"},
        {"dimension": "grade", "operator": "=", "value": 1, "group_no": 0},
    ],
)
def test_create_rule_rejects_bad_conditions(service, condition, rules_repo):
    with pytest.raises(ValidationError):
        service.create_rule(RULE, [condition])
    assert rules_repo.list_by_period(1) == []


@pytest.mark.parametrize("enabled", ["false", "0", 2, None])
def test_create_rule_rejects_non_boolean_enabled(service, rules_repo, enabled):
    with pytest.raises(ValidationError):
        service.create_rule({**RULE, "enabled": enabled})
    assert rules_repo.list_by_period(1) == []


def test_create_rule_accepts_numeric_enabled_flag(service):
    assert service.create_rule({**RULE, "enabled": 0}).rule.enabled is False


def _lost_connection(**kwargs):
    raise ConnectionError("lost connection")


def test_failed_condition_write_does_not_leave_an_unscoped_rule(service, rules_repo, conditions_repo, monkeypatch):
    monkeypatch.setattr(conditions_repo, "batch_create", _lost_connection)

    with pytest.raises(ConnectionError):
        service.create_rule(
            {**RULE, "start_time": "06:00", "end_time": "06:45"},
            [{"dimension": "class_location", "operator": "=", "value": "Cơ sở 2"}],
        )

    assert rules_repo.list_by_period(1) == []
    result = service.get_course_period_time(1, 1, {"class_location": "Cơ sở 1"})
    assert result.matched_rule is None
    assert result.start_time == time(8, 0)


def test_failed_condition_replace_keeps_previous_rule(service, conditions_repo, monkeypatch):
    created = service.create_rule(RULE, [{"dimension": "campus", "operator": "=", "value": "A"}])
    monkeypatch.setattr(conditions_repo, "batch_create", _lost_connection)

    with pytest.raises(ConnectionError):
        service.update_rule(
            created.rule.rule_id,
            {"priority": 50},
            [{"dimension": "grade", "operator": "=", "value": 1}],
        )

    current = service.get_rule(created.rule.rule_id)
    assert current.rule.priority == 200
    assert [c.dimension for c in current.conditions] == ["campus"]


def test_create_rule_rejects_inverted_dates(service):
    with pytest.raises(ValidationError):
        service.create_rule({**RULE, "effective_start_date": "2025-01-01", "effective_end_date": "2024-01-01"})


def test_create_rule_for_missing_period(service):
    with pytest.raises(NotFoundError):
        service.create_rule({**RULE, "period_id": 404})


def test_update_rule_replaces_conditions(service):
    created = service.create_rule(RULE, [{"dimension": "campus", "operator": "=", "value": "A"}])

    updated = service.update_rule(
        created.rule.rule_id,
        {"priority": 50, "enabled": False},
        [{"dimension": "grade", "operator": "between", "value": [2020, 2024]}],
    )

    assert updated.rule.priority == 50
    assert updated.rule.enabled is False
    assert [c.dimension for c in updated.conditions] == ["grade"]


def test_update_rule_without_conditions_keeps_them(service):
    created = service.create_rule(RULE, [{"dimension": "campus", "operator": "=", "value": "A"}])

    updated = service.update_rule(created.rule.rule_id, {"rule_name": "Renamed"})

    assert updated.rule.rule_name == "Renamed"
    assert [c.dimension for c in updated.conditions] == ["campus"]


def test_delete_rule_removes_conditions(service, conditions_repo):
    created = service.create_rule(RULE, [{"dimension": "campus", "operator": "=", "value": "A"}])

    service.delete_rule(created.rule.rule_id)

    assert conditions_repo.list_by_rule(created.rule.rule_id) == []
    with pytest.raises(NotFoundError):
        service.delete_rule(created.rule.rule_id)


def test_get_periods_with_rules(service):
    service.create_rule(RULE)

    items = service.get_periods_with_rules(1)

    assert [len(i.rules) for i in items] == [1, 0]


def test_get_course_period_time_applies_created_rule(service):
    service.create_rule(RULE, [{"dimension": "class_location", "operator": "=", "value": "Cơ sở 2"}])

    matched = service.get_course_period_time(1, 1, {"class_location": "Cơ sở 2"})
    default = service.get_course_period_time(1, 1, {"class_location": "Cơ sở 1"})

    assert matched.start_time == time(8, 30)
    assert matched.matched_rule.rule_name == "Winter schedule"
    assert default.start_time == time(8, 0)
    assert default.matched_rule is None


def test_get_course_period_time_rejects_bad_context(service):
    with pytest.raises(ValidationError):
        service.get_course_period_time(1, 1, ["not", "a", "mapping"])


def test_batch_get_course_period_times_keeps_slots(service):
    results = service.batch_get_course_period_times(
        1,
        [
            {"period_no": 1, "course_context": {}},
            {"period_no": "abc"},
            {"period_no": 99, "course_context": {}},
            {"period_no": 2},
        ],
    )

    assert [r.success for r in results] == [True, False, False, True]
    assert results[1].code == ErrorCode.VALIDATION_ERROR
    assert results[2].code == ErrorCode.RESOURCE_NOT_FOUND
    assert results[3].data.start_time == time(8, 55)
