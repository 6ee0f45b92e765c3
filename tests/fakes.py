"""In-memory repositories used across tests (Protocol duck typing)."""

from __future__ import annotations

from dataclasses import replace
from datetime import time
from typing import Any, Mapping, Optional

from src.course_periods.course_periods.periods.model import (
    CoursePeriod,
    NewCondition,
    NewPeriod,
    PeriodRule,
    RuleCondition,
)
from src.course_periods.course_periods.terms.model import Term


class InMemoryTerms:
    def __init__(self, terms: Optional[list[Term]] = None):
        self._by_id: dict[int, Term] = {t.term_id: t for t in terms or []}
        self._id = max(self._by_id, default=0)

    def list_all(self):
        return list(self._by_id.values())

    def get_by_id(self, term_id: int) -> Optional[Term]:
        return self._by_id.get(int(term_id))

    def get_by_code(self, term_code: str) -> Optional[Term]:
        return next((t for t in self._by_id.values() if t.term_code == term_code), None)

    def get_active(self) -> Optional[Term]:
        return next((t for t in self._by_id.values() if t.is_active), None)

    def create(self, *, term_code, term_name, start_date, end_date, is_active=False) -> int:
        self._id += 1
        self._by_id[self._id] = Term(self._id, term_code, term_name, start_date, end_date, is_active)
        return self._id

    def update(self, *, term_id: int, changes: Mapping[str, Any]) -> bool:
        term = self._by_id.get(int(term_id))
        if not term:
            return False
        self._by_id[term.term_id] = replace(term, **changes)
        return True

    def delete(self, *, term_id: int) -> bool:
        return self._by_id.pop(int(term_id), None) is not None

    def set_active(self, *, term_id: int) -> bool:
        if int(term_id) not in self._by_id:
            return False
        for tid, term in list(self._by_id.items()):
            self._by_id[tid] = replace(term, is_active=(tid == int(term_id)))
        return True


class InMemoryPeriods:
    def __init__(self, periods: Optional[list[CoursePeriod]] = None):
        self._by_id: dict[int, CoursePeriod] = {p.period_id: p for p in periods or []}
        self._id = max(self._by_id, default=0)

    def list_by_term(self, term_id: int):
        return sorted((p for p in self._by_id.values() if p.term_id == int(term_id)), key=lambda p: p.period_no)

    def get_by_id(self, period_id: int) -> Optional[CoursePeriod]:
        return self._by_id.get(int(period_id))

    def find_by_term_and_no(self, term_id: int, period_no: int) -> Optional[CoursePeriod]:
        return next(
            (p for p in self._by_id.values() if p.term_id == int(term_id) and p.period_no == int(period_no)),
            None,
        )

    def create(self, period: NewPeriod) -> int:
        self._id += 1
        self._by_id[self._id] = CoursePeriod(
            period_id=self._id,
            term_id=period.term_id,
            period_no=period.period_no,
            default_start_time=period.default_start_time,
            default_end_time=period.default_end_time,
            period_name=period.period_name,
            description=period.description,
        )
        return self._id

    def batch_create(self, periods) -> int:
        for p in periods:
            self.create(p)
        return len(periods)

    def update(self, *, period_id: int, changes: Mapping[str, Any]) -> bool:
        period = self._by_id.get(int(period_id))
        if not period:
            return False
        self._by_id[period.period_id] = replace(period, **changes)
        return True

    def delete(self, *, period_id: int) -> bool:
        return self._by_id.pop(int(period_id), None) is not None

    def copy_to_term(self, *, source_term_id: int, target_term_id: int) -> int:
        copied = 0
        for p in self.list_by_term(source_term_id):
            if self.find_by_term_and_no(target_term_id, p.period_no):
                continue
            self.create(
                NewPeriod(
                    term_id=int(target_term_id),
                    period_no=p.period_no,
                    default_start_time=p.default_start_time,
                    default_end_time=p.default_end_time,
                    period_name=p.period_name,
                    description=p.description,
                )
            )
            copied += 1
        return copied


class InMemoryConditions:
    def __init__(self, conditions: Optional[list[RuleCondition]] = None):
        self._items: list[RuleCondition] = list(conditions or [])
        self._id = max((c.condition_id for c in self._items), default=0)

    def list_by_rule(self, rule_id: int):
        return [c for c in self._items if c.rule_id == int(rule_id)]

    def batch_create(self, *, rule_id: int, conditions: list[NewCondition]) -> int:
        for c in conditions:
            self._id += 1
            self._items.append(
                RuleCondition(
                    condition_id=self._id,
                    rule_id=int(rule_id),
                    dimension=c.dimension,
                    operator=c.operator,
                    value=c.value,
                    group_no=c.group_no,
                    group_connector=c.group_connector,
                )
            )
        return len(conditions)

    def delete_by_rule(self, *, rule_id: int) -> int:
        before = len(self._items)
        self._items = [c for c in self._items if c.rule_id != int(rule_id)]
        return before - len(self._items)

    def restore(self, rule_id: int, conditions: list[RuleCondition]) -> None:
        self._items = [c for c in self._items if c.rule_id != int(rule_id)] + list(conditions)


class InMemoryRules:
    """Keeps insertion order; list_* sort by priority DESC like the SQL store.

    Writes touching conditions roll back both stores when the condition
    store raises, like the single MySQL transaction does.
    """

    def __init__(self, rules: Optional[list[PeriodRule]] = None, *, conditions: Optional[InMemoryConditions] = None):
        self._by_id: dict[int, PeriodRule] = {r.rule_id: r for r in rules or []}
        self._id = max(self._by_id, default=0)
        self._conditions = conditions if conditions is not None else InMemoryConditions()

    def list_by_period(self, period_id: int):
        items = [r for r in self._by_id.values() if r.period_id == int(period_id)]
        return sorted(items, key=lambda r: (-r.priority, r.rule_id))

    def list_enabled_by_period(self, period_id: int):
        return [r for r in self.list_by_period(period_id) if r.enabled]

    def get_by_id(self, rule_id: int) -> Optional[PeriodRule]:
        return self._by_id.get(int(rule_id))

    def create_with_conditions(self, *, period_id: int, values: Mapping[str, Any], conditions) -> int:
        self._id += 1
        rule_id = self._id
        self._by_id[rule_id] = PeriodRule(rule_id=rule_id, period_id=int(period_id), **values)
        try:
            self._conditions.batch_create(rule_id=rule_id, conditions=conditions)
        except Exception:
            del self._by_id[rule_id]
            self._conditions.delete_by_rule(rule_id=rule_id)
            raise
        return rule_id

    def update_with_conditions(self, *, rule_id: int, changes: Mapping[str, Any], conditions) -> bool:
        before = self._by_id.get(int(rule_id))
        if not before:
            return False
        old_conditions = self._conditions.list_by_rule(before.rule_id)

        self._by_id[before.rule_id] = replace(before, **changes)
        if conditions is None:
            return True
        try:
            self._conditions.delete_by_rule(rule_id=before.rule_id)
            self._conditions.batch_create(rule_id=before.rule_id, conditions=conditions)
        except Exception:
            self._by_id[before.rule_id] = before
            self._conditions.restore(before.rule_id, old_conditions)
            raise
        return True

    def delete(self, *, rule_id: int) -> bool:
        if self._by_id.pop(int(rule_id), None) is None:
            return False
        self._conditions.delete_by_rule(rule_id=rule_id)
        return True


def make_period(period_id=1, *, term_id=1, period_no=1, start=time(8, 0), end=time(8, 45)) -> CoursePeriod:
    return CoursePeriod(
        period_id=period_id,
        term_id=term_id,
        period_no=period_no,
        default_start_time=start,
        default_end_time=end,
        period_name=f"Tiết {period_no}",
    )


def make_rule(rule_id=1, *, period_id=1, priority=100, start=time(8, 30), end=time(9, 15), **kwargs) -> PeriodRule:
    return PeriodRule(
        rule_id=rule_id,
        period_id=period_id,
        rule_name=f"rule-{rule_id}",
        start_time=start,
        end_time=end,
        priority=priority,
        **kwargs,
    )


def make_condition(dimension, operator, value, *, rule_id=1, group_no=1, connector="AND", condition_id=0) -> RuleCondition:
    return RuleCondition(
        condition_id=condition_id,
        rule_id=rule_id,
        dimension=dimension,
        operator=operator,
        value=value,
        group_no=group_no,
        group_connector=connector,
    )
