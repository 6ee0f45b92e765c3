from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol, Sequence

from .model import CoursePeriod, NewCondition, NewPeriod, PeriodRule, RuleCondition


class PeriodRepository(Protocol):
    def list_by_term(self, term_id: int) -> Sequence[CoursePeriod]:
        raise NotImplementedError

    def get_by_id(self, period_id: int) -> Optional[CoursePeriod]:
        raise NotImplementedError

    def find_by_term_and_no(self, term_id: int, period_no: int) -> Optional[CoursePeriod]:
        raise NotImplementedError

    def create(self, period: NewPeriod) -> int:
        """Returns period_id."""

        raise NotImplementedError

    def batch_create(self, periods: Sequence[NewPeriod]) -> int:
        """Returns number of inserted rows."""

        raise NotImplementedError

    def update(self, *, period_id: int, changes: Mapping[str, Any]) -> bool:
        raise NotImplementedError

    def delete(self, *, period_id: int) -> bool:
        raise NotImplementedError

    def copy_to_term(self, *, source_term_id: int, target_term_id: int) -> int:
        """Copy periods missing from the target term. Returns number of copied rows."""

        raise NotImplementedError


class RuleRepository(Protocol):
    def list_by_period(self, period_id: int) -> Sequence[PeriodRule]:
        """All rules of a period, highest priority first."""

        raise NotImplementedError

    def list_enabled_by_period(self, period_id: int) -> Sequence[PeriodRule]:
        """Enabled rules of a period, highest priority first."""

        raise NotImplementedError

    def get_by_id(self, rule_id: int) -> Optional[PeriodRule]:
        raise NotImplementedError

    def create_with_conditions(
        self, *, period_id: int, values: Mapping[str, Any], conditions: Sequence[NewCondition]
    ) -> int:
        """Insert a rule and its conditions in one transaction. Returns rule_id."""

        raise NotImplementedError

    def update_with_conditions(
        self,
        *,
        rule_id: int,
        changes: Mapping[str, Any],
        conditions: Optional[Sequence[NewCondition]],
    ) -> bool:
        """Update a rule and, when `conditions` is given, replace its conditions atomically."""

        raise NotImplementedError

    def delete(self, *, rule_id: int) -> bool:
        """Delete a rule together with its conditions."""

        raise NotImplementedError


class ConditionRepository(Protocol):
    def list_by_rule(self, rule_id: int) -> Sequence[RuleCondition]:
        raise NotImplementedError
