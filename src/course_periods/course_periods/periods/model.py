from __future__ import annotations

from dataclasses import dataclass, field
from datetime import time
from typing import Any, Optional, Sequence

from ..common.datetime_utils import format_time
from ..core.constants import DEFAULT_GROUP_NO, DEFAULT_RULE_PRIORITY


@dataclass(frozen=True)
class CoursePeriod:
    """Thực thể miền (domain): Tiết học (Period) trong một học kỳ."""

    period_id: int
    term_id: int
    period_no: int
    default_start_time: time
    default_end_time: time
    period_name: Optional[str] = None
    description: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "period_id": self.period_id,
            "term_id": self.term_id,
            "period_no": self.period_no,
            "period_name": self.period_name,
            "default_start_time": format_time(self.default_start_time),
            "default_end_time": format_time(self.default_end_time),
            "description": self.description,
        }


@dataclass(frozen=True)
class PeriodRule:
    """Conditional override of a period's time window.

    Effective dates are YYYY-MM-DD strings so they compare lexicographically.
    """

    rule_id: int
    period_id: int
    rule_name: str
    start_time: time
    end_time: time
    priority: int = DEFAULT_RULE_PRIORITY
    enabled: bool = True
    effective_start_date: Optional[str] = None
    effective_end_date: Optional[str] = None
    description: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "rule_id": self.rule_id,
            "period_id": self.period_id,
            "rule_name": self.rule_name,
            "priority": self.priority,
            "enabled": self.enabled,
            "start_time": format_time(self.start_time),
            "end_time": format_time(self.end_time),
            "effective_start_date": self.effective_start_date,
            "effective_end_date": self.effective_end_date,
            "description": self.description,
        }


@dataclass(frozen=True)
class RuleCondition:
    """One dimension test of a rule.

    `value` is the decoded JSON payload: a scalar, a list, or a [low, high] pair.
    """

    condition_id: int
    rule_id: int
    dimension: str
    operator: str
    value: Any = None
    group_no: int = DEFAULT_GROUP_NO
    group_connector: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "condition_id": self.condition_id,
            "rule_id": self.rule_id,
            "group_no": self.group_no,
            "group_connector": self.group_connector,
            "dimension": self.dimension,
            "operator": self.operator,
            "value": self.value,
        }


@dataclass(frozen=True)
class NewCondition:
    """Condition payload before it is attached to a rule."""

    dimension: str
    operator: str
    value: Any
    group_no: int = DEFAULT_GROUP_NO
    group_connector: str = "AND"


@dataclass(frozen=True)
class RuleWithConditions:
    rule: PeriodRule
    conditions: Sequence[RuleCondition] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        return {"rule": self.rule.to_dict(), "conditions": [c.to_dict() for c in self.conditions]}


@dataclass(frozen=True)
class PeriodWithRules:
    period: CoursePeriod
    rules: Sequence[RuleWithConditions] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        return {"period": self.period.to_dict(), "rules": [r.to_dict() for r in self.rules]}


@dataclass(frozen=True)
class PeriodTime:
    """Effective time window of one course occurrence."""

    start_time: time
    end_time: time
    matched_rule: Optional[PeriodRule] = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "start_time": format_time(self.start_time),
            "end_time": format_time(self.end_time),
        }
        if self.matched_rule is not None:
            out["matched_rule"] = self.matched_rule.to_dict()
        return out


@dataclass(frozen=True)
class NewPeriod:
    term_id: int
    period_no: int
    default_start_time: time
    default_end_time: time
    period_name: Optional[str] = None
    description: Optional[str] = None
