from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence

from ..common.datetime_utils import normalize_iso_date, parse_time
from ..common.validators import require_int, require_non_empty, require_positive_int
from ..core.constants import DEFAULT_GROUP_NO, DEFAULT_RULE_PRIORITY
from ..core.enums import ConditionOperator, GroupConnector
from ..core.exceptions import NotFoundError, ValidationError
from ..core.logging import get_logger
from ..core.result import Result
from ..terms.repository import TermRepository
from .model import (
    CoursePeriod,
    NewCondition,
    NewPeriod,
    PeriodTime,
    PeriodWithRules,
    RuleWithConditions,
)
from .repository import ConditionRepository, PeriodRepository, RuleRepository
from .resolver import PeriodTimeRequest, PeriodTimeResolver

logger = get_logger(__name__)


class CoursePeriodService:
    """Period and rule management plus period-time resolution."""

    def __init__(
        self,
        periods: PeriodRepository,
        rules: RuleRepository,
        conditions: ConditionRepository,
        terms: Optional[TermRepository] = None,
        *,
        resolver: Optional[PeriodTimeResolver] = None,
    ):
        self._periods = periods
        self._rules = rules
        self._conditions = conditions
        self._terms = terms
        self._resolver = resolver or PeriodTimeResolver(periods, rules, conditions)

    # ---- periods ----

    def get_periods_by_term(self, term_id: int) -> Sequence[CoursePeriod]:
        return list(self._periods.list_by_term(require_positive_int(term_id, "Học kỳ")))

    def get_periods_with_rules(self, term_id: int) -> Sequence[PeriodWithRules]:
        return [
            PeriodWithRules(period=p, rules=self.get_rules_by_period(p.period_id))
            for p in self.get_periods_by_term(term_id)
        ]

    def get_period(self, period_id: int) -> CoursePeriod:
        period = self._periods.get_by_id(require_positive_int(period_id, "Tiết học"))
        if not period:
            raise NotFoundError("Tiết học không tồn tại")
        return period

    def create_period(self, data: Mapping[str, Any]) -> CoursePeriod:
        new_period = self._parse_new_period(data)
        if self._periods.find_by_term_and_no(new_period.term_id, new_period.period_no):
            raise ValidationError("Tiết học đã tồn tại trong học kỳ")

        period_id = self._periods.create(new_period)
        logger.info("period_created", period_id=period_id, term_id=new_period.term_id, period_no=new_period.period_no)
        return self.get_period(period_id)

    def update_period(self, period_id: int, changes: Mapping[str, Any]) -> CoursePeriod:
        current = self.get_period(period_id)

        cleaned: dict[str, Any] = {}
        if "period_no" in changes:
            cleaned["period_no"] = require_positive_int(changes["period_no"], "Số tiết")
            other = self._periods.find_by_term_and_no(current.term_id, cleaned["period_no"])
            if other and other.period_id != current.period_id:
                raise ValidationError("Tiết học đã tồn tại trong học kỳ")
        if "period_name" in changes:
            cleaned["period_name"] = _optional_text(changes["period_name"])
        if "description" in changes:
            cleaned["description"] = _optional_text(changes["description"])
        if "default_start_time" in changes:
            cleaned["default_start_time"] = parse_time(changes["default_start_time"], "Giờ bắt đầu")
        if "default_end_time" in changes:
            cleaned["default_end_time"] = parse_time(changes["default_end_time"], "Giờ kết thúc")

        _check_time_window(
            cleaned.get("default_start_time", current.default_start_time),
            cleaned.get("default_end_time", current.default_end_time),
        )

        self._periods.update(period_id=current.period_id, changes=cleaned)
        logger.info("period_updated", period_id=current.period_id, fields=sorted(cleaned))
        return self.get_period(current.period_id)

    def delete_period(self, period_id: int) -> None:
        if not self._periods.delete(period_id=require_positive_int(period_id, "Tiết học")):
            raise NotFoundError("Tiết học không tồn tại")
        logger.info("period_deleted", period_id=int(period_id))

    def batch_create_periods(self, items: Sequence[Mapping[str, Any]]) -> int:
        if not items:
            raise ValidationError("Danh sách tiết học trống")

        new_periods = [self._parse_new_period(item) for item in items]
        seen: set[tuple[int, int]] = set()
        for p in new_periods:
            key = (p.term_id, p.period_no)
            if key in seen or self._periods.find_by_term_and_no(p.term_id, p.period_no):
                raise ValidationError(f"Tiết {p.period_no} đã tồn tại trong học kỳ")
            seen.add(key)

        count = self._periods.batch_create(new_periods)
        logger.info("periods_batch_created", count=count)
        return count

    def copy_periods_to_term(self, source_term_id: int, target_term_id: int) -> int:
        source = require_positive_int(source_term_id, "Học kỳ nguồn")
        target = require_positive_int(target_term_id, "Học kỳ đích")
        if source == target:
            raise ValidationError("Học kỳ nguồn và đích phải khác nhau")
        self._require_term(source)
        self._require_term(target)

        count = self._periods.copy_to_term(source_term_id=source, target_term_id=target)
        logger.info("periods_copied", source_term_id=source, target_term_id=target, count=count)
        return count

    # ---- rules ----

    def get_rules_by_period(self, period_id: int) -> Sequence[RuleWithConditions]:
        rules = self._rules.list_by_period(require_positive_int(period_id, "Tiết học"))
        return [RuleWithConditions(rule=r, conditions=tuple(self._conditions.list_by_rule(r.rule_id))) for r in rules]

    def get_rule(self, rule_id: int) -> RuleWithConditions:
        rule = self._rules.get_by_id(require_positive_int(rule_id, "Quy tắc"))
        if not rule:
            raise NotFoundError("Quy tắc không tồn tại")
        return RuleWithConditions(rule=rule, conditions=tuple(self._conditions.list_by_rule(rule.rule_id)))

    def create_rule(self, data: Mapping[str, Any], conditions: Sequence[Mapping[str, Any]] = ()) -> RuleWithConditions:
        values = _parse_rule_values(data, partial=False)
        new_conditions = _parse_conditions(conditions)
        period = self.get_period(data.get("period_id"))

        rule_id = self._rules.create_with_conditions(
            period_id=period.period_id, values=values, conditions=new_conditions
        )

        logger.info("rule_created", rule_id=rule_id, period_id=period.period_id, conditions=len(new_conditions))
        return self.get_rule(rule_id)

    def update_rule(
        self,
        rule_id: int,
        data: Mapping[str, Any],
        conditions: Optional[Sequence[Mapping[str, Any]]] = None,
    ) -> RuleWithConditions:
        """Update rule fields; when `conditions` is given it replaces the old set."""

        current = self.get_rule(rule_id).rule
        values = _parse_rule_values(data, partial=True)
        _check_time_window(values.get("start_time", current.start_time), values.get("end_time", current.end_time))
        _check_date_range(
            values.get("effective_start_date", current.effective_start_date),
            values.get("effective_end_date", current.effective_end_date),
        )
        new_conditions = _parse_conditions(conditions) if conditions is not None else None

        if not self._rules.update_with_conditions(rule_id=current.rule_id, changes=values, conditions=new_conditions):
            raise NotFoundError("Quy tắc không tồn tại")

        logger.info("rule_updated", rule_id=current.rule_id, fields=sorted(values))
        return self.get_rule(current.rule_id)

    def delete_rule(self, rule_id: int) -> None:
        rule_id = require_positive_int(rule_id, "Quy tắc")
        if not self._rules.delete(rule_id=rule_id):
            raise NotFoundError("Quy tắc không tồn tại")
        logger.info("rule_deleted", rule_id=rule_id)

    # ---- resolution ----

    def get_course_period_time(self, term_id: int, period_no: int, context: Mapping[str, Any]) -> PeriodTime:
        term_id = require_positive_int(term_id, "Học kỳ")
        period_no = require_positive_int(period_no, "Số tiết")
        return self._resolver.resolve_period_time(term_id, period_no, _require_context(context))

    def batch_get_course_period_times(
        self, term_id: int, requests: Sequence[Mapping[str, Any]]
    ) -> list[Result[PeriodTime]]:
        term_id = require_positive_int(term_id, "Học kỳ")
        if not isinstance(requests, (list, tuple)):
            raise ValidationError("Danh sách yêu cầu không hợp lệ")

        results: list[Optional[Result[PeriodTime]]] = [None] * len(requests)
        valid_idx: list[int] = []
        valid: list[PeriodTimeRequest] = []
        for index, item in enumerate(requests):
            try:
                if not isinstance(item, Mapping):
                    raise ValidationError("Yêu cầu không hợp lệ")
                valid.append(
                    PeriodTimeRequest(
                        period_no=require_positive_int(item.get("period_no"), "Số tiết"),
                        context=_require_context(item.get("course_context", item.get("context", {}))),
                    )
                )
                valid_idx.append(index)
            except ValidationError as exc:
                results[index] = Result.from_exception(exc)

        for index, result in zip(valid_idx, self._resolver.resolve_many(term_id, valid)):
            results[index] = result
        return results

    # ---- helpers ----

    def _require_term(self, term_id: int) -> None:
        if self._terms is not None and not self._terms.get_by_id(term_id):
            raise NotFoundError("Học kỳ không tồn tại")

    def _parse_new_period(self, data: Mapping[str, Any]) -> NewPeriod:
        if not isinstance(data, Mapping):
            raise ValidationError("Dữ liệu tiết học không hợp lệ")

        term_id = require_positive_int(data.get("term_id"), "Học kỳ")
        self._require_term(term_id)
        start = parse_time(data.get("default_start_time"), "Giờ bắt đầu")
        end = parse_time(data.get("default_end_time"), "Giờ kết thúc")
        _check_time_window(start, end)

        return NewPeriod(
            term_id=term_id,
            period_no=require_positive_int(data.get("period_no"), "Số tiết"),
            default_start_time=start,
            default_end_time=end,
            period_name=_optional_text(data.get("period_name")),
            description=_optional_text(data.get("description")),
        )


def _parse_rule_values(data: Mapping[str, Any], *, partial: bool) -> dict[str, Any]:
    if not isinstance(data, Mapping):
        raise ValidationError("Dữ liệu quy tắc không hợp lệ")

    values: dict[str, Any] = {}
    if not partial or "rule_name" in data:
        values["rule_name"] = require_non_empty(data.get("rule_name"), "Tên quy tắc")
    if not partial or "start_time" in data:
        values["start_time"] = parse_time(data.get("start_time"), "Giờ bắt đầu")
    if not partial or "end_time" in data:
        values["end_time"] = parse_time(data.get("end_time"), "Giờ kết thúc")
    if "priority" in data:
        values["priority"] = require_int(data["priority"], "Độ ưu tiên")
    elif not partial:
        values["priority"] = DEFAULT_RULE_PRIORITY
    if "enabled" in data:
        values["enabled"] = _parse_enabled(data["enabled"])
    elif not partial:
        values["enabled"] = True
    if not partial or "effective_start_date" in data:
        values["effective_start_date"] = normalize_iso_date(data.get("effective_start_date"), "Ngày hiệu lực")
    if not partial or "effective_end_date" in data:
        values["effective_end_date"] = normalize_iso_date(data.get("effective_end_date"), "Ngày hết hiệu lực")
    if "description" in data:
        values["description"] = _optional_text(data["description"])

    if not partial:
        _check_time_window(values["start_time"], values["end_time"])
        _check_date_range(values["effective_start_date"], values["effective_end_date"])
    return values


def _parse_conditions(items: Sequence[Mapping[str, Any]]) -> list[NewCondition]:
    if not isinstance(items, (list, tuple)):
        raise ValidationError("Danh sách điều kiện không hợp lệ")

    out: list[NewCondition] = []
    for item in items:
        if not isinstance(item, Mapping):
            raise ValidationError("Điều kiện không hợp lệ")

        operator = ConditionOperator.parse(item.get("operator"))
        if operator is None:
            raise ValidationError(f"Toán tử không hợp lệ: {item.get('operator')!r}")

        connector = item.get("group_connector") or GroupConnector.AND.value
        if connector not in (GroupConnector.AND.value, GroupConnector.OR.value):
            raise ValidationError(f"Liên kết nhóm không hợp lệ: {connector!r}")

        value = item.get("value", item.get("value_json"))
        if operator in (ConditionOperator.IN, ConditionOperator.NOT_IN) and not isinstance(value, (list, tuple)):
            raise ValidationError("Giá trị của 'in'/'not_in' phải là danh sách")
        if operator == ConditionOperator.BETWEEN and (not isinstance(value, (list, tuple)) or len(value) != 2):
            raise ValidationError("Giá trị của 'between' phải là [min, max]")

        out.append(
            NewCondition(
                dimension=require_non_empty(item.get("dimension"), "Chiều điều kiện"),
                operator=operator.value,
                value=list(value) if isinstance(value, tuple) else value,
                group_no=require_positive_int(item.get("group_no", DEFAULT_GROUP_NO), "Nhóm điều kiện"),
                group_connector=connector,
            )
        )
    return out


def _require_context(context: Any) -> Mapping[str, Any]:
    if context is None:
        return {}
    if not isinstance(context, Mapping):
        raise ValidationError("Ngữ cảnh khóa học không hợp lệ")
    return context


def _parse_enabled(value: Any) -> bool:
    # 0/1 come from MySQL TINYINT exports; strings such as "false" are rejected.
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    raise ValidationError("Trạng thái bật/tắt không hợp lệ (true/false)")


def _optional_text(value: Any) -> Optional[str]:
    text = str(value).strip() if value is not None else ""
    return text or None


def _check_time_window(start, end) -> None:
    if start >= end:
        raise ValidationError("Giờ bắt đầu phải trước giờ kết thúc")


def _check_date_range(start: Optional[str], end: Optional[str]) -> None:
    if start and end and start > end:
        raise ValidationError("Ngày hiệu lực phải trước ngày hết hiệu lực")
