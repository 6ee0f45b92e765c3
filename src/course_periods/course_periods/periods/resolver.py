from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Optional, Sequence

from ..common.datetime_utils import today_iso
from ..core.enums import ErrorCode
from ..core.exceptions import NotFoundError, PeriodNotFoundError
from ..core.logging import get_logger
from ..core.result import Result
from .matching.evaluator import CourseContext
from .matching.matcher import RuleMatcher
from .model import PeriodTime
from .repository import ConditionRepository, PeriodRepository, RuleRepository

logger = get_logger(__name__)


@dataclass(frozen=True)
class PeriodTimeRequest:
    period_no: int
    context: Mapping[str, Any] = field(default_factory=dict)


class PeriodTimeResolver:
    """Resolve the effective time window of a course period.

    Rules come from the store already ordered by descending priority and the
    first one that matches wins. When none match, the period's default window
    applies. Store failures propagate to the caller as-is; nothing is cached
    between calls.
    """

    def __init__(
        self,
        periods: PeriodRepository,
        rules: RuleRepository,
        conditions: ConditionRepository,
        *,
        matcher: Optional[RuleMatcher] = None,
        clock: Callable[[], str] = today_iso,
    ):
        self._periods = periods
        self._rules = rules
        self._conditions = conditions
        self._matcher = matcher or RuleMatcher()
        self._clock = clock

    def resolve_period_time(self, term_id: int, period_no: int, context: CourseContext) -> PeriodTime:
        period = self._periods.find_by_term_and_no(term_id, period_no)
        if not period:
            raise PeriodNotFoundError(term_id, period_no)

        today = self._clock()
        for rule in self._rules.list_enabled_by_period(period.period_id):
            conditions = self._conditions.list_by_rule(rule.rule_id)
            if self._matcher.matches(rule, conditions, context, today):
                logger.debug(
                    "period_rule_matched",
                    term_id=term_id,
                    period_no=period_no,
                    rule_id=rule.rule_id,
                )
                return PeriodTime(start_time=rule.start_time, end_time=rule.end_time, matched_rule=rule)

        logger.debug("period_default_time", term_id=term_id, period_no=period_no)
        return PeriodTime(start_time=period.default_start_time, end_time=period.default_end_time)

    def resolve_many(self, term_id: int, requests: Sequence[PeriodTimeRequest]) -> list[Result[PeriodTime]]:
        """One result per request, in request order.

        A failing request is recorded in its own slot and never stops the rest.
        """

        results: list[Result[PeriodTime]] = []
        for index, req in enumerate(requests):
            try:
                results.append(Result.ok(self.resolve_period_time(term_id, req.period_no, req.context)))
            except NotFoundError as exc:
                logger.info("period_time_not_found", index=index, term_id=term_id, period_no=req.period_no)
                results.append(Result.from_exception(exc))
            except Exception:
                logger.exception("period_time_failed", index=index, term_id=term_id, period_no=req.period_no)
                results.append(Result.fail(ErrorCode.INTERNAL_ERROR, "Lấy thời gian tiết học thất bại"))
        return results
