from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .database.connection import DBConfig, DatabaseConnection
from .periods.mysql_condition_repository import MySQLConditionRepository
from .periods.mysql_period_repository import MySQLPeriodRepository
from .periods.mysql_rule_repository import MySQLRuleRepository
from .periods.repository import ConditionRepository, PeriodRepository, RuleRepository
from .periods.resolver import PeriodTimeResolver
from .periods.service import CoursePeriodService
from .terms.mysql_term_repository import MySQLTermRepository
from .terms.repository import TermRepository
from .terms.service import TermService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    terms_repo: TermRepository
    periods_repo: PeriodRepository
    rules_repo: RuleRepository
    conditions_repo: ConditionRepository

    term_service: TermService
    period_time_resolver: PeriodTimeResolver
    course_period_service: CoursePeriodService


def wire_container(
    *,
    terms_repo: TermRepository,
    periods_repo: PeriodRepository,
    rules_repo: RuleRepository,
    conditions_repo: ConditionRepository,
    conn: Optional[DatabaseConnection] = None,
    resolver: Optional[PeriodTimeResolver] = None,
) -> Container:
    """Build services on top of any repository implementations."""

    resolver = resolver or PeriodTimeResolver(periods_repo, rules_repo, conditions_repo)
    return Container(
        conn=conn,
        terms_repo=terms_repo,
        periods_repo=periods_repo,
        rules_repo=rules_repo,
        conditions_repo=conditions_repo,
        term_service=TermService(terms_repo),
        period_time_resolver=resolver,
        course_period_service=CoursePeriodService(
            periods_repo,
            rules_repo,
            conditions_repo,
            terms_repo,
            resolver=resolver,
        ),
    )


def build_container(*, db_config: dict) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return wire_container(
        conn=conn,
        terms_repo=MySQLTermRepository(conn),
        periods_repo=MySQLPeriodRepository(conn),
        rules_repo=MySQLRuleRepository(conn),
        conditions_repo=MySQLConditionRepository(conn),
    )
