from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_date, normalize_mysql_time
from .model import NewCondition, PeriodRule
from .mysql_condition_repository import delete_conditions, insert_conditions
from .repository import RuleRepository

_COLUMNS = """
    rule_id, period_id, rule_name, priority, enabled, start_time, end_time,
    effective_start_date, effective_end_date, description
"""
_UPDATABLE = (
    "rule_name",
    "priority",
    "enabled",
    "start_time",
    "end_time",
    "effective_start_date",
    "effective_end_date",
    "description",
)
# Rules tie on priority; rule_id keeps the order stable between reads.
_ORDER_BY = "ORDER BY priority DESC, rule_id ASC"


def _to_rule(r: dict) -> PeriodRule:
    return PeriodRule(
        rule_id=int(r["rule_id"]),
        period_id=int(r["period_id"]),
        rule_name=r.get("rule_name") or "",
        priority=int(r.get("priority") or 0),
        enabled=bool(r.get("enabled")),
        start_time=normalize_mysql_time(r["start_time"]),
        end_time=normalize_mysql_time(r["end_time"]),
        effective_start_date=normalize_mysql_date(r.get("effective_start_date")),
        effective_end_date=normalize_mysql_date(r.get("effective_end_date")),
        description=r.get("description"),
    )


def _db_value(key: str, value: Any) -> Any:
    if key == "enabled":
        return 1 if value else 0
    return value


class MySQLRuleRepository(RuleRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_by_period(self, period_id: int) -> Sequence[PeriodRule]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM course_period_rules WHERE period_id=%s {_ORDER_BY}",
                (int(period_id),),
            )
            return [_to_rule(r) for r in fetchall(cur)]

    def list_enabled_by_period(self, period_id: int) -> Sequence[PeriodRule]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM course_period_rules WHERE period_id=%s AND enabled=1 {_ORDER_BY}",
                (int(period_id),),
            )
            return [_to_rule(r) for r in fetchall(cur)]

    def get_by_id(self, rule_id: int) -> Optional[PeriodRule]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM course_period_rules WHERE rule_id=%s", (int(rule_id),))
            r = fetchone(cur)
            return _to_rule(r) if r else None

    def create_with_conditions(
        self, *, period_id: int, values: Mapping[str, Any], conditions: Sequence[NewCondition]
    ) -> int:
        fields = [k for k in _UPDATABLE if k in values]
        columns = ", ".join(["period_id"] + fields)
        marks = ", ".join(["%s"] * (len(fields) + 1))
        params = [int(period_id)] + [_db_value(k, values[k]) for k in fields]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"INSERT INTO course_period_rules({columns}) VALUES({marks})", tuple(params))
            rule_id = int(cur.lastrowid)
            insert_conditions(cur, rule_id, conditions)
            return rule_id

    def update_with_conditions(
        self,
        *,
        rule_id: int,
        changes: Mapping[str, Any],
        conditions: Optional[Sequence[NewCondition]],
    ) -> bool:
        fields = [k for k in _UPDATABLE if k in changes]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT rule_id FROM course_period_rules WHERE rule_id=%s FOR UPDATE", (int(rule_id),))
            if not fetchone(cur):
                return False

            if fields:
                assignments = ", ".join(f"{k}=%s" for k in fields)
                params = [_db_value(k, changes[k]) for k in fields] + [int(rule_id)]
                cur.execute(f"UPDATE course_period_rules SET {assignments} WHERE rule_id=%s", tuple(params))
            if conditions is not None:
                delete_conditions(cur, rule_id)
                insert_conditions(cur, rule_id, conditions)
            return True

    def delete(self, *, rule_id: int) -> bool:
        # Conditions go with the rule through ON DELETE CASCADE.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM course_period_rules WHERE rule_id=%s", (int(rule_id),))
            return cur.rowcount > 0
