from __future__ import annotations

from typing import Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, decode_json, encode_json, fetchall
from .model import NewCondition, RuleCondition
from .repository import ConditionRepository


def insert_conditions(cur, rule_id: int, conditions: Sequence[NewCondition]) -> int:
    """Insert conditions on an open cursor; the caller owns the transaction."""

    if not conditions:
        return 0
    cur.executemany(
        """
        INSERT INTO course_period_rule_conditions(rule_id, group_no, group_connector, dimension, operator, value_json)
        VALUES(%s,%s,%s,%s,%s,%s)
        """,
        [
            (int(rule_id), int(c.group_no), c.group_connector, c.dimension, c.operator, encode_json(c.value))
            for c in conditions
        ],
    )
    return cur.rowcount


def delete_conditions(cur, rule_id: int) -> int:
    cur.execute("DELETE FROM course_period_rule_conditions WHERE rule_id=%s", (int(rule_id),))
    return cur.rowcount


class MySQLConditionRepository(ConditionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_by_rule(self, rule_id: int) -> Sequence[RuleCondition]:
        # condition_id order is insertion order, which decides group discovery order.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT condition_id, rule_id, group_no, group_connector, dimension, operator, value_json
                FROM course_period_rule_conditions
                WHERE rule_id=%s
                ORDER BY condition_id ASC
                """,
                (int(rule_id),),
            )
            return [
                RuleCondition(
                    condition_id=int(r["condition_id"]),
                    rule_id=int(r["rule_id"]),
                    group_no=int(r["group_no"]),
                    group_connector=r.get("group_connector"),
                    dimension=r["dimension"],
                    operator=r["operator"],
                    value=decode_json(r.get("value_json")),
                )
                for r in fetchall(cur)
            ]
