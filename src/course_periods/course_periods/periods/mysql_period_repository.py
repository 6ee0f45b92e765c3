from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_time
from .model import CoursePeriod, NewPeriod
from .repository import PeriodRepository

_COLUMNS = "period_id, term_id, period_no, period_name, default_start_time, default_end_time, description"
_UPDATABLE = ("period_no", "period_name", "default_start_time", "default_end_time", "description")


def _to_period(r: dict) -> CoursePeriod:
    return CoursePeriod(
        period_id=int(r["period_id"]),
        term_id=int(r["term_id"]),
        period_no=int(r["period_no"]),
        period_name=r.get("period_name"),
        default_start_time=normalize_mysql_time(r["default_start_time"]),
        default_end_time=normalize_mysql_time(r["default_end_time"]),
        description=r.get("description"),
    )


def _insert_params(p: NewPeriod) -> tuple:
    return (
        int(p.term_id),
        int(p.period_no),
        p.period_name,
        p.default_start_time,
        p.default_end_time,
        p.description,
    )


_INSERT_SQL = """
    INSERT INTO course_periods(term_id, period_no, period_name, default_start_time, default_end_time, description)
    VALUES(%s,%s,%s,%s,%s,%s)
"""


class MySQLPeriodRepository(PeriodRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_by_term(self, term_id: int) -> Sequence[CoursePeriod]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM course_periods WHERE term_id=%s ORDER BY period_no ASC",
                (int(term_id),),
            )
            return [_to_period(r) for r in fetchall(cur)]

    def get_by_id(self, period_id: int) -> Optional[CoursePeriod]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM course_periods WHERE period_id=%s", (int(period_id),))
            r = fetchone(cur)
            return _to_period(r) if r else None

    def find_by_term_and_no(self, term_id: int, period_no: int) -> Optional[CoursePeriod]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM course_periods
                WHERE term_id=%s AND period_no=%s
                ORDER BY period_id ASC
                LIMIT 1
                """,
                (int(term_id), int(period_no)),
            )
            r = fetchone(cur)
            return _to_period(r) if r else None

    def create(self, period: NewPeriod) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_INSERT_SQL, _insert_params(period))
            return int(cur.lastrowid)

    def batch_create(self, periods: Sequence[NewPeriod]) -> int:
        if not periods:
            return 0
        with db_cursor(self._conn_factory) as (_, cur):
            cur.executemany(_INSERT_SQL, [_insert_params(p) for p in periods])
            return cur.rowcount

    def update(self, *, period_id: int, changes: Mapping[str, Any]) -> bool:
        fields = [k for k in _UPDATABLE if k in changes]
        if not fields:
            return True

        assignments = ", ".join(f"{k}=%s" for k in fields)
        params = [changes[k] for k in fields] + [int(period_id)]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"UPDATE course_periods SET {assignments} WHERE period_id=%s", tuple(params))
            return cur.rowcount > 0

    def delete(self, *, period_id: int) -> bool:
        # Rules and their conditions go with the period (ON DELETE CASCADE).
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM course_periods WHERE period_id=%s", (int(period_id),))
            return cur.rowcount > 0

    def copy_to_term(self, *, source_term_id: int, target_term_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO course_periods(term_id, period_no, period_name, default_start_time, default_end_time, description)
                SELECT %s, src.period_no, src.period_name, src.default_start_time, src.default_end_time, src.description
                FROM course_periods src
                WHERE src.term_id=%s
                  AND NOT EXISTS (
                      SELECT 1 FROM course_periods dst
                      WHERE dst.term_id=%s AND dst.period_no=src.period_no
                  )
                ORDER BY src.period_no ASC
                """,
                (int(target_term_id), int(source_term_id), int(target_term_id)),
            )
            return cur.rowcount
