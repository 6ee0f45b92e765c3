from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_date
from .model import Term
from .repository import TermRepository

_COLUMNS = "term_id, term_code, term_name, start_date, end_date, is_active"
_UPDATABLE = ("term_code", "term_name", "start_date", "end_date")


def _to_term(r: dict) -> Term:
    return Term(
        term_id=int(r["term_id"]),
        term_code=r["term_code"],
        term_name=r["term_name"],
        start_date=normalize_mysql_date(r.get("start_date")),
        end_date=normalize_mysql_date(r.get("end_date")),
        is_active=bool(r.get("is_active")),
    )


class MySQLTermRepository(TermRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[Term]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM system_config_terms ORDER BY start_date DESC, term_id DESC")
            return [_to_term(r) for r in fetchall(cur)]

    def get_by_id(self, term_id: int) -> Optional[Term]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM system_config_terms WHERE term_id=%s", (int(term_id),))
            r = fetchone(cur)
            return _to_term(r) if r else None

    def get_by_code(self, term_code: str) -> Optional[Term]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM system_config_terms WHERE term_code=%s", (term_code,))
            r = fetchone(cur)
            return _to_term(r) if r else None

    def get_active(self) -> Optional[Term]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM system_config_terms WHERE is_active=1 LIMIT 1")
            r = fetchone(cur)
            return _to_term(r) if r else None

    def create(
        self,
        *,
        term_code: str,
        term_name: str,
        start_date: Optional[str],
        end_date: Optional[str],
        is_active: bool = False,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO system_config_terms(term_code, term_name, start_date, end_date, is_active)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (term_code, term_name, start_date, end_date, 1 if is_active else 0),
            )
            return int(cur.lastrowid)

    def update(self, *, term_id: int, changes: Mapping[str, Any]) -> bool:
        fields = [k for k in _UPDATABLE if k in changes]
        if not fields:
            return True

        assignments = ", ".join(f"{k}=%s" for k in fields)
        params = [changes[k] for k in fields] + [int(term_id)]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"UPDATE system_config_terms SET {assignments} WHERE term_id=%s", tuple(params))
            return cur.rowcount > 0

    def delete(self, *, term_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM system_config_terms WHERE term_id=%s", (int(term_id),))
            return cur.rowcount > 0

    def set_active(self, *, term_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT term_id FROM system_config_terms WHERE term_id=%s", (int(term_id),))
            if not fetchone(cur):
                return False

            cur.execute("UPDATE system_config_terms SET is_active = (term_id = %s)", (int(term_id),))
            return True
