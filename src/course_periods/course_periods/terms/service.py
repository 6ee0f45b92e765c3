from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence

from ..common.datetime_utils import normalize_iso_date
from ..common.validators import require_non_empty, require_positive_int
from ..core.exceptions import NotFoundError, ValidationError
from ..core.logging import get_logger
from .model import Term
from .repository import TermRepository

logger = get_logger(__name__)


class TermService:
    def __init__(self, terms: TermRepository):
        self._terms = terms

    def get_all_terms(self) -> Sequence[Term]:
        return list(self._terms.list_all())

    def get_active_term(self) -> Optional[Term]:
        return self._terms.get_active()

    def get_term(self, term_id: int) -> Term:
        term = self._terms.get_by_id(require_positive_int(term_id, "Học kỳ"))
        if not term:
            raise NotFoundError("Học kỳ không tồn tại")
        return term

    def create_term(
        self,
        *,
        term_code: str,
        term_name: str,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        is_active: bool = False,
    ) -> Term:
        term_code = require_non_empty(term_code, "Mã học kỳ")
        term_name = require_non_empty(term_name, "Tên học kỳ")
        start = normalize_iso_date(start_date, "Ngày bắt đầu")
        end = normalize_iso_date(end_date, "Ngày kết thúc")
        _check_date_range(start, end)

        if self._terms.get_by_code(term_code):
            raise ValidationError("Mã học kỳ đã tồn tại")

        term_id = self._terms.create(
            term_code=term_code,
            term_name=term_name,
            start_date=start,
            end_date=end,
            is_active=False,
        )
        if is_active:
            self._terms.set_active(term_id=term_id)

        logger.info("term_created", term_id=term_id, term_code=term_code)
        return self.get_term(term_id)

    def update_term(self, term_id: int, changes: Mapping[str, Any]) -> Term:
        current = self.get_term(term_id)

        cleaned: dict[str, Any] = {}
        if "term_code" in changes:
            cleaned["term_code"] = require_non_empty(changes["term_code"], "Mã học kỳ")
            other = self._terms.get_by_code(cleaned["term_code"])
            if other and other.term_id != current.term_id:
                raise ValidationError("Mã học kỳ đã tồn tại")
        if "term_name" in changes:
            cleaned["term_name"] = require_non_empty(changes["term_name"], "Tên học kỳ")
        if "start_date" in changes:
            cleaned["start_date"] = normalize_iso_date(changes["start_date"], "Ngày bắt đầu")
        if "end_date" in changes:
            cleaned["end_date"] = normalize_iso_date(changes["end_date"], "Ngày kết thúc")

        _check_date_range(
            cleaned.get("start_date", current.start_date),
            cleaned.get("end_date", current.end_date),
        )

        self._terms.update(term_id=current.term_id, changes=cleaned)
        logger.info("term_updated", term_id=current.term_id, fields=sorted(cleaned))
        return self.get_term(current.term_id)

    def delete_term(self, term_id: int) -> None:
        if not self._terms.delete(term_id=require_positive_int(term_id, "Học kỳ")):
            raise NotFoundError("Học kỳ không tồn tại")
        logger.info("term_deleted", term_id=int(term_id))

    def set_active_term(self, term_id: int) -> None:
        if not self._terms.set_active(term_id=require_positive_int(term_id, "Học kỳ")):
            raise NotFoundError("Học kỳ không tồn tại")
        logger.info("term_activated", term_id=int(term_id))


def _check_date_range(start: Optional[str], end: Optional[str]) -> None:
    if start and end and start > end:
        raise ValidationError("Ngày bắt đầu phải trước ngày kết thúc")
