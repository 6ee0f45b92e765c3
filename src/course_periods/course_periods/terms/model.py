from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class Term:
    """Thực thể miền (domain): Học kỳ (Term)."""

    term_id: int
    term_code: str
    term_name: str
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    is_active: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "term_id": self.term_id,
            "term_code": self.term_code,
            "term_name": self.term_name,
            "start_date": self.start_date,
            "end_date": self.end_date,
            "is_active": self.is_active,
        }
