from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol, Sequence

from .model import Term


class TermRepository(Protocol):
    def list_all(self) -> Sequence[Term]:
        raise NotImplementedError

    def get_by_id(self, term_id: int) -> Optional[Term]:
        raise NotImplementedError

    def get_by_code(self, term_code: str) -> Optional[Term]:
        raise NotImplementedError

    def get_active(self) -> Optional[Term]:
        raise NotImplementedError

    def create(
        self,
        *,
        term_code: str,
        term_name: str,
        start_date: Optional[str],
        end_date: Optional[str],
        is_active: bool = False,
    ) -> int:
        """Returns term_id."""

        raise NotImplementedError

    def update(self, *, term_id: int, changes: Mapping[str, Any]) -> bool:
        raise NotImplementedError

    def delete(self, *, term_id: int) -> bool:
        raise NotImplementedError

    def set_active(self, *, term_id: int) -> bool:
        """Mark one term active and every other term inactive."""

        raise NotImplementedError
