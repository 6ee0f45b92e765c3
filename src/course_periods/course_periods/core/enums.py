from __future__ import annotations

from enum import Enum
from typing import Optional


class ConditionOperator(str, Enum):
    """Toán tử so sánh của một điều kiện (condition) trong quy tắc."""

    EQ = "="
    NE = "!="
    IN = "in"
    NOT_IN = "not_in"
    GT = ">"
    GTE = ">="
    LT = "<"
    LTE = "<="
    BETWEEN = "between"

    @classmethod
    def parse(cls, value: str) -> Optional["ConditionOperator"]:
        try:
            return cls(value)
        except ValueError:
            return None


class GroupConnector(str, Enum):
    """How conditions inside one group are combined."""

    AND = "AND"
    OR = "OR"


class ErrorCode(str, Enum):
    VALIDATION_ERROR = "VALIDATION_ERROR"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    INTERNAL_ERROR = "INTERNAL_ERROR"
