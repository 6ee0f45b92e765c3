from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, Optional, TypeVar

from .enums import ErrorCode
from .exceptions import NotFoundError, ValidationError

T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    """Uniform success/failure envelope returned to API callers."""

    success: bool
    data: Optional[T] = None
    code: Optional[ErrorCode] = None
    message: Optional[str] = None

    @classmethod
    def ok(cls, data: Optional[T] = None) -> "Result[T]":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, code: ErrorCode, message: str) -> "Result[T]":
        return cls(success=False, code=code, message=message)

    @classmethod
    def from_exception(cls, exc: Exception) -> "Result[T]":
        return cls.fail(error_code_for(exc), str(exc) or exc.__class__.__name__)

    def to_dict(self) -> dict[str, Any]:
        if self.success:
            out: dict[str, Any] = {"success": True}
            if self.data is not None:
                out["data"] = _serialize(self.data)
            return out
        return {"success": False, "code": self.code.value if self.code else None, "message": self.message}


def error_code_for(exc: Exception) -> ErrorCode:
    if isinstance(exc, NotFoundError):
        return ErrorCode.RESOURCE_NOT_FOUND
    if isinstance(exc, ValidationError):
        return ErrorCode.VALIDATION_ERROR
    return ErrorCode.INTERNAL_ERROR


def _serialize(value: Any) -> Any:
    if hasattr(value, "to_dict"):
        return value.to_dict()
    if isinstance(value, (list, tuple)):
        return [_serialize(v) for v in value]
    return value
