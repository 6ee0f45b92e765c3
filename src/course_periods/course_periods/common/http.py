from __future__ import annotations

from functools import wraps
from typing import Any

from flask import jsonify, request

from ..core.enums import ErrorCode
from ..core.exceptions import DomainError, ValidationError
from ..core.logging import get_logger
from ..core.result import Result

logger = get_logger(__name__)

_STATUS_BY_CODE = {
    ErrorCode.VALIDATION_ERROR: 400,
    ErrorCode.RESOURCE_NOT_FOUND: 404,
    ErrorCode.INTERNAL_ERROR: 500,
}


def json_result(result: Result, status: int | None = None):
    if status is None:
        status = 200 if result.success else _STATUS_BY_CODE.get(result.code, 500)
    return jsonify(result.to_dict()), status


def json_body() -> dict[str, Any]:
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        raise ValidationError("Dữ liệu JSON không hợp lệ")
    return body


def api_endpoint(view):
    """Wrap a view returning data into the JSON envelope and map domain errors."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        try:
            return json_result(Result.ok(view(*args, **kwargs)))
        except DomainError as e:
            return json_result(Result.from_exception(e))
        except Exception:
            logger.exception("api_request_failed", path=request.path, method=request.method)
            return json_result(Result.fail(ErrorCode.INTERNAL_ERROR, "Lỗi hệ thống"))

    return wrapper
