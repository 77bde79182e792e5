"""
JSON envelope used by every controller.

Responses look like ``{error, status, message, data, errors}``; keys whose
value is falsy are dropped entirely, so a successful response never carries
``"error": false`` and an empty payload is simply absent.
"""

from __future__ import annotations

from typing import Any, Mapping

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def json_response(
    error: bool,
    status: int,
    message: str | None = None,
    data: Any = None,
    errors: Mapping[str, Any] | None = None,
) -> JSONResponse:
    body = {
        "error": error,
        "status": status,
        "message": message,
        "data": data,
        "errors": errors,
    }
    filtered = {key: value for key, value in body.items() if value}
    return JSONResponse(jsonable_encoder(filtered), status_code=status)


def success_response(message: str | None = None, data: Any = None, status: int = 200) -> JSONResponse:
    return json_response(False, status, message, data)


def error_response(status: int = 500, message: str | None = None, errors: Mapping[str, Any] | None = None) -> JSONResponse:
    return json_response(True, status, message or "An error occurred", None, errors)


def not_found_response(message: str | None = None) -> JSONResponse:
    return error_response(404, message or "Resource not found")


def unauthorized_response(message: str | None = None) -> JSONResponse:
    return error_response(401, message or "Unauthorized access")


def validation_error_response(message: str | None = None, errors: Mapping[str, Any] | None = None) -> JSONResponse:
    return error_response(422, message or "Validation error", errors)


def internal_error_response(message: str | None = None, errors: Mapping[str, Any] | None = None) -> JSONResponse:
    return error_response(500, message or "Internal Error", errors)
