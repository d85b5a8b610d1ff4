"""Domain error base class and the API exception handler.

Every module's ``exceptions.py`` derives from ``DomainError`` so the
HTTP status travels with the exception.  Views catch the errors they
expect; anything that reaches DRF is translated here into
``{"detail": ..., "errors": [...]}``, which the envelope renderer turns
into ``{"success": false, "error": ..., "errors": [...]}``.
"""

from __future__ import annotations

from typing import Any

import structlog
from rest_framework import status
from rest_framework.exceptions import APIException, ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = structlog.get_logger(__name__)


class DomainError(Exception):
    """Business rule violation raised by the service layer."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_detail: str = "Request could not be processed."
    code: str = "domain_error"

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class NotFoundError(DomainError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found."
    code = "not_found"


class ConflictError(DomainError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Conflict with the current state of the resource."
    code = "conflict"


class PermissionDeniedError(DomainError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "You do not have permission to perform this action."
    code = "permission_denied"


def domain_error_response(exc: DomainError) -> Response:
    return Response(
        {
            "detail": exc.detail,
            "errors": [{"code": exc.code, "detail": exc.detail, "attr": None}],
        },
        status=exc.status_code,
    )


def _flatten_validation_errors(data: Any, attr: str | None = None) -> list[dict]:
    errors: list[dict] = []
    if isinstance(data, dict):
        for key, value in data.items():
            name = key if attr is None else f"{attr}.{key}"
            if key in {"non_field_errors", "detail"}:
                name = attr
            errors.extend(_flatten_validation_errors(value, name))
    elif isinstance(data, list):
        for index, value in enumerate(data):
            if isinstance(value, (dict, list)):
                name = f"{attr}.{index}" if attr else str(index)
                errors.extend(_flatten_validation_errors(value, name))
            else:
                errors.extend(_flatten_validation_errors(value, attr))
    else:
        errors.append(
            {"code": getattr(data, "code", "invalid"), "detail": str(data), "attr": attr}
        )
    return errors


def envelope_exception_handler(exc: Exception, context: dict) -> Response | None:
    """DRF ``EXCEPTION_HANDLER`` producing a single error shape."""
    if isinstance(exc, DomainError):
        logger.info(
            "api.domain_error",
            error=exc.__class__.__name__,
            detail=exc.detail,
            status_code=exc.status_code,
        )
        return domain_error_response(exc)

    response = exception_handler(exc, context)
    if response is None:
        return None

    if isinstance(exc, ValidationError):
        errors = _flatten_validation_errors(exc.detail)
        detail = errors[0]["detail"] if errors else "Invalid input."
        if errors and errors[0]["attr"]:
            detail = f"{errors[0]['attr']}: {detail}"
    elif isinstance(exc, APIException):
        detail = str(exc.detail)
        codes = exc.get_codes()
        code = codes if isinstance(codes, str) else exc.default_code
        errors = [{"code": code, "detail": detail, "attr": None}]
    else:
        detail = "Error"
        if isinstance(response.data, dict):
            detail = str(response.data.get("detail", detail))
        errors = [{"code": "error", "detail": detail, "attr": None}]

    response.data = {"detail": detail, "errors": errors}
    return response
