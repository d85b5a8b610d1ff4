"""Helpers for turning request payloads into pydantic DTOs."""

from __future__ import annotations

from typing import Any, Mapping, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from rest_framework.exceptions import ValidationError

DTO = TypeVar("DTO", bound=BaseModel)


def parse_dto(dto_class: Type[DTO], data: Mapping[str, Any]) -> DTO:
    """Validate ``data`` into ``dto_class``.

    Pydantic failures become a DRF ``ValidationError`` keyed by field name,
    so they reach the client through the regular error envelope.
    """
    try:
        return dto_class.model_validate(dict(data))
    except PydanticValidationError as exc:
        raise ValidationError(pydantic_errors(exc)) from exc


def pydantic_errors(exc: PydanticValidationError) -> dict[str, list[str]]:
    errors: dict[str, list[str]] = {}
    for error in exc.errors():
        attr = ".".join(str(part) for part in error["loc"]) or "non_field_errors"
        message = error["msg"].removeprefix("Value error, ")
        errors.setdefault(attr, []).append(message)
    return errors
