"""Payload Validation — pure check of a raw JSON body against the write schemas.

Invariants:
    - Returns UserCreate for CREATE, UserUpdate for UPDATE, or raises
      PayloadValidationError
    - Exactly one message is reported: the first rule violated, no aggregation
    - Pure: no IO, no logging, same input → same result

Design Decisions:
    - Pydantic does the checking, this module only picks and phrases the first
      error so clients get one stable sentence instead of a pydantic error list
"""

from typing import Any

from pydantic import BaseModel, ValidationError

from users_api.core.domain_types import PayloadKind
from users_api.core.errors import PayloadValidationError
from users_api.schemas.user import UserCreate, UserUpdate

_SCHEMAS: dict[PayloadKind, type[BaseModel]] = {
    PayloadKind.CREATE: UserCreate,
    PayloadKind.UPDATE: UserUpdate,
}

NOT_AN_OBJECT = "Request body must be a JSON object"


def validate_user_payload(kind: PayloadKind, raw: Any) -> UserCreate | UserUpdate:
    """Validate ``raw`` against the schema for ``kind``."""
    schema = _SCHEMAS[kind]
    try:
        return schema.model_validate(raw)
    except ValidationError as exc:
        first = exc.errors()[0]
        field = str(first["loc"][0]) if first["loc"] else None
        raise PayloadValidationError(describe_error(first), field=field) from None


def describe_error(error: dict) -> str:
    """Phrase a single pydantic error dict as a client-facing message."""
    loc = error.get("loc") or ()
    kind = error["type"]
    if not loc:
        if kind == "no_fields":
            return error["msg"]
        return NOT_AN_OBJECT

    field = str(loc[0])
    ctx = error.get("ctx") or {}
    match kind:
        case "missing":
            return f'"{field}" is required'
        case "string_too_short":
            return (
                f'"{field}" length must be at least '
                f'{ctx.get("min_length")} characters long'
            )
        case "string_too_long":
            return (
                f'"{field}" length must be less than or equal to '
                f'{ctx.get("max_length")} characters long'
            )
        case "string_type":
            return f'"{field}" must be a string'
        case "extra_forbidden":
            return f'"{field}" is not allowed'
        case "value_error" if field == "email":
            return '"email" must be a valid email'
    return f'"{field}" is invalid'
