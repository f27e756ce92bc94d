"""Persistence Outcomes — explicit result variants returned by repositories.

Invariants:
    - Every repository call returns exactly one of Found | Missing | Conflict | Failed
    - Failed always carries the original storage exception, unmodified
    - unwrap() is the single place where a variant becomes an exception

Design Decisions:
    - Result variants over exceptions for not-found/conflict: the repository
      never decides HTTP semantics, it only reports what happened
    - unwrap() raises typed UsersApiError subclasses so the FastAPI error
      handlers stay the single terminal translator
"""

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

from users_api.core.errors import (
    ConflictError, ErrorContext, InternalError, NotFoundError,
)

T = TypeVar("T")


@dataclass(frozen=True)
class Found(Generic[T]):
    """Statement succeeded and produced a value."""
    value: T


@dataclass(frozen=True)
class Missing:
    """By-id statement matched no row."""


@dataclass(frozen=True)
class Conflict:
    """Statement violated a uniqueness constraint."""
    message: str = "Email already exists"


@dataclass(frozen=True)
class Failed:
    """Any other storage failure."""
    error: Exception
    operation: str = "query"


Outcome = Union[Found[T], Missing, Conflict, Failed]


def unwrap(outcome: Outcome[T], user_id: int | None = None) -> T:
    """Return the value of a Found outcome, raise the matching error otherwise."""
    context = ErrorContext(user_id=user_id)
    match outcome:
        case Found(value=value):
            return value
        case Missing():
            raise NotFoundError("User", user_id, context)
        case Conflict(message=message):
            raise ConflictError(message, context)
        case Failed(error=error, operation=operation):
            raise InternalError(operation, context) from error
    raise TypeError(f"Unknown outcome: {outcome!r}")
