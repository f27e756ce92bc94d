"""User Schemas — Pydantic models with field-level validation for API boundaries.

Invariants:
    - UserCreate: name (3-255 chars, stripped) and email both required
    - UserUpdate: name/email optional, never null, at least one supplied
    - Unknown keys rejected on both write schemas
    - UserRead mirrors the users table row
    - Emails are format-checked but stored exactly as submitted

Design Decisions:
    - One schema per operation instead of one schema with runtime flags:
      required/optional is encoded in the type, not probed at runtime
    - model_fields_set drives the partial update column list
"""

from datetime import datetime
from typing import Annotated

from email_validator import validate_email
from pydantic import (
    AfterValidator, BaseModel, ConfigDict, StringConstraints,
    field_validator, model_validator,
)
from pydantic_core import PydanticCustomError

NAME_MIN_LENGTH = 3
NAME_MAX_LENGTH = 255

UserName = Annotated[
    str,
    StringConstraints(
        strip_whitespace=True,
        min_length=NAME_MIN_LENGTH,
        max_length=NAME_MAX_LENGTH,
    ),
]


def check_email_format(v: str) -> str:
    """Reject malformed addresses; accepted ones are returned untouched."""
    validate_email(v, check_deliverability=False)
    return v


UserEmail = Annotated[str, AfterValidator(check_email_format)]


class UserCreate(BaseModel):
    """Create payload — both fields required."""
    model_config = ConfigDict(extra="forbid")

    name: UserName
    email: UserEmail


class UserUpdate(BaseModel):
    """Update payload — any non-empty subset of the create fields."""
    model_config = ConfigDict(extra="forbid")

    name: UserName | None = None
    email: UserEmail | None = None

    @field_validator("name", "email", mode="before")
    @classmethod
    def reject_explicit_null(cls, v: object) -> object:
        if v is None:
            raise PydanticCustomError("string_type", "Input should be a valid string")
        return v

    @model_validator(mode="after")
    def require_one_field(self):
        if not self.model_fields_set:
            raise PydanticCustomError(
                "no_fields", 'At least one of "name" or "email" must be supplied',
            )
        return self

    def changes(self) -> dict[str, str]:
        """Only the columns the client supplied."""
        return self.model_dump(exclude_unset=True)


class UserRead(BaseModel):
    """User response — public-facing row data."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    created_at: datetime


class UserDeleted(BaseModel):
    """Delete confirmation — echoes the removed row."""
    message: str = "User deleted successfully"
    user: UserRead
