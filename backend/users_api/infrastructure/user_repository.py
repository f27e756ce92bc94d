"""User Repository — parameterized statements against the users table.

Invariants:
    - One statement per operation; user input only ever travels as bound parameters
    - update() sets exactly the columns present in the payload, never the full row
    - Unique violations become Conflict; every other SQLAlchemyError becomes
      Failed carrying the original exception; nothing is retried
    - Write failures roll the session back before returning

Design Decisions:
    - INSERT/UPDATE/DELETE ... RETURNING: one round trip yields the row to echo
      and doubles as the existence check (no row → Missing)
    - Unique violation detected by driver code (SQLSTATE 23505 for asyncpg,
      SQLITE_CONSTRAINT_UNIQUE for sqlite) rather than message parsing; the
      message check remains only for sqlite builds that lack error names
"""

import logging
from typing import Sequence

from sqlalchemy import delete, insert, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from users_api.core.domain_types import UserId
from users_api.core.outcomes import Conflict, Failed, Found, Missing, Outcome
from users_api.models.user import User
from users_api.schemas.user import UserCreate, UserRead, UserUpdate

logger = logging.getLogger(__name__)

PG_UNIQUE_VIOLATION = "23505"
SQLITE_UNIQUE_VIOLATION = "SQLITE_CONSTRAINT_UNIQUE"


def is_unique_violation(exc: IntegrityError) -> bool:
    """True when the driver reports a UNIQUE constraint failure."""
    orig = exc.orig
    for candidate in (orig, getattr(orig, "__cause__", None)):
        if candidate is None:
            continue
        code = getattr(candidate, "sqlstate", None) or getattr(candidate, "pgcode", None)
        if code == PG_UNIQUE_VIOLATION:
            return True
        if getattr(candidate, "sqlite_errorname", None) == SQLITE_UNIQUE_VIOLATION:
            return True
    return "UNIQUE constraint failed" in str(orig)


class SqlUserRepository:
    """SQLAlchemy implementation of the UserRepository protocol."""

    def __init__(self, db: AsyncSession):
        self._db = db

    async def create(self, payload: UserCreate) -> Outcome[UserRead]:
        stmt = (
            insert(User)
            .values(name=payload.name, email=payload.email)
            .returning(User)
        )
        return await self._write(stmt, "insert")

    async def list_all(self) -> Outcome[Sequence[UserRead]]:
        try:
            users = (await self._db.scalars(select(User))).all()
        except SQLAlchemyError as e:
            logger.error(f"User list failed: {e}")
            return Failed(e, "select")
        return Found([UserRead.model_validate(u) for u in users])

    async def get_by_id(self, user_id: UserId) -> Outcome[UserRead]:
        try:
            user = await self._db.scalar(select(User).where(User.id == user_id))
        except SQLAlchemyError as e:
            logger.error(f"User lookup failed: {e}", extra={"user_id": user_id})
            return Failed(e, "select")
        if user is None:
            return Missing()
        return Found(UserRead.model_validate(user))

    async def update(
        self, user_id: UserId, payload: UserUpdate,
    ) -> Outcome[UserRead]:
        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(**payload.changes())
            .returning(User)
        )
        return await self._write(stmt, "update", user_id)

    async def delete(self, user_id: UserId) -> Outcome[UserRead]:
        stmt = delete(User).where(User.id == user_id).returning(User)
        return await self._write(stmt, "delete", user_id)

    async def _write(
        self, stmt, operation: str, user_id: UserId | None = None,
    ) -> Outcome[UserRead]:
        """Execute one DML ... RETURNING statement and commit it."""
        try:
            user = (await self._db.scalars(stmt)).one_or_none()
            row = UserRead.model_validate(user) if user is not None else None
            await self._db.commit()
        except IntegrityError as e:
            await self._db.rollback()
            if is_unique_violation(e):
                logger.info(
                    f"User {operation} rejected: email already exists",
                    extra={"user_id": user_id},
                )
                return Conflict()
            logger.error(f"User {operation} integrity error: {e}")
            return Failed(e, operation)
        except SQLAlchemyError as e:
            await self._db.rollback()
            logger.error(f"User {operation} failed: {e}", extra={"user_id": user_id})
            return Failed(e, operation)
        if row is None:
            return Missing()
        return Found(row)
