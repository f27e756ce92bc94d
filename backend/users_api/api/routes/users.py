"""User Routes — CRUD handlers for /api/user.

Invariants:
    - Write bodies pass validate_user_payload() before the repository is touched
    - The id path parameter is parsed by parse_user_id(); bad ids never reach storage
    - Exactly one repository call per request; outcomes unwrapped with unwrap()
    - Handlers never catch errors — the global error handlers translate them

Design Decisions:
    - Body read as raw JSON (Any) instead of a typed parameter: the validation
      layer owns the schema and its single-message error contract
    - Repository injected through get_user_repository so tests can substitute it
"""

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from users_api.core.domain_types import PayloadKind
from users_api.core.outcomes import unwrap
from users_api.core.parse_identifiers import parse_user_id
from users_api.core.repository_protocols import UserRepository
from users_api.core.validate_payload import validate_user_payload
from users_api.infrastructure.database import get_db
from users_api.infrastructure.user_repository import SqlUserRepository
from users_api.schemas.user import UserDeleted, UserRead

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/user", tags=["users"])


def get_user_repository(db: AsyncSession = Depends(get_db)) -> UserRepository:
    """FastAPI dependency for the user repository."""
    return SqlUserRepository(db)


@router.post(
    "", response_model=UserRead, status_code=status.HTTP_201_CREATED,
)
async def create_user(
    raw: Any = Body(None),
    repo: UserRepository = Depends(get_user_repository),
):
    """Create a user."""
    payload = validate_user_payload(PayloadKind.CREATE, raw)
    user = unwrap(await repo.create(payload))
    logger.info(f"User {user.id} created", extra={"user_id": user.id})
    return user


@router.get("", response_model=list[UserRead])
async def list_users(repo: UserRepository = Depends(get_user_repository)):
    """List all users (database order)."""
    return unwrap(await repo.list_all())


@router.get("/{user_id}", response_model=UserRead)
async def get_user(
    user_id: str, repo: UserRepository = Depends(get_user_repository),
):
    """Get one user by id."""
    uid = parse_user_id(user_id)
    return unwrap(await repo.get_by_id(uid), uid)


@router.put("/{user_id}", response_model=UserRead)
async def update_user(
    user_id: str,
    raw: Any = Body(None),
    repo: UserRepository = Depends(get_user_repository),
):
    """Update the supplied fields of a user."""
    uid = parse_user_id(user_id)
    payload = validate_user_payload(PayloadKind.UPDATE, raw)
    user = unwrap(await repo.update(uid, payload), uid)
    logger.info(
        f"User {uid} updated: {sorted(payload.model_fields_set)}",
        extra={"user_id": uid},
    )
    return user


@router.delete("/{user_id}", response_model=UserDeleted)
async def delete_user(
    user_id: str, repo: UserRepository = Depends(get_user_repository),
):
    """Hard-delete a user and echo the removed row."""
    uid = parse_user_id(user_id)
    user = unwrap(await repo.delete(uid), uid)
    logger.info(f"User {uid} deleted", extra={"user_id": uid})
    return UserDeleted(user=user)
