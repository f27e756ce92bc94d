"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - Repositories report results as Outcome variants, never raise for
      not-found or conflict

Design Decisions:
    - Protocol over ABC: structural subtyping, the route tests substitute a
      recording fake without inheriting anything
    - Async in Protocol: implementations do IO, the pure validation and
      parsing that runs before them is never async
"""

from typing import Protocol, Sequence

from users_api.core.domain_types import UserId
from users_api.core.outcomes import Outcome
from users_api.schemas.user import UserCreate, UserRead, UserUpdate


class UserRepository(Protocol):
    """Contract for user persistence — implemented by infrastructure."""
    async def create(self, payload: UserCreate) -> Outcome[UserRead]: ...
    async def list_all(self) -> Outcome[Sequence[UserRead]]: ...
    async def get_by_id(self, user_id: UserId) -> Outcome[UserRead]: ...
    async def update(
        self, user_id: UserId, payload: UserUpdate,
    ) -> Outcome[UserRead]: ...
    async def delete(self, user_id: UserId) -> Outcome[UserRead]: ...
