"""User Repository — parameterized statements and outcome mapping.

Tests cover:
    - create/get/list/update/delete return Found with UserRead rows
    - unique email violation → Conflict (create and update)
    - by-id operations on absent rows → Missing
    - partial update touches only supplied columns
    - driver failures → Failed carrying the original exception
    - is_unique_violation recognizes PostgreSQL and SQLite codes
"""

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from users_api.core.domain_types import UserId
from users_api.core.outcomes import Conflict, Failed, Found, Missing
from users_api.infrastructure.user_repository import (
    SqlUserRepository, is_unique_violation,
)
from users_api.schemas.user import UserCreate, UserRead, UserUpdate


@pytest.fixture
def repo(test_db):
    return SqlUserRepository(test_db)


async def _seed(repo, name="Ann", email="ann@x.com") -> UserRead:
    outcome = await repo.create(UserCreate(name=name, email=email))
    assert isinstance(outcome, Found)
    return outcome.value


async def test_create_returns_row_with_id_and_timestamp(repo):
    user = await _seed(repo)
    assert user.id > 0
    assert user.name == "Ann"
    assert user.email == "ann@x.com"
    assert user.created_at is not None


async def test_create_duplicate_email_is_conflict(repo):
    await _seed(repo)

    outcome = await repo.create(UserCreate(name="Other", email="ann@x.com"))

    assert outcome == Conflict()


async def test_session_usable_after_conflict(repo):
    await _seed(repo)
    await repo.create(UserCreate(name="Other", email="ann@x.com"))

    user = await _seed(repo, "Bob", "bob@x.com")

    assert user.email == "bob@x.com"


async def test_list_all_empty(repo):
    assert await repo.list_all() == Found([])


async def test_list_all_returns_every_row(repo):
    await _seed(repo, "Ann", "ann@x.com")
    await _seed(repo, "Bob", "bob@x.com")

    outcome = await repo.list_all()

    assert sorted(u.name for u in outcome.value) == ["Ann", "Bob"]


async def test_get_by_id(repo):
    user = await _seed(repo)
    assert await repo.get_by_id(UserId(user.id)) == Found(user)


async def test_get_by_id_missing(repo):
    assert await repo.get_by_id(UserId(404)) == Missing()


async def test_update_only_supplied_column(repo):
    user = await _seed(repo)

    outcome = await repo.update(UserId(user.id), UserUpdate(name="Annie"))

    assert outcome.value.name == "Annie"
    assert outcome.value.email == "ann@x.com"
    assert outcome.value.created_at == user.created_at


async def test_update_missing_row(repo):
    assert await repo.update(UserId(404), UserUpdate(name="Nobody")) == Missing()


async def test_update_to_taken_email_is_conflict(repo):
    await _seed(repo, "Ann", "ann@x.com")
    bob = await _seed(repo, "Bob", "bob@x.com")

    outcome = await repo.update(UserId(bob.id), UserUpdate(email="ann@x.com"))

    assert outcome == Conflict()
    assert (await repo.get_by_id(UserId(bob.id))).value.email == "bob@x.com"


async def test_delete_returns_removed_row_then_missing(repo):
    user = await _seed(repo)

    assert await repo.delete(UserId(user.id)) == Found(user)
    assert await repo.delete(UserId(user.id)) == Missing()
    assert await repo.get_by_id(UserId(user.id)) == Missing()


async def test_driver_failure_is_failed_with_original(repo, test_db, monkeypatch):
    error = OperationalError("SELECT", {}, Exception("connection lost"))

    async def broken(*args, **kwargs):
        raise error

    monkeypatch.setattr(test_db, "scalars", broken)
    monkeypatch.setattr(test_db, "scalar", broken)

    assert await repo.list_all() == Failed(error, "select")
    assert await repo.get_by_id(UserId(1)) == Failed(error, "select")
    assert await repo.create(UserCreate(name="Ann", email="ann@x.com")) == Failed(error, "insert")
    assert await repo.delete(UserId(1)) == Failed(error, "delete")


# ─── is_unique_violation ─────────────────────────────────────────

class _DriverError(Exception):
    def __init__(self, message, sqlstate=None):
        super().__init__(message)
        self.sqlstate = sqlstate


def _integrity(orig) -> IntegrityError:
    return IntegrityError("INSERT INTO users ...", {}, orig)


def test_postgres_unique_violation_detected():
    orig = _DriverError("duplicate key value violates unique constraint", "23505")
    assert is_unique_violation(_integrity(orig))


def test_postgres_unique_violation_detected_on_cause():
    orig = _DriverError("wrapped")
    orig.__cause__ = _DriverError("duplicate key", "23505")
    assert is_unique_violation(_integrity(orig))


def test_other_integrity_errors_are_not_conflicts():
    orig = _DriverError('null value in column "name" violates not-null constraint', "23502")
    assert not is_unique_violation(_integrity(orig))


def test_sqlite_unique_message_detected():
    orig = _DriverError("UNIQUE constraint failed: users.email")
    assert is_unique_violation(_integrity(orig))
