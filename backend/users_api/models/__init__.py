"""ORM Models — SQLAlchemy declarative models for all domain entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - User is the only entity

Design Decisions:
    - All models imported here so Base.metadata is complete before
      create_all() or Alembic autogenerate runs
"""

from users_api.models.user import User  # noqa: F401
