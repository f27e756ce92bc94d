"""User ORM — the users table.

Invariants:
    - id is an auto-incrementing integer primary key, immutable once assigned
    - email is unique across all rows (enforced by the database)
    - created_at is assigned by the database on insert and never updated

Design Decisions:
    - server_default over Python default for created_at: INSERT ... RETURNING
      reports the database clock, and rows inserted outside the app agree
    - CURRENT_TIMESTAMP literal: valid on both PostgreSQL and SQLite
"""

from datetime import datetime

from sqlalchemy import DateTime, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column

from users_api.db.base import Base


class User(Base):
    """A user record."""
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(
        String(255), nullable=False, unique=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email!r}>"
