"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - UserId wraps a positive int within the INTEGER column range
    - All valid states encoded as Enums — no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders
"""

from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

UserId = NewType("UserId", int)

# Upper bound of a PostgreSQL INTEGER / SERIAL column
MAX_USER_ID = 2_147_483_647


# ─── Enums ───────────────────────────────────────────────────────

class PayloadKind(str, Enum):
    """Which write schema a payload is validated against."""
    CREATE = "create"
    UPDATE = "update"


class RunMode(str, Enum):
    """Process run mode — production hides error detail and diagnostics."""
    DEVELOPMENT = "development"
    PRODUCTION = "production"
