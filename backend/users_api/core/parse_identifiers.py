"""Identifier Parsing — coerce route parameters into domain identifiers.

Invariants:
    - Only decimal digits are accepted ("+1", "1.0", " 1" are rejected)
    - Result is within 1..MAX_USER_ID
    - Digit strings longer than MAX_USER_ID are rejected before int() runs
    - Pure: no IO, raises PayloadValidationError on bad input
"""

import re

from users_api.core.domain_types import MAX_USER_ID, UserId
from users_api.core.errors import PayloadValidationError

_DIGITS = re.compile(r"[0-9]+")
_MAX_DIGITS = len(str(MAX_USER_ID))


def parse_user_id(raw: str) -> UserId:
    """Parse the ``id`` path parameter into a positive UserId."""
    if not _DIGITS.fullmatch(raw):
        raise PayloadValidationError('"id" must be a positive integer', field="id")
    significant = raw.lstrip("0")
    if len(significant) > _MAX_DIGITS:
        raise PayloadValidationError(
            f'"id" must be less than or equal to {MAX_USER_ID}', field="id",
        )
    value = int(significant or "0")
    if value < 1:
        raise PayloadValidationError('"id" must be a positive integer', field="id")
    if value > MAX_USER_ID:
        raise PayloadValidationError(
            f'"id" must be less than or equal to {MAX_USER_ID}', field="id",
        )
    return UserId(value)
