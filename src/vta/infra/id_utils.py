"""Identifier helpers.

Stored interactions get a prefixed public id (``turn_a8Kx3nQ9mP2r``)
that the client echoes back when rating a reply.  Sessions are ad hoc
strings; when the client sends none, the server uses the current UTC
time in ISO-8601 form, which is what the browser client always did.
"""

import secrets
import string
from datetime import datetime, timezone

_ALPHABET = string.ascii_letters + string.digits
_DEFAULT_LENGTH = 12

INTERACTION_ID_PREFIX = "turn"


def generate_id(prefix: str, length: int = _DEFAULT_LENGTH) -> str:
    """Return ``"{prefix}_{random}"`` with *length* alphanumeric characters."""
    suffix = "".join(secrets.choice(_ALPHABET) for _ in range(length))
    return f"{prefix}_{suffix}"


def new_interaction_id() -> str:
    return generate_id(INTERACTION_ID_PREFIX)


def new_session_id() -> str:
    """Timestamp-style session id, e.g. ``2024-03-01T12:00:00.000Z``."""
    now = datetime.now(timezone.utc)
    return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"
