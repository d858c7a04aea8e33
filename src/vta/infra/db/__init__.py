"""Async PostgreSQL interaction store (ORM models, repository, deps)."""

from .converters import message_role, stored_to_messages
from .deps import get_interaction_repository
from .models import (RATING_HELPFUL, RATING_UNHELPFUL, ROLE_ASSISTANT,
                     ROLE_SYSTEM, ROLE_USER, Base, ChatInteraction, Rating,
                     Role, StoredMessage)
from .repository import (RATE_ALREADY_RATED, RATE_NOT_FOUND, RATE_RATED,
                         InteractionRepository, RateResult)

from vta.infra.db_engine import build_db, get_session_factory

__all__ = [
    "build_db",
    "Base",
    "ChatInteraction",
    "get_interaction_repository",
    "get_session_factory",
    "InteractionRepository",
    "message_role",
    "RATE_ALREADY_RATED",
    "RATE_NOT_FOUND",
    "RATE_RATED",
    "RateResult",
    "Rating",
    "RATING_HELPFUL",
    "RATING_UNHELPFUL",
    "Role",
    "ROLE_ASSISTANT",
    "ROLE_SYSTEM",
    "ROLE_USER",
    "StoredMessage",
    "stored_to_messages",
]
