"""Per-request dependency factories for the db package."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from vta.infra.db_engine import get_session_factory

from .repository import InteractionRepository


def get_interaction_repository(
    sf: Annotated[
        async_sessionmaker[AsyncSession],
        Depends(get_session_factory),
    ],
) -> InteractionRepository:
    """Return the interaction repository bound to this app's engine."""
    return InteractionRepository(sf)
