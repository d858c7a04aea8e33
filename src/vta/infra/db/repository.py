"""Async repository over the ``chat_interactions`` table."""

import logging
from typing import Literal

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from vta.infra.id_utils import new_interaction_id
from vta.infra.telemetry import (
    ATTR_HISTORY_MESSAGE_COUNT,
    ATTR_HISTORY_SESSION_ID,
    SPAN_HISTORY_LOAD,
    SPAN_INTERACTION_APPEND,
    tracer,
)

from .models import (
    ROLE_ASSISTANT,
    ROLE_USER,
    ChatInteraction,
    Rating,
    StoredMessage,
    utcnow,
)

logger = logging.getLogger(__name__)

RATE_RATED: Literal["rated"] = "rated"
RATE_ALREADY_RATED: Literal["already_rated"] = "already_rated"
RATE_NOT_FOUND: Literal["not_found"] = "not_found"

RateResult = Literal["rated", "already_rated", "not_found"]


class InteractionRepository:
    """Append, list and rate stored interactions.

    Every call opens its own session from the injected factory.
    Failures propagate to the caller, which decides whether they are
    fatal (chat) or downgraded (history listing).
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def session_messages(
        self, session_id: str, max_turns: int
    ) -> list[StoredMessage]:
        """Messages of the last *max_turns* interactions of a session, oldest first."""
        with tracer.start_as_current_span(SPAN_HISTORY_LOAD) as span:
            span.set_attribute(ATTR_HISTORY_SESSION_ID, session_id)
            rows = await self._latest(max_turns, session_id)
            messages = [m for row in rows for m in row.flatten()]
            span.set_attribute(ATTR_HISTORY_MESSAGE_COUNT, len(messages))
            logger.debug(
                "Loaded %d messages for session %s", len(messages), session_id
            )
            return messages

    async def recent(
        self, limit: int, session_id: str | None = None
    ) -> list[ChatInteraction]:
        """The latest *limit* interactions in chronological order."""
        return await self._latest(limit, session_id)

    async def append(self, session_id: str, user_message: str, reply: str) -> str:
        """Store one user/assistant exchange and return its interaction id."""
        now = utcnow()
        timestamp = now.isoformat()
        interaction_id = new_interaction_id()
        interaction = ChatInteraction(
            interaction_id=interaction_id,
            session_id=session_id,
            role=ROLE_ASSISTANT,
            content=reply,
            messages=[
                StoredMessage(role=ROLE_USER, content=user_message, timestamp=timestamp),
                StoredMessage(role=ROLE_ASSISTANT, content=reply, timestamp=timestamp),
            ],
            created_at=now,
        )
        with tracer.start_as_current_span(SPAN_INTERACTION_APPEND):
            async with self._session_factory() as session:
                session.add(interaction)
                await session.commit()
        logger.info(
            "Stored interaction %s for session %s", interaction_id, session_id
        )
        return interaction_id

    async def rate(self, interaction_id: str, rating: Rating) -> RateResult:
        """Set the rating of an interaction unless it already has one."""
        stmt = (
            update(ChatInteraction)
            .where(
                ChatInteraction.interaction_id == interaction_id,
                ChatInteraction.rating.is_(None),
            )
            .values(rating=rating, rated_at=utcnow())
        )
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            await session.commit()
            if result.rowcount:
                return RATE_RATED
            exists = (
                await session.execute(
                    select(ChatInteraction.id).where(
                        ChatInteraction.interaction_id == interaction_id
                    )
                )
            ).scalar_one_or_none()
        return RATE_ALREADY_RATED if exists is not None else RATE_NOT_FOUND

    async def _latest(
        self, limit: int, session_id: str | None
    ) -> list[ChatInteraction]:
        stmt = select(ChatInteraction)
        if session_id is not None:
            stmt = stmt.where(ChatInteraction.session_id == session_id)
        stmt = stmt.order_by(
            ChatInteraction.created_at.desc(), ChatInteraction.id.desc()
        ).limit(limit)
        async with self._session_factory() as session:
            rows = (await session.execute(stmt)).scalars().all()
        return list(reversed(rows))
