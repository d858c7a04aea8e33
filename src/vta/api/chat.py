"""Chat, history and rating endpoints."""

import logging

from fastapi import APIRouter, Query

from vta.core.service.metrics import HISTORY_LOAD_FAILURES_TOTAL, RATINGS_TOTAL
from vta.core.service.models import ChatContext
from vta.infra.db import RATE_ALREADY_RATED, RATE_NOT_FOUND
from vta.infra.id_utils import new_session_id
from vta.infra.logging import bind_session_id

from .deps import ChatConfigDep, ChatServiceDep, InteractionRepositoryDep
from .exceptions import (
    MESSAGE_REQUIRED,
    AlreadyRated,
    InteractionNotFound,
    InvalidChatRequest,
)
from .models import (
    ChatRequest,
    ChatResponse,
    ErrorResponse,
    HistoryResponse,
    RatingRequest,
    RatingResponse,
    to_history_entries,
    to_prompt_messages,
)

logger = logging.getLogger(__name__)

HISTORY_LIMIT_MAX = 200

router = APIRouter(prefix="/api/v1", tags=["chat"])


@router.post(
    "/chat",
    response_model=ChatResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def chat(
    chat_request: ChatRequest,
    chat_service: ChatServiceDep,
) -> ChatResponse:
    """Answer one student message with retrieved course material.

    The exchange is stored under ``sessionId``; the returned
    ``messageId`` identifies it for rating.
    """
    if not chat_request.message.strip():
        raise InvalidChatRequest(MESSAGE_REQUIRED)

    session_id = chat_request.session_id or new_session_id()
    bind_session_id(session_id)
    turn = await chat_service.reply(
        ChatContext(message=chat_request.message, session_id=session_id)
    )
    return ChatResponse(
        reply=turn.reply,
        session_id=turn.session_id,
        message_id=turn.interaction_id,
        history=to_prompt_messages(turn.history),
    )


def _history_limit(raw: str | None, default: int) -> int:
    """Parse ``?limit=``; anything unusable means *default*, clamped to range."""
    try:
        limit = int(raw) if raw else default
    except ValueError:
        limit = default
    if limit < 1:
        limit = default
    return min(limit, HISTORY_LIMIT_MAX)


@router.get("/chat/history", response_model=HistoryResponse)
async def chat_history(
    repository: InteractionRepositoryDep,
    chat_config: ChatConfigDep,
    session_id: str | None = Query(default=None, alias="sessionId"),
    limit: str | None = Query(default=None),
) -> HistoryResponse:
    """Most recent stored exchanges, oldest first.

    Never fails: a broken store or a bad ``limit`` yields an empty or
    default-sized history so the client can still start chatting.
    """
    session_id = session_id or None
    if session_id:
        bind_session_id(session_id)
    try:
        interactions = await repository.recent(
            _history_limit(limit, chat_config.history_display_limit),
            session_id=session_id,
        )
        return HistoryResponse(history=to_history_entries(interactions))
    except Exception:
        logger.warning("Error fetching chat history", exc_info=True)
        HISTORY_LOAD_FAILURES_TOTAL.inc()
        return HistoryResponse(history=[])


@router.post(
    "/chat/rating",
    response_model=RatingResponse,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
async def rate_message(
    rating_request: RatingRequest,
    repository: InteractionRepositoryDep,
) -> RatingResponse:
    """Record whether a reply was helpful. Each reply can be rated once."""
    result = await repository.rate(rating_request.message_id, rating_request.rating)
    RATINGS_TOTAL.labels(rating=rating_request.rating, result=result).inc()

    if result == RATE_NOT_FOUND:
        raise InteractionNotFound(f"Message {rating_request.message_id} not found")
    if result == RATE_ALREADY_RATED:
        raise AlreadyRated(f"Message {rating_request.message_id} is already rated")

    logger.info(
        "Message %s rated %s", rating_request.message_id, rating_request.rating
    )
    return RatingResponse(
        message_id=rating_request.message_id, rating=rating_request.rating
    )
