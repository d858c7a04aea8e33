"""Conversions between stored messages and LangChain messages."""

import logging

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage

from .models import ROLE_ASSISTANT, ROLE_SYSTEM, ROLE_USER, StoredMessage

logger = logging.getLogger(__name__)


def stored_to_message(stored: StoredMessage) -> BaseMessage | None:
    """Convert one stored message, ``None`` for unknown roles."""
    role = stored.get("role")
    content = stored.get("content") or ""
    if role == ROLE_USER:
        return HumanMessage(content=content)
    if role == ROLE_ASSISTANT:
        return AIMessage(content=content)
    if role == ROLE_SYSTEM:
        return SystemMessage(content=content)
    logger.warning("Skipping stored message with unknown role %r", role)
    return None


def stored_to_messages(stored: list[StoredMessage]) -> list[BaseMessage]:
    return [m for s in stored if (m := stored_to_message(s)) is not None]


def message_role(message: BaseMessage) -> str:
    """Map a LangChain message type back to the stored role name."""
    if isinstance(message, HumanMessage):
        return ROLE_USER
    if isinstance(message, AIMessage):
        return ROLE_ASSISTANT
    return ROLE_SYSTEM
