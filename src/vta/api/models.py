"""Pydantic models for the chat API.

Field names are snake_case in Python; the JSON wire format keeps the
camelCase keys the browser client has always sent (``sessionId``,
``messageId``).
"""

from typing import Literal

from langchain_core.messages import BaseMessage
from pydantic import AliasChoices, BaseModel, Field

from vta.infra.db import ROLE_USER, ChatInteraction, Rating, message_role

SENDER_USER = "user"
SENDER_BOT = "bot"


class ChatRequest(BaseModel):
    """Request model for the chat endpoint."""

    message: str = Field(
        default="",
        description="Student question",
    )
    session_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("sessionId", "session_id"),
        description="Client session token; a timestamp is assigned when absent",
    )


class PromptMessage(BaseModel):
    """A message of the conversation sent to the model."""

    role: Literal["user", "assistant", "system"]
    content: str


class ChatResponse(BaseModel):
    reply: str = Field(description="Assistant answer")
    session_id: str = Field(serialization_alias="sessionId")
    message_id: str = Field(
        serialization_alias="messageId",
        description="Id of the stored interaction, used for rating",
    )
    history: list[PromptMessage] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    """Body of every 4xx/5xx answer of the chat routes."""

    error: str = Field(description="Human-readable error message")
    reply: None = None
    history: list[PromptMessage] = Field(default_factory=list)


class HistoryEntry(BaseModel):
    sender: Literal["user", "bot"]
    text: str
    id: str | None = Field(
        default=None, description="Interaction id on bot messages, for rating"
    )


class HistoryResponse(BaseModel):
    history: list[HistoryEntry] = Field(default_factory=list)


class RatingRequest(BaseModel):
    message_id: str = Field(
        validation_alias=AliasChoices("messageId", "message_id"),
        min_length=1,
    )
    rating: Rating


class RatingResponse(BaseModel):
    success: bool = True
    message_id: str = Field(serialization_alias="messageId")
    rating: Rating


def to_prompt_messages(messages: list[BaseMessage]) -> list[PromptMessage]:
    return [
        PromptMessage(
            role=message_role(m),  # type: ignore[arg-type]
            content=m.content if isinstance(m.content, str) else str(m.content),
        )
        for m in messages
    ]


def to_history_entries(interactions: list[ChatInteraction]) -> list[HistoryEntry]:
    """Flatten stored interactions into display entries, oldest first."""
    entries: list[HistoryEntry] = []
    for interaction in interactions:
        for stored in interaction.flatten():
            if stored["role"] == ROLE_USER:
                entries.append(HistoryEntry(sender=SENDER_USER, text=stored["content"]))
            else:
                entries.append(
                    HistoryEntry(
                        sender=SENDER_BOT,
                        text=stored["content"],
                        id=interaction.interaction_id,
                    )
                )
    return entries
