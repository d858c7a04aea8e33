"""Chat context and result, the per-request data of the chat service."""

from dataclasses import dataclass, field

from langchain_core.messages import BaseMessage

__all__ = ["ChatContext", "ChatTurn"]


@dataclass
class ChatContext:
    """What the student sent: the message and the session it belongs to."""

    message: str
    session_id: str


@dataclass
class ChatTurn:
    """Outcome of one answered message.

    ``history`` is the conversation as sent to the model, without the
    retrieved-context message: system prompt, replayed turns and the
    current user message.
    """

    reply: str
    session_id: str
    interaction_id: str
    history: list[BaseMessage] = field(default_factory=list)
