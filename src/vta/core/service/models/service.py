"""Abstract chat service base class."""

from abc import ABC, abstractmethod

from .context import ChatContext, ChatTurn

__all__ = ["ChatService"]


class ChatService(ABC):
    """Answers one student message at a time."""

    chat_service_name: str = ""

    @abstractmethod
    async def reply(self, ctx: ChatContext) -> ChatTurn:
        """Answer ``ctx.message`` and persist the exchange.

        Raises:
            ChatServiceError: on any failure of a downstream call.
        """
