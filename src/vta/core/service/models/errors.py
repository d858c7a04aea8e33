"""Service-layer exceptions."""

__all__ = ["ChatServiceError", "EmptyReplyError"]

DEFAULT_ERROR_MESSAGE = "An unexpected error occurred"


class ChatServiceError(Exception):
    """Answering a message failed; ``str(exc)`` is never empty."""

    def __init__(self, message: str = "") -> None:
        super().__init__(message or DEFAULT_ERROR_MESSAGE)


class EmptyReplyError(ChatServiceError):
    """The completion model returned no text."""

    def __init__(self) -> None:
        super().__init__("Empty or invalid reply from the language model")
