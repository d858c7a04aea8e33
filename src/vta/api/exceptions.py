"""API exceptions and the JSON error handlers that render them.

Every failure of the chat routes is answered with an ``ErrorResponse``
body: client mistakes with 400/404/409, everything else with 500.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from vta.core.service.models import ChatServiceError

from .models import ErrorResponse

logger = logging.getLogger(__name__)

MESSAGE_REQUIRED = "Message is required"
UNEXPECTED_ERROR = "An unexpected error occurred"


class InvalidChatRequest(Exception):
    """The request is well-formed JSON but not acceptable (e.g. blank message)."""


class InteractionNotFound(Exception):
    """No stored interaction has the given id."""


class AlreadyRated(Exception):
    """The interaction already carries a rating."""


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message or UNEXPECTED_ERROR).model_dump(),
    )


def _describe_validation_error(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "Invalid request: " + "; ".join(parts) if parts else "Invalid request"


def install_exception_handlers(app: FastAPI) -> None:
    """Register the JSON error handlers on ``app``.

    Must run before the application starts serving.
    """

    @app.exception_handler(InvalidChatRequest)
    async def handle_invalid_request(
        request: Request, exc: InvalidChatRequest
    ) -> JSONResponse:
        return _error(400, str(exc))

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return _error(400, _describe_validation_error(exc))

    @app.exception_handler(InteractionNotFound)
    async def handle_not_found(
        request: Request, exc: InteractionNotFound
    ) -> JSONResponse:
        return _error(404, str(exc))

    @app.exception_handler(AlreadyRated)
    async def handle_already_rated(request: Request, exc: AlreadyRated) -> JSONResponse:
        return _error(409, str(exc))

    @app.exception_handler(ChatServiceError)
    async def handle_chat_service_error(
        request: Request, exc: ChatServiceError
    ) -> JSONResponse:
        return _error(500, str(exc))

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            "Unhandled error on %s %s",
            request.method,
            request.url.path,
            exc_info=exc,
        )
        return _error(500, str(exc))
