"""API client for the VTA chat routes."""

import logging

import httpx

from .config import CLIConfig

logger = logging.getLogger(__name__)


class ChatAPIError(Exception):
    """A request failed; the message is ready to show to the user."""


class ChatAPIClient:
    """Client for the chat, history and rating endpoints."""

    def __init__(self, config: CLIConfig, client: httpx.AsyncClient | None = None):
        self.config = config
        self.client = client or httpx.AsyncClient(timeout=config.timeout)

    async def chat(self, message: str, session_id: str | None = None) -> dict:
        """Send a message; returns ``{reply, sessionId, messageId, history}``."""
        payload: dict[str, str] = {"message": message}
        if session_id:
            payload["sessionId"] = session_id
        logger.debug("POST %s payload=%s", self.config.chat_url, payload)
        return await self._request("POST", self.config.chat_url, json=payload)

    async def history(self, session_id: str | None = None) -> list[dict]:
        """Recent exchanges as ``[{sender, text, id}]``; empty on any failure."""
        params = {"sessionId": session_id} if session_id else None
        try:
            data = await self._request("GET", self.config.history_url, params=params)
        except ChatAPIError as e:
            logger.debug("History unavailable: %s", e)
            return []
        return data.get("history") or []

    async def rate(self, message_id: str, rating: str) -> dict:
        return await self._request(
            "POST",
            self.config.rating_url,
            json={"messageId": message_id, "rating": rating},
        )

    async def _request(self, method: str, url: str, **kwargs) -> dict:
        try:
            response = await self.client.request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            raise ChatAPIError("Request timed out.") from e
        except httpx.ConnectError as e:
            raise ChatAPIError(f"Connection error: {e}") from e
        except httpx.HTTPError as e:
            raise ChatAPIError(f"Request failed: {e}") from e

        logger.debug("Response status: %s", response.status_code)
        try:
            data = response.json()
        except ValueError:
            data = {}

        if response.status_code != 200:
            detail = data.get("error") if isinstance(data, dict) else None
            raise ChatAPIError(
                f"HTTP {response.status_code}: {detail or response.text}"
            )
        return data

    async def close(self):
        """Close the HTTP client."""
        await self.client.aclose()
