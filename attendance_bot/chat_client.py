"""HTTP client posting messages to a Google Chat incoming webhook."""

from __future__ import annotations

from typing import Any, Dict

import httpx


class GoogleChatError(RuntimeError):
    """Raised when Google Chat rejects or cannot receive a message."""

    def __init__(self, status_code: int | None, detail: str) -> None:
        super().__init__(f"Google Chat webhook error ({status_code}): {detail}")
        self.status_code = status_code
        self.detail = detail


class GoogleChatClient:
    """Async wrapper around a single space webhook URL."""

    def __init__(
        self,
        webhook_url: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._webhook_url = webhook_url
        self._client = httpx.AsyncClient(
            headers={"Content-Type": "application/json; charset=UTF-8"},
            timeout=timeout,
            transport=transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def send_message(self, message: Dict[str, Any]) -> None:
        try:
            response = await self._client.post(self._webhook_url, json=message)
        except httpx.HTTPError as exc:
            raise GoogleChatError(None, str(exc)) from exc
        if response.is_error:
            raise GoogleChatError(response.status_code, response.text)


__all__ = ["GoogleChatClient", "GoogleChatError"]
