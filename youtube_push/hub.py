"""
Async PubSubHubbub client.

Only the subscribe call is needed: the hub verifies the subscription later by
calling our webhook, so a successful response here merely means "accepted".
"""

from __future__ import annotations

import asyncio
import logging

import aiohttp

logger = logging.getLogger(__name__)

HUB_URL = "https://pubsubhubbub.appspot.com/subscribe"
TOPIC_URL = "https://www.youtube.com/xml/feeds/videos.xml?channel_id="
DEFAULT_TIMEOUT = aiohttp.ClientTimeout(total=10)


class HubError(RuntimeError):
    """Raised when the hub rejects a request or cannot be reached."""

    def __init__(self, status: int, message: str) -> None:
        super().__init__(f"Hub error {status}: {message}" if status else f"Hub unreachable: {message}")
        self.status = status
        self.message = message


def topic_url(topic: str) -> str:
    return f"{TOPIC_URL}{topic}"


class HubClient:
    """Thin async wrapper around the hub subscribe endpoint."""

    def __init__(
        self,
        callback_url: str,
        *,
        hub_url: str = HUB_URL,
        session: aiohttp.ClientSession | None = None,
        timeout: aiohttp.ClientTimeout = DEFAULT_TIMEOUT,
    ) -> None:
        self.callback_url = callback_url
        self.hub_url = hub_url
        self._timeout = timeout
        self._own_session = session is None
        self._session = session

    async def close(self) -> None:
        if self._own_session and self._session is not None and not self._session.closed:
            await self._session.close()

    async def __aenter__(self) -> "HubClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def subscribe(self, topic: str) -> None:
        form = {
            "hub.mode": "subscribe",
            "hub.topic": topic_url(topic),
            "hub.callback": self.callback_url,
        }
        logger.debug("Hub POST %s form=%s", self.hub_url, form)
        try:
            async with self._get_session().post(self.hub_url, data=form) as resp:
                if not 200 <= resp.status < 300:
                    body = await resp.text(errors="replace")
                    raise HubError(resp.status, body.strip() or (resp.reason or "request failed"))
        except aiohttp.ClientError as exc:
            raise HubError(0, str(exc) or exc.__class__.__name__) from exc
        except asyncio.TimeoutError as exc:
            raise HubError(0, "request timed out") from exc

    def _get_session(self) -> aiohttp.ClientSession:
        # Created lazily so the session binds to the running loop.
        if self._session is None:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
        return self._session


__all__ = ["DEFAULT_TIMEOUT", "HUB_URL", "TOPIC_URL", "HubClient", "HubError", "topic_url"]
