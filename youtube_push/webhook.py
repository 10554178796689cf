"""aiohttp server terminating the hub webhook."""

from __future__ import annotations

import logging

from aiohttp import web

from .channel import EventSender
from .config import ConfigStore
from .events import Denied, PublicationReceived, Subscribed
from .feed import PublicationError, parse_publication
from .hub import TOPIC_URL

logger = logging.getLogger(__name__)

WEBHOOK_PATH = "/yt"
MAX_BODY_SIZE = 32 * 1024


class WebhookServer:
    def __init__(
        self,
        store: ConfigStore,
        sender: EventSender,
        *,
        path: str = WEBHOOK_PATH,
    ) -> None:
        self.store = store
        self.sender = sender
        self.path = path
        self._runner: web.AppRunner | None = None
        self._site: web.TCPSite | None = None

    def create_app(self) -> web.Application:
        app = web.Application(client_max_size=MAX_BODY_SIZE)
        app.router.add_get(self.path, self._handle_get)
        app.router.add_post(self.path, self._handle_post)
        return app

    async def start(self, host: str, port: int) -> None:
        if self._runner:
            return
        app = self.create_app()
        self._runner = web.AppRunner(app)
        await self._runner.setup()
        self._site = web.TCPSite(self._runner, host, port)
        await self._site.start()
        logger.info("Webhook server listening on %s:%s%s", host, port, self.path)

    async def stop(self) -> None:
        if self._site:
            await self._site.stop()
            self._site = None
        if self._runner:
            await self._runner.cleanup()
            self._runner = None
        self.sender.close()
        logger.info("Webhook server stopped")

    async def _handle_get(self, request: web.Request) -> web.StreamResponse:
        logger.debug("HTTP GET %s", request.rel_url)
        query = request.rel_url.query
        mode = query.get("hub.mode")
        topic_url = query.get("hub.topic")
        if mode is None or topic_url is None or not topic_url.startswith(TOPIC_URL):
            return web.Response(status=400)
        topic = topic_url[len(TOPIC_URL):]
        if topic not in self.store.current.subscriptions:
            return web.Response(status=404)

        if mode == "denied":
            self.sender.try_send(Denied(topic, query.get("hub.reason")))
            return web.Response(status=200)
        if mode == "subscribe":
            challenge = query.get("hub.challenge")
            lease_seconds = _parse_lease(query.get("hub.lease_seconds"))
            if challenge is None or lease_seconds is None:
                return web.Response(status=400)
            self.sender.try_send(Subscribed(topic, lease_seconds))
            return web.Response(status=200, text=challenge)
        return web.Response(status=400)

    async def _handle_post(self, request: web.Request) -> web.StreamResponse:
        logger.debug("HTTP POST %s", request.rel_url)
        body = await request.read()
        try:
            publication = parse_publication(body.decode("utf-8"))
        except (UnicodeDecodeError, PublicationError) as exc:
            logger.debug("Rejected notification: %s", exc)
            return web.Response(status=400)
        self.sender.try_send(PublicationReceived(publication))
        return web.Response(status=200)


def _parse_lease(raw: str | None) -> int | None:
    if raw is None or not (raw.isascii() and raw.isdigit()):
        return None
    return int(raw)


async def start_webhook(
    store: ConfigStore,
    sender: EventSender,
    *,
    host: str,
    port: int,
    path: str = WEBHOOK_PATH,
) -> WebhookServer:
    server = WebhookServer(store, sender, path=path)
    await server.start(host, port)
    return server


__all__ = ["MAX_BODY_SIZE", "WEBHOOK_PATH", "WebhookServer", "start_webhook"]
