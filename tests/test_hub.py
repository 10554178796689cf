"""
Tests for youtube_push.hub

A local aiohttp server stands in for the hub.
"""
import asyncio

import aiohttp
import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from youtube_push.hub import HubClient, HubError, topic_url


def _hub_app(status: int = 202, delay: float = 0.0, received: list | None = None) -> web.Application:
    async def handle(request: web.Request) -> web.Response:
        if received is not None:
            received.append(dict(await request.post()))
        if delay:
            await asyncio.sleep(delay)
        return web.Response(status=status, text="" if status < 400 else "bad topic")

    app = web.Application()
    app.router.add_post("/subscribe", handle)
    return app


async def test_subscribe_posts_form():
    received: list = []
    async with TestServer(_hub_app(received=received)) as server:
        async with HubClient("https://bot.example.org/yt", hub_url=str(server.make_url("/subscribe"))) as hub:
            await hub.subscribe("UCabc")

    assert received == [
        {
            "hub.mode": "subscribe",
            "hub.topic": "https://www.youtube.com/xml/feeds/videos.xml?channel_id=UCabc",
            "hub.callback": "https://bot.example.org/yt",
        }
    ]


async def test_error_status_raises_hub_error():
    async with TestServer(_hub_app(status=400)) as server:
        async with HubClient("http://cb/yt", hub_url=str(server.make_url("/subscribe"))) as hub:
            with pytest.raises(HubError) as excinfo:
                await hub.subscribe("UCabc")

    assert excinfo.value.status == 400
    assert "bad topic" in str(excinfo.value)


async def test_error_status_with_undecodable_body():
    async def handle(request: web.Request) -> web.Response:
        return web.Response(status=500, body=b"\xff\xfe broken", content_type="text/plain", charset="utf-8")

    app = web.Application()
    app.router.add_post("/subscribe", handle)
    async with TestServer(app) as server:
        async with HubClient("http://cb/yt", hub_url=str(server.make_url("/subscribe"))) as hub:
            with pytest.raises(HubError) as excinfo:
                await hub.subscribe("UCabc")

    assert excinfo.value.status == 500
    assert "broken" in str(excinfo.value)


async def test_timeout_raises_hub_error():
    timeout = aiohttp.ClientTimeout(total=0.05)
    async with TestServer(_hub_app(delay=1.0)) as server:
        async with HubClient("http://cb/yt", hub_url=str(server.make_url("/subscribe")), timeout=timeout) as hub:
            with pytest.raises(HubError) as excinfo:
                await hub.subscribe("UCabc")

    assert excinfo.value.status == 0


async def test_connection_error_raises_hub_error():
    async with TestServer(_hub_app()) as server:
        url = str(server.make_url("/subscribe"))
    # server is closed now
    async with HubClient("http://cb/yt", hub_url=url) as hub:
        with pytest.raises(HubError) as excinfo:
            await hub.subscribe("UCabc")

    assert excinfo.value.status == 0


async def test_external_session_is_not_closed():
    async with aiohttp.ClientSession() as session:
        hub = HubClient("http://cb/yt", session=session)
        await hub.close()
        assert not session.closed


def test_topic_url():
    assert topic_url("UCabc") == "https://www.youtube.com/xml/feeds/videos.xml?channel_id=UCabc"
