"""Tests for youtube_push.outbox"""
import asyncio
from unittest.mock import AsyncMock

from youtube_push.outbox import Outbox


async def test_dispatch_tracks_entry_until_done():
    outbox = Outbox()
    release = asyncio.Event()

    async def send():
        await release.wait()

    entry = outbox.dispatch("announce", "Hello", send)
    assert [e.id for e in outbox.in_flight] == [entry.id]
    assert entry.kind == "announce"

    release.set()
    await outbox.drain()

    assert len(outbox) == 0
    assert outbox.sent == 1
    assert outbox.failed == 0


async def test_failures_are_counted_not_raised():
    outbox = Outbox()
    send = AsyncMock(side_effect=RuntimeError("boom"))

    outbox.dispatch("log", "notice", send)
    await outbox.drain()

    send.assert_awaited_once()
    assert outbox.failed == 1
    assert len(outbox) == 0


async def test_drain_timeout_cancels_leftovers():
    outbox = Outbox()

    async def never():
        await asyncio.sleep(3600)

    entry = outbox.dispatch("announce", "stuck", never)
    await outbox.drain(timeout=0.01)

    assert entry.task.cancelled()
    assert len(outbox) == 0


async def test_drain_empty_outbox():
    outbox = Outbox()
    await outbox.drain()
    assert outbox.sent == 0
