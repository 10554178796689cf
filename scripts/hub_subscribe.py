"""
Manually ask the hub to (re)subscribe our webhook to a YouTube channel.

The bot does this on its own; the script is for checking hub connectivity and
the callback URL by hand. The hub verifies the request asynchronously by
calling the webhook, so the bot must be running to complete the subscription.

Usage:
    python -m scripts.hub_subscribe UCxxxxxxxxxxxxxxxxxxxxxx
    python -m scripts.hub_subscribe UCxxxx --callback https://example.org/yt
"""

from __future__ import annotations

import argparse
import asyncio
import os

from dotenv import load_dotenv

from youtube_push import WEBHOOK_PATH, HubClient, HubError, external_url
from youtube_push.hub import HUB_URL, topic_url


def resolve_callback(args: argparse.Namespace) -> str:
    if args.callback:
        return args.callback
    host = os.getenv("HTTP_EXT_HOST")
    if not host:
        raise SystemExit("Set HTTP_EXT_HOST in .env or pass --callback.")
    port = int(os.getenv("HTTP_PORT", "80") or "80")
    ext_port = int(os.getenv("HTTP_EXT_PORT", "0") or "0") or None
    secure = os.getenv("HTTP_EXT_SECURE", "").lower() in {"1", "true", "yes", "on"}
    return external_url(host, port=port, ext_port=ext_port, secure=secure) + WEBHOOK_PATH


async def main_async(args: argparse.Namespace) -> int:
    load_dotenv()
    callback = resolve_callback(args)
    print(f"Hub:      {args.hub_url}")
    print(f"Topic:    {topic_url(args.topic)}")
    print(f"Callback: {callback}")
    async with HubClient(callback, hub_url=args.hub_url) as hub:
        try:
            await hub.subscribe(args.topic)
        except HubError as exc:
            print(f"Subscribe request failed: {exc}")
            return 1
    print("Subscribe request accepted; waiting for the hub to verify the callback.")
    return 0


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Send a PubSubHubbub subscribe request.")
    parser.add_argument("topic", help="YouTube channel id")
    parser.add_argument("--callback", help="Override the webhook callback URL")
    parser.add_argument("--hub_url", default=HUB_URL, help="Override the hub subscribe endpoint")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    raise SystemExit(asyncio.run(main_async(args)))


if __name__ == "__main__":
    main()
