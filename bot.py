import asyncio
import logging
import os
import signal

from aiogram import Bot
from dotenv import load_dotenv

from services import BotMessageSender
from youtube_push import (
    WEBHOOK_PATH,
    Announcer,
    ConfigStore,
    ConfigWatcher,
    EventChannel,
    HubClient,
    Reconsider,
    YoutubeConfig,
    external_url,
    start_webhook,
)

load_dotenv()
BOT_TOKEN = os.getenv("BOT_TOKEN")
HTTP_EXT_HOST = os.getenv("HTTP_EXT_HOST")
if not BOT_TOKEN: raise RuntimeError("BOT_TOKEN is not set")
if not HTTP_EXT_HOST: raise RuntimeError("HTTP_EXT_HOST is not set")

HTTP_HOST = os.getenv("HTTP_HOST", "0.0.0.0")
HTTP_PORT = int(os.getenv("HTTP_PORT", "80") or "80")
HTTP_EXT_PORT = int(os.getenv("HTTP_EXT_PORT", "0") or "0") or None
HTTP_EXT_SECURE = os.getenv("HTTP_EXT_SECURE", "").lower() in {"1", "true", "yes", "on"}
MODULE_CONFIG_PATH = os.getenv("MODULE_CONFIG_PATH", "config/youtube.json")
CONFIG_POLL_INTERVAL = float(os.getenv("CONFIG_POLL_INTERVAL", "10") or "10")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logging.getLogger("aiogram").setLevel(logging.WARNING)
logger = logging.getLogger(__name__)


async def main():
    callback_url = external_url(
        HTTP_EXT_HOST,
        port=HTTP_PORT,
        ext_port=HTTP_EXT_PORT,
        secure=HTTP_EXT_SECURE,
    ) + WEBHOOK_PATH
    logger.warning("Starting..")
    logger.info("Hub callback URL: %s", callback_url)

    bot = Bot(BOT_TOKEN)
    hub = HubClient(callback_url)
    store = ConfigStore(YoutubeConfig())
    channel = EventChannel()

    config_sender = channel.sender("config")

    def _on_config(config: YoutubeConfig) -> None:
        # Signal the announcer to update subscriptions
        if config.enabled:
            config_sender.try_send(Reconsider())

    store.add_listener(_on_config)
    watcher = ConfigWatcher(store, MODULE_CONFIG_PATH, poll_interval=CONFIG_POLL_INTERVAL)
    watcher.check()

    announcer = Announcer(store, channel, hub, BotMessageSender(bot))
    announcer.start()
    webhook = await start_webhook(store, channel.sender("webhook"), host=HTTP_HOST, port=HTTP_PORT)
    watcher.start()

    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_event.set)
        except NotImplementedError:  # pragma: no cover - windows
            pass

    try:
        await stop_event.wait()
    finally:
        logger.info("Shutting down")
        await webhook.stop()
        await watcher.stop()
        config_sender.close()
        await announcer.join()
        await hub.close()
        await bot.session.close()
        logger.info("Done")


if __name__ == "__main__":
    asyncio.run(main())
