import asyncio
import logging
import sys

import uvloop

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    stream=sys.stdout
)
logger = logging.getLogger(__name__)

from aiogram import Bot, Dispatcher
from aiogram.enums import ParseMode
from aiogram.client.default import DefaultBotProperties
from aiogram.fsm.storage.memory import MemoryStorage

from roundclip.bot.config import BotConfig
from roundclip.bot.routers import base, content
from roundclip.bot.services.language import LanguageService
from roundclip.bot.services.telegram import TelegramDeliverySink, TelegramFileFetcher
from roundclip.modules import (
    PendingSelectionStore,
    SegmentPipeline,
    SourceMaterializer,
    SubprocessMediaTools,
    VideoNoteFlow,
)


def build_flow(config: BotConfig, bot: Bot) -> VideoNoteFlow:
    """Собирает автомат обработки из конфига"""
    tools = SubprocessMediaTools(
        ytdlp_binary=config.ytdlp_binary,
        ffmpeg_binary=config.ffmpeg_binary,
        ffprobe_binary=config.ffprobe_binary,
        timeouts=config.timeouts,
    )

    def make_store(namespace: str) -> PendingSelectionStore:
        return PendingSelectionStore(
            namespace=namespace,
            ttl_seconds=config.pending_ttl_seconds,
            max_entries=config.pending_max_entries,
        )

    return VideoNoteFlow(
        link_store=make_store("link"),
        upload_store=make_store("file"),
        materializer=SourceMaterializer(
            tools,
            fetcher=TelegramFileFetcher(bot, timeout=int(config.download_timeout)),
            policy=config.policy,
        ),
        pipeline=SegmentPipeline(tools),
        sink=TelegramDeliverySink(bot),
        work_root=config.work_dir,
    )


async def main():
    # Load config
    config = BotConfig()
    logging.getLogger().setLevel(config.log_level.upper())

    # Initialize Bot
    bot = Bot(
        token=config.telegram_bot_token,
        default=DefaultBotProperties(parse_mode=ParseMode.HTML)
    )

    # Initialize Dispatcher
    dp = Dispatcher(storage=MemoryStorage())

    # Register routers (commands first, free text last)
    dp.include_router(base.router)
    dp.include_router(content.router)

    # Inject services into workflow data
    dp["config"] = config
    dp["flow"] = build_flow(config, bot)
    dp["languages"] = LanguageService(config.default_language)

    # Delete webhook and start polling
    logger.info(f"🚀 Starting RoundClip Bot (work dir: {config.work_dir})...")
    await bot.delete_webhook(drop_pending_updates=True)
    await dp.start_polling(bot)


def run():
    # Install uvloop policy
    if sys.platform != "win32":
        uvloop.install()

    try:
        asyncio.run(main())
    except (KeyboardInterrupt, SystemExit):
        logger.info("🛑 Bot stopped!")


if __name__ == "__main__":
    run()
