"""
Telegram adapters

Реализации интерфейсов ядра (DeliverySink, Notifier, FileFetcher) поверх aiogram.
"""
import logging
from pathlib import Path
from typing import Any

from aiogram import Bot
from aiogram.exceptions import TelegramAPIError
from aiogram.types import BufferedInputFile, FSInputFile

from roundclip.bot.i18n import t
from roundclip.bot.keyboards import format_keyboard
from roundclip.modules.delivery import Artifact, ArtifactKind, DeliverySink, FileFetcher, Notifier
from roundclip.modules.exceptions import DeliveryFailure

logger = logging.getLogger(__name__)

VIDEO_NOTE_LENGTH = 384


class TelegramDeliverySink(DeliverySink):
    """Отправляет обычные видео и видео-кружки"""

    def __init__(self, bot: Bot, note_length: int = VIDEO_NOTE_LENGTH):
        self.bot = bot
        self.note_length = note_length

    async def deliver(self, artifact: Artifact, chat_ref: Any) -> None:
        try:
            if artifact.kind is ArtifactKind.FULL_VIDEO:
                await self.bot.send_video(
                    chat_id=chat_ref,
                    video=FSInputFile(artifact.path),
                    supports_streaming=True,
                )
            else:
                await self.bot.send_video_note(
                    chat_id=chat_ref,
                    video_note=BufferedInputFile(artifact.data, filename="note.mp4"),
                    length=self.note_length,
                )
        except TelegramAPIError as e:
            raise DeliveryFailure(f"{artifact.kind.value}: {e}") from e


class TelegramNotifier(Notifier):
    """Сообщения пользователю на его языке"""

    def __init__(self, bot: Bot, chat_id: int, lang: str):
        self.bot = bot
        self.chat_id = chat_id
        self.lang = lang

    async def notify(self, key: str, *args: Any) -> None:
        try:
            await self.bot.send_message(self.chat_id, t(key, self.lang, *args))
        except TelegramAPIError as e:
            # Уведомления не критичны для задачи
            logger.warning(f"Failed to send notice '{key}' to {self.chat_id}: {e}")

    async def ask_format(self, round_data: str, regular_data: str) -> None:
        await self.bot.send_message(
            self.chat_id,
            t("choosing_format", self.lang),
            reply_markup=format_keyboard(self.lang, round_data, regular_data),
        )


class TelegramFileFetcher(FileFetcher):
    """Скачивает загруженные в чат файлы через Bot API"""

    def __init__(self, bot: Bot, timeout: int = 600):
        self.bot = bot
        self.timeout = timeout

    async def fetch(self, file_id: str, destination: Path) -> None:
        file = await self.bot.get_file(file_id)
        if not file.file_path:
            raise FileNotFoundError(f"Telegram returned no file_path for {file_id}")
        await self.bot.download_file(file.file_path, destination=destination, timeout=self.timeout)
