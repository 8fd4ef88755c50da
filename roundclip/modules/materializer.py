"""
Source Materializer

Превращает ссылку или загруженный файл в локальный файл внутри
рабочей папки задачи. Лимиты проверяются до тяжёлого скачивания.
"""
import asyncio
import logging
from pathlib import Path
from typing import Dict, Optional

from .base import (
    ContentReference,
    LinkReference,
    MaterializePolicy,
    Platform,
    UploadDescriptor,
    UploadReference,
)
from .classifier import extract_instagram_id
from .delivery import FileFetcher
from .exceptions import MaterializationFailure, PolicyViolation, ToolError
from .media_tools import BROWSER_USER_AGENT, MediaTools
from .workspace import JobWorkspace

logger = logging.getLogger(__name__)

# Формат, который просим у yt-dlp для каждой платформы
FORMAT_HINTS = {
    Platform.YOUTUBE: "mp4",
    Platform.INSTAGRAM: "best",
}


def check_upload(descriptor: UploadDescriptor, policy: MaterializePolicy) -> None:
    """
    Проверяет размер загруженного видео до регистрации задачи

    Raises:
        PolicyViolation: файл больше лимита
    """
    size = descriptor.file_size or 0
    if size > policy.max_upload_bytes:
        raise PolicyViolation(PolicyViolation.TOO_LARGE, policy.max_upload_bytes, size)


def request_headers(platform: Platform) -> Optional[Dict[str, str]]:
    # Instagram отклоняет клиента yt-dlp без браузерного User-Agent
    if platform is Platform.INSTAGRAM:
        return {"User-Agent": BROWSER_USER_AGENT}
    return None


class SourceMaterializer:
    """Скачивает исходное видео для задачи"""

    def __init__(
        self,
        tools: MediaTools,
        fetcher: Optional[FileFetcher] = None,
        policy: Optional[MaterializePolicy] = None,
    ):
        self.tools = tools
        self.fetcher = fetcher
        self.policy = policy or MaterializePolicy()

    async def materialize(self, reference: ContentReference, workspace: JobWorkspace) -> Path:
        """
        Получает локальный файл

        Args:
            reference: Ссылка или загрузка
            workspace: Рабочая папка задачи

        Returns:
            Путь к входному файлу

        Raises:
            UnrecognizedReference: не удалось извлечь ID Instagram
            PolicyViolation: видео слишком длинное
            MaterializationFailure: ошибка скачивания
        """
        if isinstance(reference, UploadReference):
            return await self._materialize_upload(reference, workspace)
        if isinstance(reference, LinkReference):
            return await self._materialize_link(reference, workspace)
        raise TypeError(f"Unsupported reference: {reference!r}")

    async def _materialize_upload(self, reference: UploadReference, workspace: JobWorkspace) -> Path:
        if self.fetcher is None:
            raise MaterializationFailure("upload", "no file fetcher configured")

        name = reference.file_unique_id or "video"
        input_path = workspace.input_path(f"upload-{name}.mp4")

        try:
            await self.fetcher.fetch(reference.file_id, input_path)
        except MaterializationFailure:
            raise
        except Exception as e:
            logger.error(f"Upload fetch failed: {e}", exc_info=True)
            workspace.release(input_path)
            raise MaterializationFailure("upload", str(e)) from e

        if not input_path.exists() or input_path.stat().st_size == 0:
            workspace.release(input_path)
            raise MaterializationFailure("upload", "file is missing after fetch")

        logger.info(f"📥 Upload saved: {input_path.name}")
        return input_path

    async def _materialize_link(self, reference: LinkReference, workspace: JobWorkspace) -> Path:
        platform = reference.platform
        headers = request_headers(platform)

        # Для Instagram ID берём из ссылки ещё до сетевых запросов
        content_id = None
        if platform is Platform.INSTAGRAM:
            content_id = reference.content_id or extract_instagram_id(reference.url)

        try:
            info = await asyncio.to_thread(self.tools.probe_remote, reference.url, headers)
        except ToolError as e:
            raise MaterializationFailure(platform.value, str(e)) from e

        # Канонический ID из пробы важнее ID из ссылки YouTube
        content_id = content_id or info.content_id or reference.content_id
        if not content_id:
            raise MaterializationFailure(platform.value, "video not found")

        # Длительность неизвестна (например, трансляция) - не можем ограничить работу
        if info.duration is None or info.duration > self.policy.max_duration_seconds:
            logger.warning(f"⛔ {platform.value}:{content_id} rejected, duration={info.duration}")
            raise PolicyViolation(PolicyViolation.TOO_LONG, self.policy.max_duration_seconds, info.duration)

        input_path = workspace.input_path(f"{platform.value}-{content_id}.mp4")
        logger.info(f"⬇️  Downloading {reference.url} -> {input_path.name} ({info.duration:.0f}s)")

        try:
            await asyncio.to_thread(
                self.tools.download,
                reference.url,
                input_path,
                FORMAT_HINTS[platform],
                headers,
            )
        except ToolError as e:
            workspace.release(input_path)
            raise MaterializationFailure(platform.value, str(e)) from e

        if not input_path.exists():
            raise MaterializationFailure(platform.value, "file is missing after download")

        logger.info(f"✅ Downloaded: {input_path.name} ({input_path.stat().st_size / 1024 / 1024:.1f} MB)")
        return input_path
