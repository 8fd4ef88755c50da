"""
Segmentation & Transcode Pipeline

Режет входное видео на отрезки по 60 секунд, кодирует каждый в
квадратный видео-кружок 384x384 и сразу отдаёт на отправку.
Отрезки обрабатываются строго по очереди.
"""
import asyncio
import logging
import math
from pathlib import Path
from typing import AsyncIterator, Awaitable, Callable, Optional

from .base import (
    LengthNotice,
    PipelineCompleted,
    PipelineEvent,
    SegmentDelivered,
    SegmentFailed,
    SegmentStarted,
    TranscodeSettings,
    plan_segments,
)
from .exceptions import DeliveryFailure, ProbeFailure, ToolError, TranscodeFailure
from .media_tools import MediaTools
from .workspace import JobWorkspace

logger = logging.getLogger(__name__)

DeliverFn = Callable[[bytes], Awaitable[None]]


class SegmentPipeline:
    """Конвейер нарезки в видео-кружки"""

    def __init__(self, tools: MediaTools, settings: Optional[TranscodeSettings] = None):
        self.tools = tools
        self.settings = settings or TranscodeSettings()

    async def probe(self, input_path: Path) -> float:
        """Длительность входного файла; ошибка пробы фатальна для задачи"""
        try:
            duration = await asyncio.to_thread(self.tools.probe_duration, input_path)
        except ToolError as e:
            raise ProbeFailure(input_path, str(e)) from e

        if duration is None or not math.isfinite(duration) or duration <= 0:
            raise ProbeFailure(input_path, f"invalid duration {duration!r}")

        return duration

    async def run(
        self,
        input_path: Path,
        workspace: JobWorkspace,
        deliver: DeliverFn,
    ) -> AsyncIterator[PipelineEvent]:
        """
        Обрабатывает видео и выдаёт события по мере готовности

        Args:
            input_path: Входной файл
            workspace: Рабочая папка задачи (сюда пишутся сегменты)
            deliver: Отправка одного кружка, при ошибке бросает DeliveryFailure

        Yields:
            LengthNotice, SegmentStarted, SegmentDelivered, SegmentFailed, PipelineCompleted

        Raises:
            ProbeFailure: не удалось определить длительность
            TranscodeFailure: ffmpeg не смог закодировать сегмент
        """
        duration = await self.probe(input_path)
        segments = plan_segments(duration, self.settings.segment_seconds)
        total = len(segments)

        logger.info(f"🎬 {input_path.name}: {duration:.1f}s -> {total} segment(s)")

        if total > 1:
            yield LengthNotice(math.floor(duration), total)

        for segment in segments:
            yield SegmentStarted(segment.index, total)

            output_path = workspace.segment_path(segment.index, self.settings.container)
            try:
                await asyncio.to_thread(
                    self.tools.transcode,
                    input_path,
                    output_path,
                    segment,
                    self.settings,
                )
                if not output_path.exists():
                    raise ToolError("ffmpeg", 0, "output file is missing")
                data = output_path.read_bytes()
            except ToolError as e:
                raise TranscodeFailure(segment.index, str(e)) from e
            finally:
                # Файл сегмента временный при любом исходе отправки
                workspace.release(output_path)

            try:
                await deliver(data)
            except DeliveryFailure as e:
                logger.error(f"Send video note error on part {segment.index + 1}/{total}: {e}")
                yield SegmentFailed(segment.index, e)
                return

            logger.info(f"⭕️ Part {segment.index + 1}/{total} delivered")
            yield SegmentDelivered(segment.index)

        yield PipelineCompleted(total)
