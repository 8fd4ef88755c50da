"""
Базовые типы roundclip

Ссылки на контент, режимы выдачи, сегменты и события конвейера.
"""
import math
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional, Union


# ============================================================================
# ENUMS
# ============================================================================

class Platform(Enum):
    """Источник ссылки"""
    YOUTUBE = "youtube"
    INSTAGRAM = "instagram"


class FormatMode(Enum):
    """Формат, выбранный пользователем"""
    ROUND = "round"      # Видео-кружки (video note)
    REGULAR = "regular"  # Обычное видео без обработки


# ============================================================================
# REFERENCES - Что прислал пользователь
# ============================================================================

@dataclass(frozen=True)
class LinkReference:
    """Ссылка на YouTube / Instagram"""
    platform: Platform
    url: str
    content_id: Optional[str] = None


@dataclass(frozen=True)
class UploadReference:
    """Видео, загруженное в чат"""
    file_id: str
    file_unique_id: Optional[str] = None
    file_size: Optional[int] = None


ContentReference = Union[LinkReference, UploadReference]


@dataclass(frozen=True)
class UploadDescriptor:
    """Метаданные входящего видео от транспорта (до скачивания)"""
    file_id: Optional[str]
    file_unique_id: Optional[str] = None
    file_size: Optional[int] = None
    mime_type: Optional[str] = None


@dataclass(frozen=True)
class RemoteInfo:
    """Результат metadata-only пробы yt-dlp"""
    content_id: Optional[str]
    duration: Optional[float]
    title: Optional[str] = None
    raw: dict = field(default_factory=dict, compare=False, repr=False)


# ============================================================================
# SEGMENTS
# ============================================================================

SEGMENT_SECONDS = 60


@dataclass(frozen=True)
class Segment:
    """Один отрезок исходного видео (не длиннее SEGMENT_SECONDS)"""
    index: int
    start: float
    duration: float


def segment_count(duration: float, segment_seconds: int = SEGMENT_SECONDS) -> int:
    """ceil(D / 60); D должен быть конечным и положительным"""
    if duration is None or not math.isfinite(duration) or duration <= 0:
        raise ValueError(f"Invalid duration: {duration!r}")
    return math.ceil(duration / segment_seconds)


def plan_segments(duration: float, segment_seconds: int = SEGMENT_SECONDS) -> List[Segment]:
    """
    Разбивает длительность на сегменты

    Args:
        duration: Длительность видео в секундах
        segment_seconds: Максимальная длина одного сегмента

    Returns:
        Список сегментов в порядке возрастания индекса
    """
    count = segment_count(duration, segment_seconds)
    segments = []
    for i in range(count):
        start = i * segment_seconds
        segments.append(Segment(
            index=i,
            start=start,
            duration=min(segment_seconds, duration - start),
        ))
    return segments


# ============================================================================
# PIPELINE EVENTS
# ============================================================================

@dataclass(frozen=True)
class LengthNotice:
    """Видео длиннее одного сегмента, будет разделено"""
    duration_seconds: int
    segment_count: int


@dataclass(frozen=True)
class SegmentStarted:
    index: int
    segment_count: int


@dataclass(frozen=True)
class SegmentDelivered:
    index: int


@dataclass(frozen=True)
class SegmentFailed:
    index: int
    error: Exception


@dataclass(frozen=True)
class PipelineCompleted:
    segment_count: int


PipelineEvent = Union[LengthNotice, SegmentStarted, SegmentDelivered, SegmentFailed, PipelineCompleted]


# ============================================================================
# SETTINGS
# ============================================================================

@dataclass
class TranscodeSettings:
    """
    Параметры кодирования видео-кружков

    Ограничения video note в Telegram: квадрат, до 60 секунд.
    """
    size: int = 384
    segment_seconds: int = SEGMENT_SECONDS
    video_codec: str = "libx264"
    preset: str = "medium"
    crf: int = 23
    audio_codec: str = "aac"
    audio_bitrate: str = "128k"
    container: str = "mp4"

    @property
    def filter_chain(self) -> str:
        # Запятые внутри min() экранируются для парсера фильтров ffmpeg
        return (
            "crop=min(iw\\,ih):min(iw\\,ih),"
            f"scale={self.size}:{self.size}:force_original_aspect_ratio=increase,"
            f"crop={self.size}:{self.size}"
        )


@dataclass
class MaterializePolicy:
    """Лимиты до начала дорогой работы"""
    max_duration_seconds: int = 600
    max_upload_bytes: int = 50 * 1024 * 1024


@dataclass
class ToolTimeouts:
    """Таймауты внешних команд (секунды)"""
    probe: float = 60
    download: float = 600
    transcode: float = 600
