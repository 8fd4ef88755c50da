"""
Delivery

Интерфейсы, через которые ядро общается с транспортом:
- DeliverySink отправляет готовые видео,
- Notifier показывает пользователю сообщения и кнопки выбора,
- FileFetcher скачивает загруженные пользователем файлы.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Optional


class ArtifactKind(Enum):
    FULL_VIDEO = "full_video"  # Обычное видео-вложение
    ROUND_NOTE = "round_note"  # Видео-кружок


@dataclass(frozen=True)
class Artifact:
    """Готовый результат для отправки"""
    kind: ArtifactKind
    path: Optional[Path] = None
    data: Optional[bytes] = None

    @classmethod
    def full_video(cls, path: Path) -> "Artifact":
        return cls(ArtifactKind.FULL_VIDEO, path=path)

    @classmethod
    def round_note(cls, data: bytes) -> "Artifact":
        return cls(ArtifactKind.ROUND_NOTE, data=data)


class DeliverySink(ABC):
    """Отправка одного результата в чат"""

    @abstractmethod
    async def deliver(self, artifact: Artifact, chat_ref: Any) -> None:
        """
        Raises:
            DeliveryFailure: транспорт отклонил отправку
        """


class Notifier(ABC):
    """Сообщения пользователю (ключи переводов, текст рендерит транспорт)"""

    @abstractmethod
    async def notify(self, key: str, *args: Any) -> None:
        ...

    @abstractmethod
    async def ask_format(self, round_data: str, regular_data: str) -> None:
        """Показывает выбор: видео-кружок или обычное видео"""


class FileFetcher(ABC):
    """Скачивание загруженного в чат файла"""

    @abstractmethod
    async def fetch(self, file_id: str, destination: Path) -> None:
        ...
