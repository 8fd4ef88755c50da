"""
Исключения roundclip

Все ошибки конвейера наследуются от RoundClipError, чтобы граница
шага (VideoNoteFlow) могла поймать их одним блоком и превратить
в одно сообщение пользователю.
"""
from typing import Optional


class RoundClipError(Exception):
    """Базовая ошибка конвейера"""


class UnrecognizedReference(RoundClipError):
    """Ссылка не распознана (не удалось извлечь ID)"""

    def __init__(self, url: str):
        self.url = url
        super().__init__(f"Unrecognized reference format: {url}")


class PolicyViolation(RoundClipError):
    """Видео нарушает лимиты (слишком длинное / слишком большое)"""

    TOO_LONG = "too_long"
    TOO_LARGE = "too_large"

    def __init__(self, reason: str, limit: Optional[float] = None, actual: Optional[float] = None):
        self.reason = reason
        self.limit = limit
        self.actual = actual
        super().__init__(f"Policy violation: {reason} (actual={actual}, limit={limit})")


class MaterializationFailure(RoundClipError):
    """Не удалось получить локальный файл из ссылки или загрузки"""

    def __init__(self, platform: str, message: str = "download failed"):
        self.platform = platform
        self.message = message
        super().__init__(f"[{platform}] {message}")

    @property
    def not_found(self) -> bool:
        return self.message == "video not found"


class ProbeFailure(MaterializationFailure):
    """ffprobe не смог определить длительность"""

    def __init__(self, path, message: str = "probe failed"):
        self.path = path
        super().__init__("probe", f"{message}: {path}")


class TranscodeFailure(RoundClipError):
    """ffmpeg завершился с ошибкой"""

    def __init__(self, segment_index: int, message: str = ""):
        self.segment_index = segment_index
        super().__init__(f"Transcode failed on segment {segment_index}: {message[:200]}")


class DeliveryFailure(RoundClipError):
    """Транспорт отклонил отправку"""


class StaleSelection(RoundClipError):
    """Токен уже использован, устарел или подделан"""

    def __init__(self, token: str):
        self.token = token
        super().__init__(f"Selection not found: {token}")


class ToolError(RoundClipError):
    """Внешняя команда (yt-dlp / ffprobe / ffmpeg) завершилась неудачно"""

    def __init__(self, tool: str, returncode: Optional[int] = None, stderr: str = "", timed_out: bool = False):
        self.tool = tool
        self.returncode = returncode
        self.stderr = stderr
        self.timed_out = timed_out
        if timed_out:
            detail = "timed out"
        else:
            detail = f"exit code {returncode}: {stderr.strip()[:200]}"
        super().__init__(f"{tool} {detail}")
