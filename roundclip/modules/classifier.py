"""
Reference Classifier

Определяет, что прислал пользователь: ссылку YouTube, ссылку Instagram,
загруженный файл или неподдерживаемый текст. Никаких сетевых запросов.
"""
import logging
import re
from typing import Optional

from .base import LinkReference, Platform, UploadDescriptor, UploadReference
from .exceptions import UnrecognizedReference

logger = logging.getLogger(__name__)

YOUTUBE_HOSTS = ("youtube.com", "youtu.be")
INSTAGRAM_HOSTS = ("instagram.com", "instagr.am", "ig.me")

# Порядок важен: берётся первое совпадение
INSTAGRAM_ID_PATTERNS = [
    re.compile(r"instagram\.com/reels?/([A-Za-z0-9_-]+)"),
    re.compile(r"instagram\.com/reel/([A-Za-z0-9_-]+)"),
    re.compile(r"instagram\.com/p/([A-Za-z0-9_-]+)"),
    re.compile(r"instagram\.com/tv/([A-Za-z0-9_-]+)"),
    re.compile(r"instagram\.com/videos?/([A-Za-z0-9_-]+)"),
    re.compile(r"instagr\.am/p/([A-Za-z0-9_-]+)"),
    re.compile(r"instagr\.am/tv/([A-Za-z0-9_-]+)"),
    re.compile(r"instagr\.am/reels?/([A-Za-z0-9_-]+)"),
    re.compile(r"instagram\.com/stories/[^/]+/([A-Za-z0-9_-]+)"),
]

YOUTUBE_ID_PATTERN = re.compile(
    r"(?:youtube\.com/(?:watch\?(?:.*&)?v=|shorts/|embed/|live/)|youtu\.be/)([A-Za-z0-9_-]+)"
)

# Минимальная длина "последнего сегмента пути", чтобы счесть его ID
MIN_FALLBACK_ID_LENGTH = 6


def is_youtube_url(text: str) -> bool:
    """Проверяет, похоже ли на ссылку YouTube"""
    lowered = text.lower()
    return any(host in lowered for host in YOUTUBE_HOSTS)


def is_instagram_url(text: str) -> bool:
    """Проверяет, похоже ли на ссылку Instagram (включая короткие домены)"""
    lowered = text.lower()
    return any(host in lowered for host in INSTAGRAM_HOSTS)


def extract_youtube_id(url: str) -> Optional[str]:
    """Извлекает video ID из ссылки YouTube, если получается"""
    match = YOUTUBE_ID_PATTERN.search(url)
    return match.group(1) if match else None


def extract_instagram_id(url: str) -> str:
    """
    Извлекает ID поста/рилса из ссылки Instagram

    Сначала пробует известные формы пути, затем берёт последний
    непустой сегмент пути, если он длиннее 5 символов. Fallback
    эвристический и может ошибаться на кривых ссылках.

    Args:
        url: Ссылка Instagram

    Returns:
        ID контента (в нижнем регистре)

    Raises:
        UnrecognizedReference: если ID не удалось извлечь
    """
    clean_url = url.strip().lower().split("?")[0]

    for pattern in INSTAGRAM_ID_PATTERNS:
        match = pattern.search(clean_url)
        if match and match.group(1):
            return match.group(1)

    parts = [part for part in clean_url.split("/") if part]
    if parts and len(parts[-1]) >= MIN_FALLBACK_ID_LENGTH:
        return parts[-1]

    logger.warning(f"Could not extract Instagram ID from URL: {url}")
    raise UnrecognizedReference(url)


def classify(text: str) -> Optional[LinkReference]:
    """
    Классифицирует входящий текст

    Returns:
        LinkReference или None для неподдерживаемого текста
    """
    if not text:
        return None

    url = text.strip()

    if is_youtube_url(url):
        return LinkReference(Platform.YOUTUBE, url, extract_youtube_id(url))

    if is_instagram_url(url):
        try:
            content_id = extract_instagram_id(url)
        except UnrecognizedReference:
            # ID проверяется ещё раз при скачивании, там и будет ошибка
            content_id = None
        return LinkReference(Platform.INSTAGRAM, url, content_id)

    return None


def classify_upload(descriptor: UploadDescriptor) -> UploadReference:
    """Превращает описание загруженного видео в ссылку на контент"""
    if not descriptor.file_id:
        raise UnrecognizedReference("<upload without file_id>")
    return UploadReference(
        file_id=descriptor.file_id,
        file_unique_id=descriptor.file_unique_id,
        file_size=descriptor.file_size,
    )
