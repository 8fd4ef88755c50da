"""
Переводы сообщений бота

Поддерживаются узбекский (uz), русский (ru) и английский (en).
"""
from typing import Any, Dict, List

LANGUAGES: List[str] = ["uz", "ru", "en"]

LANGUAGE_NAMES = {
    "uz": "🇺🇿 O'zbekcha",
    "ru": "🇷🇺 Русский",
    "en": "🇬🇧 English",
}

TRANSLATIONS: Dict[str, Dict[str, str]] = {
    "welcome": {
        "uz": "Salom! 👋\n\nMen video yuklab olish va konvertatsiya qilishim mumkin.\n\n"
              "Shunchaki menga yuboring:\n- YouTube video havolasi\n- Instagram post/reels havolasi\n"
              "- Yoki shunchaki video fayl\n\nHavolani yuborgandan so'ng, siz tanlashingiz mumkin:\n"
              "⭕️ Doira video - video eslatmalar uchun\n📹 Oddiy video - oddiy yuklab olish\n\n"
              "🌐 Tilni o'zgartirish: /language",
        "ru": "Привет! 👋\n\nЯ могу скачивать и конвертировать видео.\n\n"
              "Просто отправь мне:\n- Ссылку на YouTube видео\n- Ссылку на Instagram пост/reels\n"
              "- Или просто видео файл\n\nПосле отправки ссылки ты сможешь выбрать:\n"
              "⭕️ Круглое видео - для видео-заметок\n📹 Обычное видео - обычное скачивание\n\n"
              "🌐 Сменить язык: /language",
        "en": "Hello! 👋\n\nI can download and convert videos.\n\n"
              "Just send me:\n- YouTube video link\n- Instagram post/reels link\n"
              "- Or just a video file\n\nAfter sending the link, you can choose:\n"
              "⭕️ Round video - for video notes\n📹 Regular video - regular download\n\n"
              "🌐 Change language: /language",
    },
    "invalid_url": {
        "uz": "Yuborish:\n- YouTube video havolasi\n- Instagram post/reels havolasi\n- Yoki shunchaki video fayl",
        "ru": "Отправьте:\n- Ссылку на YouTube видео\n- Ссылку на Instagram пост/reels\n- Или просто видео файл",
        "en": "Send:\n- YouTube video link\n- Instagram post/reels link\n- Or just a video file",
    },
    "processing_video": {
        "uz": "Video qayta ishlanmoqda...",
        "ru": "Обработка видео...",
        "en": "Processing video...",
    },
    "downloading_from_youtube": {
        "uz": "⏳ YouTube dan video yuklab olinmoqda...",
        "ru": "⏳ Загрузка видео с YouTube...",
        "en": "⏳ Downloading video from YouTube...",
    },
    "downloading_from_instagram": {
        "uz": "⏳ Instagram dan video yuklab olinmoqda...",
        "ru": "⏳ Загрузка видео из Instagram...",
        "en": "⏳ Downloading video from Instagram...",
    },
    "downloading_video": {
        "uz": "⏳ Video yuklab olinmoqda...",
        "ru": "⏳ Загрузка видео...",
        "en": "⏳ Downloading video...",
    },
    "video_not_found": {
        "uz": "❌ Video topilmadi",
        "ru": "❌ Не удалось найти видео",
        "en": "❌ Video not found",
    },
    "video_too_long": {
        "uz": "Video juda uzun. Maksimal davomiyligi: 10 daqiqa",
        "ru": "Видео слишком длинное. Максимальная длительность: 10 минут",
        "en": "Video is too long. Maximum duration: 10 minutes",
    },
    "video_too_large": {
        "uz": "Video juda katta. Maksimal hajmi: 50MB",
        "ru": "Видео слишком большое. Максимальный размер: 50MB",
        "en": "Video is too large. Maximum size: 50MB",
    },
    "error_processing_video": {
        "uz": "❌ Video qayta ishlashda xatolik",
        "ru": "❌ Ошибка при обработке видео",
        "en": "❌ Error processing video",
    },
    "error_processing_youtube": {
        "uz": "❌ YouTube videoni qayta ishlashda xatolik",
        "ru": "❌ Ошибка при обработке YouTube видео",
        "en": "❌ Error processing YouTube video",
    },
    "instagram_download_failed": {
        "uz": "❌ Videoni yuklab olishda xatolik. Tekshiring:\n- Video yopiq emas\n"
              "- Akkaunt ochiq\n- Postda video bor\n- Havola to'g'ri",
        "ru": "❌ Ошибка при скачивании видео. Убедитесь, что:\n- Видео не приватное\n"
              "- Аккаунт открытый\n- В посте есть видео\n- Ссылка корректная",
        "en": "❌ Error downloading video. Make sure that:\n- The video is not private\n"
              "- The account is public\n- The post contains a video\n- The link is correct",
    },
    "invalid_instagram_link": {
        "uz": "❌ Instagram havolasi noto'g'ri. Post, reel yoki video havolasini yuboring.",
        "ru": "❌ Неверный формат ссылки Instagram. Отправьте ссылку на пост, reel или видео.",
        "en": "❌ Invalid Instagram link. Send a link to a post, reel or video.",
    },
    "error_processing_file": {
        "uz": "❌ Faylni qayta ishlashda xatolik",
        "ru": "❌ Ошибка при обработке файла",
        "en": "❌ Error processing file",
    },
    "error_general": {
        "uz": "❌ Nimadir xato ketdi",
        "ru": "❌ Что-то пошло не так",
        "en": "❌ Something went wrong",
    },
    "video_id_not_found": {
        "uz": "❌ Video ID topilmadi",
        "ru": "❌ ID видео не найдено",
        "en": "❌ Video ID not found",
    },
    "choosing_format": {
        "uz": "Formatni tanlang:",
        "ru": "Выберите формат:",
        "en": "Choose format:",
    },
    "round_video": {
        "uz": "⭕️ Doira video",
        "ru": "⭕️ Круглое видео",
        "en": "⭕️ Round video",
    },
    "regular_video": {
        "uz": "📹 Oddiy video",
        "ru": "📹 Обычное видео",
        "en": "📹 Regular video",
    },
    "processing_part": {
        "uz": "⏳ Qism qayta ishlanmoqda %s dan %s...",
        "ru": "⏳ Обработка части %s из %s...",
        "en": "⏳ Processing part %s of %s...",
    },
    "video_longer_than_minute": {
        "uz": "Video 1 daqiqadan uzun (%s sek). %s ta video-doiraga bo'linadi 🎬",
        "ru": "Видео длиннее 1 минуты (%s сек). Будет разделено на %s видео-кружков 🎬",
        "en": "Video is longer than 1 minute (%s sec). It will be split into %s video circles 🎬",
    },
    "send_note_failed": {
        "uz": "❌ Video-doirani yuborib bo'lmadi",
        "ru": "❌ Не удалось отправить видео-кружок",
        "en": "❌ Failed to send the video circle",
    },
    "send_video_failed": {
        "uz": "❌ Videoni yuborib bo'lmadi",
        "ru": "❌ Не удалось отправить видео",
        "en": "❌ Failed to send the video",
    },
    "selection_expired": {
        "uz": "⌛️ Bu tanlov endi amal qilmaydi. Havolani yoki videoni qaytadan yuboring.",
        "ru": "⌛️ Этот выбор уже недействителен. Отправьте ссылку или видео ещё раз.",
        "en": "⌛️ This choice is no longer valid. Send the link or video again.",
    },
    "done": {
        "uz": "✅ Tayyor!",
        "ru": "✅ Готово!",
        "en": "✅ Done!",
    },
    "language_changed": {
        "uz": "✅ Til o'zbekchaga o'zgartirildi",
        "ru": "✅ Язык изменен на русский",
        "en": "✅ Language changed to English",
    },
    "choose_language": {
        "uz": "Tilni tanlang:",
        "ru": "Выберите язык:",
        "en": "Choose language:",
    },
}


def t(key: str, lang: str, *args: Any) -> str:
    """
    Возвращает перевод

    Если перевода на нужный язык нет, берётся английский, если нет
    и его, возвращается сам ключ. Плейсхолдеры %s заменяются по порядку.
    """
    entry = TRANSLATIONS.get(key, {})
    text = entry.get(lang) or entry.get("en") or key

    for arg in args:
        text = text.replace("%s", str(arg), 1)

    return text
