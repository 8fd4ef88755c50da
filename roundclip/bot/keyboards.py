from aiogram.types import InlineKeyboardButton, InlineKeyboardMarkup

from roundclip.bot.i18n import LANGUAGE_NAMES, LANGUAGES, t

LANGUAGE_CALLBACK_PREFIX = "lang_"


def format_keyboard(lang: str, round_data: str, regular_data: str) -> InlineKeyboardMarkup:
    """Кнопки выбора формата: кружок / обычное видео"""
    return InlineKeyboardMarkup(inline_keyboard=[
        [
            InlineKeyboardButton(text=t("round_video", lang), callback_data=round_data),
            InlineKeyboardButton(text=t("regular_video", lang), callback_data=regular_data),
        ]
    ])


def language_keyboard() -> InlineKeyboardMarkup:
    """Кнопки выбора языка"""
    return InlineKeyboardMarkup(inline_keyboard=[
        [
            InlineKeyboardButton(text=LANGUAGE_NAMES[code], callback_data=f"{LANGUAGE_CALLBACK_PREFIX}{code}")
            for code in LANGUAGES
        ]
    ])
