from typing import Dict

from roundclip.bot.i18n import LANGUAGES


class LanguageService:
    """In-memory language preferences (lost on restart)"""

    def __init__(self, default_language: str = "ru"):
        if default_language not in LANGUAGES:
            raise ValueError(f"Unsupported default language: {default_language}")
        self.default_language = default_language
        self.user_languages: Dict[int, str] = {}

    def get_user_language(self, user_id: int) -> str:
        """Returns user's language or the default one"""
        return self.user_languages.get(user_id, self.default_language)

    def set_user_language(self, user_id: int, language: str) -> None:
        if not self.is_valid_language(language):
            raise ValueError(f"Unsupported language: {language}")
        self.user_languages[user_id] = language

    def is_valid_language(self, language: str) -> bool:
        return language in LANGUAGES
