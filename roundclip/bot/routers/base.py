from aiogram import Router, types, F
from aiogram.filters import Command, CommandStart

from roundclip.bot.i18n import t
from roundclip.bot.keyboards import LANGUAGE_CALLBACK_PREFIX, language_keyboard
from roundclip.bot.services.language import LanguageService

router = Router()


@router.message(CommandStart())
async def cmd_start(message: types.Message, languages: LanguageService):
    """Handler for /start"""
    lang = languages.get_user_language(message.from_user.id)
    await message.answer(t("welcome", lang))


@router.message(Command("language"))
async def cmd_language(message: types.Message, languages: LanguageService):
    """Handler for /language"""
    lang = languages.get_user_language(message.from_user.id)
    await message.answer(t("choose_language", lang), reply_markup=language_keyboard())


@router.callback_query(F.data.startswith(LANGUAGE_CALLBACK_PREFIX))
async def choose_language(callback: types.CallbackQuery, languages: LanguageService):
    """Language button"""
    code = callback.data[len(LANGUAGE_CALLBACK_PREFIX):]
    await callback.answer()

    if not languages.is_valid_language(code):
        return

    languages.set_user_language(callback.from_user.id, code)

    if isinstance(callback.message, types.Message):
        await callback.message.edit_text(t("language_changed", code))
    else:
        await callback.bot.send_message(callback.from_user.id, t("language_changed", code))
