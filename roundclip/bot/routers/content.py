import logging

from aiogram import Bot, Router, types, F
from aiogram.exceptions import TelegramAPIError

from roundclip.bot.i18n import t
from roundclip.bot.services.language import LanguageService
from roundclip.bot.services.telegram import TelegramNotifier
from roundclip.modules.base import UploadDescriptor
from roundclip.modules.interaction import CHOICE_PATTERN, VideoNoteFlow

router = Router()
logger = logging.getLogger(__name__)

VIDEO_DOCUMENT = F.document & F.document.mime_type.startswith("video/")


def make_notifier(bot: Bot, chat_id: int, user_id: int, languages: LanguageService) -> TelegramNotifier:
    return TelegramNotifier(bot, chat_id, languages.get_user_language(user_id))


@router.message(F.video | VIDEO_DOCUMENT)
async def handle_video(message: types.Message, bot: Bot, flow: VideoNoteFlow, languages: LanguageService):
    """Handle uploaded videos"""
    media = message.video or message.document
    descriptor = UploadDescriptor(
        file_id=media.file_id,
        file_unique_id=media.file_unique_id,
        file_size=media.file_size,
        mime_type=media.mime_type,
    )
    notifier = make_notifier(bot, message.chat.id, message.from_user.id, languages)
    await flow.handle_upload(descriptor, notifier)


@router.callback_query(F.data.regexp(CHOICE_PATTERN))
async def handle_choice(callback: types.CallbackQuery, bot: Bot, flow: VideoNoteFlow, languages: LanguageService):
    """Round / regular button"""
    await callback.answer()

    lang = languages.get_user_language(callback.from_user.id)
    if isinstance(callback.message, types.Message):
        chat_id = callback.message.chat.id
        try:
            # Убираем кнопки, чтобы не было повторных нажатий
            await callback.message.edit_text(t("processing_video", lang), reply_markup=None)
        except TelegramAPIError as e:
            logger.warning(f"Failed to edit choice message: {e}")
    else:
        chat_id = callback.from_user.id

    notifier = TelegramNotifier(bot, chat_id, lang)
    await flow.handle_choice(callback.data, chat_id, notifier)


@router.message(F.text & ~F.text.startswith("/"))
async def handle_text(message: types.Message, bot: Bot, flow: VideoNoteFlow, languages: LanguageService):
    """Handle YouTube/Instagram links and any other text"""
    notifier = make_notifier(bot, message.chat.id, message.from_user.id, languages)
    await flow.handle_text(message.text, notifier)
