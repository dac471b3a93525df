"""
Pasted provider links (YouTube, JioSaavn, Spotify) resolve straight to a
track without going through a search listing.
"""
import logging

from aiogram import F, Router
from aiogram.enums import ChatAction
from aiogram.types import Message

from services.links import LinkRouter
from services.models import Failed, RequestContext
from templates.messages import DELIVERY_ERROR_TEXT, UNSUPPORTED_LINK_TEXT, failure_text
from utils.links import detect_link

router = Router(name="links")
logger = logging.getLogger("links")


@router.message(F.text.func(detect_link))
async def handle_link(message: Message, link_router: LinkRouter):
    url = message.text.strip()
    user = message.from_user
    logger.info(f"🔗 [LINK] User: {user.username or user.id}, URL: {url}")

    await message.bot.send_chat_action(message.chat.id, ChatAction.UPLOAD_DOCUMENT)
    request = RequestContext(chat_id=message.chat.id, reply_to_message_id=message.message_id)
    try:
        outcome = await link_router.route(url, request)
    except Exception:
        logger.exception(f"❌ Link failed: {url}")
        await message.reply(DELIVERY_ERROR_TEXT)
        return

    if outcome is None:
        await message.reply(UNSUPPORTED_LINK_TEXT)
    elif isinstance(outcome, Failed):
        await message.reply(failure_text(outcome))
