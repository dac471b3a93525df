"""
Free-text search: aggregate catalog and live results, open a session
and render the first page of the listing.
"""
import logging

from aiogram import F, Router
from aiogram.enums import ChatAction
from aiogram.types import Message

from services.aggregator import ResultAggregator
from services.sessions import SessionStore
from templates.buttons import search_results_kb
from templates.messages import NO_RESULTS_TEXT, UNSUPPORTED_LINK_TEXT, search_results_text
from utils.config import Settings
from utils.links import is_url
from utils.pagination import paginate

router = Router(name="search")
logger = logging.getLogger("search")


@router.message(F.text, ~F.text.startswith("/"))
async def handle_search(
    message: Message,
    aggregator: ResultAggregator,
    sessions: SessionStore,
    settings: Settings,
):
    query = message.text.strip()
    chat_id = message.chat.id

    # Supported links are taken by the links router first.
    if is_url(query):
        await message.reply(UNSUPPORTED_LINK_TEXT)
        return

    logger.info(f"🔎 [SEARCH] User: {message.from_user.username or message.from_user.id}, Query: {query}")
    await message.bot.send_chat_action(chat_id, ChatAction.TYPING)

    try:
        results = await aggregator.aggregate(query)
    except Exception:
        logger.exception(f"❌ Search failed for {query!r}")
        await message.reply("⚠️ Something went wrong while searching. Please try again later.")
        return

    if not results:
        sessions.delete(chat_id)
        await message.reply(NO_RESULTS_TEXT)
        return

    sessions.start(chat_id, results, message.message_id)
    page = paginate(results, 1, settings.page_size)
    sent = await message.answer(search_results_text(page), reply_markup=search_results_kb(page))
    sessions.set_rendered(chat_id, sent.message_id, 1)
