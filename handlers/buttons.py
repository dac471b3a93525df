import logging
from contextlib import suppress

from aiogram import F, Router
from aiogram.exceptions import TelegramBadRequest
from aiogram.types import CallbackQuery

from services.models import Failed, FailureReason, RequestContext
from services.resolver import SelectionResolver
from services.sessions import SessionStore
from templates.buttons import CANCEL_SEARCH, PageCallback, PlayCallback, search_results_kb
from templates.messages import DELIVERY_ERROR_TEXT, SESSION_EXPIRED_TEXT, failure_text, search_results_text
from utils.config import Settings
from utils.pagination import paginate

router = Router(name="buttons")
logger = logging.getLogger("buttons")


# ───────────────────────────────────────────────
# Safe edit helper
# ───────────────────────────────────────────────
async def safe_edit(c: CallbackQuery, text: str, reply_markup=None):
    """Safely edits a message, avoids 'message is not modified' errors."""
    try:
        await c.message.edit_text(text, reply_markup=reply_markup)
    except TelegramBadRequest as e:
        if "not modified" in str(e).lower():
            return
        logger.exception("❌ Edit text failed.")
        await c.message.answer(text, reply_markup=reply_markup)


async def safe_answer(c: CallbackQuery, text: str = None, show_alert: bool = False):
    # Long downloads can outlive the callback query.
    with suppress(TelegramBadRequest):
        await c.answer(text, show_alert=show_alert)


# ───────────────────────────────────────────────
# Search listing
# ───────────────────────────────────────────────
@router.callback_query(F.data == CANCEL_SEARCH)
async def cb_cancel_search(c: CallbackQuery, sessions: SessionStore):
    sessions.delete(c.message.chat.id)
    with suppress(TelegramBadRequest):
        await c.message.delete()
    await safe_answer(c, "🗑️ Search cancelled")


@router.callback_query(PageCallback.filter())
async def cb_page(c: CallbackQuery, callback_data: PageCallback, sessions: SessionStore, settings: Settings):
    chat_id = c.message.chat.id
    session = sessions.get(chat_id)
    if session is None:
        await safe_answer(c, SESSION_EXPIRED_TEXT, show_alert=True)
        return

    page = paginate(session.results, callback_data.page, settings.page_size)
    await safe_edit(c, search_results_text(page), search_results_kb(page))
    sessions.set_rendered(chat_id, c.message.message_id, callback_data.page)
    await safe_answer(c)


# ───────────────────────────────────────────────
# 🎵 Play a result
# ───────────────────────────────────────────────
@router.callback_query(PlayCallback.filter())
async def cb_play(
    c: CallbackQuery,
    callback_data: PlayCallback,
    sessions: SessionStore,
    resolver: SelectionResolver,
):
    chat_id = c.message.chat.id
    session = sessions.get(chat_id)
    if session is None:
        await safe_answer(c, SESSION_EXPIRED_TEXT, show_alert=True)
        return

    selection = callback_data.to_selection()
    logger.info(f"🎵 [PLAY] User: {c.from_user.username or c.from_user.id}, {selection.origin.value}:{selection.key}")

    request = RequestContext(
        chat_id=chat_id,
        reply_to_message_id=session.original_message_id,
        listing_message_id=c.message.message_id,
    )
    try:
        outcome = await resolver.resolve(selection, request)
    except Exception:
        logger.exception(f"❌ Play failed for {selection.origin.value}:{selection.key}")
        await safe_answer(c)
        await c.bot.send_message(chat_id, DELIVERY_ERROR_TEXT)
        return

    if not isinstance(outcome, Failed):
        await safe_answer(c, "▶️ Playing...")
    elif outcome.reason == FailureReason.FETCH_ERROR:
        await safe_answer(c)
        await c.bot.send_message(chat_id, failure_text(outcome))
    else:
        await safe_answer(c, failure_text(outcome), show_alert=True)


@router.callback_query(F.data.startswith("play|"))
async def cb_play_malformed(c: CallbackQuery):
    """Play tokens that do not unpack (unknown origin, missing key)."""
    logger.warning(f"⚠️ Malformed play token: {c.data}")
    await safe_answer(c, "❌ Invalid song ID!", show_alert=True)
