"""
Owner-only commands:
- /broadcast (as a reply): forward the replied message to every user
- /users: user and catalog statistics
- /export: all users as CSV
"""
import logging
from contextlib import suppress
from datetime import datetime, timezone

from aiogram import F, Router
from aiogram.exceptions import TelegramBadRequest
from aiogram.filters import Command
from aiogram.types import BufferedInputFile, CallbackQuery, Message

from services.broadcast import BroadcastReport, Broadcaster
from templates.buttons import CANCEL_BROADCAST, BroadcastCallback, broadcast_confirm_kb
from templates.messages import (
    BROADCAST_CONFIRM_TEXT,
    BROADCAST_USAGE_TEXT,
    OWNER_ONLY_TEXT,
    bot_stats_text,
    broadcast_progress_text,
)
from utils.config import Settings
from utils.export import users_to_csv

router = Router(name="admin")
logger = logging.getLogger("admin")


@router.message(Command("broadcast"))
async def cmd_broadcast(message: Message, settings: Settings):
    if not settings.is_owner(message.from_user.id):
        await message.reply(OWNER_ONLY_TEXT)
        return
    if not message.reply_to_message:
        await message.reply(BROADCAST_USAGE_TEXT)
        return

    await message.reply(
        BROADCAST_CONFIRM_TEXT,
        reply_markup=broadcast_confirm_kb(message.reply_to_message.message_id),
    )


@router.callback_query(BroadcastCallback.filter())
async def cb_confirm_broadcast(
    c: CallbackQuery,
    callback_data: BroadcastCallback,
    settings: Settings,
    broadcaster: Broadcaster,
):
    if not settings.is_owner(c.from_user.id):
        await c.answer("❌ Unauthorized", show_alert=True)
        return
    await c.answer("📤 Starting broadcast...")

    status = c.message

    async def on_progress(report: BroadcastReport):
        with suppress(TelegramBadRequest):
            await status.edit_text(broadcast_progress_text(report))

    await status.edit_text("📤 Broadcasting... Please wait.")
    report = await broadcaster.run(c.message.chat.id, callback_data.message_id, on_progress=on_progress)
    with suppress(TelegramBadRequest):
        await status.edit_text(broadcast_progress_text(report, done=True))


@router.callback_query(F.data == CANCEL_BROADCAST)
async def cb_cancel_broadcast(c: CallbackQuery, settings: Settings):
    if not settings.is_owner(c.from_user.id):
        await c.answer("❌ Unauthorized", show_alert=True)
        return
    await c.answer("Broadcast cancelled")
    await c.message.edit_text("❌ Broadcast cancelled.")


@router.message(Command("users"))
async def cmd_users(message: Message, settings: Settings, users, catalog):
    if not settings.is_owner(message.from_user.id):
        await message.reply(OWNER_ONLY_TEXT)
        return
    stats = await users.stats()
    counts = await catalog.counts()
    await message.reply(bot_stats_text(stats, counts))


@router.message(Command("export"))
async def cmd_export(message: Message, settings: Settings, users):
    if not settings.is_owner(message.from_user.id):
        await message.reply(OWNER_ONLY_TEXT)
        return

    rows = await users.all_users()
    if not rows:
        await message.reply("📭 No users to export yet.")
        return

    filename = f"users_{int(datetime.now(timezone.utc).timestamp())}.csv"
    document = BufferedInputFile(users_to_csv(rows).encode("utf-8"), filename=filename)
    await message.reply_document(document, caption=f"📊 <b>User Export</b>\n\nTotal Users: {len(rows)}")
    logger.info(f"📁 Exported {len(rows)} users")
