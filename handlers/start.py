from contextlib import suppress

from aiogram import F, Router
from aiogram.exceptions import TelegramBadRequest
from aiogram.filters import Command, CommandStart
from aiogram.types import CallbackQuery, Message

from handlers.middlewares import is_channel_member
from templates.buttons import CHECK_MEMBERSHIP, main_menu_kb
from templates.messages import HELP_TEXT, start_text, user_stats_text, verified_text
from utils.config import Settings

router = Router(name=__name__)


@router.message(CommandStart())
async def cmd_start(message: Message):
    await message.answer(start_text(message.from_user.first_name), reply_markup=main_menu_kb())


@router.message(Command("help"))
async def cmd_help(message: Message):
    await message.answer(HELP_TEXT)


@router.message(Command("stats"))
async def cmd_stats(message: Message, users):
    user = await users.get(message.from_user.id)
    if not user:
        await message.answer("❌ User data not found.")
        return
    await message.answer(user_stats_text(user))


@router.callback_query(F.data == "my_stats")
async def cb_my_stats(c: CallbackQuery, users):
    await c.answer()
    user = await users.get(c.from_user.id)
    await c.message.answer(user_stats_text(user) if user else "❌ User data not found.")


@router.callback_query(F.data == "help")
async def cb_help(c: CallbackQuery):
    await c.answer()
    await c.message.answer(HELP_TEXT)


@router.callback_query(F.data == CHECK_MEMBERSHIP)
async def cb_check_membership(c: CallbackQuery, settings: Settings):
    if not settings.force_join_enabled or await is_channel_member(c.bot, settings.force_join_channel, c.from_user.id):
        await c.answer("✅ Verified! You can now use the bot.", show_alert=True)
        with suppress(TelegramBadRequest):
            await c.message.delete()
        await c.message.answer(verified_text(c.from_user.first_name))
        return

    await c.answer(
        f"❌ You haven't joined {settings.force_join_channel} yet! Please join first.",
        show_alert=True,
    )
