"""
Outer middlewares shared by every router:
- UserTrackingMiddleware: records each interaction in the user store
- ForceJoinMiddleware: optional channel membership gate
"""
import logging
from typing import Any, Awaitable, Callable, Dict

from aiogram import BaseMiddleware, Bot
from aiogram.enums import ChatMemberStatus
from aiogram.exceptions import TelegramAPIError
from aiogram.types import CallbackQuery, Message, TelegramObject

from templates.buttons import CHECK_MEMBERSHIP, force_join_kb
from templates.messages import force_join_text

logger = logging.getLogger("middlewares")

MEMBER_STATUSES = {ChatMemberStatus.CREATOR, ChatMemberStatus.ADMINISTRATOR, ChatMemberStatus.MEMBER}

Handler = Callable[[TelegramObject, Dict[str, Any]], Awaitable[Any]]


async def is_channel_member(bot: Bot, channel: str, user_id: int) -> bool:
    try:
        member = await bot.get_chat_member(channel, user_id)
    except TelegramAPIError as e:
        logger.error(f"Error checking channel membership for {user_id}: {e}")
        return False
    return member.status in MEMBER_STATUSES


class UserTrackingMiddleware(BaseMiddleware):
    async def __call__(self, handler: Handler, event: TelegramObject, data: Dict[str, Any]) -> Any:
        user = getattr(event, "from_user", None)
        users = data.get("users")
        if user is not None and users is not None and not user.is_bot:
            try:
                await users.touch(user.id, user.first_name, user.last_name, user.username)
            except Exception:
                logger.exception(f"❌ Error saving user {user.id}")
        return await handler(event, data)


class ForceJoinMiddleware(BaseMiddleware):
    def __init__(self, channel: str, owner_id=None):
        self.channel = channel
        self.owner_id = owner_id

    async def __call__(self, handler: Handler, event: TelegramObject, data: Dict[str, Any]) -> Any:
        user = getattr(event, "from_user", None)
        if user is None or user.id == self.owner_id:
            return await handler(event, data)
        if isinstance(event, CallbackQuery) and event.data == CHECK_MEMBERSHIP:
            return await handler(event, data)

        bot: Bot = data["bot"]
        if await is_channel_member(bot, self.channel, user.id):
            return await handler(event, data)

        logger.info(f"🔒 User {user.id} is not a member of {self.channel}")
        if isinstance(event, CallbackQuery):
            await event.answer(f"❌ Please join {self.channel} first!", show_alert=True)
            chat_id = event.message.chat.id if event.message else user.id
            await bot.send_message(chat_id, force_join_text(self.channel), reply_markup=force_join_kb(self.channel))
        elif isinstance(event, Message):
            await event.reply(force_join_text(self.channel), reply_markup=force_join_kb(self.channel))
        return None
