import logging
from html import escape
from typing import Optional

from aiogram import Bot
from aiogram.exceptions import TelegramAPIError
from aiogram.types import FSInputFile, ReplyParameters

from services.errors import TransientDeliveryFailure
from services.models import CatalogEntry, RequestContext

logger = logging.getLogger("publisher")


def build_caption(title: str, artist: str, footer: str = "") -> str:
    caption = f"🎵 {escape(title or '')}\n👤 {escape(artist or '')}"
    if footer:
        caption += f"\n\n{escape(footer)}"
    return caption


class TelegramPublisher:
    """Delivers tracks to users and keeps the distribution channel copy."""

    def __init__(self, bot: Bot, channel_id: int, caption_footer: str = ""):
        self._bot = bot
        self._channel_id = channel_id
        self._footer = caption_footer

    def caption(self, title: str, artist: str) -> str:
        return build_caption(title, artist, self._footer)

    @staticmethod
    def _reply(request: RequestContext) -> Optional[ReplyParameters]:
        if request.reply_to_message_id is None:
            return None
        return ReplyParameters(message_id=request.reply_to_message_id, allow_sending_without_reply=True)

    async def replay(self, request: RequestContext, entry: CatalogEntry) -> int:
        """Copies the stored channel message to the requester."""
        try:
            sent = await self._bot.copy_message(
                chat_id=request.chat_id,
                from_chat_id=self._channel_id,
                message_id=entry.distribution_ref,
                caption=self.caption(entry.title, entry.artist),
                reply_parameters=self._reply(request),
            )
        except TelegramAPIError as e:
            logger.error(f"❌ Could not copy channel message {entry.distribution_ref}: {e}")
            raise TransientDeliveryFailure(request.chat_id, e.message) from e
        return sent.message_id

    async def publish_audio(self, request: RequestContext, path: str, title: str, artist: str, duration: int) -> int:
        """
        Uploads path once to the distribution channel, then sends the same file to
        the requester. Returns the channel message id.

        Once the channel copy exists its id is returned even if the requester
        cannot be reached, so the track is catalogued and never uploaded twice.
        """
        caption = self.caption(title, artist)
        posted = await self._bot.send_audio(
            chat_id=self._channel_id,
            audio=FSInputFile(path),
            caption=caption,
            title=title,
            performer=artist,
            duration=duration or None,
        )
        logger.info(f"✅ Sent to channel, message ID: {posted.message_id}")

        try:
            await self._bot.send_audio(
                chat_id=request.chat_id,
                audio=posted.audio.file_id,
                caption=caption,
                title=title,
                performer=artist,
                duration=duration or None,
                reply_parameters=self._reply(request),
            )
        except TelegramAPIError as e:
            logger.warning(f"⚠️ Channel copy {posted.message_id} kept, delivery to {request.chat_id} failed: {e}")
        return posted.message_id

    async def show_progress(self, request: RequestContext, text: str) -> Optional[int]:
        try:
            sent = await self._bot.send_message(
                request.chat_id, text, reply_parameters=self._reply(request)
            )
        except TelegramAPIError as e:
            logger.warning(f"⚠️ Could not show progress in {request.chat_id}: {e}")
            return None
        return sent.message_id

    async def delete_quietly(self, chat_id: int, message_id: Optional[int]):
        if message_id is None:
            return
        try:
            await self._bot.delete_message(chat_id, message_id)
        except TelegramAPIError as e:
            logger.debug(f"Message {message_id} in {chat_id} not deleted: {e}")
