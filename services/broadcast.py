import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from aiogram import Bot
from aiogram.exceptions import TelegramAPIError, TelegramForbiddenError

from services.errors import DeliveryFailure, PermanentDeliveryFailure, TransientDeliveryFailure

logger = logging.getLogger("broadcast")

PROGRESS_EVERY = 10


@dataclass
class BroadcastReport:
    total: int
    success: int = 0
    failed: int = 0
    blocked: int = 0

    @property
    def processed(self) -> int:
        return self.success + self.failed + self.blocked


ProgressCallback = Callable[[BroadcastReport], Awaitable[None]]


class Broadcaster:
    """Forwards one message to every reachable user, one at a time."""

    def __init__(self, bot: Bot, users, delay_seconds: float = 0.05, progress_every: int = PROGRESS_EVERY):
        self._bot = bot
        self._users = users
        self._delay = delay_seconds
        self._progress_every = max(1, progress_every)

    async def deliver(self, user_id: int, from_chat_id: int, message_id: int):
        try:
            await self._bot.forward_message(user_id, from_chat_id, message_id)
        except TelegramForbiddenError as e:
            raise PermanentDeliveryFailure(user_id, e.message) from e
        except TelegramAPIError as e:
            raise TransientDeliveryFailure(user_id, e.message) from e

    async def run(
        self,
        from_chat_id: int,
        message_id: int,
        on_progress: Optional[ProgressCallback] = None,
    ) -> BroadcastReport:
        recipients = await self._users.reachable_users()
        report = BroadcastReport(total=len(recipients))
        logger.info(f"📤 Broadcasting message {message_id} to {report.total} users")

        for index, user in enumerate(recipients, start=1):
            user_id = user["user_id"]
            try:
                await self.deliver(user_id, from_chat_id, message_id)
                report.success += 1
            except PermanentDeliveryFailure:
                report.blocked += 1
                await self._users.mark_blocked(user_id)
            except DeliveryFailure as e:
                report.failed += 1
                logger.warning(f"⚠️ Failed to send to {user_id}: {e}")

            if on_progress and (index % self._progress_every == 0 or index == report.total):
                await on_progress(report)
            await asyncio.sleep(self._delay)

        logger.info(
            f"✅ Broadcast done: {report.success} sent, {report.failed} failed, {report.blocked} blocked"
        )
        return report
