import asyncio
import logging
import shutil

import aiohttp
from aiogram import Bot, Dispatcher
from aiogram.client.default import DefaultBotProperties
from aiogram.enums import ParseMode
from aiogram.types import ErrorEvent
from motor.motor_asyncio import AsyncIOMotorClient

from handlers.admin import router as admin_router
from handlers.buttons import router as buttons_router
from handlers.links import router as links_router
from handlers.middlewares import ForceJoinMiddleware, UserTrackingMiddleware
from handlers.search import router as search_router
from handlers.start import router as start_router
from services.aggregator import ResultAggregator
from services.broadcast import Broadcaster
from services.catalog import MongoCatalog
from services.fetchers import SaavnFetcher, SpotifyFetcher, YouTubeFetcher
from services.links import LinkRouter
from services.models import Namespace
from services.providers import SaavnClient, SpotifyClient, YouTubeClient
from services.publisher import TelegramPublisher
from services.resolver import SelectionResolver
from services.sessions import SessionStore
from services.users import MongoUserStore
from utils.config import Settings
from utils.logger import configure_logging

logger = logging.getLogger("MusicBot")


# ───────────────────────────────────────────────
# BOT FACTORY
# ───────────────────────────────────────────────
def make_bot(settings: Settings) -> Bot:
    return Bot(
        token=settings.bot_token,
        default=DefaultBotProperties(parse_mode=ParseMode.HTML),
    )


def make_dispatcher(settings: Settings) -> Dispatcher:
    dp = Dispatcher()

    for observer in (dp.message, dp.callback_query):
        observer.outer_middleware(UserTrackingMiddleware())
        if settings.force_join_enabled:
            observer.outer_middleware(ForceJoinMiddleware(settings.force_join_channel, settings.owner_id))

    # Order matters: commands and links before the free-text search.
    dp.include_router(start_router)
    dp.include_router(admin_router)
    dp.include_router(buttons_router)
    dp.include_router(links_router)
    dp.include_router(search_router)

    @dp.errors()
    async def on_error(event: ErrorEvent):
        logger.error(f"❌ Unhandled error in update {event.update.update_id}: {event.exception}", exc_info=event.exception)
        return True

    return dp


# ───────────────────────────────────────────────
# HEALTH CHECK
# ───────────────────────────────────────────────
def health_check(settings: Settings):
    print("\n═════════════ 🎵 MusicBot Startup Check ═════════════")
    print("💬 Telegram Token: ✅ Loaded")
    print(f"🗄️ MongoDB: ✅ {settings.mongo_db}")
    print(f"📢 Distribution channel: ✅ {settings.channel_id}")
    print(f"👑 Owner ID: {'✅ Loaded' if settings.owner_id else '⚠️ Missing (admin commands disabled)'}")
    print(f"🔒 Force join: {settings.force_join_channel or '⚠️ Disabled'}")
    print(f"🎧 Spotify: {'✅ Enabled' if settings.spotify_enabled else '⚠️ Missing (Spotify links disabled)'}")
    print(f"🎼 ffmpeg binary: {'✅ Found' if shutil.which('ffmpeg') else '❌ Not Found'}")
    print(f"🎥 yt-dlp: {'✅ Installed' if shutil.which('yt-dlp') else '⚠️ Not Found (will use python module)'}")
    print("═════════════════════════════════════════════════════\n")

    if not shutil.which("ffmpeg"):
        logger.warning("⚠️ ffmpeg not found - audio conversion will fail!")
    if not settings.owner_id:
        logger.warning("⚠️ OWNER_ID not set - /broadcast, /users and /export are unavailable")


# ───────────────────────────────────────────────
# MAIN
# ───────────────────────────────────────────────
async def main():
    configure_logging()
    settings = Settings.from_env()
    health_check(settings)

    bot = make_bot(settings)
    dp = make_dispatcher(settings)

    mongo = AsyncIOMotorClient(settings.mongo_uri)
    db = mongo[settings.mongo_db]
    catalog = MongoCatalog(db)
    users = MongoUserStore(db)
    await catalog.ensure_indexes()
    await users.ensure_indexes()

    http = aiohttp.ClientSession()
    try:
        saavn = SaavnClient(http, settings.saavn_api_base)
        youtube = YouTubeClient()
        spotify = (
            SpotifyClient(settings.spotify_client_id, settings.spotify_client_secret)
            if settings.spotify_enabled else None
        )

        publisher = TelegramPublisher(bot, settings.channel_id, settings.caption_footer)
        fetchers = {
            Namespace.AUDIO: SaavnFetcher(publisher, http, saavn),
            Namespace.VIDEO: YouTubeFetcher(publisher, http, youtube),
        }
        if spotify:
            fetchers[Namespace.STREAM] = SpotifyFetcher(publisher, http, spotify)

        sessions = SessionStore(settings.session_ttl_seconds)
        resolver = SelectionResolver(catalog, publisher, fetchers, sessions)

        dp.workflow_data.update(
            settings=settings,
            catalog=catalog,
            users=users,
            sessions=sessions,
            resolver=resolver,
            aggregator=ResultAggregator(catalog, saavn, youtube, live_limit=settings.search_limit),
            link_router=LinkRouter(resolver, catalog, saavn, spotify),
            broadcaster=Broadcaster(bot, users, delay_seconds=settings.broadcast_delay_seconds),
        )

        logger.info("🚀 Starting MusicBot (JioSaavn + YouTube + Spotify)")
        await bot.delete_webhook(drop_pending_updates=True)
        await dp.start_polling(bot, allowed_updates=dp.resolve_used_update_types())
    finally:
        await http.close()
        mongo.close()
        await bot.session.close()


if __name__ == "__main__":
    asyncio.run(main())
