# templates/messages.py
from html import escape

from services.models import Failed, FailureReason
from utils.pagination import Page

START_TEXT = (
    "👋 <b>Welcome, {name}!</b>\n\n"
    "Here's what I can do:\n\n"
    "🎵 Send me a song name to search\n"
    "🔗 Send a YouTube, JioSaavn or Spotify link to download\n\n"
    "<b>Commands:</b>\n"
    "/start - Show this message\n"
    "/help - Get help\n"
    "/stats - View your stats\n\n"
    "Enjoy using the bot! 🎉"
)

HELP_TEXT = (
    "📖 <b>Help Guide</b>\n\n"
    "<b>How to use:</b>\n"
    "1️⃣ Send a song name to search\n"
    "2️⃣ Send a YouTube video link\n"
    "3️⃣ Send a JioSaavn or Spotify track link\n\n"
    "💡 Tips:\n"
    "• Be specific with song names\n"
    "• Include the artist name for better results\n"
    "• Songs downloaded once are sent instantly next time"
)

VERIFIED_TEXT = (
    "✅ <b>Membership Verified!</b>\n\n"
    "Welcome, {name}! You now have full access to the bot.\n\n"
    "🎵 Send me a song name to search\n"
    "🔗 Send a YouTube, JioSaavn or Spotify link to download"
)

FORCE_JOIN_TEXT = (
    "🔒 <b>Access Restricted</b>\n\n"
    "To use this bot, you must join our channel first!\n\n"
    "📢 <b>Channel:</b> {channel}\n\n"
    "👇 Click the button below to join, then click \"✅ I've Joined\""
)

BROADCAST_USAGE_TEXT = (
    "📢 <b>Broadcast Usage:</b>\n\n"
    "Reply to any message with /broadcast to forward it to all users.\n\n"
    "<b>Supported message types:</b>\n"
    "• Text\n• Photos\n• Videos\n• Audio\n• Documents\n• Stickers"
)

BROADCAST_CONFIRM_TEXT = (
    "⚠️ <b>Confirm Broadcast</b>\n\n"
    "Are you sure you want to forward this message to ALL users?"
)

OWNER_ONLY_TEXT = "❌ This command is only available for the bot owner."
NO_RESULTS_TEXT = "❌ No results found. Try a different search."
UNSUPPORTED_LINK_TEXT = "⚠️ Unsupported link. Send a YouTube, JioSaavn or Spotify track link, or just type a song name."
SESSION_EXPIRED_TEXT = "❌ Session expired. Search again!"
DELIVERY_ERROR_TEXT = "⚠️ Something went wrong while getting your song. Please try again later."


def start_text(first_name: str) -> str:
    return START_TEXT.format(name=escape(first_name or "User"))


def verified_text(first_name: str) -> str:
    return VERIFIED_TEXT.format(name=escape(first_name or "User"))


def force_join_text(channel: str) -> str:
    return FORCE_JOIN_TEXT.format(channel=escape(channel))


def search_results_text(page: Page) -> str:
    return (
        "🎵 <b>Search Results</b>\n"
        f"📄 Page <b>{page.page}</b> / <b>{page.total_pages}</b>\n"
        f"🔢 Total Results: <b>{page.total_count}</b>"
    )


def user_stats_text(user: dict) -> str:
    name = escape(f"{user.get('first_name') or ''} {user.get('last_name') or ''}".strip() or "N/A")
    return (
        "📊 <b>Your Statistics</b>\n\n"
        f"👤 Name: {name}\n"
        f"🆔 User ID: <code>{user['user_id']}</code>\n"
        f"📅 Joined: {_day(user.get('created_at'))}\n"
        f"🕐 Last Active: {_day(user.get('last_active'))}\n"
        f"📈 Total Interactions: {user.get('total_interactions', 0)}"
    )


def bot_stats_text(stats: dict, catalog_counts: dict) -> str:
    return (
        "📊 <b>Bot User Statistics</b>\n\n"
        f"👥 Total Users: {stats['total']}\n"
        f"✅ Active Users: {stats['active']}\n"
        f"🚫 Blocked Bot: {stats['blocked']}\n"
        f"🕐 Active (24h): {stats['recent']}\n\n"
        "🗂 <b>Catalog</b>\n"
        f"🔴 YouTube: {catalog_counts.get('youtube', 0)}\n"
        f"🟢 JioSaavn: {catalog_counts.get('saavan', 0)}\n"
        f"🎧 Spotify: {catalog_counts.get('spotify', 0)}"
    )


def broadcast_progress_text(report, done: bool = False) -> str:
    head = "✅ <b>Broadcast Complete!</b>" if done else "📤 Broadcasting..."
    return (
        f"{head}\n\n"
        f"✅ Success: {report.success}\n"
        f"❌ Failed: {report.failed}\n"
        f"🚫 Blocked: {report.blocked}\n\n"
        f"📊 Progress: {report.processed}/{report.total}"
    )


def download_error_text(detail: str) -> str:
    return f"❌ Error downloading song: {escape(detail)}"


def _day(value) -> str:
    return value.strftime("%a %b %d %Y") if hasattr(value, "strftime") else "N/A"


def failure_text(failed: Failed) -> str:
    if failed.reason == FailureReason.INVALID_ID:
        return "❌ Invalid song ID!"
    if failed.reason == FailureReason.NOT_FOUND:
        return "❌ Song not found!"
    return download_error_text(failed.detail or "unknown error")
