from aiogram.filters.callback_data import CallbackData
from aiogram.types import InlineKeyboardButton, InlineKeyboardMarkup

from services.models import Origin, SearchResultItem, Selection
from utils.pagination import Page, format_duration, truncate_label

CANCEL_SEARCH = "cancel_search"
CHECK_MEMBERSHIP = "check_membership"
CANCEL_BROADCAST = "cancel_broadcast"


# ───────────────────────────────────────────────
# Callback data
# ───────────────────────────────────────────────
class PlayCallback(CallbackData, prefix="play", sep="|"):
    origin: Origin
    key: str

    @classmethod
    def for_item(cls, item: SearchResultItem) -> "PlayCallback":
        return cls(origin=item.origin, key=item.selection_key)

    def to_selection(self) -> Selection:
        return Selection(origin=self.origin, key=self.key)


class PageCallback(CallbackData, prefix="page", sep="|"):
    page: int


class BroadcastCallback(CallbackData, prefix="confirm_broadcast", sep=":"):
    message_id: int


# ───────────────────────────────────────────────
# Keyboards
# ───────────────────────────────────────────────
def main_menu_kb():
    return InlineKeyboardMarkup(
        inline_keyboard=[
            [InlineKeyboardButton(text="📊 My Stats", callback_data="my_stats")],
            [InlineKeyboardButton(text="❓ Help", callback_data="help")],
        ]
    )


def result_label(position: int, item: SearchResultItem) -> str:
    """'<n>. <icon> <title> - <artist> [M:SS]', capped at 60 characters."""
    icon = "🔴" if item.origin.is_video else "🟢"
    duration = f" [{format_duration(item.duration)}]" if item.duration else ""
    return truncate_label(f"{position}. {icon} {item.title} - {item.artist}{duration}")


def search_results_kb(page: Page[SearchResultItem]):
    rows = [
        [
            InlineKeyboardButton(
                text=result_label(page.offset + index + 1, item),
                callback_data=PlayCallback.for_item(item).pack(),
            )
        ]
        for index, item in enumerate(page.items)
    ]

    nav = []
    if page.has_prev:
        nav.append(InlineKeyboardButton(text="⬅️ Prev", callback_data=PageCallback(page=page.page - 1).pack()))
    if page.has_next:
        nav.append(InlineKeyboardButton(text="➡️ Next", callback_data=PageCallback(page=page.page + 1).pack()))
    if nav:
        rows.append(nav)

    rows.append([InlineKeyboardButton(text="❌ Cancel", callback_data=CANCEL_SEARCH)])
    return InlineKeyboardMarkup(inline_keyboard=rows)


def force_join_kb(channel: str):
    return InlineKeyboardMarkup(
        inline_keyboard=[
            [InlineKeyboardButton(text="📢 Join Channel", url=f"https://t.me/{channel.lstrip('@')}")],
            [InlineKeyboardButton(text="✅ I've Joined", callback_data=CHECK_MEMBERSHIP)],
        ]
    )


def broadcast_confirm_kb(message_id: int):
    return InlineKeyboardMarkup(
        inline_keyboard=[
            [
                InlineKeyboardButton(
                    text="✅ Yes, Broadcast",
                    callback_data=BroadcastCallback(message_id=message_id).pack(),
                ),
                InlineKeyboardButton(text="❌ Cancel", callback_data=CANCEL_BROADCAST),
            ]
        ]
    )
