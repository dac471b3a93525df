import math
from dataclasses import dataclass
from typing import Generic, Sequence, TypeVar, Union

T = TypeVar("T")

PAGE_SIZE = 10
MAX_LABEL_LENGTH = 60


@dataclass(frozen=True)
class Page(Generic[T]):
    items: list[T]
    page: int
    page_size: int
    total_count: int
    total_pages: int

    @property
    def offset(self) -> int:
        """Global index of the first item on this page."""
        return (self.page - 1) * self.page_size

    @property
    def has_prev(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages


def paginate(results: Sequence[T], page: int = 1, page_size: int = PAGE_SIZE) -> Page[T]:
    """
    1-indexed slice of results.

    Pages outside 1..total_pages produce an empty slice rather than an error.
    """
    if page_size < 1:
        raise ValueError("page_size must be positive")

    total = len(results)
    start = (page - 1) * page_size
    items = list(results[start:start + page_size]) if page >= 1 else []
    return Page(
        items=items,
        page=page,
        page_size=page_size,
        total_count=total,
        total_pages=math.ceil(total / page_size),
    )


def format_duration(value: Union[int, float, str, None]) -> str:
    """Seconds -> M:SS. Pre-formatted strings are returned as they are."""
    if isinstance(value, str):
        return value
    if not value:
        return "0:00"
    seconds = int(value)
    return f"{seconds // 60}:{seconds % 60:02d}"


def truncate_label(text: str, limit: int = MAX_LABEL_LENGTH) -> str:
    if len(text) <= limit:
        return text
    return text[: limit - 3] + "..."
