import time
from dataclasses import dataclass, replace
from typing import Dict, List, Optional

from services.models import SearchResultItem


@dataclass(frozen=True)
class SearchSession:
    results: List[SearchResultItem]
    original_message_id: Optional[int]
    current_page: int = 1
    rendered_message_id: Optional[int] = None
    created_at: float = 0.0


class SessionStore:
    """
    Current search per chat.

    A chat has at most one session; starting a new one replaces the old.
    Sessions idle longer than ttl_seconds are dropped on access.
    """

    def __init__(self, ttl_seconds: int = 1800):
        self._ttl_seconds = max(1, ttl_seconds)
        self._sessions: Dict[int, SearchSession] = {}

    def start(self, chat_id: int, results: List[SearchResultItem], original_message_id: Optional[int]) -> SearchSession:
        session = SearchSession(
            results=list(results),
            original_message_id=original_message_id,
            created_at=time.monotonic(),
        )
        self.set(chat_id, session)
        return session

    def get(self, chat_id: int) -> Optional[SearchSession]:
        self._purge(time.monotonic())
        return self._sessions.get(chat_id)

    def set(self, chat_id: int, session: SearchSession):
        self._purge(time.monotonic())
        self._sessions[chat_id] = session

    def delete(self, chat_id: int):
        self._sessions.pop(chat_id, None)

    def set_rendered(self, chat_id: int, message_id: int, page: int = 1):
        session = self.get(chat_id)
        if session is None:
            return
        self._sessions[chat_id] = replace(
            session,
            rendered_message_id=message_id,
            current_page=page,
            created_at=time.monotonic(),
        )

    def __len__(self) -> int:
        return len(self._sessions)

    def _purge(self, now: float):
        expired = [
            chat_id for chat_id, session in self._sessions.items()
            if now - session.created_at > self._ttl_seconds
        ]
        for chat_id in expired:
            del self._sessions[chat_id]
