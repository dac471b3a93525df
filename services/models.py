from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Union

INVALID_KEYS = frozenset({"", "undefined", "null", "none"})


class Namespace(str, Enum):
    """Catalog namespaces; the value is the Mongo collection name."""

    VIDEO = "youtube"
    AUDIO = "saavan"
    STREAM = "spotify"


NAMESPACE_ORDER = (Namespace.VIDEO, Namespace.AUDIO, Namespace.STREAM)


class Origin(str, Enum):
    """Where a search result came from. The value travels in callback data."""

    CATALOG_VIDEO = "youtube"
    CATALOG_AUDIO = "saavan"
    CATALOG_STREAM = "spotify"
    LIVE_VIDEO = "youtube_api"
    LIVE_AUDIO = "saavan_api"
    LIVE_STREAM = "spotify_api"

    @property
    def is_catalog(self) -> bool:
        return self in _CATALOG_ORIGINS

    @property
    def namespace(self) -> Namespace:
        return _ORIGIN_NAMESPACE[self]

    @property
    def is_video(self) -> bool:
        return self.namespace is Namespace.VIDEO

    @classmethod
    def catalog_for(cls, namespace: Namespace) -> "Origin":
        return _CATALOG_BY_NAMESPACE[namespace]


_CATALOG_ORIGINS = frozenset({Origin.CATALOG_VIDEO, Origin.CATALOG_AUDIO, Origin.CATALOG_STREAM})
_ORIGIN_NAMESPACE = {
    Origin.CATALOG_VIDEO: Namespace.VIDEO,
    Origin.CATALOG_AUDIO: Namespace.AUDIO,
    Origin.CATALOG_STREAM: Namespace.STREAM,
    Origin.LIVE_VIDEO: Namespace.VIDEO,
    Origin.LIVE_AUDIO: Namespace.AUDIO,
    Origin.LIVE_STREAM: Namespace.STREAM,
}
_CATALOG_BY_NAMESPACE = {
    Namespace.VIDEO: Origin.CATALOG_VIDEO,
    Namespace.AUDIO: Origin.CATALOG_AUDIO,
    Namespace.STREAM: Origin.CATALOG_STREAM,
}


@dataclass(frozen=True)
class SearchResultItem:
    title: str
    artist: str
    origin: Origin
    selection_key: str
    duration: Union[int, str, None] = None
    image_url: Optional[str] = None


@dataclass(frozen=True)
class CatalogEntry:
    namespace: Namespace
    provider_id: str
    title: str
    artist: str
    distribution_ref: int
    duration: int = 0
    source_url: Optional[str] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    id: Optional[str] = None

    def to_document(self) -> dict:
        doc = {
            "provider_id": self.provider_id,
            "title": self.title,
            "artist": self.artist,
            "message_id": self.distribution_ref,
            "duration": self.duration,
            "created_at": self.created_at,
        }
        if self.source_url:
            doc["source_url"] = self.source_url
        return doc

    @classmethod
    def from_document(cls, namespace: Namespace, doc: dict) -> "CatalogEntry":
        return cls(
            namespace=namespace,
            provider_id=doc["provider_id"],
            title=doc.get("title") or "Unknown",
            artist=doc.get("artist") or "Unknown",
            distribution_ref=doc["message_id"],
            duration=int(doc.get("duration") or 0),
            source_url=doc.get("source_url"),
            created_at=doc.get("created_at") or datetime.now(timezone.utc),
            id=str(doc["_id"]) if doc.get("_id") is not None else None,
        )

    def to_result(self) -> SearchResultItem:
        return SearchResultItem(
            title=self.title,
            artist=self.artist,
            origin=Origin.catalog_for(self.namespace),
            selection_key=self.id or "",
            duration=self.duration,
        )


@dataclass(frozen=True)
class Selection:
    """A user's pick: which origin and which key within it."""

    origin: Origin
    key: Optional[str]

    @property
    def has_valid_key(self) -> bool:
        return self.key is not None and self.key.strip().lower() not in INVALID_KEYS


@dataclass(frozen=True)
class RequestContext:
    """Who asked, and which messages belong to the request."""

    chat_id: int
    reply_to_message_id: Optional[int] = None
    listing_message_id: Optional[int] = None


@dataclass(frozen=True)
class FetchedTrack:
    provider_id: str
    title: str
    artist: str
    distribution_ref: int
    duration: int = 0
    source_url: Optional[str] = None


class FailureReason(str, Enum):
    INVALID_ID = "invalid_id"
    NOT_FOUND = "not_found"
    FETCH_ERROR = "fetch_error"


@dataclass(frozen=True)
class Replayed:
    distribution_ref: int
    entry: CatalogEntry


@dataclass(frozen=True)
class Fetched:
    distribution_ref: int
    entry: CatalogEntry


@dataclass(frozen=True)
class Failed:
    reason: FailureReason
    detail: str = ""


Outcome = Union[Replayed, Fetched, Failed]
