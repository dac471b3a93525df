"""
Selection resolver: replay an already published track or fetch it once.

    pending ──invalid id──────────────────────────────▶ Failed(invalid_id)
       │
    lookup ──catalog token, no entry──────────────────▶ Failed(not_found)
       │ hit                      │ miss
    replay ─▶ Replayed          fetch ──error─────────▶ Failed(fetch_error)
                                  │ ok
                               persist ─▶ Fetched

A replay whose channel post can no longer be copied ends in Failed(not_found).

Every terminal state except an invalid id removes the progress and listing
messages. The chat's search session is cleared only when the request came from
a listing; a pasted link leaves an open search untouched.
"""
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from services.errors import DeliveryFailure, ProviderFetchFailure
from services.models import (
    CatalogEntry,
    Failed,
    FailureReason,
    Fetched,
    FetchedTrack,
    Namespace,
    Outcome,
    Replayed,
    RequestContext,
    Selection,
)

logger = logging.getLogger("resolver")


class ResolutionState(str, Enum):
    PENDING = "pending"
    LOOKUP = "lookup"
    REPLAY = "replay"
    FETCH = "fetch"
    PERSIST = "persist"


@dataclass
class Resolution:
    selection: Selection
    request: RequestContext
    state: ResolutionState = ResolutionState.PENDING
    entry: Optional[CatalogEntry] = None
    fetched: Optional[FetchedTrack] = None
    progress_message_id: Optional[int] = None
    listing_deleted: bool = False
    outcome: Optional[Outcome] = None
    trace: List[ResolutionState] = field(default_factory=list)


class SelectionResolver:
    def __init__(self, catalog, publisher, fetchers: Dict[Namespace, object], sessions):
        self._catalog = catalog
        self._publisher = publisher
        self._fetchers = fetchers
        self._sessions = sessions
        self._steps = {
            ResolutionState.PENDING: self._pending,
            ResolutionState.LOOKUP: self._lookup,
            ResolutionState.REPLAY: self._replay,
            ResolutionState.FETCH: self._fetch,
            ResolutionState.PERSIST: self._persist,
        }

    async def resolve(self, selection: Selection, request: RequestContext) -> Outcome:
        return (await self.run(selection, request)).outcome

    async def run(self, selection: Selection, request: RequestContext) -> Resolution:
        resolution = Resolution(selection=selection, request=request)
        try:
            while resolution.outcome is None:
                resolution.trace.append(resolution.state)
                await self._steps[resolution.state](resolution)
        finally:
            if resolution.trace != [ResolutionState.PENDING]:
                await self._finish(resolution)

        logger.info(
            f"🎯 {selection.origin.value}:{selection.key} -> "
            f"{type(resolution.outcome).__name__} via {'/'.join(s.value for s in resolution.trace)}"
        )
        return resolution

    # ───────────────────────────────────────────────
    # States
    # ───────────────────────────────────────────────
    async def _pending(self, r: Resolution):
        if not r.selection.has_valid_key:
            r.outcome = Failed(FailureReason.INVALID_ID, "Invalid song ID!")
            return
        r.state = ResolutionState.LOOKUP

    async def _lookup(self, r: Resolution):
        origin = r.selection.origin
        if origin.is_catalog:
            r.entry = await self._catalog.find_by_id(origin.namespace, r.selection.key)
            if r.entry is None:
                r.outcome = Failed(FailureReason.NOT_FOUND, "Song not found!")
                return
        else:
            r.entry = await self._catalog.find_by_provider_id(origin.namespace, r.selection.key)

        r.state = ResolutionState.REPLAY if r.entry else ResolutionState.FETCH

    async def _replay(self, r: Resolution):
        try:
            await self._publisher.replay(r.request, r.entry)
        except DeliveryFailure:
            # The stored channel post is gone or unreachable.
            r.outcome = Failed(FailureReason.NOT_FOUND, "Song not found!")
            return
        r.outcome = Replayed(r.entry.distribution_ref, r.entry)

    async def _fetch(self, r: Resolution):
        fetcher = self._fetchers.get(r.selection.origin.namespace)
        if fetcher is None:
            r.outcome = Failed(FailureReason.FETCH_ERROR, "This source is not configured")
            return

        await self._publisher.delete_quietly(r.request.chat_id, r.request.listing_message_id)
        r.listing_deleted = True
        r.progress_message_id = await self._publisher.show_progress(
            r.request, f"⏳ Downloading from {fetcher.label}... Please wait!"
        )
        try:
            r.fetched = await fetcher.fetch_and_publish(r.selection.key, r.request)
        except ProviderFetchFailure as e:
            logger.error(f"❌ {fetcher.label} download failed for {r.selection.key}: {e}")
            r.outcome = Failed(FailureReason.FETCH_ERROR, str(e))
            return
        r.state = ResolutionState.PERSIST

    async def _persist(self, r: Resolution):
        track = r.fetched
        entry = await self._catalog.create(
            CatalogEntry(
                namespace=r.selection.origin.namespace,
                provider_id=track.provider_id,
                title=track.title,
                artist=track.artist,
                distribution_ref=track.distribution_ref,
                duration=track.duration,
                source_url=track.source_url,
            )
        )
        r.outcome = Fetched(track.distribution_ref, entry)

    async def _finish(self, r: Resolution):
        chat_id = r.request.chat_id
        if r.request.listing_message_id is not None:
            self._sessions.delete(chat_id)
        await self._publisher.delete_quietly(chat_id, r.progress_message_id)
        if not r.listing_deleted:
            await self._publisher.delete_quietly(chat_id, r.request.listing_message_id)
