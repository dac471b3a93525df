import asyncio
import logging
from typing import List

from services.models import NAMESPACE_ORDER, SearchResultItem
from utils.matching import build_search_pattern

logger = logging.getLogger("aggregator")


class ResultAggregator:
    """
    Catalog-first search.

    When the catalog has anything matching the query, only catalog entries are
    returned (video, audio, stream order). Otherwise Saavn and YouTube are
    queried together and their results concatenated, Saavn first.
    """

    def __init__(self, catalog, saavn, youtube, live_limit: int = 10):
        self._catalog = catalog
        self._saavn = saavn
        self._youtube = youtube
        self._live_limit = live_limit

    async def aggregate(self, query: str) -> List[SearchResultItem]:
        catalog_results = await self.search_catalog(query)
        if catalog_results:
            logger.info(f"🗂 {len(catalog_results)} catalog match(es) for '{query}'")
            return catalog_results

        live_results = await self.search_live(query)
        logger.info(f"🌐 {len(live_results)} live result(s) for '{query}'")
        return live_results

    async def search_catalog(self, query: str) -> List[SearchResultItem]:
        pattern = build_search_pattern(query)
        if pattern is None:
            return []

        per_namespace = await asyncio.gather(
            *(self._catalog.search(namespace, pattern) for namespace in NAMESPACE_ORDER)
        )
        return [entry.to_result() for entries in per_namespace for entry in entries]

    async def search_live(self, query: str) -> List[SearchResultItem]:
        saavn_results, youtube_results = await asyncio.gather(
            self._saavn.search(query, limit=self._live_limit),
            self._youtube.search(query, limit=self._live_limit),
            return_exceptions=True,
        )
        return self._usable("saavn", saavn_results) + self._usable("youtube", youtube_results)

    def _usable(self, provider: str, results) -> List[SearchResultItem]:
        if isinstance(results, Exception):
            logger.error(f"❌ {provider} search failed: {results}")
            return []
        return list(results)[: self._live_limit]
