"""Batched eBay search across many part numbers.

One gateway call serves one user request: every keyword is looked up
concurrently inside a shared HTTP session and the results come back in the
same order as the keywords, with an explicit absent marker for keywords that
found nothing or failed on their own.
"""

import asyncio
import logging
from collections.abc import Callable
from functools import partial

import aiohttp

from ..ebay import BrowseApiClient, BrowseSearchConfig, FindingApiClient, search_config_for
from ..ebay.search_config import EbaySearchConfig
from ..exceptions import EbayAuthError, EbayRateLimitError
from ..models import KeywordResult, SearchMode
from .cache_service import CacheService

logger = logging.getLogger(__name__)

# Failures that mean the whole batch is pointless, not just one keyword
FATAL_ERRORS = (EbayAuthError, EbayRateLimitError)


def create_session(timeout: int = 20) -> aiohttp.ClientSession:
    """Create the HTTP session used for one batch of eBay calls.

    Args:
        timeout: Total per-request timeout in seconds.

    Returns:
        aiohttp.ClientSession: Configured HTTP session.
    """
    connector = aiohttp.TCPConnector(limit=100, limit_per_host=30)
    client_timeout = aiohttp.ClientTimeout(total=timeout)
    headers = {"Accept": "application/json", "Accept-Language": "en-US,en;q=0.5"}
    return aiohttp.ClientSession(connector=connector, timeout=client_timeout, headers=headers)


class EbaySearchGateway:
    """Looks up part numbers on eBay according to a user's search mode.

    Responsibilities:
    - Route each mode to the Browse or the Finding API
    - Search keywords concurrently with a bounded fan-out
    - Degrade single-keyword failures to "not found"
    - Raise only when the whole batch cannot succeed
    """

    def __init__(
        self,
        browse_client: BrowseApiClient,
        finding_client: FindingApiClient,
        cache_service: CacheService | None = None,
        max_concurrent: int = 5,
        http_timeout: int = 20,
        session_factory: Callable[[], aiohttp.ClientSession] | None = None,
    ):
        self.browse_client = browse_client
        self.finding_client = finding_client
        self.cache_service = cache_service
        self.max_concurrent = max_concurrent
        self.http_timeout = http_timeout
        self.session_factory = session_factory or partial(create_session, http_timeout)

    async def search(self, keywords: list[str], mode: SearchMode) -> list[KeywordResult]:
        """Find the best listing for each keyword.

        Args:
            keywords: Part numbers in request order.
            mode: Search strategy of the requesting user.

        Returns:
            One KeywordResult per keyword, in the same order.

        Raises:
            EbayAuthError: If no OAuth token could be obtained.
            EbayRateLimitError: If eBay throttled any lookup.
        """
        if not keywords:
            return []

        search_config = search_config_for(mode)
        logger.info("Starting eBay search: %d keywords, mode %s", len(keywords), mode.value)

        async with self.session_factory() as session:
            if isinstance(search_config, BrowseSearchConfig):
                # Fail fast on auth instead of once per keyword
                await self.browse_client.get_token(session)

            semaphore = asyncio.Semaphore(self.max_concurrent)

            async def search_one(keyword: str) -> KeywordResult:
                async with semaphore:
                    return await self._search_keyword(keyword, mode, search_config, session)

            raw_results = await asyncio.gather(
                *[search_one(keyword) for keyword in keywords], return_exceptions=True
            )

        results: list[KeywordResult] = []
        for keyword, raw_result in zip(keywords, raw_results):
            if isinstance(raw_result, FATAL_ERRORS):
                raise raw_result
            if isinstance(raw_result, BaseException):
                if not isinstance(raw_result, Exception):
                    raise raw_result
                logger.warning("Search failed for keyword %s: %s", keyword, raw_result)
                results.append(KeywordResult(keyword=keyword))
            else:
                results.append(raw_result)

        logger.info(
            "eBay search completed: %d results, %d found",
            len(results),
            sum(1 for r in results if r.found),
        )
        return results

    async def _search_keyword(
        self,
        keyword: str,
        mode: SearchMode,
        search_config: EbaySearchConfig,
        session: aiohttp.ClientSession,
    ) -> KeywordResult:
        if self.cache_service is not None:
            cached = await self.cache_service.get_keyword_result(mode, keyword)
            if cached is not None:
                return cached

        if isinstance(search_config, BrowseSearchConfig):
            items = await self.browse_client.search_active_items(keyword, search_config, session)
        else:
            items = await self.finding_client.search_completed_items(
                keyword, search_config, session
            )

        result = KeywordResult(keyword=keyword, match=items[0] if items else None)

        if self.cache_service is not None:
            await self.cache_service.set_keyword_result(mode, result)
        return result
