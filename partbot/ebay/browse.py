"""eBay Browse API client for active fixed-price listings.

Authenticates with the OAuth client-credentials grant and keeps the
application token in an injected AppTokenCache so concurrent keyword lookups
share a single token.
"""

import asyncio
import base64
import logging
from typing import Any

import aiohttp

from ..config import EbayConfig
from ..exceptions import EbayApiError, EbayAuthError, EbayRateLimitError
from ..models import ListingMatch
from .search_config import BrowseSearchConfig
from .token_cache import AppTokenCache

logger = logging.getLogger(__name__)

OAUTH_SCOPE = "https://api.ebay.com/oauth/api_scope"


class BrowseApiClient:
    """Searches active listings through the Browse API."""

    def __init__(self, config: EbayConfig, token_cache: AppTokenCache):
        self.config = config
        self.token_cache = token_cache
        self._token_lock = asyncio.Lock()

    async def get_token(self, session: aiohttp.ClientSession) -> str:
        """Return a valid application token, refreshing it when stale.

        Raises:
            EbayAuthError: If eBay refuses to issue a token.
        """
        token = self.token_cache.get()
        if token:
            return token

        async with self._token_lock:
            token = self.token_cache.get()
            if token:
                return token
            return await self._refresh_token(session)

    async def _refresh_token(self, session: aiohttp.ClientSession) -> str:
        credentials = base64.b64encode(
            f"{self.config.client_id}:{self.config.client_secret}".encode()
        ).decode()
        headers = {
            "Content-Type": "application/x-www-form-urlencoded",
            "Authorization": f"Basic {credentials}",
        }
        data = {"grant_type": "client_credentials", "scope": OAUTH_SCOPE}

        try:
            async with session.post(self.config.oauth_url, headers=headers, data=data) as response:
                if response.status != 200:
                    raise EbayAuthError(f"OAuth failed: HTTP {response.status}")
                payload = await response.json()
        except aiohttp.ClientError as e:
            raise EbayAuthError(f"OAuth request failed: {e}") from e

        token = payload.get("access_token")
        if not token:
            raise EbayAuthError("OAuth response has no access_token")

        self.token_cache.store(token, float(payload.get("expires_in", 7200)))
        logger.debug("eBay OAuth token refreshed")
        return token

    async def search_active_items(
        self, keyword: str, search_config: BrowseSearchConfig, session: aiohttp.ClientSession
    ) -> list[ListingMatch]:
        """Search active listings for a keyword.

        Args:
            keyword: Part number to search for.
            search_config: Browse filter and sort settings.
            session: HTTP session for requests.

        Returns:
            Listings in eBay's relevance order, possibly empty.

        Raises:
            EbayAuthError: If no token could be obtained.
            EbayRateLimitError: If eBay answered HTTP 429.
            EbayApiError: For any other unsuccessful response.
        """
        token = await self.get_token(session)

        params: dict[str, str] = {
            "q": keyword,
            "limit": str(self.config.search_limit),
            "filter": search_config.filter,
        }
        if search_config.sort:
            params["sort"] = search_config.sort

        headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
            "X-EBAY-C-MARKETPLACE-ID": self.config.marketplace_id,
        }

        url = f"{self.config.browse_api_url}/item_summary/search"
        async with session.get(url, params=params, headers=headers) as response:
            if response.status == 429:
                raise EbayRateLimitError("eBay Browse API rate limit exceeded")
            if response.status == 401:
                # Token revoked early; the next lookup fetches a fresh one
                self.token_cache.clear()
            if response.status != 200:
                raise EbayApiError(f"eBay Browse API error: HTTP {response.status}")
            data = await response.json()

        return [self._parse_item(item) for item in data.get("itemSummaries") or []]

    @staticmethod
    def _parse_item(item: dict[str, Any]) -> ListingMatch:
        price = item.get("price") or {}
        return ListingMatch(
            item_id=str(item.get("itemId") or "N/A"),
            title=item.get("title") or "No Title",
            price_value=str(price.get("value") or "0"),
            price_currency=price.get("currency") or "USD",
        )
