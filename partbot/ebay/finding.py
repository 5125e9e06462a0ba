"""eBay Finding API client for sold and ended listings."""

import logging
from typing import Any

import aiohttp

from ..config import EbayConfig
from ..exceptions import EbayApiError, EbayRateLimitError
from ..models import ListingMatch
from .search_config import FindingSearchConfig

logger = logging.getLogger(__name__)

SERVICE_VERSION = "1.13.0"
RATE_LIMIT_ERROR_ID = "10001"


def _first(value: Any, default: Any = None) -> Any:
    """Unwrap the single-element lists the Finding API JSON format uses."""
    if isinstance(value, list):
        return value[0] if value else default
    return default if value is None else value


class FindingApiClient:
    """Searches completed listings through findCompletedItems."""

    def __init__(self, config: EbayConfig):
        self.config = config

    def _build_params(self, keyword: str, search_config: FindingSearchConfig) -> dict[str, str]:
        params = {
            "OPERATION-NAME": "findCompletedItems",
            "SERVICE-VERSION": SERVICE_VERSION,
            "SECURITY-APPNAME": self.config.client_id,
            "GLOBAL-ID": self.config.marketplace_id,
            "RESPONSE-DATA-FORMAT": "JSON",
            "REST-PAYLOAD": "",
            "keywords": keyword,
            "paginationInput.entriesPerPage": str(self.config.search_limit),
            "paginationInput.pageNumber": "1",
        }
        if search_config.sort_order:
            params["sortOrder"] = search_config.sort_order
        for index, (name, value) in enumerate(search_config.item_filters):
            params[f"itemFilter({index}).name"] = name
            params[f"itemFilter({index}).value"] = value
        return params

    async def search_completed_items(
        self, keyword: str, search_config: FindingSearchConfig, session: aiohttp.ClientSession
    ) -> list[ListingMatch]:
        """Search completed listings for a keyword.

        Raises:
            EbayRateLimitError: If eBay reports the call quota as exhausted.
            EbayApiError: For any other unsuccessful response.
        """
        logger.debug("Searching completed items on eBay: %s", keyword)
        params = self._build_params(keyword, search_config)

        async with session.get(self.config.finding_api_url, params=params) as response:
            if response.status == 429:
                raise EbayRateLimitError("eBay Finding API rate limit exceeded")
            # Quota errors arrive as HTTP 500 with an error body
            data = await response.json(content_type=None)
            status = response.status

        body = _first((data or {}).get("findCompletedItemsResponse"), {}) or {}
        if not body:
            self._raise_for_error(data or {}, status)

        if _first(body.get("ack")) not in ("Success", "Warning"):
            self._raise_for_error(body, status)

        search_result = _first(body.get("searchResult"), {}) or {}
        items = search_result.get("item") or []
        results = [self._parse_item(item) for item in items]

        logger.debug("Finding API search completed: %s -> %d results", keyword, len(results))
        return results

    @staticmethod
    def _raise_for_error(body: dict[str, Any], status: int) -> None:
        error_message = _first(body.get("errorMessage"), {}) or {}
        error = _first(error_message.get("error"), {}) or {}
        error_id = str(_first(error.get("errorId"), ""))
        message = _first(error.get("message"), f"HTTP {status}")

        if error_id == RATE_LIMIT_ERROR_ID:
            raise EbayRateLimitError(f"eBay Finding API rate limit exceeded: {message}")
        raise EbayApiError(f"eBay Finding API error: {message}")

    @staticmethod
    def _parse_item(item: dict[str, Any]) -> ListingMatch:
        selling_status = _first(item.get("sellingStatus"), {}) or {}
        current_price = _first(selling_status.get("currentPrice"), {}) or {}
        return ListingMatch(
            item_id=str(_first(item.get("itemId"), "N/A")),
            title=_first(item.get("title"), "No Title") or "No Title",
            price_value=str(current_price.get("__value__") or "0"),
            price_currency=current_price.get("@currencyId") or "N/A",
        )
