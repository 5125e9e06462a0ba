"""eBay API clients.

Contains the marketplace-specific clients used by the search gateway:

- BrowseApiClient: active fixed-price listings, OAuth bearer token
- FindingApiClient: completed (sold or ended) listings
- AppTokenCache: application token holder owned by the Browse client
- search_config_for: maps a user's search mode to a query strategy
"""

from .browse import BrowseApiClient
from .finding import FindingApiClient
from .search_config import BrowseSearchConfig, FindingSearchConfig, search_config_for
from .token_cache import AppTokenCache

__all__ = [
    "AppTokenCache",
    "BrowseApiClient",
    "BrowseSearchConfig",
    "FindingApiClient",
    "FindingSearchConfig",
    "search_config_for",
]
