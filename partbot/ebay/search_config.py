"""Search mode to eBay query strategy mapping."""

from dataclasses import dataclass, field

from ..models import SearchMode


@dataclass(frozen=True)
class BrowseSearchConfig:
    """Browse API query for active listings."""

    filter: str
    sort: str | None = None


@dataclass(frozen=True)
class FindingSearchConfig:
    """Finding API query for completed listings."""

    item_filters: tuple[tuple[str, str], ...] = field(default_factory=tuple)
    sort_order: str | None = None


EbaySearchConfig = BrowseSearchConfig | FindingSearchConfig

_CONFIGS: dict[SearchMode, EbaySearchConfig] = {
    SearchMode.ACTIVE: BrowseSearchConfig(filter="buyingOptions:{FIXED_PRICE}"),
    SearchMode.SOLD: FindingSearchConfig(
        item_filters=(("SoldItemsOnly", "true"),),
        sort_order="EndTimeSoonest",
    ),
    SearchMode.ENDED: FindingSearchConfig(
        item_filters=(("ListingType", "FixedPrice"),),
        sort_order="EndTimeSoonest",
    ),
}


def search_config_for(mode: SearchMode) -> EbaySearchConfig:
    """Return the query strategy for a search mode."""
    return _CONFIGS[SearchMode(mode)]
