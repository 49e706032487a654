"""
CryptoPulse — Item View
Signal filter and sort order for the dashboard item list, plus lookup of a
single item for the detail view.
"""
from enum import Enum
from typing import Iterable, List, Optional

from cryptopulse.data.models import MarketItem


class ItemSort(str, Enum):
    DATE_DESC = "date-desc"
    DATE_ASC = "date-asc"
    CONFIDENCE_DESC = "confidence-desc"


class SignalFilter(str, Enum):
    ALL = "ALL"
    BUY = "BUY"
    SELL = "SELL"
    NEUTRAL = "NEUTRAL"
    HOLD = "HOLD"


def filter_and_sort_items(
    items: Iterable[MarketItem],
    signal: SignalFilter = SignalFilter.ALL,
    sort: ItemSort = ItemSort.DATE_DESC,
) -> List[MarketItem]:
    """
    Items matching the signal filter, in the requested order.
    Ties keep their incoming order.
    """
    signal = SignalFilter(signal)
    sort = ItemSort(sort)

    result = list(items)
    if signal != SignalFilter.ALL:
        result = [item for item in result if item.signal.value == signal.value]

    if sort == ItemSort.CONFIDENCE_DESC:
        result.sort(key=lambda item: item.confidence, reverse=True)
    else:
        result.sort(key=lambda item: item.timestamp, reverse=sort == ItemSort.DATE_DESC)
    return result


def find_item(items: Iterable[MarketItem], item_id: str) -> Optional[MarketItem]:
    for item in items:
        if item.id == item_id:
            return item
    return None
