"""
CryptoPulse — Notification Watermark
Decides which items of a new batch still need to be announced.
"""
from dataclasses import dataclass, replace
from datetime import datetime
from typing import List, Sequence, Tuple

from cryptopulse.data.models import MarketItem


@dataclass(frozen=True)
class WatermarkState:
    """Newest item timestamp already announced, and whether a first batch was seen."""
    watermark: datetime
    primed: bool = False


def plan_notifications(
    state: WatermarkState, items: Sequence[MarketItem]
) -> Tuple[List[MarketItem], WatermarkState]:
    """
    Return (items to send oldest first, watermark after sending all of them).

    The first batch only primes the watermark so pre-existing news is never
    replayed; an empty first batch leaves the watermark where it was.
    """
    if not state.primed:
        watermark = max((item.timestamp for item in items), default=state.watermark)
        return [], WatermarkState(watermark=watermark, primed=True)

    fresh = sorted(
        (item for item in items if item.timestamp > state.watermark),
        key=lambda item: item.timestamp,
    )
    watermark = max([state.watermark] + [item.timestamp for item in fresh])
    return fresh, replace(state, watermark=watermark)


def advance(state: WatermarkState, item: MarketItem) -> WatermarkState:
    """Move the watermark past an item that has been dispatched."""
    if item.timestamp > state.watermark:
        return replace(state, watermark=item.timestamp)
    return state
