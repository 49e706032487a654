"""
CryptoPulse — Base Provider Interface
Every AI backend implements produce_report() and never raises out of it.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from cryptopulse.data.models import MarketItem, MarketReport, ProviderId
from cryptopulse.utils.helpers import utc_now


class ProviderError(Exception):
    """Raised inside an adapter for a failed attempt; never escapes produce_report()."""


class BaseProvider(ABC):
    """Abstract base class for all AI report providers."""

    def __init__(self, provider_id: ProviderId):
        self.provider_id = provider_id

    async def connect(self) -> None:
        """Initialize transport resources."""

    async def disconnect(self) -> None:
        """Release transport resources."""

    @abstractmethod
    async def produce_report(self, prompt: str, credential: str) -> Optional[MarketReport]:
        """Ask the provider for a market report. Returns None on any failure."""
        pass

    def _parse_items(self, parsed: Any) -> List[Dict[str, Any]]:
        """Validate the extracted payload shape and return the raw item dicts."""
        if not isinstance(parsed, dict) or not isinstance(parsed.get("items"), list):
            raise ProviderError("Invalid JSON structure: missing items")
        return [item for item in parsed["items"] if isinstance(item, dict)]

    def _build_report(self, parsed: Dict[str, Any], items: List[MarketItem]) -> MarketReport:
        return MarketReport(
            items=items,
            overall_sentiment=parsed.get("overallSentiment"),
            last_updated=utc_now(),
            used_model=self.provider_id,
        )
