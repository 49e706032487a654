"""
CryptoPulse — CoinGecko Market Data Adapter
Top coins by market cap with 24h change. Failures degrade to an empty list.
"""
import aiohttp
from typing import Any, Dict, List, Optional

from cryptopulse.config.settings import get_settings
from cryptopulse.data.models import CoinPrice
from cryptopulse.utils.logger import get_logger

logger = get_logger("coingecko_adapter")


def _to_coin(row: Dict[str, Any]) -> CoinPrice:
    return CoinPrice(
        id=row["id"],
        symbol=str(row["symbol"]).upper(),
        name=row["name"],
        current_price=row.get("current_price"),
        price_change_percentage_24h=row.get("price_change_percentage_24h"),
        image=row.get("image"),
    )


class CoinGeckoAdapter:
    """CoinGecko /coins/markets client."""

    def __init__(self):
        self.settings = get_settings().data
        self.base_url = self.settings.coingecko_base_url
        self._session: Optional[aiohttp.ClientSession] = None

    async def connect(self) -> None:
        timeout = aiohttp.ClientTimeout(total=self.settings.poll_timeout_seconds)
        self._session = aiohttp.ClientSession(timeout=timeout)
        logger.info("coingecko_adapter_connected")

    async def disconnect(self) -> None:
        if self._session:
            await self._session.close()
            self._session = None
        logger.info("coingecko_adapter_disconnected")

    async def fetch_top_coins(self) -> List[CoinPrice]:
        """Fetch the top coins by market cap (first page only)."""
        try:
            if not self._session:
                await self.connect()

            url = f"{self.base_url}/coins/markets"
            params = {
                "vs_currency": "usd",
                "order": "market_cap_desc",
                "per_page": self.settings.top_coins_limit,
                "page": 1,
                "sparkline": "false",
                "price_change_percentage": "24h",
            }

            async with self._session.get(url, params=params) as resp:
                if not 200 <= resp.status < 300:
                    # Usually the free-tier rate limit
                    logger.warning("coingecko_markets_error", status=resp.status)
                    return []
                data = await resp.json()

            return [_to_coin(row) for row in data]
        except Exception as e:
            logger.error("coingecko_markets_exception", error=str(e))
            return []


# Singleton
_adapter: Optional[CoinGeckoAdapter] = None


def get_price_adapter() -> CoinGeckoAdapter:
    global _adapter
    if _adapter is None:
        _adapter = CoinGeckoAdapter()
    return _adapter
