"""
CryptoPulse — Integration Tests for the CoinGecko price adapter
"""
import pytest

import aiohttp

from cryptopulse.data.adapters.coingecko_adapter import CoinGeckoAdapter
from cryptopulse.tests.factories import make_session

MARKETS = [
    {
        "id": "bitcoin", "symbol": "btc", "name": "Bitcoin", "current_price": 64000.5,
        "price_change_percentage_24h": 2.31, "image": "https://img/btc.png", "market_cap": 1,
    },
    {
        "id": "ethereum", "symbol": "eth", "name": "Ethereum", "current_price": 3100,
        "price_change_percentage_24h": -1.2, "image": "https://img/eth.png",
    },
]


class TestCoinGeckoAdapter:
    @pytest.mark.asyncio
    async def test_top_coins(self):
        adapter = CoinGeckoAdapter()
        adapter._session = make_session(payload=MARKETS)

        coins = await adapter.fetch_top_coins()

        assert [c.symbol for c in coins] == ["BTC", "ETH"]
        assert coins[0].current_price == 64000.5
        assert coins[1].price_change_percentage_24h == -1.2
        args, kwargs = adapter._session.get.call_args
        assert args[0].endswith("/coins/markets")
        assert kwargs["params"]["per_page"] == 20
        assert kwargs["params"]["page"] == 1
        assert kwargs["params"]["order"] == "market_cap_desc"
        assert kwargs["params"]["price_change_percentage"] == "24h"

    @pytest.mark.asyncio
    async def test_non_200_returns_empty(self):
        adapter = CoinGeckoAdapter()
        adapter._session = make_session(status=429, payload={"error": "rate limited"})
        assert await adapter.fetch_top_coins() == []

    @pytest.mark.asyncio
    async def test_any_2xx_is_success(self):
        adapter = CoinGeckoAdapter()
        adapter._session = make_session(status=203, payload=MARKETS)
        coins = await adapter.fetch_top_coins()
        assert [c.id for c in coins] == ["bitcoin", "ethereum"]

    @pytest.mark.asyncio
    async def test_network_error_returns_empty(self):
        adapter = CoinGeckoAdapter()
        adapter._session = make_session(exc=aiohttp.ClientConnectionError("dns"))
        assert await adapter.fetch_top_coins() == []

    @pytest.mark.asyncio
    async def test_bad_payload_returns_empty(self):
        adapter = CoinGeckoAdapter()
        adapter._session = make_session(payload=[{"unexpected": True}])
        assert await adapter.fetch_top_coins() == []
