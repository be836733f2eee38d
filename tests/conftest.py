from typing import Any, Dict, List, Tuple

import pytest

from app.services.market_service import CoinGeckoService


class FakeCoinGeckoService(CoinGeckoService):
    """按路径返回预设 (状态码, 数据)，并记录所有请求"""

    def __init__(self, responses: Dict[str, Tuple[int, Any]]) -> None:
        super().__init__()
        self.responses = responses
        self.calls: List[Tuple[str, Dict[str, Any]]] = []

    async def _get_json(self, path: str, params: Dict[str, Any]) -> Tuple[int, Any]:
        self.calls.append((path, dict(params)))
        return self.responses[path]


BTC_ROW = {
    "id": "bitcoin",
    "symbol": "btc",
    "name": "Bitcoin",
    "image": "https://assets.coingecko.com/coins/images/1/large/bitcoin.png",
    "current_price": 60000,
    "market_cap": 1_000_000_000,
    "market_cap_rank": 1,
    "total_volume": 300_000_000,
    "high_24h": 61000,
    "low_24h": 59000,
    "price_change_percentage_24h": -1.2,
    "price_change_percentage_24h_in_currency": -1.2,
    "price_change_percentage_7d_in_currency": 3.4,
    "price_change_percentage_30d_in_currency": None,
    "ath": 69000,
    "atl": 67.81,
}


SEARCH_COINS = {
    "coins": [
        {"id": "wrapped-bitcoin", "symbol": "wbtc", "name": "Wrapped Bitcoin"},
        {"id": "bitcoin", "symbol": "btc", "name": "Bitcoin"},
    ]
}


@pytest.fixture
def make_service():
    def _make(search=(200, SEARCH_COINS), markets=(200, [BTC_ROW])):
        return FakeCoinGeckoService({"/search": search, "/coins/markets": markets})
    return _make


@pytest.fixture
def btc_row():
    return dict(BTC_ROW)
