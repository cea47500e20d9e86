from __future__ import annotations

from typing import Any, List, Optional

from .http_client import FiriHttpClient
from .models import (
    HistoricOrder,
    Market,
    MarketID,
    MarketTicker,
    Orderbook,
    parse_json,
    parse_list,
)


class FiriPublicClient:
    """Market data endpoints that need no signature."""

    def __init__(self, http_client: FiriHttpClient) -> None:
        self.http_client = http_client

    def _get(self, path: str, timeout: Optional[float]) -> Any:
        response = self.http_client.execute("GET", path, timeout=timeout)
        return parse_json(response.expect(200))

    def get_markets_v1(self, *, timeout: Optional[float] = None) -> List[Market]:
        return parse_list(self._get("/v1/markets", timeout), Market.from_payload)

    def get_markets(self, *, timeout: Optional[float] = None) -> List[Market]:
        return parse_list(self._get("/v2/markets", timeout), Market.from_payload)

    def get_market_tickers(self, *, timeout: Optional[float] = None) -> List[MarketTicker]:
        return parse_list(self._get("/v2/markets/tickers", timeout), MarketTicker.from_payload)

    def get_market_ticker(self, market: MarketID | str, *, timeout: Optional[float] = None) -> MarketTicker:
        market_id = MarketID.parse(market)
        payload = self._get(f"/v2/markets/{market_id.value}/ticker", timeout)
        return MarketTicker.from_payload(payload, market=market_id.value)

    def get_market_trade_history(
        self, market: MarketID | str, *, timeout: Optional[float] = None
    ) -> List[HistoricOrder]:
        market_id = MarketID.parse(market)
        payload = self._get(f"/v2/markets/{market_id.value}/history", timeout)
        return parse_list(payload, HistoricOrder.from_payload)

    def get_orderbook(self, market: MarketID | str, *, timeout: Optional[float] = None) -> Orderbook:
        market_id = MarketID.parse(market)
        return Orderbook.from_payload(self._get(f"/v2/markets/{market_id.value}/depth", timeout))
