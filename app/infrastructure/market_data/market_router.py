"""
Market-routing price feed: dispatch each ticker to the feed for its market.
"""

from __future__ import annotations

from typing import Dict

from app.domain.errors import PriceFetchError
from app.domain.models import Market, PriceQuote
from app.domain.services.ports import PriceFeed


class MarketRoutingPriceFeed:
    def __init__(self, feeds: Dict[Market, PriceFeed]):
        self.feeds = feeds
        self.last_sources: Dict[str, str] = {}

    async def fetch_price(self, ticker: str, market: Market) -> PriceQuote:
        feed = self.feeds.get(Market(market))
        if feed is None:
            raise PriceFetchError(ticker, f"No price feed configured for market {market}", {"market": str(market)})
        quote = await feed.fetch_price(ticker, market)
        self.last_sources[ticker] = quote.source
        return quote
