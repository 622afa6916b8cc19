"""
YFinance Price Feed
US-listed tickers via Yahoo Finance, async-safe via thread offloading
"""

import asyncio
import logging
from datetime import datetime, timezone
from decimal import Decimal

import yfinance as yf

from app.domain.errors import PriceFetchError
from app.domain.models import Currency, Market, PriceQuote

logger = logging.getLogger(__name__)


class YFinanceProvider:
    """Yahoo Finance quote source for US tickers"""

    source = "yfinance"

    def __init__(self, history_period: str = "5d"):
        self.history_period = history_period

    async def _history(self, ticker: yf.Ticker, **kwargs):
        """
        Async-safe wrapper around yfinance history()
        """
        return await asyncio.to_thread(ticker.history, **kwargs)

    async def fetch_price(self, ticker: str, market: Market = Market.US) -> PriceQuote:
        try:
            frame = await self._history(yf.Ticker(ticker), period=self.history_period)
        except Exception as exc:
            logger.error("yfinance history failed | ticker=%s | %s", ticker, exc)
            raise PriceFetchError(ticker, f"Failed to fetch price for {ticker}: {exc}") from exc

        if frame is None or frame.empty or "Close" not in frame:
            raise PriceFetchError(ticker, f"Failed to fetch price for {ticker}: no price history")

        closes = frame["Close"].dropna()
        if closes.empty:
            raise PriceFetchError(ticker, f"Failed to fetch price for {ticker}: no closing price")

        price = Decimal(str(float(closes.iloc[-1])))
        if price <= 0:
            raise PriceFetchError(ticker, f"Invalid price parsed for {ticker}: {price}")

        return PriceQuote(
            ticker=ticker,
            price=price,
            currency=Currency.USD,
            source=self.source,
            fetched_at=datetime.now(timezone.utc),
        )
