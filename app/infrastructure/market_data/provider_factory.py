"""
Price feed factory (settings-driven).
"""

from __future__ import annotations

from app.config import settings
from app.domain.models import Market
from app.infrastructure.market_data.exchange_rates import ExchangeRateFetcher
from app.infrastructure.market_data.market_router import MarketRoutingPriceFeed
from app.infrastructure.market_data.naver_finance_provider import NaverFinanceProvider
from app.infrastructure.market_data.yfinance_provider import YFinanceProvider


def get_price_feed() -> MarketRoutingPriceFeed:
    return MarketRoutingPriceFeed(
        {
            Market.KRX: NaverFinanceProvider(base_url=settings.NAVER_FINANCE_URL),
            Market.US: YFinanceProvider(),
        }
    )


def get_exchange_rate_provider() -> ExchangeRateFetcher:
    return ExchangeRateFetcher(url=settings.EXCHANGE_RATE_URL)
