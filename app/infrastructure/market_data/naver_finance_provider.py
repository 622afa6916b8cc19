"""
Naver Finance Price Feed
Current price for KRX tickers scraped from the Naver Finance item page
"""

import logging
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Optional

import httpx
from bs4 import BeautifulSoup

from app.config import settings
from app.domain.errors import PriceFetchError
from app.domain.models import Currency, Market, PriceQuote

logger = logging.getLogger(__name__)

_USER_AGENT = "Mozilla/5.0 (compatible; dca-order-sheet/1.0)"


class NaverFinanceProvider:
    """
    KRX quote source.

    A single AsyncClient may be shared; when none is given each call opens
    its own short-lived client.
    """

    source = "naver"

    def __init__(
        self,
        base_url: str = settings.NAVER_FINANCE_URL,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 10.0,
    ):
        self.base_url = base_url
        self.client = client
        self.timeout = timeout

    async def fetch_price(self, ticker: str, market: Market = Market.KRX) -> PriceQuote:
        try:
            html = await self._get_page(ticker)
        except httpx.HTTPError as exc:
            logger.error("Failed to fetch price | ticker=%s | %s", ticker, exc)
            raise PriceFetchError(ticker, f"Failed to fetch price for {ticker}: {exc}") from exc

        price = self.parse_price(html)
        if price is None:
            logger.error("Price not found in response | ticker=%s", ticker)
            raise PriceFetchError(ticker, f"Failed to fetch price for {ticker}: price not found in response")

        return PriceQuote(
            ticker=ticker,
            price=price,
            currency=Currency.KRW,
            source=self.source,
            fetched_at=datetime.now(timezone.utc),
        )

    async def _get_page(self, ticker: str) -> str:
        params = {"code": ticker}
        headers = {"User-Agent": _USER_AGENT}
        if self.client is not None:
            resp = await self.client.get(self.base_url, params=params, headers=headers)
            resp.raise_for_status()
            return resp.text
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            resp = await client.get(self.base_url, params=params, headers=headers)
            resp.raise_for_status()
            return resp.text

    @staticmethod
    def parse_price(html: str) -> Optional[Decimal]:
        """
        Extract the current price, e.g. ``<dd class="no_today"><span>37,250</span>``.

        Returns None when the element is missing or the value is not positive.
        """
        soup = BeautifulSoup(html, "html.parser")
        node = soup.select_one("dd.no_today span") or soup.select_one("p.no_today span.blind")
        if node is None:
            return None

        raw = node.get_text(strip=True).replace(",", "")
        try:
            price = Decimal(raw)
        except InvalidOperation:
            return None
        return price if price > 0 else None
