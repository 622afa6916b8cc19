"""
Exchange rate fetcher - USD/KRW from a public API.
Falls back to the configured default rate when the API is unavailable.
"""

import logging
from decimal import Decimal
from typing import Dict, Optional

import httpx

from app.config import settings
from app.domain.models import Currency

logger = logging.getLogger(__name__)


class ExchangeRateFetcher:
    """Rates relative to KRW: {"KRW": 1, "USD": <KRW per USD>}"""

    def __init__(
        self,
        url: str = settings.EXCHANGE_RATE_URL,
        default_usd_rate: Decimal = Decimal(str(settings.DEFAULT_USD_KRW_RATE)),
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 10.0,
    ):
        self.url = url
        self.default_usd_rate = default_usd_rate
        self.client = client
        self.timeout = timeout

    async def get_rates(self) -> Dict[str, Decimal]:
        usd_rate = await self._fetch_usd_krw()
        rates = {Currency.KRW.value: Decimal("1"), Currency.USD.value: usd_rate}
        logger.info("Exchange rates resolved | USD=%s", usd_rate)
        return rates

    async def _fetch_usd_krw(self) -> Decimal:
        try:
            payload = await self._get_json()
            if payload.get("result") != "success":
                raise ValueError("Invalid response from exchange rate API")
            rate = Decimal(str(payload["rates"]["KRW"]))
            if rate <= 0:
                raise ValueError(f"Invalid exchange rate: {rate}")
            return rate
        except (httpx.HTTPError, ValueError, KeyError, TypeError) as exc:
            logger.warning(
                "Failed to fetch exchange rate, using default %s: %s",
                self.default_usd_rate,
                exc,
            )
            return self.default_usd_rate

    async def _get_json(self) -> dict:
        headers = {"User-Agent": "dca-order-sheet/1.0"}
        if self.client is not None:
            resp = await self.client.get(self.url, headers=headers)
            resp.raise_for_status()
            return resp.json()
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            resp = await client.get(self.url, headers=headers)
            resp.raise_for_status()
            return resp.json()
