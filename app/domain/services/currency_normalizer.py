"""
Currency normalization between a market's native currency and the base currency.

Rates are expressed as "1 unit of currency = rate units of base"
(e.g. {"KRW": 1, "USD": 1350}).
"""

from decimal import Decimal
from typing import Mapping, Union

from app.domain.errors import ExchangeRateError
from app.domain.models import BASE_CURRENCY, MARKET_CURRENCY, Currency, Market

Rates = Mapping[str, Decimal]


def currency_for_market(market: Union[Market, str]) -> Currency:
    return MARKET_CURRENCY[Market(market)]


class CurrencyNormalizer:
    """Converts prices to and from the base currency"""

    def __init__(self, base: Currency = BASE_CURRENCY):
        self.base = base

    def validate_rates(self, rates: Rates) -> None:
        base_rate = rates.get(self.base.value)
        if base_rate is None or Decimal(base_rate) != Decimal("1"):
            raise ExchangeRateError(
                f"{self.base.value} exchange rate must be 1 (base currency)",
                {"currency": self.base.value, "rate": None if base_rate is None else str(base_rate)},
            )
        for currency, rate in rates.items():
            if rate <= 0:
                raise ExchangeRateError(
                    f"Invalid exchange rate for currency: {currency}",
                    {"currency": currency, "rate": str(rate)},
                )

    def to_base(self, price: Decimal, currency: Union[Currency, str], rates: Rates) -> Decimal:
        currency = Currency(currency)
        if currency == self.base:
            return price
        return price * self._rate(currency, rates)

    def from_base(self, price: Decimal, currency: Union[Currency, str], rates: Rates) -> Decimal:
        currency = Currency(currency)
        if currency == self.base:
            return price
        return price / self._rate(currency, rates)

    def normalize_price(self, price: Decimal, market: Union[Market, str], rates: Rates) -> Decimal:
        """Price in the market's native currency -> base currency"""
        return self.to_base(price, currency_for_market(market), rates)

    @staticmethod
    def _rate(currency: Currency, rates: Rates) -> Decimal:
        rate = rates.get(currency.value)
        if rate is None or rate <= 0:
            raise ExchangeRateError(
                f"Invalid exchange rate for currency: {currency.value}",
                {"currency": currency.value, "rate": None if rate is None else str(rate)},
            )
        return rate
