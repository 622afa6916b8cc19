from decimal import Decimal

import httpx
import pytest

from app.domain.errors import ErrorKind, PriceFetchError
from app.domain.models import Currency, Market
from app.infrastructure.market_data.exchange_rates import ExchangeRateFetcher
from app.infrastructure.market_data.market_router import MarketRoutingPriceFeed
from app.infrastructure.market_data.naver_finance_provider import NaverFinanceProvider
from app.infrastructure.market_data.yfinance_provider import YFinanceProvider

from fakes import FakePriceFeed

NAVER_HTML = """
<html><body>
<div class="rate_info">
  <dl class="blind"><dt>종목 시세 정보</dt>
  <dd class="no_today"><span>37,250</span></dd></dl>
</div>
</body></html>
"""

NAVER_BLIND_HTML = """
<p class="no_today"><em class="no_up"><span class="blind">12,345</span></em></p>
"""


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def test_parse_price_from_quote_block():
    assert NaverFinanceProvider.parse_price(NAVER_HTML) == Decimal("37250")
    assert NaverFinanceProvider.parse_price(NAVER_BLIND_HTML) == Decimal("12345")


@pytest.mark.parametrize(
    "html",
    [
        "<html><body>nothing here</body></html>",
        '<dd class="no_today"><span>-</span></dd>',
        '<dd class="no_today"><span>0</span></dd>',
    ],
)
def test_parse_price_returns_none_when_unusable(html):
    assert NaverFinanceProvider.parse_price(html) is None


async def test_naver_fetch_price():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["code"] = request.url.params["code"]
        return httpx.Response(200, text=NAVER_HTML)

    async with _client(handler) as client:
        provider = NaverFinanceProvider(base_url="https://finance.example/item", client=client)
        quote = await provider.fetch_price("069500")

    assert seen["code"] == "069500"
    assert quote.price == Decimal("37250")
    assert quote.currency == Currency.KRW
    assert quote.source == "naver"


async def test_naver_http_error_becomes_price_fetch_error():
    async with _client(lambda request: httpx.Response(503)) as client:
        provider = NaverFinanceProvider(base_url="https://finance.example/item", client=client)
        with pytest.raises(PriceFetchError) as exc:
            await provider.fetch_price("069500")

    assert exc.value.kind == ErrorKind.PRICE_FETCH
    assert exc.value.ticker == "069500"
    assert "Failed to fetch price for 069500" in exc.value.message


async def test_naver_unparseable_page_becomes_price_fetch_error():
    async with _client(lambda request: httpx.Response(200, text="<html></html>")) as client:
        provider = NaverFinanceProvider(base_url="https://finance.example/item", client=client)
        with pytest.raises(PriceFetchError):
            await provider.fetch_price("069500")


async def test_exchange_rates_from_api():
    payload = {"result": "success", "rates": {"KRW": 1402.5, "USD": 1}}
    async with _client(lambda request: httpx.Response(200, json=payload)) as client:
        rates = await ExchangeRateFetcher(url="https://fx.example/USD", client=client).get_rates()
    assert rates == {"KRW": Decimal("1"), "USD": Decimal("1402.5")}


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500),
        httpx.Response(200, json={"result": "error"}),
        httpx.Response(200, json={"result": "success", "rates": {}}),
        httpx.Response(200, json={"result": "success", "rates": {"KRW": -1}}),
    ],
)
async def test_exchange_rates_fall_back_to_default(response):
    async with _client(lambda request: response) as client:
        fetcher = ExchangeRateFetcher(
            url="https://fx.example/USD",
            default_usd_rate=Decimal("1350"),
            client=client,
        )
        rates = await fetcher.get_rates()
    assert rates["USD"] == Decimal("1350")
    assert rates["KRW"] == Decimal("1")


async def test_router_dispatches_by_market():
    krx = FakePriceFeed(prices={"069500": Decimal("35000")})
    us = FakePriceFeed(prices={"VOO": Decimal("500")}, currencies={"VOO": Currency.USD})
    router = MarketRoutingPriceFeed({Market.KRX: krx, Market.US: us})

    assert (await router.fetch_price("069500", Market.KRX)).price == Decimal("35000")
    assert (await router.fetch_price("VOO", "US")).currency == Currency.USD
    assert krx.calls == ["069500"]
    assert us.calls == ["VOO"]
    assert router.last_sources == {"069500": "fake", "VOO": "fake"}


async def test_router_without_feed_for_market():
    router = MarketRoutingPriceFeed({Market.KRX: FakePriceFeed()})
    with pytest.raises(PriceFetchError):
        await router.fetch_price("VOO", Market.US)


class _EmptyFrame:
    empty = True


async def test_yfinance_failures_become_price_fetch_errors(monkeypatch):
    provider = YFinanceProvider()

    async def boom(ticker, **kwargs):
        raise RuntimeError("rate limited")

    monkeypatch.setattr(provider, "_history", boom)
    with pytest.raises(PriceFetchError) as exc:
        await provider.fetch_price("VOO")
    assert "rate limited" in exc.value.message

    async def empty(ticker, **kwargs):
        return _EmptyFrame()

    monkeypatch.setattr(provider, "_history", empty)
    with pytest.raises(PriceFetchError):
        await provider.fetch_price("VOO")
