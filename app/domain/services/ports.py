"""
Collaborator protocols consumed by the execution core - ASYNC
"""

from decimal import Decimal
from typing import Dict, Optional, Protocol

from app.domain.models import (
    Execution,
    Market,
    NotificationResult,
    Plan,
    Portfolio,
    PriceQuote,
)


class PriceFeed(Protocol):
    """Quote source. Raises PriceFetchError on network/parse failure."""

    async def fetch_price(self, ticker: str, market: Market) -> PriceQuote:
        ...


class ExchangeRateProvider(Protocol):
    async def get_rates(self) -> Dict[str, Decimal]:
        """Rates relative to the base currency, base included with rate 1"""
        ...


class PlanStore(Protocol):
    async def get_active_plan(self, user_id: str) -> Optional[Plan]:
        ...


class PortfolioStore(Protocol):
    async def get_active_portfolio(self, user_id: str) -> Optional[Portfolio]:
        ...


class ExecutionStore(Protocol):
    async def get(self, user_id: str, ym_cycle: str) -> Optional[Execution]:
        """Execution for the key, or None (soft-deleted rows count as absent)"""
        ...

    async def save(self, execution: Execution) -> None:
        """Upsert by (user_id, ym_cycle)"""
        ...


class Notifier(Protocol):
    async def send(self, plan: Plan, execution: Execution) -> NotificationResult:
        ...
