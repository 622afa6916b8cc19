"""
PORTFOLIO SERVICE
Get / upsert the user's single active target portfolio.
"""

import logging
from typing import Optional

from app.domain.models import Portfolio, PortfolioInput
from app.domain.services.plan_validator import validate_portfolio_holdings
from app.infrastructure.db.repositories.portfolio_repository import PortfolioRepository

logger = logging.getLogger(__name__)


class PortfolioService:
    def __init__(self, repo: PortfolioRepository):
        self.repo = repo

    async def get(self, user_id: str) -> Optional[Portfolio]:
        return await self.repo.get_active_portfolio(user_id)

    async def upsert(self, user_id: str, portfolio_input: PortfolioInput) -> Portfolio:
        existing = await self.repo.get_active_portfolio(user_id)
        validate_portfolio_holdings(portfolio_input.holdings, creating=existing is None)

        if existing is None:
            portfolio = await self.repo.create(user_id, portfolio_input)
            logger.info("Portfolio created | user=%s | holdings=%d", user_id, len(portfolio.holdings))
            return portfolio

        portfolio = await self.repo.update(user_id, portfolio_input)
        logger.info("Portfolio updated | user=%s | holdings=%d", user_id, len(portfolio.holdings))
        return portfolio
