"""
Portfolio Repository
One active portfolio per user; holdings stored as a JSON snapshot.
"""

import uuid
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.models import Holding, Market, Portfolio, PortfolioInput
from app.infrastructure.db.models import PortfolioModel

DEFAULT_PORTFOLIO_NAME = "My Portfolio"


class PortfolioRepository:
    """CRUD for target portfolios"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_active_portfolio(self, user_id: str) -> Optional[Portfolio]:
        model = await self._get_active_model(user_id)
        return self._to_domain(model) if model else None

    async def create(self, user_id: str, portfolio_input: PortfolioInput) -> Portfolio:
        await self.session.execute(
            update(PortfolioModel)
            .where(PortfolioModel.user_id == user_id, PortfolioModel.is_active.is_(True))
            .values(is_active=False)
        )
        model = PortfolioModel(
            portfolio_id=str(uuid.uuid4()),
            user_id=user_id,
            name=portfolio_input.name or DEFAULT_PORTFOLIO_NAME,
            holdings=self._holdings_to_json(portfolio_input.holdings or ()),
            is_active=True,
        )
        self.session.add(model)
        await self.session.commit()
        await self.session.refresh(model)
        return self._to_domain(model)

    async def update(self, user_id: str, portfolio_input: PortfolioInput) -> Optional[Portfolio]:
        model = await self._get_active_model(user_id)
        if model is None:
            return None
        if portfolio_input.name:
            model.name = portfolio_input.name
        if portfolio_input.holdings is not None:
            model.holdings = self._holdings_to_json(portfolio_input.holdings)
        await self.session.commit()
        await self.session.refresh(model)
        return self._to_domain(model)

    async def _get_active_model(self, user_id: str) -> Optional[PortfolioModel]:
        result = await self.session.execute(
            select(PortfolioModel)
            .where(PortfolioModel.user_id == user_id, PortfolioModel.is_active.is_(True))
            .order_by(PortfolioModel.id.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    @staticmethod
    def _holdings_to_json(holdings: Sequence[Holding]) -> List[Dict[str, Any]]:
        return [
            {
                "ticker": h.ticker,
                "name": h.name,
                "market": h.market.value,
                "target_weight": str(h.target_weight),
            }
            for h in holdings
        ]

    @staticmethod
    def _to_domain(model: PortfolioModel) -> Portfolio:
        """Convert database model to domain entity"""
        return Portfolio(
            portfolio_id=model.portfolio_id,
            user_id=model.user_id,
            name=model.name,
            holdings=tuple(
                Holding(
                    ticker=row["ticker"],
                    name=row.get("name", row["ticker"]),
                    market=Market(row["market"]),
                    target_weight=Decimal(row["target_weight"]),
                )
                for row in model.holdings
            ),
            is_active=model.is_active,
        )
