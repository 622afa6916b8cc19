from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from app.domain.models import Holding, Market, Portfolio, PortfolioInput


class HoldingSchema(BaseModel):
    ticker: str = Field(..., min_length=1, examples=["069500"])
    name: str = Field(..., examples=["KODEX 200"])
    market: Market
    target_weight: Decimal = Field(..., examples=["0.6"])

    def to_domain(self) -> Holding:
        return Holding(
            ticker=self.ticker,
            name=self.name,
            market=self.market,
            target_weight=self.target_weight,
        )


class PortfolioUpsertRequest(BaseModel):
    name: Optional[str] = None
    holdings: Optional[List[HoldingSchema]] = None

    def to_input(self) -> PortfolioInput:
        holdings = None
        if self.holdings is not None:
            holdings = tuple(h.to_domain() for h in self.holdings)
        return PortfolioInput(name=self.name, holdings=holdings)


class PortfolioResponse(BaseModel):
    portfolio_id: str
    user_id: str
    name: str
    holdings: List[HoldingSchema]
    is_active: bool

    @classmethod
    def from_domain(cls, portfolio: Portfolio) -> "PortfolioResponse":
        return cls(
            portfolio_id=portfolio.portfolio_id,
            user_id=portfolio.user_id,
            name=portfolio.name,
            holdings=[
                HoldingSchema(
                    ticker=h.ticker,
                    name=h.name,
                    market=h.market,
                    target_weight=h.target_weight,
                )
                for h in portfolio.holdings
            ],
            is_active=portfolio.is_active,
        )
