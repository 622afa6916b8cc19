from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional

from pydantic import BaseModel

from app.domain.models import (
    Currency,
    Execution,
    ExecutionItem,
    ExecutionStatus,
    ExecutionSummary,
    Market,
)


class ExecutionItemSchema(BaseModel):
    ticker: str
    name: str
    market: Market
    price: Decimal
    price_currency: Currency
    native_price: Optional[Decimal] = None
    target_weight: Decimal
    target_amount: Decimal
    carry_in: Decimal
    shares: int
    est_cost: Decimal
    carry_out: Decimal

    @classmethod
    def from_domain(cls, item: ExecutionItem) -> "ExecutionItemSchema":
        return cls(
            ticker=item.ticker,
            name=item.name,
            market=item.market,
            price=item.price,
            price_currency=item.price_currency,
            native_price=item.native_price,
            target_weight=item.target_weight,
            target_amount=item.target_amount,
            carry_in=item.carry_in,
            shares=item.shares,
            est_cost=item.est_cost,
            carry_out=item.carry_out,
        )


class ExecutionSummarySchema(BaseModel):
    ym_cycle: str
    year_month: str
    cycle_index: int
    as_of_date: datetime
    status: ExecutionStatus
    cycle_budget: Decimal

    @classmethod
    def from_domain(cls, summary: ExecutionSummary) -> "ExecutionSummarySchema":
        return cls(
            ym_cycle=summary.ym_cycle,
            year_month=summary.year_month,
            cycle_index=summary.cycle_index,
            as_of_date=summary.as_of_date,
            status=summary.status,
            cycle_budget=summary.cycle_budget,
        )


class ExecutionListResponse(BaseModel):
    year_month: str
    executions: List[ExecutionSummarySchema]


class ExecutionDetailResponse(BaseModel):
    ym_cycle: str
    year_month: str
    cycle_index: int
    cycle_weight: Decimal
    as_of_date: datetime
    portfolio_id: str
    plan_id: str
    total_budget: Decimal
    cycle_budget: Decimal
    status: ExecutionStatus
    items: List[ExecutionItemSchema]
    carry_by_ticker: Dict[str, Decimal]
    exchange_rates: Dict[str, Decimal]
    total_est_cost: Decimal
    total_carry_out: Decimal
    confirmed_at: Optional[datetime] = None
    confirm_note: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_domain(cls, execution: Execution) -> "ExecutionDetailResponse":
        return cls(
            ym_cycle=execution.ym_cycle,
            year_month=execution.year_month,
            cycle_index=execution.cycle_index,
            cycle_weight=execution.cycle_weight,
            as_of_date=execution.as_of_date,
            portfolio_id=execution.portfolio_id,
            plan_id=execution.plan_id,
            total_budget=execution.total_budget,
            cycle_budget=execution.cycle_budget,
            status=execution.status,
            items=[ExecutionItemSchema.from_domain(i) for i in execution.items],
            carry_by_ticker=dict(execution.carry_by_ticker),
            exchange_rates=dict(execution.exchange_rates),
            total_est_cost=execution.total_est_cost,
            total_carry_out=execution.total_carry_out,
            confirmed_at=execution.user_confirm.confirmed_at,
            confirm_note=execution.user_confirm.note,
            created_at=execution.created_at,
            updated_at=execution.updated_at,
        )


class ConfirmRequest(BaseModel):
    note: Optional[str] = None
    confirmed_at: Optional[datetime] = None
