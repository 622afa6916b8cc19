"""
Execution Repository
Keyed by (user_id, ym_cycle). save() is an upsert; soft-deleted rows are
invisible to reads but are overwritten by a later save for the same key.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.models import (
    Currency,
    Execution,
    ExecutionItem,
    ExecutionStatus,
    Market,
    UserConfirm,
)
from app.infrastructure.db.models import ExecutionModel, ExecutionStatusEnum
from app.utils.money import decimal_map_to_json
from app.utils.time import ensure_aware


class ExecutionRepository:
    """Repository for Execution order sheets"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, user_id: str, ym_cycle: str) -> Optional[Execution]:
        model = await self._get_model(user_id, ym_cycle)
        if model is None or model.deleted_at is not None:
            return None
        return self._to_domain(model)

    async def save(self, execution: Execution) -> None:
        """
        Upsert by (user_id, ym_cycle)

        The unique constraint on the key guarantees a single row per cycle
        even if two triggers race past the existence check.
        """
        model = await self._get_model(execution.user_id, execution.ym_cycle)
        if model is None:
            model = ExecutionModel(user_id=execution.user_id, ym_cycle=execution.ym_cycle)
            self.session.add(model)

        model.year_month = execution.year_month
        model.cycle_index = execution.cycle_index
        model.portfolio_id = execution.portfolio_id
        model.plan_id = execution.plan_id
        model.as_of_date = execution.as_of_date
        model.cycle_weight = str(execution.cycle_weight)
        model.total_budget = str(execution.total_budget)
        model.cycle_budget = str(execution.cycle_budget)
        model.items = [self._item_to_json(item) for item in execution.items]
        model.carry_by_ticker = decimal_map_to_json(execution.carry_by_ticker)
        model.exchange_rates = decimal_map_to_json(execution.exchange_rates)
        model.status = ExecutionStatusEnum(execution.status.value)
        model.confirmed_at = execution.user_confirm.confirmed_at
        model.confirm_note = execution.user_confirm.note
        model.created_at = execution.created_at
        model.updated_at = execution.updated_at
        model.deleted_at = execution.deleted_at

        try:
            await self.session.commit()
        except Exception:
            # Leave the session usable for the next user in a sweep
            await self.session.rollback()
            raise

    async def list_by_month(self, user_id: str, year_month: str) -> List[Execution]:
        """Prefix scan on the "YYYY-MM#" part of the key"""
        result = await self.session.execute(
            select(ExecutionModel)
            .where(
                ExecutionModel.user_id == user_id,
                ExecutionModel.ym_cycle.startswith(f"{year_month}#"),
                ExecutionModel.deleted_at.is_(None),
            )
            .order_by(ExecutionModel.cycle_index)
        )
        return [self._to_domain(m) for m in result.scalars().all()]

    async def confirm(
        self,
        user_id: str,
        ym_cycle: str,
        note: Optional[str],
        confirmed_at: datetime,
        updated_at: datetime,
    ) -> Optional[Execution]:
        model = await self._get_model(user_id, ym_cycle)
        if model is None or model.deleted_at is not None:
            return None
        model.status = ExecutionStatusEnum.CONFIRMED
        model.confirmed_at = confirmed_at
        model.confirm_note = note
        model.updated_at = updated_at
        await self.session.commit()
        return self._to_domain(model)

    async def soft_delete(self, user_id: str, ym_cycle: str, deleted_at: datetime) -> bool:
        model = await self._get_model(user_id, ym_cycle)
        if model is None or model.deleted_at is not None:
            return False
        model.deleted_at = deleted_at
        model.updated_at = deleted_at
        await self.session.commit()
        return True

    async def _get_model(self, user_id: str, ym_cycle: str) -> Optional[ExecutionModel]:
        result = await self.session.execute(
            select(ExecutionModel).where(
                ExecutionModel.user_id == user_id,
                ExecutionModel.ym_cycle == ym_cycle,
            )
        )
        return result.scalar_one_or_none()

    @staticmethod
    def _item_to_json(item: ExecutionItem) -> Dict[str, Any]:
        return {
            "ticker": item.ticker,
            "name": item.name,
            "market": item.market.value,
            "price": str(item.price),
            "price_currency": item.price_currency.value,
            "native_price": None if item.native_price is None else str(item.native_price),
            "target_weight": str(item.target_weight),
            "target_amount": str(item.target_amount),
            "carry_in": str(item.carry_in),
            "shares": item.shares,
            "est_cost": str(item.est_cost),
            "carry_out": str(item.carry_out),
        }

    @staticmethod
    def _item_from_json(row: Dict[str, Any]) -> ExecutionItem:
        native = row.get("native_price")
        return ExecutionItem(
            ticker=row["ticker"],
            name=row["name"],
            market=Market(row["market"]),
            price=Decimal(row["price"]),
            target_weight=Decimal(row["target_weight"]),
            target_amount=Decimal(row["target_amount"]),
            carry_in=Decimal(row["carry_in"]),
            shares=int(row["shares"]),
            est_cost=Decimal(row["est_cost"]),
            carry_out=Decimal(row["carry_out"]),
            price_currency=Currency(row.get("price_currency", Currency.KRW.value)),
            native_price=None if native is None else Decimal(native),
        )

    @classmethod
    def _to_domain(cls, model: ExecutionModel) -> Execution:
        """Convert database model to domain entity"""
        return Execution(
            user_id=model.user_id,
            ym_cycle=model.ym_cycle,
            portfolio_id=model.portfolio_id,
            plan_id=model.plan_id,
            as_of_date=ensure_aware(model.as_of_date),
            year_month=model.year_month,
            cycle_index=model.cycle_index,
            cycle_weight=Decimal(model.cycle_weight),
            total_budget=Decimal(model.total_budget),
            cycle_budget=Decimal(model.cycle_budget),
            items=tuple(cls._item_from_json(row) for row in model.items),
            carry_by_ticker={k: Decimal(v) for k, v in model.carry_by_ticker.items()},
            exchange_rates={k: Decimal(v) for k, v in (model.exchange_rates or {}).items()},
            status=ExecutionStatus(model.status.value),
            user_confirm=UserConfirm(
                confirmed_at=ensure_aware(model.confirmed_at),
                note=model.confirm_note,
            ),
            created_at=ensure_aware(model.created_at),
            updated_at=ensure_aware(model.updated_at),
            deleted_at=ensure_aware(model.deleted_at),
        )
