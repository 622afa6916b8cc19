"""
Plan Repository
One active plan per user; creating a plan deactivates the previous one.
"""

import uuid
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.domain.models import NotificationChannel, Plan, PlanInput, PlanSchedule
from app.infrastructure.db.models import PlanModel


class PlanRepository:
    """CRUD for investment plans"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_active_plan(self, user_id: str) -> Optional[Plan]:
        model = await self._get_active_model(user_id)
        return self._to_domain(model) if model else None

    async def list_active_user_ids(self) -> List[str]:
        result = await self.session.execute(
            select(PlanModel.user_id)
            .where(PlanModel.is_active.is_(True))
            .order_by(PlanModel.user_id)
        )
        return list(dict.fromkeys(result.scalars().all()))

    async def create(self, user_id: str, plan_input: PlanInput) -> Plan:
        await self.session.execute(
            update(PlanModel)
            .where(PlanModel.user_id == user_id, PlanModel.is_active.is_(True))
            .values(is_active=False)
        )
        schedule = plan_input.schedule
        channels = plan_input.notification_channels or (NotificationChannel.EMAIL,)
        model = PlanModel(
            plan_id=str(uuid.uuid4()),
            user_id=user_id,
            monthly_budget=plan_input.monthly_budget,
            currency=settings.BASE_CURRENCY,
            cycle_count=plan_input.cycle_count,
            cycle_weights=[str(w) for w in plan_input.cycle_weights],
            schedule_days=list(schedule.days),
            schedule_timezone=schedule.timezone,
            email=plan_input.email,
            notification_channels=[c.value for c in channels],
            telegram_chat_id=plan_input.telegram_chat_id,
            is_active=True,
        )
        self.session.add(model)
        await self.session.commit()
        await self.session.refresh(model)
        return self._to_domain(model)

    async def update(self, user_id: str, plan_input: PlanInput) -> Optional[Plan]:
        model = await self._get_active_model(user_id)
        if model is None:
            return None

        if plan_input.monthly_budget is not None:
            model.monthly_budget = plan_input.monthly_budget
        if plan_input.cycle_count is not None:
            model.cycle_count = plan_input.cycle_count
        if plan_input.cycle_weights is not None:
            model.cycle_weights = [str(w) for w in plan_input.cycle_weights]
        if plan_input.schedule is not None:
            model.schedule_days = list(plan_input.schedule.days)
            model.schedule_timezone = plan_input.schedule.timezone
        if plan_input.email:
            model.email = plan_input.email
        if plan_input.notification_channels is not None:
            model.notification_channels = [c.value for c in plan_input.notification_channels]
        if plan_input.telegram_chat_id is not None:
            model.telegram_chat_id = plan_input.telegram_chat_id

        await self.session.commit()
        await self.session.refresh(model)
        return self._to_domain(model)

    async def _get_active_model(self, user_id: str) -> Optional[PlanModel]:
        result = await self.session.execute(
            select(PlanModel)
            .where(PlanModel.user_id == user_id, PlanModel.is_active.is_(True))
            .order_by(PlanModel.id.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    @staticmethod
    def _to_domain(model: PlanModel) -> Plan:
        """Convert database model to domain entity"""
        return Plan(
            plan_id=model.plan_id,
            user_id=model.user_id,
            monthly_budget=Decimal(str(model.monthly_budget)),
            cycle_count=model.cycle_count,
            cycle_weights=tuple(Decimal(w) for w in model.cycle_weights),
            schedule=PlanSchedule(
                days=tuple(int(d) for d in model.schedule_days),
                timezone=model.schedule_timezone,
            ),
            email=model.email,
            notification_channels=tuple(NotificationChannel(c) for c in model.notification_channels),
            telegram_chat_id=model.telegram_chat_id,
            is_active=model.is_active,
        )
