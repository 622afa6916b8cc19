from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from app.domain.models import NotificationChannel, Plan, PlanInput, PlanSchedule


class PlanScheduleSchema(BaseModel):
    days: List[int] = Field(..., examples=[[1, 11, 21]])
    timezone: str = "Asia/Seoul"


class PlanUpsertRequest(BaseModel):
    """Partial update: omitted fields keep their stored value."""

    monthly_budget: Optional[Decimal] = Field(None, examples=["1000000"])
    cycle_count: Optional[int] = Field(None, examples=[3])
    cycle_weights: Optional[List[Decimal]] = Field(None, examples=[["0.5", "0.3", "0.2"]])
    schedule: Optional[PlanScheduleSchema] = None
    email: Optional[str] = None
    notification_channels: Optional[List[NotificationChannel]] = None
    telegram_chat_id: Optional[str] = None

    def to_input(self) -> PlanInput:
        return PlanInput(
            monthly_budget=self.monthly_budget,
            cycle_count=self.cycle_count,
            cycle_weights=tuple(self.cycle_weights) if self.cycle_weights is not None else None,
            schedule=(
                PlanSchedule(days=tuple(self.schedule.days), timezone=self.schedule.timezone)
                if self.schedule is not None
                else None
            ),
            email=self.email,
            notification_channels=(
                tuple(self.notification_channels) if self.notification_channels is not None else None
            ),
            telegram_chat_id=self.telegram_chat_id,
        )


class PlanResponse(BaseModel):
    plan_id: str
    user_id: str
    monthly_budget: Decimal
    cycle_count: int
    cycle_weights: List[Decimal]
    schedule: PlanScheduleSchema
    email: str
    notification_channels: List[NotificationChannel]
    telegram_chat_id: Optional[str] = None
    is_active: bool

    @classmethod
    def from_domain(cls, plan: Plan) -> "PlanResponse":
        return cls(
            plan_id=plan.plan_id,
            user_id=plan.user_id,
            monthly_budget=plan.monthly_budget,
            cycle_count=plan.cycle_count,
            cycle_weights=list(plan.cycle_weights),
            schedule=PlanScheduleSchema(days=list(plan.schedule.days), timezone=plan.schedule.timezone),
            email=plan.email,
            notification_channels=list(plan.notification_channels),
            telegram_chat_id=plan.telegram_chat_id,
            is_active=plan.is_active,
        )
