"""
Domain Models - Upsert inputs
Partial updates: None means "leave unchanged".
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Tuple

from .entities import Holding, NotificationChannel, PlanSchedule


@dataclass(frozen=True)
class PlanInput:
    monthly_budget: Optional[Decimal] = None
    cycle_count: Optional[int] = None
    cycle_weights: Optional[Tuple[Decimal, ...]] = None
    schedule: Optional[PlanSchedule] = None
    email: Optional[str] = None
    notification_channels: Optional[Tuple[NotificationChannel, ...]] = None
    telegram_chat_id: Optional[str] = None


@dataclass(frozen=True)
class PortfolioInput:
    name: Optional[str] = None
    holdings: Optional[Tuple[Holding, ...]] = None
