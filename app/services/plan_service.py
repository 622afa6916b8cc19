"""
PLAN SERVICE
Get / upsert the user's single active plan.
"""

import logging
from typing import Optional

from app.domain.models import Plan, PlanInput
from app.domain.services.plan_validator import validate_plan_input
from app.infrastructure.db.repositories.plan_repository import PlanRepository

logger = logging.getLogger(__name__)


class PlanService:
    def __init__(self, repo: PlanRepository):
        self.repo = repo

    async def get(self, user_id: str) -> Optional[Plan]:
        return await self.repo.get_active_plan(user_id)

    async def upsert(self, user_id: str, plan_input: PlanInput) -> Plan:
        existing = await self.repo.get_active_plan(user_id)

        if existing is None:
            validate_plan_input(plan_input, creating=True)
            plan = await self.repo.create(user_id, plan_input)
            logger.info("Plan created | user=%s | plan=%s", user_id, plan.plan_id)
            return plan

        validate_plan_input(plan_input, creating=False, current_cycle_count=existing.cycle_count)
        if plan_input.cycle_count is not None and plan_input.cycle_weights is None:
            # Changing the cycle count must come with matching weights
            validate_plan_input(
                PlanInput(cycle_weights=existing.cycle_weights),
                creating=False,
                current_cycle_count=plan_input.cycle_count,
            )
        if plan_input.cycle_count is not None and plan_input.schedule is None:
            validate_plan_input(
                PlanInput(schedule=existing.schedule),
                creating=False,
                current_cycle_count=plan_input.cycle_count,
            )

        plan = await self.repo.update(user_id, plan_input)
        logger.info("Plan updated | user=%s | plan=%s", user_id, existing.plan_id)
        return plan
