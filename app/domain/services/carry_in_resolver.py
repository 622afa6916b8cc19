"""
CARRY-IN RESOLVER
Finds the carry-out of the cycle immediately before the one being generated.

Cycle N > 1 reads "{ym}#{N-1}". Cycle 1 walks back to the previous month
and probes #3, #2, #1 in that order. Gaps (skipped cycles, plan changed its
cycle count) degrade to an empty carry-in.
"""

import logging
from decimal import Decimal
from typing import Dict

from app.domain.models import build_ym_cycle, previous_year_month
from app.domain.services.ports import ExecutionStore

logger = logging.getLogger(__name__)

MAX_CYCLES_PER_MONTH = 3


class CarryInResolver:
    """Carry-in lookup over the execution store - ASYNC"""

    def __init__(self, execution_store: ExecutionStore):
        self.execution_store = execution_store

    async def resolve(self, user_id: str, year_month: str, cycle_index: int) -> Dict[str, Decimal]:
        if cycle_index > 1:
            key = build_ym_cycle(year_month, cycle_index - 1)
            previous = await self.execution_store.get(user_id, key)
            if previous is None:
                logger.info("No carry-in source for %s (user=%s)", key, user_id)
                return {}
            return dict(previous.carry_by_ticker)

        prev_month = previous_year_month(year_month)
        for index in range(MAX_CYCLES_PER_MONTH, 0, -1):
            key = build_ym_cycle(prev_month, index)
            previous = await self.execution_store.get(user_id, key)
            if previous is not None:
                logger.info("Carry-in for %s#1 taken from %s (user=%s)", year_month, key, user_id)
                return dict(previous.carry_by_ticker)

        logger.info("No carry-in found in %s (user=%s)", prev_month, user_id)
        return {}
