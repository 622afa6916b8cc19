"""
EXECUTION SERVICE

Read and lifecycle operations on stored order sheets:
- list for a month / detail
- confirm (GENERATED|SENT -> CONFIRMED)
- soft delete (never for CONFIRMED)
"""

import logging
from datetime import datetime
from typing import Callable, List, Optional
from urllib.parse import unquote

from app.config import settings
from app.domain.errors import ConflictError, NotFoundError
from app.domain.models import (
    Execution,
    ExecutionStatus,
    ExecutionSummary,
    parse_year_month,
    parse_ym_cycle,
)
from app.infrastructure.db.repositories.execution_repository import ExecutionRepository
from app.utils.time import current_year_month, utc_now

logger = logging.getLogger(__name__)


class ExecutionService:
    def __init__(
        self,
        repo: ExecutionRepository,
        clock: Callable[[], datetime] = utc_now,
        timezone_name: str = settings.TIMEZONE,
    ):
        self.repo = repo
        self.clock = clock
        self.timezone_name = timezone_name

    def current_year_month(self) -> str:
        return current_year_month(self.clock(), self.timezone_name)

    async def list_for_month(self, user_id: str, year_month: Optional[str] = None) -> List[ExecutionSummary]:
        ym = year_month or self.current_year_month()
        parse_year_month(ym)
        executions = await self.repo.list_by_month(user_id, ym)
        return [ExecutionSummary.from_execution(e) for e in executions]

    async def get_detail(self, user_id: str, ym_cycle: str) -> Execution:
        key = self._normalize_key(ym_cycle)
        execution = await self.repo.get(user_id, key)
        if execution is None:
            raise NotFoundError("Execution not found", {"ym_cycle": key})
        return execution

    async def confirm(
        self,
        user_id: str,
        ym_cycle: str,
        note: Optional[str] = None,
        confirmed_at: Optional[datetime] = None,
    ) -> Execution:
        existing = await self.get_detail(user_id, ym_cycle)
        if existing.status == ExecutionStatus.CONFIRMED:
            raise ConflictError("Execution is already confirmed", {"ym_cycle": existing.ym_cycle})

        now = self.clock()
        confirmed = await self.repo.confirm(
            user_id,
            existing.ym_cycle,
            note=note or None,
            confirmed_at=confirmed_at or now,
            updated_at=now,
        )
        if confirmed is None:
            raise NotFoundError("Execution not found", {"ym_cycle": existing.ym_cycle})
        logger.info("Execution confirmed | user=%s | %s", user_id, existing.ym_cycle)
        return confirmed

    async def delete(self, user_id: str, ym_cycle: str) -> None:
        existing = await self.get_detail(user_id, ym_cycle)
        if existing.status == ExecutionStatus.CONFIRMED:
            raise ConflictError("Cannot delete confirmed execution", {"ym_cycle": existing.ym_cycle})

        await self.repo.soft_delete(user_id, existing.ym_cycle, self.clock())
        logger.info("Execution soft-deleted | user=%s | %s", user_id, existing.ym_cycle)

    @staticmethod
    def _normalize_key(ym_cycle: str) -> str:
        """Path values arrive URL-encoded ("2026-02%231")."""
        decoded = unquote(ym_cycle)
        parse_ym_cycle(decoded)
        return decoded
