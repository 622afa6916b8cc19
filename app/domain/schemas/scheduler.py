from decimal import Decimal
from typing import Optional

from pydantic import BaseModel

from app.domain.models import ProcessResult, ProcessStatus


class TriggerRequest(BaseModel):
    dry_run: bool = False
    force: bool = True


class TriggerExecutionSummary(BaseModel):
    ym_cycle: str
    year_month: str
    cycle_index: int
    cycle_budget: Decimal
    item_count: int


class TriggerResponse(BaseModel):
    ok: bool
    status: ProcessStatus
    message: str
    dry_run: bool
    execution: Optional[TriggerExecutionSummary] = None

    @classmethod
    def from_result(cls, result: ProcessResult) -> "TriggerResponse":
        execution = None
        if result.execution is not None:
            execution = TriggerExecutionSummary(
                ym_cycle=result.execution.ym_cycle,
                year_month=result.execution.year_month,
                cycle_index=result.execution.cycle_index,
                cycle_budget=result.execution.cycle_budget,
                item_count=len(result.execution.items),
            )
        return cls(
            ok=result.ok,
            status=result.status,
            message=result.message,
            dry_run=result.dry_run,
            execution=execution,
        )
