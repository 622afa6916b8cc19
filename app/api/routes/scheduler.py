"""
Manual trigger for the order sheet pipeline.
Defaults to force mode so users can generate a sheet on a non-run day.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends

from app.api.dependencies import get_orchestrator, get_user_id
from app.domain.schemas.scheduler import TriggerRequest, TriggerResponse
from app.services.execution_orchestrator import ExecutionOrchestrator

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/trigger", response_model=TriggerResponse)
async def trigger(
    payload: Optional[TriggerRequest] = None,
    user_id: str = Depends(get_user_id),
    orchestrator: ExecutionOrchestrator = Depends(get_orchestrator),
):
    payload = payload or TriggerRequest()
    logger.info("Manual trigger | user=%s | dry_run=%s | force=%s", user_id, payload.dry_run, payload.force)
    result = await orchestrator.process(user_id, dry_run=payload.dry_run, force=payload.force)
    return TriggerResponse.from_result(result)
