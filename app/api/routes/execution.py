"""
Order sheet read / confirm / delete routes.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.api.dependencies import get_execution_service, get_user_id
from app.api.errors import to_http_exception
from app.domain.errors import DomainError
from app.domain.schemas.execution import (
    ConfirmRequest,
    ExecutionDetailResponse,
    ExecutionListResponse,
    ExecutionSummarySchema,
)
from app.services.execution_service import ExecutionService

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("", response_model=ExecutionListResponse)
async def list_executions(
    ym: Optional[str] = Query(None, description="Month as YYYY-MM (defaults to current month)"),
    user_id: str = Depends(get_user_id),
    service: ExecutionService = Depends(get_execution_service),
):
    year_month = ym or service.current_year_month()
    try:
        summaries = await service.list_for_month(user_id, year_month)
    except DomainError as e:
        raise to_http_exception(e)

    return ExecutionListResponse(
        year_month=year_month,
        executions=[ExecutionSummarySchema.from_domain(s) for s in summaries],
    )


@router.get("/{ym_cycle}", response_model=ExecutionDetailResponse)
async def get_execution(
    ym_cycle: str,
    user_id: str = Depends(get_user_id),
    service: ExecutionService = Depends(get_execution_service),
):
    try:
        execution = await service.get_detail(user_id, ym_cycle)
    except DomainError as e:
        raise to_http_exception(e)
    return ExecutionDetailResponse.from_domain(execution)


@router.post("/{ym_cycle}/confirm", response_model=ExecutionDetailResponse)
async def confirm_execution(
    ym_cycle: str,
    payload: Optional[ConfirmRequest] = None,
    user_id: str = Depends(get_user_id),
    service: ExecutionService = Depends(get_execution_service),
):
    payload = payload or ConfirmRequest()
    try:
        execution = await service.confirm(
            user_id,
            ym_cycle,
            note=payload.note,
            confirmed_at=payload.confirmed_at,
        )
    except DomainError as e:
        raise to_http_exception(e)
    return ExecutionDetailResponse.from_domain(execution)


@router.delete("/{ym_cycle}")
async def delete_execution(
    ym_cycle: str,
    user_id: str = Depends(get_user_id),
    service: ExecutionService = Depends(get_execution_service),
):
    try:
        await service.delete(user_id, ym_cycle)
    except DomainError as e:
        raise to_http_exception(e)
    return {"deleted": True}
