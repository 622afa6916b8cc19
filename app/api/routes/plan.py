import logging

from fastapi import APIRouter, Depends, HTTPException

from app.api.dependencies import get_plan_service, get_user_id
from app.api.errors import to_http_exception
from app.domain.errors import DomainError
from app.domain.schemas.plan import PlanResponse, PlanUpsertRequest
from app.services.plan_service import PlanService

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("", response_model=PlanResponse)
async def get_plan(
    user_id: str = Depends(get_user_id),
    service: PlanService = Depends(get_plan_service),
):
    plan = await service.get(user_id)
    if plan is None:
        raise HTTPException(status_code=404, detail="No active plan")
    return PlanResponse.from_domain(plan)


@router.put("", response_model=PlanResponse)
async def upsert_plan(
    payload: PlanUpsertRequest,
    user_id: str = Depends(get_user_id),
    service: PlanService = Depends(get_plan_service),
):
    try:
        plan = await service.upsert(user_id, payload.to_input())
    except DomainError as e:
        raise to_http_exception(e)
    return PlanResponse.from_domain(plan)
