import logging

from fastapi import APIRouter, Depends, HTTPException

from app.api.dependencies import get_portfolio_service, get_user_id
from app.api.errors import to_http_exception
from app.domain.errors import DomainError
from app.domain.schemas.portfolio import PortfolioResponse, PortfolioUpsertRequest
from app.services.portfolio_service import PortfolioService

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("", response_model=PortfolioResponse)
async def get_portfolio(
    user_id: str = Depends(get_user_id),
    service: PortfolioService = Depends(get_portfolio_service),
):
    portfolio = await service.get(user_id)
    if portfolio is None:
        raise HTTPException(status_code=404, detail="No active portfolio")
    return PortfolioResponse.from_domain(portfolio)


@router.put("", response_model=PortfolioResponse)
async def upsert_portfolio(
    payload: PortfolioUpsertRequest,
    user_id: str = Depends(get_user_id),
    service: PortfolioService = Depends(get_portfolio_service),
):
    try:
        portfolio = await service.upsert(user_id, payload.to_input())
    except DomainError as e:
        raise to_http_exception(e)
    return PortfolioResponse.from_domain(portfolio)
