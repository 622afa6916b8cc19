"""
FastAPI dependencies: caller identity and per-request services.
"""

from fastapi import Depends, Header, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.infrastructure.db.database import get_db
from app.infrastructure.db.repositories.execution_repository import ExecutionRepository
from app.infrastructure.db.repositories.plan_repository import PlanRepository
from app.infrastructure.db.repositories.portfolio_repository import PortfolioRepository
from app.services.execution_orchestrator import ExecutionOrchestrator
from app.services.execution_service import ExecutionService
from app.services.orchestrator_factory import build_orchestrator
from app.services.plan_service import PlanService
from app.services.portfolio_service import PortfolioService


async def get_user_id(x_user_id: str = Header(..., alias="X-User-Id")) -> str:
    """Caller identity; authentication happens upstream."""
    user_id = x_user_id.strip()
    if not user_id:
        raise HTTPException(status_code=401, detail="X-User-Id header is required")
    return user_id


async def get_orchestrator(db: AsyncSession = Depends(get_db)) -> ExecutionOrchestrator:
    return build_orchestrator(db)


async def get_execution_service(db: AsyncSession = Depends(get_db)) -> ExecutionService:
    return ExecutionService(ExecutionRepository(db))


async def get_plan_service(db: AsyncSession = Depends(get_db)) -> PlanService:
    return PlanService(PlanRepository(db))


async def get_portfolio_service(db: AsyncSession = Depends(get_db)) -> PortfolioService:
    return PortfolioService(PortfolioRepository(db))
