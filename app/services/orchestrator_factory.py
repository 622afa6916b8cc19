"""
Wires an ExecutionOrchestrator to the database-backed stores and live feeds.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from app.infrastructure.db.repositories.execution_repository import ExecutionRepository
from app.infrastructure.db.repositories.notification_log_repository import NotificationLogRepository
from app.infrastructure.db.repositories.plan_repository import PlanRepository
from app.infrastructure.db.repositories.portfolio_repository import PortfolioRepository
from app.infrastructure.market_data.provider_factory import get_exchange_rate_provider, get_price_feed
from app.services.execution_orchestrator import ExecutionOrchestrator
from app.services.notification_service import ExecutionNotifier


def build_orchestrator(session: AsyncSession) -> ExecutionOrchestrator:
    return ExecutionOrchestrator(
        plan_store=PlanRepository(session),
        portfolio_store=PortfolioRepository(session),
        execution_store=ExecutionRepository(session),
        price_feed=get_price_feed(),
        notifier=ExecutionNotifier(NotificationLogRepository(session)),
        exchange_rate_provider=get_exchange_rate_provider(),
    )
