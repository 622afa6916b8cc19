import os

# Settings are read at import time; point them at SQLite before any app import
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from typing import AsyncGenerator  # noqa: E402

import pytest  # noqa: E402
from fastapi import FastAPI  # noqa: E402
from httpx import AsyncClient, ASGITransport  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402

from app.api.dependencies import get_orchestrator  # noqa: E402
from app.api.routes import execution, health, plan, portfolio, scheduler  # noqa: E402
from app.infrastructure.db import models  # noqa: E402,F401
from app.infrastructure.db.database import Base, get_db  # noqa: E402
from app.infrastructure.db.repositories.execution_repository import ExecutionRepository  # noqa: E402
from app.infrastructure.db.repositories.plan_repository import PlanRepository  # noqa: E402
from app.infrastructure.db.repositories.portfolio_repository import PortfolioRepository  # noqa: E402
from app.services.execution_orchestrator import ExecutionOrchestrator  # noqa: E402

from fakes import FakeNotifier, FakePriceFeed, fixed_clock, utc  # noqa: E402

# 2026-02-05 08:00 in Seoul
RUN_DAY = utc(2026, 2, 4, 23)


@pytest.fixture()
async def db_engine(tmp_path):
    db_path = tmp_path / "test.db"
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{db_path}",
        future=True,
        echo=False
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture()
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture()
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session
        # cleanup
        for table in reversed(Base.metadata.sorted_tables):
            await session.execute(table.delete())
        await session.commit()


@pytest.fixture()
def price_feed() -> FakePriceFeed:
    return FakePriceFeed()


@pytest.fixture()
def notifier() -> FakeNotifier:
    return FakeNotifier()


def db_orchestrator(session: AsyncSession, price_feed, notifier, now=RUN_DAY) -> ExecutionOrchestrator:
    return ExecutionOrchestrator(
        plan_store=PlanRepository(session),
        portfolio_store=PortfolioRepository(session),
        execution_store=ExecutionRepository(session),
        price_feed=price_feed,
        notifier=notifier,
        clock=fixed_clock(now),
        price_fetch_delay=0,
    )


@pytest.fixture()
def build_db_orchestrator(price_feed, notifier):
    def build(session: AsyncSession, now=RUN_DAY) -> ExecutionOrchestrator:
        return db_orchestrator(session, price_feed, notifier, now)
    return build


@pytest.fixture()
async def app(db_session, price_feed, notifier) -> FastAPI:
    app = FastAPI()
    app.include_router(health.router, tags=["Health"])
    app.include_router(scheduler.router, prefix="/api/v1/scheduler", tags=["Scheduler"])
    app.include_router(execution.router, prefix="/api/v1/executions", tags=["Executions"])
    app.include_router(plan.router, prefix="/api/v1/plan", tags=["Plan"])
    app.include_router(portfolio.router, prefix="/api/v1/portfolio", tags=["Portfolio"])

    async def override_get_db():
        try:
            yield db_session
            await db_session.commit()
        except Exception:
            await db_session.rollback()
            raise

    async def override_get_orchestrator():
        return db_orchestrator(db_session, price_feed, notifier)

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_orchestrator] = override_get_orchestrator
    return app


@pytest.fixture()
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
