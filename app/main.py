"""
FastAPI Main Application with Scheduler
Order sheet API plus the in-process daily sweep
"""

from contextlib import asynccontextmanager
import logging
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import settings
from app.core.logging import setup_logging
from app.infrastructure.db.database import init_db, close_db
from app.scheduler.main import DCAScheduler
from app.api.routes import execution, health, plan, portfolio, scheduler as scheduler_routes

setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Application lifespan manager
    Handles startup and shutdown of the database and scheduler
    """
    logger.info("Starting DCA order sheet service | env=%s", settings.APP_ENV)

    await init_db()
    logger.info("Database initialized")

    scheduler = None
    if settings.SCHEDULER_ENABLED:
        try:
            scheduler = DCAScheduler()
            scheduler.start()
            logger.info("Scheduler started | run_time=%s %s", settings.SCHEDULER_RUN_TIME, settings.TIMEZONE)
        except Exception as e:
            logger.error("Failed to start scheduler: %s", e)
            scheduler = None
    else:
        logger.info("Scheduler disabled")
    app.state.scheduler = scheduler

    yield

    if scheduler:
        scheduler.stop()
    await close_db()
    logger.info("Shutdown complete")


app = FastAPI(
    title="DCA Order Sheet Service",
    description="Recurring split-purchase order sheets for a target portfolio",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router, tags=["Health"])
app.include_router(scheduler_routes.router, prefix="/api/v1/scheduler", tags=["Scheduler"])
app.include_router(execution.router, prefix="/api/v1/executions", tags=["Executions"])
app.include_router(plan.router, prefix="/api/v1/plan", tags=["Plan"])
app.include_router(portfolio.router, prefix="/api/v1/portfolio", tags=["Portfolio"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app.main:app", host=settings.API_HOST, port=settings.API_PORT, reload=settings.DEBUG)
