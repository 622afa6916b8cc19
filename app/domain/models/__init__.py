"""
Domain Models Package
Export all domain entities
"""

from .entities import (
    # Enums / fact tables
    BASE_CURRENCY,
    MARKET_CURRENCY,
    Currency,
    ExecutionStatus,
    Market,
    NotificationChannel,
    ProcessStatus,

    # Entities
    CalculationRequest,
    CalculationResult,
    Execution,
    ExecutionItem,
    ExecutionSummary,
    ExecutionTotals,
    Holding,
    NotificationResult,
    Plan,
    PlanSchedule,
    Portfolio,
    PriceQuote,
    ProcessResult,
    SweepSummary,
    UserConfirm,
)
from .inputs import PlanInput, PortfolioInput
from .keys import build_ym_cycle, parse_year_month, parse_ym_cycle, previous_year_month, year_month_of

__all__ = [
    # Enums / fact tables
    "BASE_CURRENCY",
    "MARKET_CURRENCY",
    "Currency",
    "ExecutionStatus",
    "Market",
    "NotificationChannel",
    "ProcessStatus",

    # Entities
    "CalculationRequest",
    "CalculationResult",
    "Execution",
    "ExecutionItem",
    "ExecutionSummary",
    "ExecutionTotals",
    "Holding",
    "NotificationResult",
    "Plan",
    "PlanSchedule",
    "Portfolio",
    "PriceQuote",
    "ProcessResult",
    "SweepSummary",
    "UserConfirm",

    # Inputs
    "PlanInput",
    "PortfolioInput",

    # Keys
    "build_ym_cycle",
    "parse_year_month",
    "parse_ym_cycle",
    "previous_year_month",
    "year_month_of",
]
