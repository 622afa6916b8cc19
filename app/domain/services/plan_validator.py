"""
Plan and portfolio input validation (applied on upsert).

The execution calculator re-checks what it depends on; these checks keep bad
configuration from being stored in the first place.
"""

from decimal import Decimal
from typing import Optional, Sequence

from app.domain.errors import PlanValidationError, PortfolioValidationError, ValidationCode
from app.domain.models import Holding, PlanInput, PlanSchedule
from app.domain.services.input_validator import WEIGHT_EPSILON

ALLOWED_CYCLE_COUNTS = (2, 3)
MIN_RUN_DAY = 1
MAX_RUN_DAY = 28


def validate_plan_input(plan_input: PlanInput, creating: bool, current_cycle_count: Optional[int] = None) -> None:
    """
    Validate a plan upsert.

    On create every field except notification settings is required. On update
    only supplied fields are checked, against the effective cycle count.
    """
    if creating:
        for field_name in ("monthly_budget", "cycle_count", "cycle_weights", "schedule", "email"):
            if getattr(plan_input, field_name) in (None, ""):
                raise PlanValidationError(
                    ValidationCode.MISSING_FIELD,
                    f"{field_name} is required when creating a new plan",
                    {"field": field_name},
                )

    if plan_input.monthly_budget is not None and plan_input.monthly_budget < 0:
        raise PlanValidationError(
            ValidationCode.INVALID_MONTHLY_BUDGET,
            f"Monthly budget must be non-negative, got {plan_input.monthly_budget}",
            {"monthly_budget": str(plan_input.monthly_budget)},
        )

    cycle_count = plan_input.cycle_count if plan_input.cycle_count is not None else current_cycle_count
    if plan_input.cycle_count is not None and plan_input.cycle_count not in ALLOWED_CYCLE_COUNTS:
        raise PlanValidationError(
            ValidationCode.INVALID_CYCLE_COUNT,
            f"cycleCount must be 2 or 3, got {plan_input.cycle_count}",
            {"cycle_count": plan_input.cycle_count},
        )

    if plan_input.cycle_weights is not None:
        validate_cycle_weights(plan_input.cycle_weights, cycle_count)

    if plan_input.schedule is not None:
        validate_schedule(plan_input.schedule, cycle_count)


def validate_cycle_weights(weights: Sequence[Decimal], cycle_count: Optional[int]) -> None:
    count = cycle_count if cycle_count is not None else len(weights)
    if len(weights) != count:
        raise PlanValidationError(
            ValidationCode.INVALID_CYCLE_WEIGHTS,
            f"cycleWeights length ({len(weights)}) must match cycleCount ({count})",
            {"length": len(weights), "cycle_count": count},
        )

    for weight in weights:
        if weight <= 0 or weight > 1:
            raise PlanValidationError(
                ValidationCode.INVALID_CYCLE_WEIGHTS,
                "Each cycleWeight must be between 0 (exclusive) and 1 (inclusive)",
                {"weight": str(weight)},
            )

    total = sum(weights, Decimal("0"))
    if abs(total - Decimal("1")) > WEIGHT_EPSILON:
        raise PlanValidationError(
            ValidationCode.INVALID_CYCLE_WEIGHTS,
            f"cycleWeights must sum to 1.0, got {total}",
            {"sum": str(total)},
        )


def validate_schedule(schedule: PlanSchedule, cycle_count: Optional[int]) -> None:
    days = list(schedule.days)
    if len(set(days)) != len(days):
        raise PlanValidationError(
            ValidationCode.INVALID_SCHEDULE,
            "Schedule days must be unique",
            {"days": days},
        )
    for day in days:
        if day < MIN_RUN_DAY or day > MAX_RUN_DAY:
            raise PlanValidationError(
                ValidationCode.INVALID_SCHEDULE,
                f"Schedule day must be between {MIN_RUN_DAY} and {MAX_RUN_DAY}, got {day}",
                {"day": day},
            )
    if cycle_count is not None and len(days) != cycle_count:
        raise PlanValidationError(
            ValidationCode.INVALID_SCHEDULE,
            f"Schedule needs one day per cycle ({cycle_count}), got {len(days)}",
            {"days": days, "cycle_count": cycle_count},
        )
    if not schedule.timezone:
        raise PlanValidationError(
            ValidationCode.INVALID_SCHEDULE,
            "Schedule timezone is required",
        )


def validate_portfolio_holdings(holdings: Optional[Sequence[Holding]], creating: bool) -> None:
    if holdings is None:
        if creating:
            raise PortfolioValidationError(
                ValidationCode.EMPTY_HOLDINGS,
                "Holdings are required when creating a new portfolio",
            )
        return
    if not holdings:
        raise PortfolioValidationError(ValidationCode.EMPTY_HOLDINGS, "Holdings must not be empty")

    tickers = [h.ticker for h in holdings]
    if len(set(tickers)) != len(tickers):
        raise PortfolioValidationError(
            ValidationCode.INVALID_HOLDINGS,
            "Each ticker may appear only once",
            {"tickers": tickers},
        )

    for holding in holdings:
        if holding.target_weight < 0:
            raise PortfolioValidationError(
                ValidationCode.INVALID_HOLDINGS,
                f"Holding weight cannot be negative: {holding.ticker}",
                {"ticker": holding.ticker, "target_weight": str(holding.target_weight)},
            )

    total = sum((h.target_weight for h in holdings), Decimal("0"))
    if abs(total - Decimal("1")) > WEIGHT_EPSILON:
        raise PortfolioValidationError(
            ValidationCode.INVALID_TARGET_WEIGHT_SUM,
            f"Holdings target weights must sum to 1.0, got {total}",
            {"sum": str(total)},
        )
