"""
INPUT VALIDATOR
Rejects malformed calculation requests before any arithmetic.

Category order is fixed (first violated category wins):
1. EMPTY_HOLDINGS
2. INVALID_CYCLE_WEIGHT
3. INVALID_MONTHLY_BUDGET
4. INVALID_TARGET_WEIGHT_SUM
5. MISSING_PRICE / INVALID_PRICE (per holding, in holding order)
6. NEGATIVE_CARRY_IN
"""

from decimal import Decimal
from typing import Mapping, Sequence

from app.domain.errors import CalculationValidationError, ValidationCode
from app.domain.models import CalculationRequest, Holding

WEIGHT_EPSILON = Decimal("0.001")


def validate_inputs(request: CalculationRequest) -> None:
    """
    Validate all inputs for execution calculation

    Raises:
        CalculationValidationError: first violated category
    """
    validate_holdings(request.holdings)
    validate_cycle_weight(request.cycle_weight)
    validate_monthly_budget(request.monthly_budget)
    validate_target_weight_sum(request.holdings)
    validate_prices(request.holdings, request.prices)
    validate_carry_in(request.carry_in_by_ticker)


def validate_holdings(holdings: Sequence[Holding]) -> None:
    if not holdings:
        raise CalculationValidationError(
            ValidationCode.EMPTY_HOLDINGS,
            "Holdings must not be empty",
        )


def validate_cycle_weight(cycle_weight: Decimal) -> None:
    if cycle_weight <= 0 or cycle_weight > 1:
        raise CalculationValidationError(
            ValidationCode.INVALID_CYCLE_WEIGHT,
            f"Cycle weight must be between 0 (exclusive) and 1 (inclusive), got {cycle_weight}",
            {"cycle_weight": str(cycle_weight)},
        )


def validate_monthly_budget(monthly_budget: Decimal) -> None:
    if monthly_budget < 0:
        raise CalculationValidationError(
            ValidationCode.INVALID_MONTHLY_BUDGET,
            f"Monthly budget must be non-negative, got {monthly_budget}",
            {"monthly_budget": str(monthly_budget)},
        )


def validate_target_weight_sum(holdings: Sequence[Holding]) -> None:
    total = sum((h.target_weight for h in holdings), Decimal("0"))
    if abs(total - Decimal("1")) > WEIGHT_EPSILON:
        raise CalculationValidationError(
            ValidationCode.INVALID_TARGET_WEIGHT_SUM,
            f"Sum of target weights must be 1.0 (±{WEIGHT_EPSILON}), got {total}",
            {
                "sum": str(total),
                "holdings": [
                    {"ticker": h.ticker, "target_weight": str(h.target_weight)}
                    for h in holdings
                ],
            },
        )


def validate_prices(holdings: Sequence[Holding], prices: Mapping[str, Decimal]) -> None:
    for holding in holdings:
        price = prices.get(holding.ticker)
        if price is None:
            raise CalculationValidationError(
                ValidationCode.MISSING_PRICE,
                f"Price missing for ticker {holding.ticker}",
                {"ticker": holding.ticker},
            )
        if price <= 0:
            raise CalculationValidationError(
                ValidationCode.INVALID_PRICE,
                f"Price must be positive for ticker {holding.ticker}, got {price}",
                {"ticker": holding.ticker, "price": str(price)},
            )


def validate_carry_in(carry_in_by_ticker: Mapping[str, Decimal]) -> None:
    for ticker, amount in carry_in_by_ticker.items():
        if amount < 0:
            raise CalculationValidationError(
                ValidationCode.NEGATIVE_CARRY_IN,
                f"Carry-in amount must be non-negative for ticker {ticker}, got {amount}",
                {"ticker": ticker, "amount": str(amount)},
            )
