"""
EXECUTION CALCULATOR
Cycle budget + target weights + prices + carry-in -> whole-share order sheet

RULES (LOCKED):
- Validate first, propagate validation failures unchanged
- Shares: floor() ALWAYS, never round up
- Currency amounts: never rounded, remainder carries to the same ticker
- No redistribution across tickers
- Deterministic: dry runs recompute the same numbers
"""

from decimal import Decimal, ROUND_FLOOR
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from app.domain.models import (
    CalculationRequest,
    CalculationResult,
    ExecutionItem,
    ExecutionTotals,
    Holding,
)
from app.domain.services.input_validator import validate_inputs
from app.utils.money import Number, decimal_map, to_decimal

ZERO = Decimal("0")


class ExecutionCalculator:
    """
    Execution Calculator
    Pure function object; safe to share across concurrent runs.
    """

    def calculate(self, request: CalculationRequest) -> CalculationResult:
        """
        Calculate the order sheet for one cycle

        Args:
            request: Budget, cycle weight, holdings, prices and carry-in

        Returns:
            CalculationResult with items in holding order

        Raises:
            CalculationValidationError: if any input invariant is violated
        """
        validate_inputs(request)

        cycle_budget = self.compute_cycle_budget(request.monthly_budget, request.cycle_weight)
        items = self._compute_items(
            request.holdings,
            cycle_budget,
            request.prices,
            request.carry_in_by_ticker,
        )

        return CalculationResult(
            cycle_budget=cycle_budget,
            items=tuple(items),
            carry_out_by_ticker=self.build_carry_out_map(items),
            totals=self.compute_totals(items),
        )

    @staticmethod
    def compute_cycle_budget(monthly_budget: Decimal, cycle_weight: Decimal) -> Decimal:
        return monthly_budget * cycle_weight

    def _compute_items(
        self,
        holdings: Sequence[Holding],
        cycle_budget: Decimal,
        prices: Mapping[str, Decimal],
        carry_in_by_ticker: Mapping[str, Decimal],
    ) -> List[ExecutionItem]:
        items = []
        for holding in holdings:
            price = prices[holding.ticker]
            carry_in = carry_in_by_ticker.get(holding.ticker, ZERO)

            target_amount = cycle_budget * holding.target_weight
            budget_for_ticker = target_amount + carry_in

            shares = self._floor_shares(budget_for_ticker, price)
            est_cost = price * shares
            carry_out = budget_for_ticker - est_cost

            items.append(
                ExecutionItem(
                    ticker=holding.ticker,
                    name=holding.name,
                    market=holding.market,
                    price=price,
                    target_weight=holding.target_weight,
                    target_amount=target_amount,
                    carry_in=carry_in,
                    shares=shares,
                    est_cost=est_cost,
                    carry_out=carry_out,
                )
            )
        return items

    @staticmethod
    def _floor_shares(amount: Decimal, price: Decimal) -> int:
        """
        Whole shares affordable with ``amount``.

        Decimal division keeps this exact for the amounts in play; float
        division could put 70000/35000 a hair under 2.
        """
        return int((amount / price).to_integral_value(rounding=ROUND_FLOOR))

    @staticmethod
    def build_carry_out_map(items: Iterable[ExecutionItem]) -> Dict[str, Decimal]:
        return {item.ticker: item.carry_out for item in items}

    @staticmethod
    def compute_totals(items: Sequence[ExecutionItem]) -> ExecutionTotals:
        return ExecutionTotals(
            total_est_cost=sum((item.est_cost for item in items), ZERO),
            total_carry_out=sum((item.carry_out for item in items), ZERO),
        )


_default_calculator = ExecutionCalculator()


def calculate_execution(
    monthly_budget: Number,
    cycle_weight: Number,
    holdings: Sequence[Holding],
    prices: Mapping[str, Number],
    carry_in_by_ticker: Optional[Mapping[str, Number]] = None,
) -> CalculationResult:
    """Convenience wrapper accepting plain numbers."""
    request = CalculationRequest(
        monthly_budget=to_decimal(monthly_budget),
        cycle_weight=to_decimal(cycle_weight),
        holdings=tuple(holdings),
        prices=decimal_map(prices),
        carry_in_by_ticker=decimal_map(carry_in_by_ticker or {}),
    )
    return _default_calculator.calculate(request)
