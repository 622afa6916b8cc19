"""
EXECUTION ORCHESTRATOR

One sequential pipeline per (user, invocation):
plan -> run-day gate -> portfolio -> cycle -> idempotency guard -> prices
-> carry-in -> calculator -> persist (GENERATED, then SENT) -> notify

Outcomes:
- skipped: no plan / not a run day / no portfolio (expected, not errors)
- exists:  execution for this cycle already stored (returned untouched)
- error:   price feed, exchange rate, validation or store failure
- created: execution built (and persisted unless dry run)

An error result never leaves a stored row behind. Once the GENERATED save
succeeds the run counts as created, even if the SENT update fails.
"""

import asyncio
import logging
from dataclasses import replace
from datetime import datetime
from decimal import Decimal
from typing import Callable, Dict, Iterable, Optional

from app.config import settings
from app.domain.errors import (
    DomainError,
    ExchangeRateError,
    PlanValidationError,
    ValidationCode,
)
from app.domain.models import (
    CalculationRequest,
    CalculationResult,
    Execution,
    ExecutionStatus,
    Plan,
    Portfolio,
    PriceQuote,
    ProcessResult,
    ProcessStatus,
    SweepSummary,
    build_ym_cycle,
    year_month_of,
)
from app.domain.services.carry_in_resolver import CarryInResolver
from app.domain.services.currency_normalizer import CurrencyNormalizer
from app.domain.services.cycle_resolver import (
    cycle_index,
    force_cycle_index,
    is_run_day,
    next_run_day,
)
from app.domain.services.execution_calculator import ExecutionCalculator
from app.domain.services.ports import (
    ExchangeRateProvider,
    ExecutionStore,
    Notifier,
    PlanStore,
    PortfolioStore,
    PriceFeed,
)
from app.utils.time import today_in_timezone, utc_now

logger = logging.getLogger(__name__)


class ExecutionOrchestrator:
    """
    Generates the order sheet for a user's current cycle.

    All collaborators are injected so each test can supply its own fakes.
    """

    def __init__(
        self,
        plan_store: PlanStore,
        portfolio_store: PortfolioStore,
        execution_store: ExecutionStore,
        price_feed: PriceFeed,
        notifier: Notifier,
        exchange_rate_provider: Optional[ExchangeRateProvider] = None,
        calculator: Optional[ExecutionCalculator] = None,
        normalizer: Optional[CurrencyNormalizer] = None,
        clock: Callable[[], datetime] = utc_now,
        price_fetch_delay: float = settings.PRICE_FETCH_DELAY_SECONDS,
        price_fetch_timeout: Optional[float] = settings.PRICE_FETCH_TIMEOUT_SECONDS,
    ):
        self.plan_store = plan_store
        self.portfolio_store = portfolio_store
        self.execution_store = execution_store
        self.price_feed = price_feed
        self.notifier = notifier
        self.exchange_rate_provider = exchange_rate_provider
        self.calculator = calculator or ExecutionCalculator()
        self.normalizer = normalizer or CurrencyNormalizer()
        self.carry_in_resolver = CarryInResolver(execution_store)
        self.clock = clock
        self.price_fetch_delay = price_fetch_delay
        self.price_fetch_timeout = price_fetch_timeout

    async def process(self, user_id: str, dry_run: bool = False, force: bool = False) -> ProcessResult:
        """
        Run one orchestration for ``user_id``.

        Args:
            dry_run: build and return the execution without persisting or notifying
            force: skip the run-day gate and resolve the nearest applicable cycle
        """
        now = self.clock()
        logger.info("Processing plan | user=%s | dry_run=%s | force=%s", user_id, dry_run, force)

        try:
            plan = await self.plan_store.get_active_plan(user_id)
            if plan is None:
                return self._skipped("No active plan", dry_run)

            today = today_in_timezone(now, plan.schedule.timezone)
            days = plan.schedule.days
            if not force and not is_run_day(days, today.day):
                upcoming = next_run_day(days, today.day)
                return self._skipped(
                    f"Today ({today.day}) is not a run day; next run day is {upcoming}",
                    dry_run,
                )

            portfolio = await self.portfolio_store.get_active_portfolio(user_id)
            if portfolio is None or not portfolio.holdings:
                return self._skipped("No active portfolio with holdings", dry_run)

            index = force_cycle_index(days, today.day) if force else cycle_index(days, today.day)
            cycle_weight = self._cycle_weight(plan, index)
            year_month = year_month_of(today)
            ym_cycle = build_ym_cycle(year_month, index)

            existing = await self.execution_store.get(user_id, ym_cycle)
            if existing is not None:
                logger.info("Execution already exists | user=%s | %s", user_id, ym_cycle)
                return ProcessResult(
                    status=ProcessStatus.EXISTS,
                    message=f"Execution {ym_cycle} already exists",
                    dry_run=dry_run,
                    execution=existing,
                )

            quotes = await self._fetch_quotes_with_deadline(portfolio)
            rates = await self._resolve_rates(quotes.values())
            prices = {
                ticker: self.normalizer.to_base(quote.price, quote.currency, rates)
                for ticker, quote in quotes.items()
            }

            carry_in = await self.carry_in_resolver.resolve(user_id, year_month, index)

            result = self.calculator.calculate(
                CalculationRequest(
                    monthly_budget=plan.monthly_budget,
                    cycle_weight=cycle_weight,
                    holdings=portfolio.holdings,
                    prices=prices,
                    carry_in_by_ticker=carry_in,
                )
            )

            execution = self._build_execution(
                user_id=user_id,
                plan=plan,
                portfolio=portfolio,
                result=result,
                quotes=quotes,
                rates=rates,
                year_month=year_month,
                index=index,
                cycle_weight=cycle_weight,
                now=now,
            )

            if dry_run:
                logger.info("Dry run complete | user=%s | %s", user_id, ym_cycle)
                return ProcessResult(
                    status=ProcessStatus.CREATED,
                    message=f"Execution {ym_cycle} calculated (dry run, not saved)",
                    dry_run=True,
                    execution=execution,
                )

            await self.execution_store.save(execution)

        except asyncio.TimeoutError:
            logger.error("Price fetch timed out | user=%s", user_id)
            return self._error("Price fetch timed out", dry_run)
        except DomainError as exc:
            logger.warning("Execution generation failed | user=%s | %s: %s", user_id, exc.kind.value, exc.message)
            return self._error(exc.message, dry_run)
        except Exception as exc:
            logger.exception("Execution generation failed | user=%s", user_id)
            return self._error(self._summarize(exc), dry_run)

        # The GENERATED row is stored from here on; a failed SENT update keeps it
        execution = await self._mark_sent(execution)
        await self._notify(plan, execution)

        logger.info(
            "Execution created | user=%s | %s | cost=%s | carry=%s",
            user_id,
            execution.ym_cycle,
            execution.total_est_cost,
            execution.total_carry_out,
        )
        return ProcessResult(
            status=ProcessStatus.CREATED,
            message=f"Execution {execution.ym_cycle} created",
            dry_run=False,
            execution=execution,
        )

    async def run_all(self, user_ids: Iterable[str], dry_run: bool = False) -> SweepSummary:
        """Scheduled sweep: process each user sequentially, never forced."""
        summary = SweepSummary()
        for user_id in user_ids:
            result = await self.process(user_id, dry_run=dry_run, force=False)
            summary.record(user_id, result)
        logger.info(
            "Sweep finished | processed=%d created=%d skipped=%d exists=%d failed=%d",
            summary.processed,
            summary.created,
            summary.skipped,
            summary.exists,
            summary.failed,
        )
        return summary

    # ------------------------------------------------------------------
    # INTERNAL HELPERS
    # ------------------------------------------------------------------

    @staticmethod
    def _cycle_weight(plan: Plan, index: int) -> Decimal:
        if index > len(plan.cycle_weights):
            raise PlanValidationError(
                ValidationCode.INVALID_CYCLE_WEIGHTS,
                f"Plan has no cycle weight for cycle {index}",
                {"cycle_index": index, "cycle_weights": [str(w) for w in plan.cycle_weights]},
            )
        return plan.cycle_weights[index - 1]

    async def _fetch_quotes_with_deadline(self, portfolio: Portfolio) -> Dict[str, PriceQuote]:
        if self.price_fetch_timeout:
            return await asyncio.wait_for(self._fetch_quotes(portfolio), timeout=self.price_fetch_timeout)
        return await self._fetch_quotes(portfolio)

    async def _fetch_quotes(self, portfolio: Portfolio) -> Dict[str, PriceQuote]:
        """Sequential on purpose: one request at a time with a fixed gap."""
        quotes: Dict[str, PriceQuote] = {}
        for position, holding in enumerate(portfolio.holdings):
            if position and self.price_fetch_delay > 0:
                await asyncio.sleep(self.price_fetch_delay)
            quotes[holding.ticker] = await self.price_feed.fetch_price(holding.ticker, holding.market)
        return quotes

    async def _resolve_rates(self, quotes: Iterable[PriceQuote]) -> Dict[str, Decimal]:
        base = self.normalizer.base
        foreign = sorted({q.currency.value for q in quotes if q.currency != base})
        if not foreign:
            return {base.value: Decimal("1")}

        if self.exchange_rate_provider is None:
            raise ExchangeRateError(
                "No exchange rate provider configured",
                {"currencies": foreign},
            )
        rates = await self.exchange_rate_provider.get_rates()
        self.normalizer.validate_rates(rates)
        return dict(rates)

    @staticmethod
    def _build_execution(
        user_id: str,
        plan: Plan,
        portfolio: Portfolio,
        result: CalculationResult,
        quotes: Dict[str, PriceQuote],
        rates: Dict[str, Decimal],
        year_month: str,
        index: int,
        cycle_weight: Decimal,
        now: datetime,
    ) -> Execution:
        items = [
            replace(
                item,
                price_currency=quotes[item.ticker].currency,
                native_price=quotes[item.ticker].price,
            )
            for item in result.items
        ]
        return Execution(
            user_id=user_id,
            ym_cycle=build_ym_cycle(year_month, index),
            portfolio_id=portfolio.portfolio_id,
            plan_id=plan.plan_id,
            as_of_date=now,
            year_month=year_month,
            cycle_index=index,
            cycle_weight=cycle_weight,
            total_budget=plan.monthly_budget,
            cycle_budget=result.cycle_budget,
            items=tuple(items),
            carry_by_ticker=dict(result.carry_out_by_ticker),
            exchange_rates=rates,
            status=ExecutionStatus.GENERATED,
            created_at=now,
            updated_at=now,
        )

    async def _mark_sent(self, execution: Execution) -> Execution:
        sent = execution.with_status(ExecutionStatus.SENT, self.clock())
        try:
            await self.execution_store.save(sent)
        except Exception:
            logger.exception(
                "SENT update failed, keeping GENERATED | user=%s | %s",
                execution.user_id,
                execution.ym_cycle,
            )
            return execution
        return sent

    async def _notify(self, plan: Plan, execution: Execution) -> None:
        """Best effort: delivery never changes the stored execution."""
        try:
            outcome = await self.notifier.send(plan, execution)
        except Exception:
            logger.exception("Notification failed | user=%s | %s", execution.user_id, execution.ym_cycle)
            return
        if not outcome.success:
            logger.warning(
                "Notification not delivered | user=%s | %s | %s: %s",
                execution.user_id,
                execution.ym_cycle,
                outcome.channel.value,
                outcome.error,
            )

    @staticmethod
    def _skipped(message: str, dry_run: bool) -> ProcessResult:
        logger.info("Skipped: %s", message)
        return ProcessResult(status=ProcessStatus.SKIPPED, message=message, dry_run=dry_run)

    @staticmethod
    def _summarize(exc: Exception, limit: int = 120) -> str:
        """Class name plus the first line of the message (drivers append SQL and parameters)."""
        lines = str(exc).strip().splitlines()
        if not lines:
            return exc.__class__.__name__
        first = lines[0]
        if len(first) > limit:
            first = first[:limit].rstrip() + "..."
        return f"{exc.__class__.__name__}: {first}"

    @staticmethod
    def _error(message: str, dry_run: bool) -> ProcessResult:
        return ProcessResult(status=ProcessStatus.ERROR, message=message, dry_run=dry_run)
