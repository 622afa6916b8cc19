"""
Domain Models - Entities
Pure domain objects with no infrastructure dependencies
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Dict, List, Mapping, Optional, Tuple


class Market(str, Enum):
    """Exchange a holding trades on"""
    KRX = "KRX"
    US = "US"


class Currency(str, Enum):
    """Quote currency"""
    KRW = "KRW"
    USD = "USD"


BASE_CURRENCY = Currency.KRW

# Static fact table: native quote currency per market
MARKET_CURRENCY: Dict[Market, Currency] = {
    Market.KRX: Currency.KRW,
    Market.US: Currency.USD,
}


class ExecutionStatus(str, Enum):
    """Order sheet lifecycle"""
    GENERATED = "GENERATED"
    SENT = "SENT"
    CONFIRMED = "CONFIRMED"


class NotificationChannel(str, Enum):
    EMAIL = "EMAIL"
    TELEGRAM = "TELEGRAM"


class ProcessStatus(str, Enum):
    """Terminal outcome of one orchestration run"""
    CREATED = "created"
    SKIPPED = "skipped"
    EXISTS = "exists"
    ERROR = "error"


@dataclass(frozen=True)
class Holding:
    """Portfolio holding with its target weight - Immutable"""
    ticker: str
    name: str
    market: Market
    target_weight: Decimal

    def __post_init__(self):
        if not self.ticker:
            raise ValueError("Holding ticker cannot be empty")


@dataclass(frozen=True)
class Portfolio:
    """Active target portfolio snapshot"""
    portfolio_id: str
    user_id: str
    name: str
    holdings: Tuple[Holding, ...]
    is_active: bool = True

    @property
    def tickers(self) -> List[str]:
        return [h.ticker for h in self.holdings]


@dataclass(frozen=True)
class PlanSchedule:
    """Run days (day-of-month, one per cycle) and the timezone they are observed in"""
    days: Tuple[int, ...]
    timezone: str = "Asia/Seoul"


@dataclass(frozen=True)
class Plan:
    """Monthly investment plan"""
    plan_id: str
    user_id: str
    monthly_budget: Decimal
    cycle_count: int
    cycle_weights: Tuple[Decimal, ...]
    schedule: PlanSchedule
    email: str
    notification_channels: Tuple[NotificationChannel, ...] = (NotificationChannel.EMAIL,)
    telegram_chat_id: Optional[str] = None
    is_active: bool = True


@dataclass(frozen=True)
class CalculationRequest:
    """Everything the execution calculator needs for one cycle"""
    monthly_budget: Decimal
    cycle_weight: Decimal
    holdings: Tuple[Holding, ...]
    prices: Mapping[str, Decimal]
    carry_in_by_ticker: Mapping[str, Decimal] = field(default_factory=dict)


@dataclass(frozen=True)
class ExecutionItem:
    """One order sheet row"""
    ticker: str
    name: str
    market: Market
    price: Decimal
    target_weight: Decimal
    target_amount: Decimal
    carry_in: Decimal
    shares: int
    est_cost: Decimal
    carry_out: Decimal
    price_currency: Currency = BASE_CURRENCY
    native_price: Optional[Decimal] = None

    @property
    def budget_for_ticker(self) -> Decimal:
        return self.target_amount + self.carry_in


@dataclass(frozen=True)
class ExecutionTotals:
    total_est_cost: Decimal
    total_carry_out: Decimal


@dataclass(frozen=True)
class CalculationResult:
    """Output of the execution calculator"""
    cycle_budget: Decimal
    items: Tuple[ExecutionItem, ...]
    carry_out_by_ticker: Dict[str, Decimal]
    totals: ExecutionTotals


@dataclass(frozen=True)
class UserConfirm:
    confirmed_at: Optional[datetime] = None
    note: Optional[str] = None


@dataclass(frozen=True)
class Execution:
    """Order sheet for one (user, cycle) - Immutable once created"""
    user_id: str
    ym_cycle: str
    portfolio_id: str
    plan_id: str
    as_of_date: datetime
    year_month: str
    cycle_index: int
    cycle_weight: Decimal
    total_budget: Decimal
    cycle_budget: Decimal
    items: Tuple[ExecutionItem, ...]
    carry_by_ticker: Dict[str, Decimal]
    status: ExecutionStatus
    created_at: datetime
    updated_at: datetime
    exchange_rates: Dict[str, Decimal] = field(default_factory=dict)
    user_confirm: UserConfirm = field(default_factory=UserConfirm)
    deleted_at: Optional[datetime] = None

    @property
    def total_est_cost(self) -> Decimal:
        return sum((item.est_cost for item in self.items), Decimal("0"))

    @property
    def total_carry_out(self) -> Decimal:
        return sum((item.carry_out for item in self.items), Decimal("0"))

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def with_status(self, status: ExecutionStatus, at: datetime) -> "Execution":
        return replace(self, status=status, updated_at=at)


@dataclass(frozen=True)
class ExecutionSummary:
    """List-view projection of an execution"""
    ym_cycle: str
    year_month: str
    cycle_index: int
    as_of_date: datetime
    status: ExecutionStatus
    cycle_budget: Decimal

    @classmethod
    def from_execution(cls, execution: Execution) -> "ExecutionSummary":
        return cls(
            ym_cycle=execution.ym_cycle,
            year_month=execution.year_month,
            cycle_index=execution.cycle_index,
            as_of_date=execution.as_of_date,
            status=execution.status,
            cycle_budget=execution.cycle_budget,
        )


@dataclass(frozen=True)
class PriceQuote:
    """Single quote returned by a price feed"""
    ticker: str
    price: Decimal
    currency: Currency
    source: str
    fetched_at: datetime


@dataclass(frozen=True)
class NotificationResult:
    success: bool
    channel: NotificationChannel
    error: Optional[str] = None


@dataclass(frozen=True)
class ProcessResult:
    """Outcome of ExecutionOrchestrator.process"""
    status: ProcessStatus
    message: str
    dry_run: bool = False
    execution: Optional[Execution] = None

    @property
    def ok(self) -> bool:
        return self.status != ProcessStatus.ERROR


@dataclass
class SweepSummary:
    """Aggregate outcome of a scheduler sweep over many users"""
    processed: int = 0
    created: int = 0
    skipped: int = 0
    exists: int = 0
    failed: int = 0
    errors: List[Dict[str, str]] = field(default_factory=list)

    def record(self, user_id: str, result: ProcessResult) -> None:
        self.processed += 1
        if result.status == ProcessStatus.CREATED:
            self.created += 1
        elif result.status == ProcessStatus.SKIPPED:
            self.skipped += 1
        elif result.status == ProcessStatus.EXISTS:
            self.exists += 1
        else:
            self.failed += 1
            self.errors.append({"user_id": user_id, "message": result.message})
