"""
Domain Errors
Kind-tagged exception hierarchy. Callers branch on ``kind`` / ``code``,
never on message text.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(str, Enum):
    """Category of a domain failure"""
    VALIDATION = "VALIDATION"
    EXCHANGE_RATE = "EXCHANGE_RATE"
    CYCLE_RESOLUTION = "CYCLE_RESOLUTION"
    PRICE_FETCH = "PRICE_FETCH"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"


class ValidationCode(str, Enum):
    """Stable validation codes"""
    # Calculation input
    EMPTY_HOLDINGS = "EMPTY_HOLDINGS"
    INVALID_CYCLE_WEIGHT = "INVALID_CYCLE_WEIGHT"
    INVALID_MONTHLY_BUDGET = "INVALID_MONTHLY_BUDGET"
    INVALID_TARGET_WEIGHT_SUM = "INVALID_TARGET_WEIGHT_SUM"
    MISSING_PRICE = "MISSING_PRICE"
    INVALID_PRICE = "INVALID_PRICE"
    NEGATIVE_CARRY_IN = "NEGATIVE_CARRY_IN"

    # Plan / portfolio input
    INVALID_CYCLE_COUNT = "INVALID_CYCLE_COUNT"
    INVALID_CYCLE_WEIGHTS = "INVALID_CYCLE_WEIGHTS"
    INVALID_SCHEDULE = "INVALID_SCHEDULE"
    MISSING_FIELD = "MISSING_FIELD"
    INVALID_HOLDINGS = "INVALID_HOLDINGS"
    INVALID_YM_CYCLE = "INVALID_YM_CYCLE"


class DomainError(Exception):
    """Base class for all domain failures"""

    kind: ErrorKind = ErrorKind.VALIDATION

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details: Dict[str, Any] = details or {}

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"kind": self.kind.value, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class ValidationError(DomainError):
    """Input rejected before any state change"""

    kind = ErrorKind.VALIDATION

    def __init__(
        self,
        code: ValidationCode,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.code = code

    def to_dict(self) -> Dict[str, Any]:
        payload = super().to_dict()
        payload["code"] = self.code.value
        return payload


class CalculationValidationError(ValidationError):
    """Execution calculation input violated an invariant"""


class PlanValidationError(ValidationError):
    """Plan input violated an invariant"""


class PortfolioValidationError(ValidationError):
    """Portfolio input violated an invariant"""


class ExchangeRateError(DomainError):
    """Missing or non-positive exchange rate"""

    kind = ErrorKind.EXCHANGE_RATE


class CycleResolutionError(DomainError):
    """Day is not part of the schedule"""

    kind = ErrorKind.CYCLE_RESOLUTION


class PriceFetchError(DomainError):
    """Quote source failed (network, HTTP status, parse)"""

    kind = ErrorKind.PRICE_FETCH

    def __init__(self, ticker: str, message: str, details: Optional[Dict[str, Any]] = None):
        merged = {"ticker": ticker}
        merged.update(details or {})
        super().__init__(message, merged)
        self.ticker = ticker


class NotFoundError(DomainError):
    kind = ErrorKind.NOT_FOUND


class ConflictError(DomainError):
    kind = ErrorKind.CONFLICT
