from decimal import Decimal

import pytest

from app.domain.errors import CalculationValidationError, ValidationCode
from app.domain.models import CalculationRequest, Holding, Market
from app.domain.services.input_validator import validate_inputs

from fakes import DEFAULT_PRICES, make_holdings


def _request(**overrides) -> CalculationRequest:
    fields = dict(
        monthly_budget=Decimal("1000000"),
        cycle_weight=Decimal("0.5"),
        holdings=make_holdings(),
        prices=dict(DEFAULT_PRICES),
        carry_in_by_ticker={},
    )
    fields.update(overrides)
    return CalculationRequest(**fields)


def _code(request: CalculationRequest) -> ValidationCode:
    with pytest.raises(CalculationValidationError) as exc:
        validate_inputs(request)
    return exc.value.code


def test_valid_request_passes():
    validate_inputs(_request())


def test_empty_holdings():
    assert _code(_request(holdings=())) == ValidationCode.EMPTY_HOLDINGS


@pytest.mark.parametrize("weight", ["0", "-0.1", "1.0001"])
def test_cycle_weight_out_of_range(weight):
    assert _code(_request(cycle_weight=Decimal(weight))) == ValidationCode.INVALID_CYCLE_WEIGHT


def test_cycle_weight_of_one_is_allowed():
    validate_inputs(_request(cycle_weight=Decimal("1")))


def test_negative_budget():
    assert _code(_request(monthly_budget=Decimal("-1"))) == ValidationCode.INVALID_MONTHLY_BUDGET


def test_missing_price():
    prices = dict(DEFAULT_PRICES)
    del prices["379800"]
    with pytest.raises(CalculationValidationError) as exc:
        validate_inputs(_request(prices=prices))
    assert exc.value.code == ValidationCode.MISSING_PRICE
    assert exc.value.details["ticker"] == "379800"


@pytest.mark.parametrize("price", ["0", "-100"])
def test_non_positive_price(price):
    prices = dict(DEFAULT_PRICES)
    prices["439870"] = Decimal(price)
    assert _code(_request(prices=prices)) == ValidationCode.INVALID_PRICE


def test_price_errors_follow_holding_order():
    prices = {"069500": Decimal("0"), "439870": Decimal("12000")}
    with pytest.raises(CalculationValidationError) as exc:
        validate_inputs(_request(prices=prices))
    assert exc.value.code == ValidationCode.INVALID_PRICE
    assert exc.value.details["ticker"] == "069500"


def test_negative_carry_in():
    request = _request(carry_in_by_ticker={"069500": Decimal("-1")})
    assert _code(request) == ValidationCode.NEGATIVE_CARRY_IN


def test_first_violated_category_wins():
    bad_weights = (Holding("A", "A", Market.KRX, Decimal("0.2")),)

    # Budget is checked before weight sum, prices and carry-in
    request = _request(
        monthly_budget=Decimal("-5"),
        holdings=bad_weights,
        prices={},
        carry_in_by_ticker={"A": Decimal("-1")},
    )
    assert _code(request) == ValidationCode.INVALID_MONTHLY_BUDGET

    assert _code(_request(cycle_weight=Decimal("0"), monthly_budget=Decimal("-5"))) == (
        ValidationCode.INVALID_CYCLE_WEIGHT
    )
    assert _code(_request(holdings=bad_weights, prices={})) == ValidationCode.INVALID_TARGET_WEIGHT_SUM
    assert _code(_request(prices={}, carry_in_by_ticker={"069500": Decimal("-1")})) == (
        ValidationCode.MISSING_PRICE
    )


def test_weight_sum_error_lists_holdings():
    holdings = (
        Holding("A", "A", Market.KRX, Decimal("0.5")),
        Holding("B", "B", Market.KRX, Decimal("0.3")),
    )
    with pytest.raises(CalculationValidationError) as exc:
        validate_inputs(_request(holdings=holdings, prices={"A": Decimal("1"), "B": Decimal("1")}))
    assert exc.value.details["sum"] == "0.8"
    assert [h["ticker"] for h in exc.value.details["holdings"]] == ["A", "B"]
    assert exc.value.to_dict()["code"] == "INVALID_TARGET_WEIGHT_SUM"
