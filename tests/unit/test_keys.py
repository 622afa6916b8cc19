from datetime import date

import pytest

from app.domain.errors import ValidationCode, ValidationError
from app.domain.models import build_ym_cycle, parse_year_month, parse_ym_cycle, previous_year_month, year_month_of


def test_build_and_parse():
    assert build_ym_cycle("2026-02", 1) == "2026-02#1"
    assert parse_ym_cycle("2026-02#3") == ("2026-02", 3)
    assert year_month_of(date(2026, 2, 5)) == "2026-02"


def test_keys_sort_lexicographically_within_a_month():
    keys = [build_ym_cycle("2026-02", n) for n in (3, 1, 2)]
    assert sorted(keys) == ["2026-02#1", "2026-02#2", "2026-02#3"]
    assert all(k.startswith("2026-02#") for k in keys)


@pytest.mark.parametrize("value", ["2026-2#1", "2026-02-1", "2026-02#0", "2026-13#1", "", "2026-02#"])
def test_malformed_keys_are_rejected(value):
    with pytest.raises(ValidationError) as exc:
        parse_ym_cycle(value)
    assert exc.value.code == ValidationCode.INVALID_YM_CYCLE


def test_previous_year_month_rolls_over_january():
    assert previous_year_month("2026-01") == "2025-12"
    assert previous_year_month("2026-03") == "2026-02"


def test_parse_year_month_rejects_garbage():
    assert parse_year_month("2026-10") == (2026, 10)
    with pytest.raises(ValidationError):
        parse_year_month("202610")


def test_build_rejects_zero_cycle():
    with pytest.raises(ValidationError):
        build_ym_cycle("2026-02", 0)
