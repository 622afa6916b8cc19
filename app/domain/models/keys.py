"""
Execution key helpers.

``ym_cycle`` is ``"YYYY-MM#N"``: used as the storage key and as a
prefix-scannable range key by year-month. The format must not change.
"""

import re
from datetime import date
from typing import Tuple

from app.domain.errors import ValidationCode, ValidationError

_YEAR_MONTH_RE = re.compile(r"^(\d{4})-(0[1-9]|1[0-2])$")
_YM_CYCLE_RE = re.compile(r"^(\d{4}-(?:0[1-9]|1[0-2]))#([1-9]\d*)$")


def year_month_of(day: date) -> str:
    return f"{day.year:04d}-{day.month:02d}"


def build_ym_cycle(year_month: str, cycle_index: int) -> str:
    parse_year_month(year_month)
    if cycle_index < 1:
        raise ValidationError(
            ValidationCode.INVALID_YM_CYCLE,
            f"Cycle index must be >= 1, got {cycle_index}",
            {"cycle_index": cycle_index},
        )
    return f"{year_month}#{cycle_index}"


def parse_ym_cycle(ym_cycle: str) -> Tuple[str, int]:
    match = _YM_CYCLE_RE.match(ym_cycle or "")
    if not match:
        raise ValidationError(
            ValidationCode.INVALID_YM_CYCLE,
            f"Malformed ymCycle '{ym_cycle}', expected YYYY-MM#N",
            {"ym_cycle": ym_cycle},
        )
    return match.group(1), int(match.group(2))


def previous_year_month(year_month: str) -> str:
    year, month = parse_year_month(year_month)
    if month == 1:
        return f"{year - 1:04d}-12"
    return f"{year:04d}-{month - 1:02d}"


def parse_year_month(year_month: str) -> Tuple[int, int]:
    match = _YEAR_MONTH_RE.match(year_month or "")
    if not match:
        raise ValidationError(
            ValidationCode.INVALID_YM_CYCLE,
            f"Malformed year-month '{year_month}', expected YYYY-MM",
            {"year_month": year_month},
        )
    return int(match.group(1)), int(match.group(2))
