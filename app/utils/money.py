"""Decimal helpers for money, weights and JSON round-tripping."""

from decimal import Decimal
from typing import Dict, Mapping, Union

Number = Union[Decimal, int, float, str]


def to_decimal(value: Number) -> Decimal:
    """Exact conversion; floats go through ``str`` so 0.3 stays 0.3."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def decimal_map(values: Mapping[str, Number]) -> Dict[str, Decimal]:
    return {key: to_decimal(val) for key, val in values.items()}


def decimal_map_to_json(values: Mapping[str, Decimal]) -> Dict[str, str]:
    """Decimals are stored as strings so no precision is lost in JSON columns."""
    return {key: str(val) for key, val in values.items()}
