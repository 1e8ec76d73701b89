"""Utility functions for freeboard."""

from freeboard.utils.date_parser import parse_date, get_date_range
from freeboard.utils.amount_parser import parse_amount, coerce_decimal, round_cents
from freeboard.utils.cache import TTLCache
from freeboard.utils.clock import SystemClock, FixedClock

__all__ = [
    "parse_date",
    "get_date_range",
    "parse_amount",
    "coerce_decimal",
    "round_cents",
    "TTLCache",
    "SystemClock",
    "FixedClock",
]
