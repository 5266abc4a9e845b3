"""Utilities and helper functions"""
from orderdesk.utils.helpers import (
    format_datetime_for_storage,
    format_money,
    get_now,
    parse_datetime,
)


__all__ = [
    "format_datetime_for_storage",
    "format_money",
    "get_now",
    "parse_datetime",
]
