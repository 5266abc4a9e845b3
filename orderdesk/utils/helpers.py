"""
Helper functions
"""

from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal, localcontext

from orderdesk.core.config import Config


def get_now() -> datetime:
    """
    Current time, timezone-aware UTC

    Returns:
        datetime with UTC tzinfo
    """
    return datetime.now(timezone.utc)


def format_datetime_for_storage(dt: datetime | None) -> str | None:
    """ISO 8601 string for a TEXT column"""
    return dt.isoformat() if dt else None


def parse_datetime(value: str | None) -> datetime | None:
    """
    Parse a timestamp read from the database

    Naive values are treated as UTC (SQLite CURRENT_TIMESTAMP).
    """
    if not value:
        return None
    dt = datetime.fromisoformat(value)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def format_money(amount: Decimal, currency: str | None = None, precision: int | None = None) -> str:
    """
    Format an amount for display, e.g. "INR 1,234.50"

    Args:
        amount: Amount
        currency: Currency code, Config.CURRENCY by default
        precision: Decimal places, Config.CURRENCY_PRECISION by default

    Returns:
        Formatted string
    """
    if precision is None:
        precision = Config.CURRENCY_PRECISION
    amount = Decimal(amount)
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, amount.adjusted() + precision + 2)
        quantized = amount.quantize(Decimal(1).scaleb(-precision), rounding=ROUND_HALF_UP)
    return f"{currency or Config.CURRENCY} {quantized:,.{precision}f}"
