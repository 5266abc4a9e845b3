"""Core - configuration and constants"""

from orderdesk.core.config import Config
from orderdesk.core.constants import COMPLETED_STATUSES, OrderStatus, PriceSource


__all__ = [
    "COMPLETED_STATUSES",
    "Config",
    "OrderStatus",
    "PriceSource",
]
