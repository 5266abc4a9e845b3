"""
Application configuration from environment variables
"""

import os
from decimal import Decimal, InvalidOperation

from dotenv import load_dotenv


load_dotenv()


def _get_decimal(name: str, default: str) -> Decimal:
    raw = os.getenv(name, default)
    try:
        return Decimal(raw)
    except InvalidOperation:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


class Config:
    """Application settings"""

    # Database
    DATABASE_PATH: str = os.getenv("DATABASE_PATH", "orderdesk.db")

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOGS_DIR: str = os.getenv("LOGS_DIR", "logs")

    # Pricing
    CURRENCY: str = os.getenv("CURRENCY", "INR")
    CURRENCY_PRECISION: int = int(os.getenv("CURRENCY_PRECISION", "2"))
    DEFAULT_OPERATION_COST_PERCENTAGE: Decimal = _get_decimal(
        "DEFAULT_OPERATION_COST_PERCENTAGE", "10"
    )

    # Optimistic locking retries
    CONFLICT_RETRY_ATTEMPTS: int = int(os.getenv("CONFLICT_RETRY_ATTEMPTS", "3"))
    CONFLICT_RETRY_BASE_DELAY: float = float(os.getenv("CONFLICT_RETRY_BASE_DELAY", "0.05"))

    @classmethod
    def validate(cls) -> bool:
        """
        Validate settings

        Returns:
            True if every setting is usable

        Raises:
            ValueError: Names the first invalid setting
        """
        if not cls.DATABASE_PATH:
            raise ValueError("DATABASE_PATH is not set")

        if not 0 <= cls.CURRENCY_PRECISION <= 6:
            raise ValueError(
                f"CURRENCY_PRECISION must be between 0 and 6, got {cls.CURRENCY_PRECISION}"
            )

        if cls.DEFAULT_OPERATION_COST_PERCENTAGE < 0:
            raise ValueError(
                "DEFAULT_OPERATION_COST_PERCENTAGE must be non-negative, "
                f"got {cls.DEFAULT_OPERATION_COST_PERCENTAGE}"
            )

        if cls.CONFLICT_RETRY_ATTEMPTS < 1:
            raise ValueError(
                f"CONFLICT_RETRY_ATTEMPTS must be at least 1, got {cls.CONFLICT_RETRY_ATTEMPTS}"
            )

        if cls.CONFLICT_RETRY_BASE_DELAY < 0:
            raise ValueError(
                "CONFLICT_RETRY_BASE_DELAY must be non-negative, "
                f"got {cls.CONFLICT_RETRY_BASE_DELAY}"
            )

        return True
