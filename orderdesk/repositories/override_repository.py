"""
Repository for customer-specific price overrides
"""

import logging
from datetime import datetime
from decimal import Decimal

import aiosqlite

from orderdesk.core.constants import PriceSource
from orderdesk.domain.exceptions import DuplicateOverride
from orderdesk.domain.pricing import (
    DiscountOverride,
    FixedPriceOverride,
    PricingOverride,
    to_decimal,
    validate_override,
)
from orderdesk.repositories.base import BaseRepository
from orderdesk.utils.helpers import format_datetime_for_storage, get_now, parse_datetime


logger = logging.getLogger(__name__)


class OverrideRepository(BaseRepository[PricingOverride]):
    """Overrides, at most one per (customer, product) pair"""

    async def get_override(self, customer_id: int, product_id: int) -> PricingOverride | None:
        """
        Override stored for the pair, active or expired

        Returns:
            FixedPriceOverride, DiscountOverride or None
        """
        row = await self._fetch_one(
            "SELECT * FROM customer_product_pricing WHERE customer_id = ? AND product_id = ?",
            (customer_id, product_id),
        )
        return self._row_to_override(row) if row else None

    async def get_active_override(
        self, customer_id: int, product_id: int, at: datetime | None = None
    ) -> PricingOverride | None:
        """
        Override for the pair if it is still in effect at `at` (now by default)
        """
        override = await self.get_override(customer_id, product_id)
        if override is None or not override.is_active(at or get_now()):
            return None
        return override

    async def list_overrides(
        self, customer_id: int, active_only: bool = False, at: datetime | None = None
    ) -> list[PricingOverride]:
        """
        All overrides of a customer, ordered by product

        Args:
            customer_id: Customer ID
            active_only: Leave out expired overrides
            at: Moment used for the expiry check

        Returns:
            List of overrides
        """
        rows = await self._fetch_all(
            "SELECT * FROM customer_product_pricing WHERE customer_id = ? ORDER BY product_id",
            (customer_id,),
        )
        overrides = [self._row_to_override(row) for row in rows]
        if active_only:
            moment = at or get_now()
            overrides = [override for override in overrides if override.is_active(moment)]
        return overrides

    async def save_override(
        self, override: PricingOverride, replace_active: bool = False
    ) -> PricingOverride:
        """
        Insert or replace the override for its pair

        Args:
            override: New override
            replace_active: Confirm replacing an override that is still active

        Returns:
            The saved override

        Raises:
            InvalidPricingInput: Bad price or percentage
            DuplicateOverride: An active override exists and replace_active is False
        """
        validate_override(override)

        now = get_now()
        if isinstance(override, FixedPriceOverride):
            fixed_price = str(to_decimal(override.price, "fixed_price"))
            discount_percent = None
        else:
            fixed_price = None
            discount_percent = str(to_decimal(override.percentage, "discount_percent"))

        async with self.transaction():
            existing = await self.get_override(override.customer_id, override.product_id)
            if existing is not None and existing.is_active(now) and not replace_active:
                raise DuplicateOverride(override.customer_id, override.product_id)

            await self._execute(
                """
                INSERT INTO customer_product_pricing
                (customer_id, product_id, pricing_type, fixed_price, discount_percent,
                 visible, effective_to, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT (customer_id, product_id) DO UPDATE SET
                    pricing_type = excluded.pricing_type,
                    fixed_price = excluded.fixed_price,
                    discount_percent = excluded.discount_percent,
                    visible = excluded.visible,
                    effective_to = excluded.effective_to,
                    updated_at = excluded.updated_at
                """,
                (
                    override.customer_id,
                    override.product_id,
                    override.kind,
                    fixed_price,
                    discount_percent,
                    1 if override.visible else 0,
                    format_datetime_for_storage(override.effective_to),
                    now.isoformat(),
                    now.isoformat(),
                ),
            )

        action = "replaced" if existing is not None else "created"
        logger.info(
            f"Price override {action}: customer #{override.customer_id}, "
            f"product #{override.product_id} ({override.kind})"
        )
        return override

    async def delete_override(self, customer_id: int, product_id: int) -> bool:
        """
        Remove the override of a pair

        Returns:
            True if an override was removed
        """
        cursor = await self._execute(
            "DELETE FROM customer_product_pricing WHERE customer_id = ? AND product_id = ?",
            (customer_id, product_id),
        )
        await self.db.commit()
        deleted = cursor.rowcount > 0
        if deleted:
            logger.info(f"Price override removed: customer #{customer_id}, product #{product_id}")
        return deleted

    def _row_to_override(self, row: aiosqlite.Row) -> PricingOverride:
        common = {
            "customer_id": row["customer_id"],
            "product_id": row["product_id"],
            "visible": bool(row["visible"]),
            "effective_to": parse_datetime(row["effective_to"]),
        }
        if row["pricing_type"] == PriceSource.FIXED:
            return FixedPriceOverride(price=Decimal(row["fixed_price"]), **common)
        return DiscountOverride(percentage=Decimal(row["discount_percent"]), **common)
