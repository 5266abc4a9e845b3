"""
Pricing service: quotes, customer catalogs and override editing
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from orderdesk.database.models import Customer, Product
from orderdesk.domain.exceptions import InvalidPricingInput
from orderdesk.domain.pricing import (
    DiscountOverride,
    FixedPriceOverride,
    PriceBreakdown,
    PricingOverride,
    resolve_price,
)
from orderdesk.domain.ports import CatalogStore, PricingOverrideStore
from orderdesk.repositories import EntityNotFoundError
from orderdesk.utils.helpers import get_now


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CatalogEntry:
    """Product as offered to one customer"""

    product: Product
    breakdown: PriceBreakdown

    @property
    def price(self) -> Decimal:
        return self.breakdown.final_price


class PricingService:
    """
    Price resolution against stored catalog data
    """

    def __init__(self, catalog_repo: CatalogStore, override_repo: PricingOverrideStore):
        """
        Args:
            catalog_repo: Stores, customers and products
            override_repo: Customer price overrides
        """
        self.catalog_repo = catalog_repo
        self.override_repo = override_repo

    async def _get_customer(self, customer_id: int) -> Customer:
        customer = await self.catalog_repo.get_customer(customer_id)
        if not customer:
            raise EntityNotFoundError("Customer", customer_id)
        return customer

    async def _get_store_product(self, store_id: int, product_id: int) -> Product:
        product = await self.catalog_repo.get_product(product_id)
        if not product or product.store_id != store_id:
            raise EntityNotFoundError("Product", product_id)
        return product

    async def quote_price(
        self, customer_id: int, product_id: int, at: datetime | None = None
    ) -> PriceBreakdown:
        """
        Price the customer would pay for one unit right now

        Args:
            customer_id: Customer ID
            product_id: Product ID from the customer's store
            at: Moment used for the override expiry check

        Returns:
            PriceBreakdown

        Raises:
            EntityNotFoundError: Unknown customer or product
        """
        customer = await self._get_customer(customer_id)
        product = await self._get_store_product(customer.store_id, product_id)
        percentage = await self.catalog_repo.get_store_operation_cost_percentage(customer.store_id)
        override = await self.override_repo.get_active_override(customer_id, product_id, at)

        return resolve_price(product.base_price, percentage, override)

    async def get_customer_catalog(
        self, customer_id: int, at: datetime | None = None
    ) -> list[CatalogEntry]:
        """
        Products visible to the customer with their resolved prices

        Products hidden by an active override are left out.
        """
        customer = await self._get_customer(customer_id)
        percentage = await self.catalog_repo.get_store_operation_cost_percentage(customer.store_id)
        products = await self.catalog_repo.get_products(customer.store_id)
        overrides = {
            override.product_id: override
            for override in await self.override_repo.list_overrides(
                customer_id, active_only=True, at=at or get_now()
            )
        }

        entries = []
        for product in products:
            override = overrides.get(product.id)
            if override is not None and not override.visible:
                continue
            entries.append(
                CatalogEntry(
                    product=product,
                    breakdown=resolve_price(product.base_price, percentage, override),
                )
            )
        return entries

    async def assign_override(
        self,
        customer_id: int,
        product_id: int,
        *,
        fixed_price=None,
        discount_percent=None,
        visible: bool = True,
        effective_to: datetime | None = None,
        replace_active: bool = False,
    ) -> PricingOverride:
        """
        Give a customer a fixed price or a discount on a product

        Args:
            customer_id: Customer ID
            product_id: Product ID
            fixed_price: Fixed unit price
            discount_percent: Discount in percent off the marked-up price
            visible: Offer the product in the customer catalog
            effective_to: Expiry
            replace_active: Confirm replacing an active override

        Returns:
            Saved override

        Raises:
            InvalidPricingInput: Neither or both pricing modes, or bad values
            DuplicateOverride: Active override exists and replace_active is False
            EntityNotFoundError: Unknown customer or product
        """
        if (fixed_price is None) == (discount_percent is None):
            raise InvalidPricingInput(
                "override",
                {"fixed_price": fixed_price, "discount_percent": discount_percent},
                "exactly one of fixed_price or discount_percent must be set",
            )

        customer = await self._get_customer(customer_id)
        await self._get_store_product(customer.store_id, product_id)

        override: PricingOverride
        if fixed_price is not None:
            override = FixedPriceOverride(
                customer_id=customer_id,
                product_id=product_id,
                price=fixed_price,
                visible=visible,
                effective_to=effective_to,
            )
        else:
            override = DiscountOverride(
                customer_id=customer_id,
                product_id=product_id,
                percentage=discount_percent,
                visible=visible,
                effective_to=effective_to,
            )

        return await self.override_repo.save_override(override, replace_active=replace_active)

    async def remove_override(self, customer_id: int, product_id: int) -> bool:
        """
        Drop the customer's override, later quotes use the store markup

        Returns:
            True if an override existed
        """
        return await self.override_repo.delete_override(customer_id, product_id)

    async def update_operation_cost(self, store_id: int, percentage) -> Decimal:
        """
        Change the store markup for future quotes and orders

        Raises:
            InvalidPricingInput: Negative or non-numeric percentage
            EntityNotFoundError: Unknown store
        """
        return await self.catalog_repo.update_operation_cost_percentage(store_id, percentage)
