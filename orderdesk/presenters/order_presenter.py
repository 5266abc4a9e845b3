"""
OrderPresenter - plain-text order and invoice formatting
"""

from collections.abc import Mapping

from orderdesk.core.constants import OrderStatus, PriceSource
from orderdesk.database.models import Product
from orderdesk.domain.order import Order
from orderdesk.domain.pricing import PriceBreakdown
from orderdesk.utils.helpers import format_money


DATETIME_FORMAT = "%Y-%m-%d %H:%M"

PRICE_SOURCE_LABELS = {
    PriceSource.MARKUP: "store price",
    PriceSource.FIXED: "fixed price",
    PriceSource.DISCOUNT: "discount",
}


class OrderPresenter:
    """Presenter for orders and price quotes"""

    @staticmethod
    def format_status(status: OrderStatus) -> str:
        return OrderStatus.get_status_name(status)

    @staticmethod
    def format_order_details(
        order: Order,
        products: Mapping[int, Product] | None = None,
        currency: str | None = None,
        include_history: bool = False,
    ) -> str:
        """
        Invoice-style order summary

        Args:
            order: Order
            products: Product ID -> Product, for names in the item lines
            currency: Currency code, Config.CURRENCY by default
            include_history: Append the status history

        Returns:
            Multi-line text
        """
        products = products or {}

        lines = [f"Order #{order.id}", f"Status: {order.status.label}"]
        lines.append(f"Customer: #{order.customer_id}")
        if order.created_at:
            lines.append(f"Created: {order.created_at.strftime(DATETIME_FORMAT)}")
        if order.pricing_locked_at:
            lines.append(f"Prices locked: {order.pricing_locked_at.strftime(DATETIME_FORMAT)}")

        lines.append("")
        lines.append("Items:")
        for number, item in enumerate(order.line_items, start=1):
            product = products.get(item.product_id)
            name = product.get_display_name() if product else f"Product #{item.product_id}"
            line = (
                f"{number}. {name} x {item.quantity} @ {format_money(item.unit_price, currency)}"
                f" = {format_money(item.subtotal, currency)}"
            )
            if item.price_source != PriceSource.MARKUP:
                line += f" ({PRICE_SOURCE_LABELS.get(item.price_source, item.price_source)})"
            lines.append(line)

        lines.append("")
        lines.append(f"Subtotal: {format_money(order.total, currency)}")
        lines.append(f"Total: {format_money(order.total, currency)}")

        if include_history and order.status_history:
            lines.append("")
            lines.append("History:")
            for entry in order.status_history:
                changed_at = entry.changed_at.strftime(DATETIME_FORMAT)
                if entry.old_status is None:
                    text = f"{changed_at} {entry.new_status.label}"
                else:
                    text = f"{changed_at} {entry.old_status.label} -> {entry.new_status.label}"
                if entry.notes:
                    text += f" ({entry.notes})"
                lines.append(f"- {text}")

        return "\n".join(lines)

    @staticmethod
    def format_order_short(order: Order, currency: str | None = None) -> str:
        """One line for order lists"""
        count = len(order.line_items)
        items = "item" if count == 1 else "items"
        return (
            f"#{order.id} {order.status.label} - {format_money(order.total, currency)}"
            f" ({count} {items})"
        )

    @staticmethod
    def format_price_breakdown(breakdown: PriceBreakdown, currency: str | None = None) -> str:
        """
        Explain how a quoted price was reached
        """
        lines = [
            f"Base price: {format_money(breakdown.base_price, currency)}",
            f"Operation cost: {breakdown.operation_cost_percentage}% "
            f"(+{format_money(breakdown.markup_amount, currency)})",
            f"Store price: {format_money(breakdown.marked_up_price, currency)}",
        ]
        if breakdown.override_type == PriceSource.FIXED:
            lines.append("Customer fixed price applied")
        elif breakdown.override_type == PriceSource.DISCOUNT:
            lines.append("Customer discount applied")
        lines.append(f"Price: {format_money(breakdown.final_price, currency)}")
        return "\n".join(lines)
