"""
Repository for orders, their line items and status history
Optimistic locking on the `version` column
"""

import logging
from dataclasses import replace
from decimal import Decimal
from typing import Any

import aiosqlite

from orderdesk.core.constants import COMPLETED_STATUSES, OrderStatus
from orderdesk.domain.order import LineItem, Order, StatusHistoryEntry
from orderdesk.repositories.base import BaseRepository
from orderdesk.repositories.exceptions import ConcurrencyConflict, EntityNotFoundError
from orderdesk.utils.helpers import format_datetime_for_storage, parse_datetime


logger = logging.getLogger(__name__)


class OrderRepository(BaseRepository[Order]):
    """Order persistence"""

    async def add(self, order: Order) -> Order:
        """
        Insert a new order with its line items and history

        Args:
            order: Unsaved order (id is None)

        Returns:
            The same order with id and line item ids set
        """
        if order.id is not None:
            raise ValueError(f"Order #{order.id} is already saved")

        async with self.transaction():
            cursor = await self._execute(
                """
                INSERT INTO orders
                (store_id, customer_id, status, total_amount, placed_by,
                 pricing_locked_at, created_at, updated_at, version)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    order.store_id,
                    order.customer_id,
                    order.status.code,
                    str(order.total),
                    order.placed_by,
                    format_datetime_for_storage(order.pricing_locked_at),
                    format_datetime_for_storage(order.created_at),
                    format_datetime_for_storage(order.updated_at),
                    order.version,
                ),
            )
            order_id = cursor.lastrowid

            saved_items = []
            for position, item in enumerate(order.line_items):
                item_cursor = await self._execute(
                    """
                    INSERT INTO order_items
                    (order_id, position, product_id, quantity, unit_price, price_source)
                    VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    (
                        order_id,
                        position,
                        item.product_id,
                        item.quantity,
                        str(item.unit_price),
                        item.price_source,
                    ),
                )
                saved_items.append(replace(item, id=item_cursor.lastrowid))

            await self._insert_history(order_id, order.status_history)

        order.id = order_id
        order.line_items = tuple(saved_items)
        logger.info(
            f"Order #{order_id} created for customer #{order.customer_id}, total {order.total}"
        )
        return order

    async def get_by_id(self, order_id: int) -> Order | None:
        """
        Load an order with line items and history

        Returns:
            Order or None
        """
        row = await self._fetch_one("SELECT * FROM orders WHERE id = ?", (order_id,))
        if not row:
            return None

        item_rows = await self._fetch_all(
            "SELECT * FROM order_items WHERE order_id = ? ORDER BY position", (order_id,)
        )
        history_rows = await self._fetch_all(
            "SELECT * FROM order_status_history WHERE order_id = ? ORDER BY id", (order_id,)
        )
        return self._row_to_order(row, item_rows, history_rows)

    async def load_order(self, order_id: int) -> Order:
        """
        Load an order that must exist

        Raises:
            EntityNotFoundError: Unknown order
        """
        order = await self.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundError("Order", order_id)
        return order

    async def save_order(self, order: Order) -> Order:
        """
        Persist status changes of a loaded order

        Line items are never rewritten. History entries appended since the
        load are inserted.

        Args:
            order: Order loaded with load_order and then mutated

        Returns:
            The same order with version incremented

        Raises:
            EntityNotFoundError: Order was never saved or no longer exists
            ConcurrencyConflict: Stored version differs from order.version
        """
        if order.id is None:
            raise EntityNotFoundError("Order", 0)

        async with self.transaction():
            row = await self._fetch_one("SELECT version FROM orders WHERE id = ?", (order.id,))
            if not row:
                raise EntityNotFoundError("Order", order.id)

            current_version = row["version"]
            if current_version != order.version:
                logger.warning(
                    f"Version conflict on order #{order.id}: "
                    f"expected {order.version}, found {current_version}"
                )
                raise ConcurrencyConflict("Order", order.id, order.version, current_version)

            cursor = await self._execute(
                """
                UPDATE orders
                SET status = ?, pricing_locked_at = ?, updated_at = ?, version = version + 1
                WHERE id = ? AND version = ?
                """,
                (
                    order.status.code,
                    format_datetime_for_storage(order.pricing_locked_at),
                    format_datetime_for_storage(order.updated_at),
                    order.id,
                    order.version,
                ),
            )
            if cursor.rowcount == 0:
                raise ConcurrencyConflict("Order", order.id, order.version)

            count_row = await self._fetch_one(
                "SELECT COUNT(*) AS cnt FROM order_status_history WHERE order_id = ?",
                (order.id,),
            )
            stored = count_row["cnt"] if count_row else 0
            await self._insert_history(order.id, order.status_history[stored:])

        order.version += 1
        logger.debug(f"Order #{order.id} saved, version {order.version}")
        return order

    async def list_orders(
        self,
        store_id: int | None = None,
        customer_id: int | None = None,
        open_only: bool = False,
        limit: int | None = None,
    ) -> list[Order]:
        """
        Orders with filtering, newest first

        Args:
            store_id: Filter by store
            customer_id: Filter by customer
            open_only: Leave out COMPLETED and CANCELLED orders
            limit: Maximum number of orders

        Returns:
            List of orders
        """
        query = "SELECT id FROM orders WHERE 1=1"
        params: list[Any] = []

        if store_id is not None:
            query += " AND store_id = ?"
            params.append(store_id)

        if customer_id is not None:
            query += " AND customer_id = ?"
            params.append(customer_id)

        if open_only:
            placeholders = ", ".join("?" for _ in COMPLETED_STATUSES)
            query += f" AND status NOT IN ({placeholders})"
            params.extend(sorted(status.code for status in COMPLETED_STATUSES))

        query += " ORDER BY created_at DESC, id DESC"

        if limit:
            query += " LIMIT ?"
            params.append(limit)

        rows = await self._fetch_all(query, tuple(params) if params else None)
        orders = []
        for row in rows:
            order = await self.get_by_id(row["id"])
            if order is not None:
                orders.append(order)
        return orders

    async def get_status_history(self, order_id: int) -> list[StatusHistoryEntry]:
        """Status history of an order, oldest first"""
        rows = await self._fetch_all(
            "SELECT * FROM order_status_history WHERE order_id = ? ORDER BY id", (order_id,)
        )
        return [self._row_to_history(row) for row in rows]

    # ===== HELPERS =====

    async def _insert_history(self, order_id: int, entries: list[StatusHistoryEntry]) -> None:
        for entry in entries:
            await self._execute(
                """
                INSERT INTO order_status_history
                (order_id, old_status, new_status, changed_by, changed_at, notes)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    order_id,
                    entry.old_status.code if entry.old_status is not None else None,
                    entry.new_status.code,
                    entry.changed_by,
                    format_datetime_for_storage(entry.changed_at),
                    entry.notes,
                ),
            )

    def _row_to_history(self, row: aiosqlite.Row) -> StatusHistoryEntry:
        old_status = row["old_status"]
        return StatusHistoryEntry(
            old_status=OrderStatus.from_code(old_status) if old_status is not None else None,
            new_status=OrderStatus.from_code(row["new_status"]),
            changed_at=parse_datetime(row["changed_at"]),
            changed_by=row["changed_by"],
            notes=row["notes"],
        )

    def _row_to_order(
        self,
        row: aiosqlite.Row,
        item_rows: list[aiosqlite.Row],
        history_rows: list[aiosqlite.Row],
    ) -> Order:
        line_items = tuple(
            LineItem(
                id=item["id"],
                product_id=item["product_id"],
                quantity=item["quantity"],
                unit_price=Decimal(item["unit_price"]),
                price_source=item["price_source"],
            )
            for item in item_rows
        )
        return Order(
            id=row["id"],
            store_id=row["store_id"],
            customer_id=row["customer_id"],
            line_items=line_items,
            status=OrderStatus.from_code(row["status"]),
            created_at=parse_datetime(row["created_at"]),
            updated_at=parse_datetime(row["updated_at"]),
            pricing_locked_at=parse_datetime(row["pricing_locked_at"]),
            placed_by=row["placed_by"],
            status_history=[self._row_to_history(history) for history in history_rows],
            version=row["version"],
        )
