"""
SQLite database connection and schema
"""

import logging
from typing import TYPE_CHECKING

import aiosqlite

from orderdesk.core.config import Config


if TYPE_CHECKING:
    from orderdesk.services.service_factory import ServiceFactory


logger = logging.getLogger(__name__)


# Money is stored as TEXT to keep Decimal values exact
SCHEMA_STATEMENTS = (
    """
    CREATE TABLE IF NOT EXISTS stores (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL,
        operation_cost_percentage TEXT NOT NULL DEFAULT '0',
        currency TEXT NOT NULL DEFAULT 'INR',
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS customers (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        store_id INTEGER NOT NULL,
        name TEXT NOT NULL,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        FOREIGN KEY (store_id) REFERENCES stores(id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS products (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        store_id INTEGER NOT NULL,
        name TEXT NOT NULL,
        sku TEXT,
        base_price TEXT NOT NULL,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        FOREIGN KEY (store_id) REFERENCES stores(id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS customer_product_pricing (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        customer_id INTEGER NOT NULL,
        product_id INTEGER NOT NULL,
        pricing_type TEXT NOT NULL,
        fixed_price TEXT,
        discount_percent TEXT,
        visible INTEGER NOT NULL DEFAULT 1,
        effective_to TEXT,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL,
        UNIQUE (customer_id, product_id),
        CHECK (
            (pricing_type = 'fixed' AND fixed_price IS NOT NULL AND discount_percent IS NULL)
            OR (pricing_type = 'discount' AND discount_percent IS NOT NULL AND fixed_price IS NULL)
        ),
        FOREIGN KEY (customer_id) REFERENCES customers(id),
        FOREIGN KEY (product_id) REFERENCES products(id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS orders (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        store_id INTEGER NOT NULL,
        customer_id INTEGER NOT NULL,
        status INTEGER NOT NULL DEFAULT 0,
        total_amount TEXT NOT NULL,
        placed_by INTEGER,
        pricing_locked_at TEXT,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL,
        version INTEGER NOT NULL DEFAULT 1,
        CHECK (status BETWEEN 0 AND 6),
        FOREIGN KEY (store_id) REFERENCES stores(id),
        FOREIGN KEY (customer_id) REFERENCES customers(id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS order_items (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        order_id INTEGER NOT NULL,
        position INTEGER NOT NULL,
        product_id INTEGER NOT NULL,
        quantity INTEGER NOT NULL CHECK (quantity > 0),
        unit_price TEXT NOT NULL,
        price_source TEXT NOT NULL DEFAULT 'markup',
        FOREIGN KEY (order_id) REFERENCES orders(id),
        FOREIGN KEY (product_id) REFERENCES products(id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS order_status_history (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        order_id INTEGER NOT NULL,
        old_status INTEGER,
        new_status INTEGER NOT NULL,
        changed_by INTEGER,
        changed_at TEXT NOT NULL,
        notes TEXT,
        FOREIGN KEY (order_id) REFERENCES orders(id)
    )
    """,
)

INDEX_STATEMENTS = (
    "CREATE INDEX IF NOT EXISTS idx_customers_store ON customers(store_id)",
    "CREATE INDEX IF NOT EXISTS idx_products_store ON products(store_id)",
    "CREATE INDEX IF NOT EXISTS idx_pricing_customer ON customer_product_pricing(customer_id)",
    "CREATE INDEX IF NOT EXISTS idx_orders_store_status ON orders(store_id, status)",
    "CREATE INDEX IF NOT EXISTS idx_orders_customer ON orders(customer_id)",
    "CREATE INDEX IF NOT EXISTS idx_order_items_order ON order_items(order_id)",
    "CREATE INDEX IF NOT EXISTS idx_status_history_order ON order_status_history(order_id)",
)


class Database:
    """SQLite database access"""

    def __init__(self, db_path: str | None = None):
        """
        Args:
            db_path: Path to the database file, ":memory:" for tests
        """
        self.db_path = db_path or Config.DATABASE_PATH
        self.connection: aiosqlite.Connection | None = None
        self._service_factory: "ServiceFactory | None" = None

    def _get_connection(self) -> aiosqlite.Connection:
        if self.connection is None:
            raise RuntimeError("Database is not connected")
        return self.connection

    def get_connection(self) -> aiosqlite.Connection:
        """
        Active connection for repositories and services

        Raises:
            RuntimeError: connect() was not called
        """
        return self._get_connection()

    async def connect(self):
        """Open the connection"""
        connection = await aiosqlite.connect(self.db_path)
        connection.row_factory = aiosqlite.Row
        await connection.execute("PRAGMA foreign_keys=ON")
        if self.db_path != ":memory:":
            await connection.execute("PRAGMA journal_mode=WAL")
        self.connection = connection
        logger.info("Connected to database: %s", self.db_path)

    async def disconnect(self):
        """Close the connection"""
        connection = self.connection
        if connection:
            await connection.close()
            self.connection = None
            self._service_factory = None
            logger.info("Disconnected from database")

    @property
    def services(self) -> "ServiceFactory":
        """
        Service factory bound to this connection

        Returns:
            ServiceFactory
        """
        if self._service_factory is None:
            from orderdesk.services.service_factory import ServiceFactory

            self._service_factory = ServiceFactory(self._get_connection())
        return self._service_factory

    async def init_db(self):
        """Create tables and indexes if they do not exist"""
        if not self.connection:
            await self.connect()

        connection = self._get_connection()
        for statement in SCHEMA_STATEMENTS:
            await connection.execute(statement)
        for statement in INDEX_STATEMENTS:
            await connection.execute(statement)
        await connection.commit()
        logger.info("Database schema ready")

    async def get_table_names(self) -> list[str]:
        """Names of user tables, sorted"""
        cursor = await self._get_connection().execute(
            "SELECT name FROM sqlite_master WHERE type = 'table' AND name NOT LIKE 'sqlite_%' "
            "ORDER BY name"
        )
        rows = await cursor.fetchall()
        return [row["name"] for row in rows]
