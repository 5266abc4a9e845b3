"""
Base repository for SQLite access
"""

import logging
from contextlib import asynccontextmanager
from typing import Generic, TypeVar

import aiosqlite


logger = logging.getLogger(__name__)

T = TypeVar("T")


class BaseRepository(Generic[T]):
    """
    Common query helpers for all repositories
    """

    def __init__(self, db_connection: aiosqlite.Connection):
        """
        Args:
            db_connection: Open database connection
        """
        self.db = db_connection

    @asynccontextmanager
    async def transaction(self):
        """
        Transaction context manager

        BEGIN IMMEDIATE takes the write lock up front so concurrent writers
        serialize. Commits on success, rolls back and re-raises on error.

        Yields:
            aiosqlite.Connection: The connection inside BEGIN IMMEDIATE
        """
        if not self.db:
            raise RuntimeError("Database is not connected")

        await self.db.execute("BEGIN IMMEDIATE")
        try:
            yield self.db
            await self.db.commit()
            logger.debug("Transaction committed")
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Transaction rolled back: {e}")
            raise

    async def _execute(self, query: str, params: tuple | dict | None = None) -> aiosqlite.Cursor:
        if params:
            return await self.db.execute(query, params)
        return await self.db.execute(query)

    async def _fetch_one(
        self, query: str, params: tuple | dict | None = None
    ) -> aiosqlite.Row | None:
        """
        Fetch a single row

        Returns:
            Row or None
        """
        cursor = await self._execute(query, params)
        return await cursor.fetchone()

    async def _fetch_all(
        self, query: str, params: tuple | dict | None = None
    ) -> list[aiosqlite.Row]:
        """
        Fetch all rows

        Returns:
            List of rows
        """
        cursor = await self._execute(query, params)
        return list(await cursor.fetchall())

    async def _execute_commit(self, query: str, params: tuple | dict | None = None) -> int:
        """
        Run a write statement and commit (INSERT, UPDATE, DELETE)

        Returns:
            ID of the inserted row or the number of changed rows
        """
        cursor = await self._execute(query, params)
        await self.db.commit()
        return cursor.lastrowid if cursor.lastrowid else cursor.rowcount
