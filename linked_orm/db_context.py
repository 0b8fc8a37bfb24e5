import logging
import os
from contextlib import asynccontextmanager

import aiosqlite

from .entity_meta import EntityMeta

logger = logging.getLogger(__name__)


class db_context:
    """Connection settings shared by every registered entity class.

    Args:
        db_path: Path of the SQLite database file.
        sync_schema: Create missing tables (and seed data) on ``initialize``.
        raise_not_found: Whether ``Entity.find`` raises ``DocumentNotFound``
            for unknown ids instead of returning None.
    """

    def __init__(self, db_path, sync_schema=False, raise_not_found=True):
        self._db_path = db_path
        self._sync_schema = sync_schema
        self.raise_not_found = raise_not_found

        for cls in EntityMeta.registry.values():
            cls._context = self

        EntityMeta.resolve_pending(strict=True)

        directory = os.path.dirname(self._db_path)
        if directory and not os.path.exists(directory):
            os.makedirs(directory)

    @property
    def db_path(self):
        return self._db_path

    async def initialize(self):
        if self._sync_schema:
            await self.sync_schema()

    @asynccontextmanager
    async def get_connection(self):
        conn = await aiosqlite.connect(self._db_path)
        try:
            yield conn
        except Exception:
            await conn.rollback()
            raise
        finally:
            await conn.close()

    async def fetch(self, sql, params=()):
        """Run a SELECT and return ``(rows, cursor.description)``."""
        self._log(sql, params)
        async with self.get_connection() as conn:
            cursor = await conn.execute(sql, list(params))
            rows = await cursor.fetchall()
            return rows, cursor.description

    async def execute(self, sql, params=()):
        """Run a write statement, commit, and return the affected row count."""
        self._log(sql, params)
        async with self.get_connection() as conn:
            cursor = await conn.execute(sql, list(params))
            await conn.commit()
            return cursor.rowcount

    async def insert(self, sql, params=()):
        """Run an INSERT, commit, and return the new row id."""
        self._log(sql, params)
        async with self.get_connection() as conn:
            cursor = await conn.execute(sql, list(params))
            await conn.commit()
            return cursor.lastrowid

    def _log(self, sql, params):
        if params:
            logger.debug("[SQL EXECUTE]: %s | [PARAMS]: %s", " ".join(sql.split()), list(params))
        else:
            logger.debug("[SQL EXECUTE]: %s", " ".join(sql.split()))

    async def sync_schema(self):
        for cls in EntityMeta.registry.values():
            logger.info("Syncing table %s for %s", cls._table_name, cls.__name__)
            await cls.sync_schema()
        await self.seed_data()

    async def seed_data(self):
        """Hook for subclasses that populate a freshly synced database."""
