"""
Domain Database Connection Pool

Manages the asyncpg connection pool for the ops dashboard database.
Runs migrations on initialization and verifies the expected tables exist.

Schema Evolution:
-----------------
When adding/removing/renaming tables in schema.sql:
1. Update the schema.sql file with new DDL
2. Update DomainDBPool.EXPECTED_TABLES constant with new table names
"""

from typing import Optional

import asyncpg
from loguru import logger

from opsdash_api.reconciliation.db.migrations import run_migrations

SCHEMA_NAME = "opsdash"


class DomainDBPool:
    """Domain database connection pool manager."""

    EXPECTED_TABLES = {
        "clients",
        "users",
        "client_engineer_assignments",
        "systems",
        "client_systems",
        "integration_settings",
        "sync_jobs",
    }

    def __init__(self, connection_string: str):
        """
        Initialize domain DB pool.

        Args:
            connection_string: PostgreSQL connection string for the domain database
        """
        self.connection_string = connection_string
        self.pool: Optional[asyncpg.Pool] = None
        self._pool_initialized = False

    async def initialize(self) -> None:
        """Create the pool, validate it and run migrations."""
        if self._pool_initialized and self.pool is not None:
            logger.debug("Domain DB pool already initialized")
            return

        try:
            logger.info("Initializing domain database pool")

            self.pool = await asyncpg.create_pool(
                self.connection_string,
                min_size=2,
                max_size=10,
                command_timeout=60,
                timeout=15,
                max_cached_statement_lifetime=0,  # Disable prepared statement caching (safer for DDL)
            )

            async with self.pool.acquire() as conn:
                result = await conn.fetchval("SELECT 1")
                if result != 1:
                    raise RuntimeError("Pool validation query failed")

            logger.info("Domain DB pool validated")

            await run_migrations(self.pool)
            await self._verify_tables()

            self._pool_initialized = True
            logger.success("Domain database initialized successfully")

        except Exception as e:
            logger.error("Failed to initialize domain DB pool", error=str(e), exc_info=True)
            if self.pool:
                await self.pool.close()
                self.pool = None
            raise

    async def _verify_tables(self) -> None:
        """Check that every expected table exists in the opsdash schema."""
        async with self.pool.acquire() as conn:
            rows = await conn.fetch(
                """
                SELECT table_name
                FROM information_schema.tables
                WHERE table_schema = $1
                """,
                SCHEMA_NAME,
            )
        existing_tables = {row["table_name"] for row in rows}
        missing_tables = self.EXPECTED_TABLES - existing_tables

        if missing_tables:
            missing = ", ".join(sorted(missing_tables))
            logger.error(
                "Database schema is incomplete",
                schema=SCHEMA_NAME,
                missing=sorted(missing_tables),
                existing=sorted(existing_tables),
            )
            raise RuntimeError(f"Incomplete database schema: missing tables {missing}")

        logger.info(f"All {len(self.EXPECTED_TABLES)} {SCHEMA_NAME} tables verified")

    async def close(self) -> None:
        """Close the connection pool gracefully."""
        if self.pool:
            logger.info("Closing domain database pool")
            await self.pool.close()
            self.pool = None
            self._pool_initialized = False

    def acquire(self):
        """
        Acquire a database connection from the pool.

        Usage:
            async with pool.acquire() as conn:
                result = await conn.fetchrow("SELECT * FROM ...")
        """
        if not self.pool:
            raise RuntimeError("Domain DB pool not initialized - call initialize() first")
        return self.pool.acquire()

    async def health_check(self) -> bool:
        """
        Check if database connection is healthy.

        Returns:
            True if connection is healthy, False otherwise
        """
        try:
            if not self.pool:
                return False

            async with self.pool.acquire() as conn:
                result = await conn.fetchval("SELECT 1")
                return result == 1
        except Exception as e:
            logger.error(f"Domain DB health check failed: {e}")
            return False
