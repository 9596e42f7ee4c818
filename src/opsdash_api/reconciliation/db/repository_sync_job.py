"""
Sync Job Repository

Repository for sync job operations (append-only table) and the advisory lock that
serializes sync runs.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator
from uuid import UUID
from uuid import uuid4

from loguru import logger

from opsdash_api.errors import SyncAlreadyRunningError
from opsdash_api.reconciliation.db.repository_base import BaseRepository
from opsdash_api.reconciliation.enums import SyncJobStatus


class SyncJobRepository(BaseRepository):
    """Sync job repository (append-only)."""

    def __init__(self, pool):
        super().__init__(pool, "sync_jobs", id_column="sync_job_id")

    async def create(self, sync_type: str) -> UUID:
        """Create a new sync job (RUNNING status)."""
        sync_job_id = uuid4()

        async with self.pool.acquire() as conn:
            await conn.execute(
                f"""
                INSERT INTO {self.qualified_table}
                    (sync_job_id, sync_type, status, started_at)
                VALUES ($1, $2, $3, NOW())
                """,
                sync_job_id,
                sync_type,
                SyncJobStatus.RUNNING.value,
            )

        return sync_job_id

    async def complete(
        self,
        sync_job_id: UUID,
        records_processed: int = 0,
        records_created: int = 0,
        records_updated: int = 0,
        records_failed: int = 0,
        systems_linked: int = 0,
    ) -> None:
        """Mark sync job as COMPLETED."""
        async with self.pool.acquire() as conn:
            await conn.execute(
                f"""
                UPDATE {self.qualified_table}
                SET status = $2,
                    completed_at = NOW(),
                    records_processed = $3,
                    records_created = $4,
                    records_updated = $5,
                    records_failed = $6,
                    systems_linked = $7
                WHERE {self.id_col} = $1
                """,
                sync_job_id,
                SyncJobStatus.COMPLETED.value,
                records_processed,
                records_created,
                records_updated,
                records_failed,
                systems_linked,
            )

    async def fail(self, sync_job_id: UUID, error_message: str) -> None:
        """Mark sync job as FAILED."""
        async with self.pool.acquire() as conn:
            await conn.execute(
                f"""
                UPDATE {self.qualified_table}
                SET status = $2,
                    completed_at = NOW(),
                    error_message = $3
                WHERE {self.id_col} = $1
                """,
                sync_job_id,
                SyncJobStatus.FAILED.value,
                error_message,
            )

    @asynccontextmanager
    async def advisory_lock(self, name: str) -> AsyncIterator[None]:
        """
        Hold a session-level Postgres advisory lock for the duration of the block.

        The connection is kept for the whole block because advisory locks belong
        to the session that took them.

        Raises:
            SyncAlreadyRunningError: If another session holds the lock
        """
        async with self.pool.acquire() as conn:
            acquired = await conn.fetchval("SELECT pg_try_advisory_lock(hashtext($1))", name)
            if not acquired:
                raise SyncAlreadyRunningError(f"Sync '{name}' is already running")

            logger.debug("Advisory lock acquired", lock_name=name)
            try:
                yield
            finally:
                await conn.execute("SELECT pg_advisory_unlock(hashtext($1))", name)
                logger.debug("Advisory lock released", lock_name=name)
