"""
System Repository

Repository for the system catalog and additive client-system links.
"""

from typing import List
from uuid import UUID

from opsdash_api.reconciliation.db.repository_base import BaseRepository
from opsdash_api.reconciliation.models.entities import CatalogSystem


class SystemRepository(BaseRepository):
    """System catalog repository."""

    def __init__(self, pool):
        super().__init__(pool, "systems")

    async def list_catalog(self) -> List[CatalogSystem]:
        async with self.pool.acquire() as conn:
            rows = await conn.fetch(f"SELECT id, name, category FROM {self.qualified_table} ORDER BY name")
            return [CatalogSystem.model_validate(dict(row)) for row in rows]

    async def link_client_system(self, client_id: UUID, system_id: UUID) -> bool:
        """
        Link a system to a client. Existing links are left untouched.

        Returns:
            True if a new link was created, False if it already existed
        """
        async with self.pool.acquire() as conn:
            status = await conn.execute(
                """
                INSERT INTO opsdash.client_systems (client_id, system_id)
                VALUES ($1, $2)
                ON CONFLICT (client_id, system_id) DO NOTHING
                """,
                client_id,
                system_id,
            )
        # asyncpg returns the command tag, e.g. "INSERT 0 1"
        return status.endswith(" 1")
