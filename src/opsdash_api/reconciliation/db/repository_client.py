"""
Client Repository

Repository for clients reconciled from the directory. ``external_id`` is the merge key.
"""

from datetime import datetime
from typing import Any
from typing import Dict
from typing import Optional
from typing import Tuple
from uuid import UUID
from uuid import uuid4

from opsdash_api.reconciliation.db.repository_base import BaseRepository
from opsdash_api.reconciliation.models.sync import ClientFields

# Columns written from the directory on every sync, in a fixed order
SYNCED_COLUMNS = list(ClientFields.model_fields)


class ClientRepository(BaseRepository):
    """Client repository."""

    def __init__(self, pool):
        super().__init__(pool, "clients")

    async def get_by_external_id(self, external_id: str) -> Optional[Dict[str, Any]]:
        """Get client by directory record id."""
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(
                f"SELECT * FROM {self.qualified_table} WHERE external_id = $1",
                external_id,
            )
            return dict(row) if row else None

    async def upsert_by_external_id(self, external_id: str, fields: ClientFields) -> Tuple[Dict[str, Any], bool]:
        """
        Create or update the client identified by ``external_id``.

        An existing row keeps its local id; only the synced columns change.

        Returns:
            (row, created) where created is True when a new client was inserted
        """
        columns = fields.to_columns()
        values = [columns[name] for name in SYNCED_COLUMNS]

        async with self.pool.acquire() as conn:
            async with conn.transaction():
                existing_id = await conn.fetchval(
                    f"SELECT id FROM {self.qualified_table} WHERE external_id = $1 FOR UPDATE",
                    external_id,
                )

                if existing_id is not None:
                    assignments = ", ".join(f"{name} = ${i + 2}" for i, name in enumerate(SYNCED_COLUMNS))
                    row = await conn.fetchrow(
                        f"""
                        UPDATE {self.qualified_table}
                        SET {assignments}, updated_at = NOW()
                        WHERE id = $1
                        RETURNING *
                        """,
                        existing_id,
                        *values,
                    )
                    return dict(row), False

                column_list = ", ".join(["id", "external_id", *SYNCED_COLUMNS])
                placeholders = ", ".join(f"${i + 1}" for i in range(len(SYNCED_COLUMNS) + 2))
                row = await conn.fetchrow(
                    f"""
                    INSERT INTO {self.qualified_table} ({column_list})
                    VALUES ({placeholders})
                    RETURNING *
                    """,
                    uuid4(),
                    external_id,
                    *values,
                )
                return dict(row), True

    async def update_legacy_pointers(
        self,
        client_id: UUID,
        system_engineer_id: Optional[UUID],
        primary_consultant_id: Optional[UUID],
        secondary_consultant_id: Optional[UUID],
        grce_engineer_id: Optional[UUID],
    ) -> None:
        """Write the single-engineer pointer columns kept for older consumers."""
        async with self.pool.acquire() as conn:
            await conn.execute(
                f"""
                UPDATE {self.qualified_table}
                SET system_engineer_id = $2,
                    primary_consultant_id = $3,
                    secondary_consultant_id = $4,
                    grce_engineer_id = $5,
                    updated_at = NOW()
                WHERE id = $1
                """,
                client_id,
                system_engineer_id,
                primary_consultant_id,
                secondary_consultant_id,
                grce_engineer_id,
            )

    async def update_trust_center(self, client_id: UUID, trust_center_url: Optional[str], platform: Optional[str]) -> None:
        async with self.pool.acquire() as conn:
            await conn.execute(
                f"""
                UPDATE {self.qualified_table}
                SET trust_center_url = $2,
                    trust_center_platform = $3,
                    updated_at = NOW()
                WHERE id = $1
                """,
                client_id,
                trust_center_url,
                platform,
            )

    async def count_synced(self) -> int:
        """Number of clients linked to a directory record."""
        async with self.pool.acquire() as conn:
            return await conn.fetchval(f"SELECT COUNT(*) FROM {self.qualified_table} WHERE external_id IS NOT NULL")

    async def last_synced_at(self) -> Optional[datetime]:
        async with self.pool.acquire() as conn:
            return await conn.fetchval(f"SELECT MAX(last_synced_at) FROM {self.qualified_table}")
