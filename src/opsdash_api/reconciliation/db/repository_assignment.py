"""
Assignment Repository

Repository for client engineer assignments. The directory sync replaces a client's
whole assignment set at once.
"""

from typing import Iterable
from typing import List
from uuid import UUID
from uuid import uuid4

from opsdash_api.reconciliation.db.repository_base import BaseRepository
from opsdash_api.reconciliation.models.entities import Assignment
from opsdash_api.reconciliation.models.sync import RoleAssignment


class AssignmentRepository(BaseRepository):
    """Client engineer assignment repository."""

    def __init__(self, pool):
        super().__init__(pool, "client_engineer_assignments")

    async def replace_for_client(self, client_id: UUID, assignments: Iterable[RoleAssignment]) -> int:
        """
        Replace every assignment of a client with ``assignments``.

        Delete and insert run in one transaction, so readers see either the old
        set or the new one.

        Returns:
            Number of rows inserted
        """
        unique = list(dict.fromkeys(assignments))

        async with self.pool.acquire() as conn:
            async with conn.transaction():
                await conn.execute(
                    f"DELETE FROM {self.qualified_table} WHERE client_id = $1",
                    client_id,
                )
                if unique:
                    await conn.executemany(
                        f"""
                        INSERT INTO {self.qualified_table} (id, client_id, user_id, role)
                        VALUES ($1, $2, $3, $4)
                        ON CONFLICT (client_id, user_id, role) DO NOTHING
                        """,
                        [(uuid4(), client_id, item.user_id, item.role.value) for item in unique],
                    )
        return len(unique)

    async def list_for_client(self, client_id: UUID) -> List[Assignment]:
        async with self.pool.acquire() as conn:
            rows = await conn.fetch(
                f"""
                SELECT client_id, user_id, role
                FROM {self.qualified_table}
                WHERE client_id = $1
                ORDER BY role, user_id
                """,
                client_id,
            )
            return [Assignment.model_validate(dict(row)) for row in rows]
