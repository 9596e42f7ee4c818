"""
User Repository

Read access to local user accounts for identity resolution.
"""

from typing import List

from opsdash_api.reconciliation.db.repository_base import BaseRepository
from opsdash_api.reconciliation.models.entities import Identity


class UserRepository(BaseRepository):
    """User repository (users are managed elsewhere; the sync only reads them)."""

    def __init__(self, pool):
        super().__init__(pool, "users")

    async def list_identities(self) -> List[Identity]:
        """All users with the fields identity resolution compares against."""
        async with self.pool.acquire() as conn:
            rows = await conn.fetch(
                f"""
                SELECT id, name, directory_name, email
                FROM {self.qualified_table}
                ORDER BY created_at, id
                """
            )
            return [Identity.model_validate(dict(row)) for row in rows]
