"""
Integration Settings Repository

Read access to persisted integration credentials and configuration.
"""

from typing import Any
from typing import Dict
from typing import Optional

from opsdash_api.reconciliation.db.repository_base import BaseRepository


class IntegrationSettingsRepository(BaseRepository):
    """Integration settings repository (one row per provider)."""

    def __init__(self, pool):
        super().__init__(pool, "integration_settings", id_column="provider")

    async def get_by_provider(self, provider: str) -> Optional[Dict[str, Any]]:
        """Get the settings row of a provider: enabled, api_key and config (JSON text)."""
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(
                f"""
                SELECT provider, enabled, api_key, config
                FROM {self.qualified_table}
                WHERE {self.id_col} = $1
                """,
                provider,
            )
            return dict(row) if row else None
