"""
Directory Configuration Provider

Resolves the directory credential and collection ids. Persisted integration settings
win over environment defaults; the resolved value is cached on the provider instance
until ``invalidate()`` is called.
"""

import json
from typing import Optional

from loguru import logger
from pydantic import BaseModel

from opsdash_api.errors import DirectoryConfigError
from opsdash_api.settings import Settings

DIRECTORY_PROVIDER = "directory"


class DirectoryConfig(BaseModel):
    """Resolved directory configuration for one sync run."""

    api_key: Optional[str] = None
    client_collection_id: Optional[str] = None
    contacts_collection_id: Optional[str] = None
    vendors_collection_id: Optional[str] = None

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key) and bool(self.client_collection_id)


class DirectoryConfigProvider:
    """
    Constructor-injected source of DirectoryConfig.

    Args:
        settings: Environment-level defaults
        integration_settings_repo: Repository exposing ``get_by_provider(provider)``
    """

    def __init__(self, settings: Settings, integration_settings_repo):
        self.settings = settings
        self.integration_settings_repo = integration_settings_repo
        self._cached: Optional[DirectoryConfig] = None

    async def load(self) -> DirectoryConfig:
        """Return the cached configuration, resolving it on first use."""
        if self._cached is not None:
            return self._cached

        api_key = self.settings.directory_api_key
        client_collection_id = self.settings.directory_client_collection_id
        contacts_collection_id = self.settings.directory_contacts_collection_id
        vendors_collection_id = self.settings.directory_vendors_collection_id

        try:
            integration = await self.integration_settings_repo.get_by_provider(DIRECTORY_PROVIDER)
        except Exception as e:
            logger.warning(
                "Could not read persisted directory settings, using environment defaults",
                provider=DIRECTORY_PROVIDER,
                error=str(e),
            )
            integration = None

        if integration:
            if integration.get("enabled") and integration.get("api_key"):
                api_key = integration["api_key"]

            raw_config = integration.get("config")
            if raw_config:
                try:
                    overrides = json.loads(raw_config) if isinstance(raw_config, str) else dict(raw_config)
                except (ValueError, TypeError):
                    logger.warning("Invalid JSON in directory integration config, using environment defaults")
                    overrides = {}
                client_collection_id = overrides.get("clientDatabaseId") or client_collection_id
                contacts_collection_id = overrides.get("teamMembersDatabaseId") or contacts_collection_id
                vendors_collection_id = overrides.get("vendorsDatabaseId") or vendors_collection_id

        self._cached = DirectoryConfig(
            api_key=api_key,
            client_collection_id=client_collection_id,
            contacts_collection_id=contacts_collection_id,
            vendors_collection_id=vendors_collection_id,
        )
        return self._cached

    def invalidate(self) -> None:
        """Drop the cached configuration. Safe to call any number of times."""
        self._cached = None

    async def require_complete(self) -> DirectoryConfig:
        """
        Load the configuration and fail fast when it cannot drive a sync.

        Raises:
            DirectoryConfigError: If the API key or the client collection id is missing
        """
        config = await self.load()
        if not config.api_key:
            raise DirectoryConfigError("Directory API key not configured")
        if not config.client_collection_id:
            raise DirectoryConfigError("Directory client collection id not configured")
        return config
