"""Settings for the ops dashboard directory sync."""

from typing import Optional

from pydantic_settings import BaseSettings
from pydantic_settings import SettingsConfigDict


class Settings(BaseSettings):
    """
    Settings for the directory reconciliation engine and its admin API.

    [pydantic.BaseSettings](https://docs.pydantic.dev/latest/concepts/pydantic_settings/) reads
    configuration values from:
    1. Environment variables (production)
    2. .env file (local development)

    Directory credentials and collection ids defined here are only the environment-level
    defaults; persisted integration settings take precedence (see DirectoryConfigProvider).
    """

    # Domain database
    domain_db_connection_string: Optional[str] = None
    """PostgreSQL connection string for the dashboard database (clients, users, assignments)."""

    # Directory-of-record (environment defaults)
    directory_api_key: Optional[str] = None
    """API credential for the directory-of-record."""

    directory_client_collection_id: Optional[str] = None
    """Collection holding client records."""

    directory_contacts_collection_id: Optional[str] = None
    """Collection holding team member / contact records."""

    directory_vendors_collection_id: Optional[str] = None
    """Collection holding vendor / product records."""

    directory_api_base_url: str = "https://api.notion.com/v1"
    """Base URL of the directory API."""

    directory_api_version: str = "2022-06-28"
    """Value sent in the directory API version header."""

    directory_page_size: int = 100
    """Page size for paginated collection queries (the API caps this at 100)."""

    directory_timeout_seconds: float = 30.0
    """Per-request timeout for directory API calls."""

    # Trust-center enrichment
    trust_center_registry_url: str = "https://trustlists.org/api/trust-centers.json"
    """Public registry of company trust centers."""

    trust_center_cache_ttl_seconds: int = 7 * 24 * 60 * 60
    """How long a fetched registry list is reused."""

    enrichment_timeout_seconds: float = 10.0
    """Upper bound for a single trust-center lookup during a sync."""

    # Downstream cache
    redis_url: Optional[str] = None
    """Redis URL of the dashboard read cache. Invalidation is skipped when unset."""

    # Run serialization
    sync_lock_name: str = "directory_sync"
    """Advisory lock key that serializes directory sync runs."""

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=".env",  # Load from .env file if it exists (local development)
        env_file_encoding="utf-8",
        extra="ignore",  # Ignore extra environment variables not defined in the model
        validate_default=True,
    )
