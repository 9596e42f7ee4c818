"""
Directory Sync Orchestrator

Drives one sync run:

    LOAD_CONFIG -> BUILD_CACHES -> FETCH_ALL_RECORDS
        -> per record: TRANSFORM -> UPSERT -> RECONCILE_ASSIGNMENTS -> RECONCILE_VENDOR_LINKS -> ENRICH
        -> INVALIDATE_DOWNSTREAM_CACHES -> DONE

Configuration and the primary collection fetch are fatal. Everything after that is
isolated per record: a failure is recorded in the run's error list and the next
record is processed.
"""

import asyncio
from dataclasses import dataclass
from typing import Any
from typing import Callable
from typing import Dict
from typing import Optional

from loguru import logger

from opsdash_api.directory.client import DirectoryClient
from opsdash_api.directory.client import ExternalRecord
from opsdash_api.directory.config import DirectoryConfig
from opsdash_api.directory.config import DirectoryConfigProvider
from opsdash_api.errors import format_record_error
from opsdash_api.reconciliation.assignments import compute_assignments
from opsdash_api.reconciliation.assignments import legacy_pointers
from opsdash_api.reconciliation.cache_invalidation import DownstreamCache
from opsdash_api.reconciliation.caches import SyncContext
from opsdash_api.reconciliation.db import SyncRepositories
from opsdash_api.reconciliation.enrichment import TrustCenterRegistry
from opsdash_api.reconciliation.enums import SyncType
from opsdash_api.reconciliation.models.sync import SingleSyncResult
from opsdash_api.reconciliation.models.sync import SyncResult
from opsdash_api.reconciliation.models.sync import SyncStatus
from opsdash_api.reconciliation.transform import display_name
from opsdash_api.reconciliation.transform import transform_record
from opsdash_api.reconciliation.vendors import extract_vendor_names
from opsdash_api.reconciliation.vendors import link_vendors
from opsdash_api.settings import Settings


@dataclass
class RecordOutcome:
    """What happened to one record."""

    client: Dict[str, Any]
    is_new: bool
    systems_linked: int = 0
    trust_center_found: bool = False


class DirectorySyncEngine:
    """
    Reconciles directory client records into the local store.

    Args:
        config_provider: Source of directory credentials and collection ids
        repositories: Repositories the engine reads and writes through
        settings: Application settings (page size, timeouts, lock name)
        trust_center: Enrichment collaborator; enrichment is skipped when None
        downstream_cache: Cache invalidated after each run; skipped when None
        directory_client_factory: Builds a directory client from a DirectoryConfig.
            The result must be an async context manager.
    """

    def __init__(
        self,
        config_provider: DirectoryConfigProvider,
        repositories: SyncRepositories,
        settings: Optional[Settings] = None,
        trust_center: Optional[TrustCenterRegistry] = None,
        downstream_cache: Optional[DownstreamCache] = None,
        directory_client_factory: Optional[Callable[[DirectoryConfig], Any]] = None,
    ):
        self.config_provider = config_provider
        self.repositories = repositories
        self.settings = settings or config_provider.settings
        self.trust_center = trust_center
        self.downstream_cache = downstream_cache
        self.directory_client_factory = directory_client_factory or self._default_directory_client

    def _default_directory_client(self, config: DirectoryConfig) -> DirectoryClient:
        return DirectoryClient(
            api_key=config.api_key,
            base_url=self.settings.directory_api_base_url,
            api_version=self.settings.directory_api_version,
            timeout=self.settings.directory_timeout_seconds,
        )

    async def _build_context(self, directory, config: DirectoryConfig) -> SyncContext:
        identities = await self.repositories.users.list_identities()
        catalog = await self.repositories.systems.list_catalog()
        context = SyncContext(
            directory,
            config,
            identities=identities,
            catalog=catalog,
            page_size=self.settings.directory_page_size,
        )
        await context.build_caches()
        return context

    # ────────────────────────────────────────────────────────────────────────
    # Full sync
    # ────────────────────────────────────────────────────────────────────────

    async def sync_all(self) -> SyncResult:
        """
        Sync every record of the client collection.

        Returns:
            Run summary; per-record failures are listed in ``errors``

        Raises:
            DirectoryConfigError: If the integration is not configured
            DirectoryAPIError: If the client collection cannot be fetched
            SyncAlreadyRunningError: If another run holds the sync lock
        """
        config = await self.config_provider.require_complete()
        sync_jobs = self.repositories.sync_jobs

        async with sync_jobs.advisory_lock(self.settings.sync_lock_name):
            sync_job_id = await sync_jobs.create(SyncType.DIRECTORY_FULL.value)
            logger.info("Directory sync started", sync_job_id=str(sync_job_id))
            result = SyncResult()

            try:
                async with self.directory_client_factory(config) as directory:
                    context = await self._build_context(directory, config)
                    records = await directory.query_collection(
                        config.client_collection_id, page_size=self.settings.directory_page_size
                    )
                    logger.info(
                        "Client records fetched",
                        collection_id=config.client_collection_id,
                        record_count=len(records),
                    )

                    for record in records:
                        await self._sync_record_isolated(record, context, result)
            except Exception as e:
                await sync_jobs.fail(sync_job_id, str(e))
                logger.error("Directory sync failed", sync_job_id=str(sync_job_id), error=str(e))
                raise

            await self._invalidate_downstream(result)

            await self._complete_job(
                sync_job_id,
                result,
                records_processed=result.synced,
                records_created=result.created,
                records_updated=result.updated,
                records_failed=len(records) - result.synced,
                systems_linked=result.systems_linked,
            )

        logger.success(
            "Directory sync completed",
            synced=result.synced,
            created=result.created,
            updated=result.updated,
            systems_linked=result.systems_linked,
            error_count=len(result.errors),
        )
        return result

    async def _sync_record_isolated(self, record: ExternalRecord, context: SyncContext, result: SyncResult) -> None:
        try:
            await self._apply_record(record, context, result)
            result.synced += 1
        except Exception as e:
            message = format_record_error(display_name(record), e)
            result.errors.append(message)
            logger.error("Record sync failed", external_id=record.id, error=message, error_type=type(e).__name__)

    async def _invalidate_downstream(self, result: Optional[SyncResult] = None) -> None:
        if self.downstream_cache is None:
            return
        try:
            await self.downstream_cache.invalidate_team_cache()
        except Exception as e:
            logger.warning("Downstream cache invalidation failed", error=str(e))
            if result is not None:
                result.errors.append(f"Cache invalidation failed: {e}")

    async def _complete_job(self, sync_job_id, result: Optional[SyncResult], **counters: int) -> None:
        """Mark the sync job completed. A failure is logged and added to the run errors."""
        try:
            await self.repositories.sync_jobs.complete(sync_job_id, **counters)
        except Exception as e:
            logger.warning("Sync job completion could not be recorded", sync_job_id=str(sync_job_id), error=str(e))
            if result is not None:
                result.errors.append(f"Sync job bookkeeping failed: {e}")

    # ────────────────────────────────────────────────────────────────────────
    # Per-record pipeline
    # ────────────────────────────────────────────────────────────────────────

    async def _apply_record(
        self,
        record: ExternalRecord,
        context: SyncContext,
        result: Optional[SyncResult] = None,
    ) -> RecordOutcome:
        """Transform, upsert, reconcile assignments and vendor links, enrich. Errors propagate."""
        repos = self.repositories

        await context.warm_frameworks(record.properties.get("Compliance"))
        fields = transform_record(record, context)

        client, created = await repos.clients.upsert_by_external_id(record.id, fields)
        if result is not None:
            if created:
                result.created += 1
            else:
                result.updated += 1
        client_id = client["id"]

        assignments = compute_assignments(record, fields, context)
        await repos.assignments.replace_for_client(client_id, assignments)
        logger.debug(
            "Assignments replaced",
            client_id=str(client_id),
            external_id=record.id,
            assignment_count=len(assignments),
        )

        pointers = legacy_pointers(assignments)
        try:
            await repos.clients.update_legacy_pointers(client_id, **pointers)
            client.update(pointers)
        except Exception as e:
            message = format_record_error(display_name(record), e)
            logger.warning("Legacy pointer update failed", client_id=str(client_id), error=message)
            if result is not None:
                result.errors.append(message)

        outcome = RecordOutcome(client=client, is_new=created)

        vendor_names = extract_vendor_names(record, context)
        if vendor_names:
            outcome.systems_linked = await link_vendors(client_id, vendor_names, context, repos.systems)
            if result is not None:
                result.systems_linked += outcome.systems_linked

        outcome.trust_center_found = await self._enrich(client, fields.website_url)
        return outcome

    async def _enrich(self, client: Dict[str, Any], website_url: Optional[str]) -> bool:
        """Attach the client's trust center when the registry knows its website. Never raises."""
        if self.trust_center is None or not website_url:
            return False

        try:
            match = await asyncio.wait_for(
                self.trust_center.lookup(website_url),
                timeout=self.settings.enrichment_timeout_seconds,
            )
            if not match.found:
                return False
            await self.repositories.clients.update_trust_center(client["id"], match.trust_center_url, match.platform)
        except Exception as e:
            logger.warning(
                "Trust-center lookup failed",
                client_id=str(client["id"]),
                website_url=website_url,
                error=str(e) or type(e).__name__,
            )
            return False

        client["trust_center_url"] = match.trust_center_url
        client["trust_center_platform"] = match.platform
        return True

    # ────────────────────────────────────────────────────────────────────────
    # Single record sync and status
    # ────────────────────────────────────────────────────────────────────────

    async def sync_single(self, external_id: str) -> SingleSyncResult:
        """
        Sync one directory record by id.

        Unlike ``sync_all``, any failure while processing the record propagates.

        Raises:
            DirectoryConfigError: If the integration is not configured
            DirectoryAPIError: If the record cannot be fetched
            SyncAlreadyRunningError: If another run holds the sync lock
        """
        config = await self.config_provider.require_complete()
        sync_jobs = self.repositories.sync_jobs

        async with sync_jobs.advisory_lock(self.settings.sync_lock_name):
            sync_job_id = await sync_jobs.create(SyncType.DIRECTORY_SINGLE.value)
            try:
                async with self.directory_client_factory(config) as directory:
                    context = await self._build_context(directory, config)
                    record = await directory.get_record(external_id)
                    outcome = await self._apply_record(record, context)
            except Exception as e:
                await sync_jobs.fail(sync_job_id, str(e))
                logger.error("Single record sync failed", external_id=external_id, error=str(e))
                raise

            await self._invalidate_downstream()
            await self._complete_job(
                sync_job_id,
                None,
                records_processed=1,
                records_created=int(outcome.is_new),
                records_updated=int(not outcome.is_new),
                systems_linked=outcome.systems_linked,
            )

        logger.success(
            "Single record synced",
            external_id=external_id,
            client_id=str(outcome.client["id"]),
            is_new=outcome.is_new,
        )
        return SingleSyncResult(
            client=outcome.client,
            trust_center_found=outcome.trust_center_found,
            systems_linked=outcome.systems_linked,
            is_new=outcome.is_new,
        )

    async def status(self) -> SyncStatus:
        """Client counts, last sync time and whether the integration is configured."""
        config = await self.config_provider.load()
        clients = self.repositories.clients
        return SyncStatus(
            total_clients=await clients.count(),
            synced_clients=await clients.count_synced(),
            last_synced_at=await clients.last_synced_at(),
            client_collection_id=config.client_collection_id,
            is_configured=config.is_configured,
        )
