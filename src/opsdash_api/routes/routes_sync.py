"""
Directory Sync API Routes

Administrative endpoints that run and inspect the directory reconciliation.
"""

from fastapi import APIRouter
from fastapi import Depends
from fastapi import Path
from fastapi import status
from loguru import logger

from opsdash_api.dependencies import get_config_provider
from opsdash_api.dependencies import get_sync_engine
from opsdash_api.directory.config import DirectoryConfigProvider
from opsdash_api.reconciliation.models.sync import SingleSyncResult
from opsdash_api.reconciliation.models.sync import SyncResult
from opsdash_api.reconciliation.models.sync import SyncStatus
from opsdash_api.reconciliation.orchestrator import DirectorySyncEngine

ROUTER_SYNC = APIRouter(tags=["Directory Sync"])


@ROUTER_SYNC.post(
    "/directory/sync",
    response_model=SyncResult,
    status_code=status.HTTP_200_OK,
    summary="Sync all clients from the directory",
    responses={
        200: {"description": "Sync finished; per-client failures are listed in errors"},
        409: {"description": "Another sync is already running"},
        502: {"description": "The directory could not be queried"},
        503: {"description": "Directory integration not configured"},
    },
)
async def sync_directory(engine: DirectorySyncEngine = Depends(get_sync_engine)):
    """
    Run a full directory sync and return its summary.

    The response is `{synced, created, updated, systemsLinked, errors}`.
    """
    logger.info("Directory sync requested")
    return await engine.sync_all()


@ROUTER_SYNC.get(
    "/directory/sync/status",
    response_model=SyncStatus,
    summary="Directory sync status",
)
async def sync_status(engine: DirectorySyncEngine = Depends(get_sync_engine)):
    """Client counts, last sync time and whether the integration is configured."""
    return await engine.status()


@ROUTER_SYNC.post(
    "/directory/clients/{external_id}/sync",
    response_model=SingleSyncResult,
    summary="Sync one client from the directory",
    responses={
        409: {"description": "Another sync is already running"},
        502: {"description": "The directory record could not be fetched"},
        503: {"description": "Directory integration not configured"},
    },
)
async def sync_single_client(
    external_id: str = Path(..., description="Directory record id of the client"),
    engine: DirectorySyncEngine = Depends(get_sync_engine),
):
    """Sync a single client by its directory record id."""
    logger.info("Single client sync requested", external_id=external_id)
    return await engine.sync_single(external_id)


@ROUTER_SYNC.post(
    "/integrations/directory/clear-cache",
    summary="Drop cached directory configuration",
)
async def clear_directory_config_cache(
    config_provider: DirectoryConfigProvider = Depends(get_config_provider),
):
    """Call after changing the directory integration settings."""
    config_provider.invalidate()
    logger.info("Directory configuration cache cleared")
    return {"message": "Directory configuration cache cleared"}
