"""FastAPI dependencies for accessing app state."""

from fastapi import HTTPException
from fastapi import Request
from fastapi import status

from opsdash_api.directory.config import DirectoryConfigProvider
from opsdash_api.reconciliation.orchestrator import DirectorySyncEngine


def get_sync_engine(request: Request) -> DirectorySyncEngine:
    """
    Get the directory sync engine from request state.

    Raises
    ------
    HTTPException
        503 when the domain database is not configured, so no engine exists
    """
    engine = getattr(request.app.state, "sync_engine", None)
    if engine is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Directory sync is not available: domain database not configured",
        )
    return engine


def get_config_provider(request: Request) -> DirectoryConfigProvider:
    """Get the directory configuration provider used by the sync engine."""
    return get_sync_engine(request).config_provider
