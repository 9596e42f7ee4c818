from textwrap import dedent
from typing import Any

import pydantic
from fastapi import FastAPI
from fastapi.openapi.utils import get_openapi
from fastapi.routing import APIRoute
from loguru import logger

from opsdash_api.directory.config import DirectoryConfigProvider
from opsdash_api.errors import DirectorySyncError
from opsdash_api.errors import handle_broad_exceptions
from opsdash_api.errors import handle_directory_sync_errors
from opsdash_api.errors import handle_pydantic_validation_errors
from opsdash_api.monitoring.logger import configure_logger
from opsdash_api.reconciliation.cache_invalidation import DownstreamCache
from opsdash_api.reconciliation.db import IntegrationSettingsRepository
from opsdash_api.reconciliation.db import SyncRepositories
from opsdash_api.reconciliation.db.pool import DomainDBPool
from opsdash_api.reconciliation.enrichment import TrustCenterRegistry
from opsdash_api.reconciliation.orchestrator import DirectorySyncEngine
from opsdash_api.routes.routes_health import ROUTER_HEALTH
from opsdash_api.routes.routes_sync import ROUTER_SYNC
from opsdash_api.settings import Settings


def build_sync_engine(settings: Settings, pool) -> DirectorySyncEngine:
    """Wire the sync engine and its collaborators on top of a database pool."""
    config_provider = DirectoryConfigProvider(settings, IntegrationSettingsRepository(pool))
    return DirectorySyncEngine(
        config_provider=config_provider,
        repositories=SyncRepositories.from_pool(pool),
        settings=settings,
        trust_center=TrustCenterRegistry(
            registry_url=settings.trust_center_registry_url,
            cache_ttl_seconds=settings.trust_center_cache_ttl_seconds,
            timeout=settings.enrichment_timeout_seconds,
        ),
        downstream_cache=DownstreamCache(settings.redis_url),
    )


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create a FastAPI application.

    Configuration is loaded directly from environment variables via pydantic-settings.
    Use a .env file for local development.
    """
    settings = settings or Settings()

    configure_logger()

    logger.info(
        "Configuration loaded successfully",
        domain_db_set=bool(settings.domain_db_connection_string),
        directory_api_key_set=bool(settings.directory_api_key),
        client_collection_set=bool(settings.directory_client_collection_id),
        redis_set=bool(settings.redis_url),
    )

    app = FastAPI(
        title="Ops Dashboard API",
        version="v1",
        description=dedent(
            """
        Administrative API of the operations dashboard.

        | Area | Notes |
        | --- | --- |
        | Directory sync | Reconciles clients, engineer assignments and vendor systems from the directory-of-record |
        | Health | Liveness and database status |
        """
        ),
        generate_unique_id_function=custom_generate_unique_id,
    )
    app.state.settings = settings

    app.include_router(ROUTER_HEALTH, prefix="/api")

    if settings.domain_db_connection_string:
        domain_db_pool = DomainDBPool(settings.domain_db_connection_string)
        app.state.domain_db_pool = domain_db_pool
        app.state.sync_engine = build_sync_engine(settings, domain_db_pool)
        logger.success("Directory sync enabled")

        @app.on_event("startup")
        async def startup_domain_db():
            """Initialize the domain database (runs migrations)."""
            await app.state.domain_db_pool.initialize()

        @app.on_event("shutdown")
        async def shutdown_domain_db():
            """Close database and cache connections."""
            await app.state.domain_db_pool.close()
            downstream_cache = app.state.sync_engine.downstream_cache
            if downstream_cache is not None:
                await downstream_cache.close()
            logger.info("Domain database closed")

    else:
        logger.warning("Directory sync disabled (domain_db_connection_string not set)")

    app.include_router(ROUTER_SYNC, prefix="/api")

    app.add_exception_handler(
        exc_class_or_status_code=pydantic.ValidationError,
        handler=handle_pydantic_validation_errors,
    )
    app.add_exception_handler(
        exc_class_or_status_code=DirectorySyncError,
        handler=handle_directory_sync_errors,
    )

    app.middleware("http")(handle_broad_exceptions)

    app.openapi = lambda: custom_openapi_schema(app)

    return app


def custom_generate_unique_id(route: APIRoute):
    """
    Generate prettier `operationId`s in the OpenAPI schema.

    These become the function names in generated client SDKs.
    """
    if route.tags:
        return f"{route.tags[0]}-{route.name}"
    return route.name


def custom_openapi_schema(app: FastAPI) -> dict[str, Any]:
    """Generate the OpenAPI schema once and cache it on the app."""
    if app.openapi_schema:
        return app.openapi_schema

    app.openapi_schema = get_openapi(
        title=app.title,
        version=app.version,
        description=app.description,
        routes=app.routes,
    )
    return app.openapi_schema
