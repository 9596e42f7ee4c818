"""Persistence for the directory sync: connection pool, migrations and repositories."""

from dataclasses import dataclass

from opsdash_api.reconciliation.db.repository_assignment import AssignmentRepository
from opsdash_api.reconciliation.db.repository_client import ClientRepository
from opsdash_api.reconciliation.db.repository_integration_settings import IntegrationSettingsRepository
from opsdash_api.reconciliation.db.repository_sync_job import SyncJobRepository
from opsdash_api.reconciliation.db.repository_system import SystemRepository
from opsdash_api.reconciliation.db.repository_user import UserRepository


@dataclass
class SyncRepositories:
    """Repositories the sync engine writes through."""

    clients: ClientRepository
    users: UserRepository
    assignments: AssignmentRepository
    systems: SystemRepository
    sync_jobs: SyncJobRepository

    @classmethod
    def from_pool(cls, pool) -> "SyncRepositories":
        return cls(
            clients=ClientRepository(pool),
            users=UserRepository(pool),
            assignments=AssignmentRepository(pool),
            systems=SystemRepository(pool),
            sync_jobs=SyncJobRepository(pool),
        )


__all__ = [
    "AssignmentRepository",
    "ClientRepository",
    "IntegrationSettingsRepository",
    "SyncJobRepository",
    "SyncRepositories",
    "SystemRepository",
    "UserRepository",
]
