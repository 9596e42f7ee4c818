"""
Reconciliation Models Module

- Database entity models (users, assignments, catalog systems)
- Sync models (transformed field set, run summaries)
"""

from opsdash_api.reconciliation.models.entities import Assignment
from opsdash_api.reconciliation.models.entities import CatalogSystem
from opsdash_api.reconciliation.models.entities import Identity
from opsdash_api.reconciliation.models.sync import ClientFields
from opsdash_api.reconciliation.models.sync import ContactInfo
from opsdash_api.reconciliation.models.sync import RoleAssignment
from opsdash_api.reconciliation.models.sync import SingleSyncResult
from opsdash_api.reconciliation.models.sync import SyncResult
from opsdash_api.reconciliation.models.sync import SyncStatus

__all__ = [
    # Entity models
    "Identity",
    "Assignment",
    "CatalogSystem",
    # Sync models
    "ClientFields",
    "ContactInfo",
    "RoleAssignment",
    "SyncResult",
    "SingleSyncResult",
    "SyncStatus",
]
