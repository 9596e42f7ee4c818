"""
Sync Models

Values produced while reconciling directory records: the transformed client field set,
resolved role assignments and the summaries returned to callers.
"""

from datetime import datetime
from typing import Any
from typing import Dict
from typing import List
from typing import Optional
from uuid import UUID

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field

from opsdash_api.reconciliation.enums import AssignmentRole
from opsdash_api.reconciliation.enums import CheckCadence
from opsdash_api.reconciliation.enums import ClientStatus
from opsdash_api.reconciliation.enums import Priority


class ContactInfo(BaseModel):
    """Contact cache entry."""

    name: Optional[str] = None
    email: Optional[str] = None


class ClientFields(BaseModel):
    """Field set of one client as derived from a directory record."""

    name: str = "Unknown Client"
    status: ClientStatus = ClientStatus.ACTIVE
    priority: Optional[Priority] = None
    default_cadence: CheckCadence = CheckCadence.MONTHLY

    system_engineer_name: Optional[str] = None
    primary_consultant_name: Optional[str] = None
    secondary_consultant_names: List[str] = Field(default_factory=list)
    it_manager_name: Optional[str] = None
    grce_engineer_name: Optional[str] = None

    poc_email: Optional[str] = None
    office_address: Optional[str] = None
    hours_per_month: Optional[str] = None
    it_syncs_frequency: Optional[str] = None
    onsites_frequency: Optional[str] = None

    compliance_frameworks: List[str] = Field(default_factory=list)
    dmarc: Optional[str] = None
    access_requests: Optional[str] = None
    user_access_reviews: Optional[str] = None
    accepted_password_policy: Optional[str] = None

    teams: List[str] = Field(default_factory=list)
    hr_processes: List[str] = Field(default_factory=list)
    policies: List[str] = Field(default_factory=list)

    it_glue_url: Optional[str] = None
    zendesk_url: Optional[str] = None
    trello_url: Optional[str] = None
    one_password_url: Optional[str] = None
    shared_drive_url: Optional[str] = None
    website_url: Optional[str] = None

    start_date: Optional[datetime] = None
    estimation: Optional[float] = None

    last_synced_at: Optional[datetime] = None

    def to_columns(self) -> Dict[str, Any]:
        """Column name -> value mapping for the clients table."""
        columns = self.model_dump()
        for key in ("status", "priority", "default_cadence"):
            if columns[key] is not None:
                columns[key] = columns[key].value
        return columns


class RoleAssignment(BaseModel):
    """One (user, role) pair computed for a client."""

    user_id: UUID
    role: AssignmentRole

    model_config = ConfigDict(frozen=True)


class SyncResult(BaseModel):
    """Summary of one full directory sync run."""

    synced: int = 0
    created: int = 0
    updated: int = 0
    systems_linked: int = Field(default=0, alias="systemsLinked")
    errors: List[str] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)


class SingleSyncResult(BaseModel):
    """Result of syncing one directory record by id."""

    client: Dict[str, Any]
    trust_center_found: bool = False
    systems_linked: int = 0
    is_new: bool = False


class SyncStatus(BaseModel):
    """Current state of the directory integration."""

    total_clients: int
    synced_clients: int
    last_synced_at: Optional[datetime] = None
    client_collection_id: Optional[str] = None
    is_configured: bool = False
