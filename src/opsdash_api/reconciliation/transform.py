"""
Record Transformer

Maps one directory client record onto the local client field set. Pure: all lookups go
through the SyncContext caches, which must already be warm.
"""

from datetime import datetime
from typing import Any
from typing import Dict
from typing import List
from typing import Optional

from opsdash_api.directory.client import ExternalRecord
from opsdash_api.directory.properties import PersonReference
from opsdash_api.directory.properties import PropertyType
from opsdash_api.directory.properties import get_text
from opsdash_api.directory.properties import get_value
from opsdash_api.directory.properties import property_type_of
from opsdash_api.reconciliation.caches import SyncContext
from opsdash_api.reconciliation.enums import CheckCadence
from opsdash_api.reconciliation.enums import ClientStatus
from opsdash_api.reconciliation.enums import Priority
from opsdash_api.reconciliation.models.sync import ClientFields

DEFAULT_CLIENT_NAME = "Unknown Client"

STATUS_MAP: Dict[str, ClientStatus] = {
    "active": ClientStatus.ACTIVE,
    "new - active": ClientStatus.ACTIVE,
    "exiting": ClientStatus.OFFBOARDING,
    "ip closing": ClientStatus.OFFBOARDING,
    "on-hold due to no payment": ClientStatus.ON_HOLD,
    "as needed": ClientStatus.AS_NEEDED,
    "deactivate": ClientStatus.INACTIVE,
}

CADENCE_MAP: Dict[str, CheckCadence] = {
    "weekly": CheckCadence.WEEKLY,
    "bi-weekly": CheckCadence.BIWEEKLY,
    "biweekly": CheckCadence.BIWEEKLY,
    "monthly": CheckCadence.MONTHLY,
    "adhoc": CheckCadence.ADHOC,
    "not needed": CheckCadence.ADHOC,
}

PRIORITY_MAP: Dict[str, Priority] = {
    "p1": Priority.P1,
    "p2": Priority.P2,
    "p3": Priority.P3,
    "p4": Priority.P4,
}


def map_status(label: Optional[str]) -> ClientStatus:
    if not label:
        return ClientStatus.ACTIVE
    return STATUS_MAP.get(label.strip().lower(), ClientStatus.ACTIVE)


def map_cadence(label: Optional[str]) -> CheckCadence:
    if not label:
        return CheckCadence.MONTHLY
    return CADENCE_MAP.get(label.strip().lower(), CheckCadence.MONTHLY)


def map_priority(label: Optional[str]) -> Optional[Priority]:
    if not label:
        return None
    return PRIORITY_MAP.get(label.strip().lower())


def display_name(record: ExternalRecord) -> str:
    """Name used in error messages: the client title, falling back to the record id."""
    return get_text(record.properties, "Client") or record.id


def _as_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, str):
        return value or None
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, list):
        return ", ".join(_as_list(value)) or None
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _as_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value else []
    if isinstance(value, list):
        items = []
        for item in value:
            if isinstance(item, PersonReference):
                item = item.name
            if item:
                items.append(str(item))
        return items
    return [str(value)]


def _as_number(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


def _as_datetime(value: Any) -> Optional[datetime]:
    return value if isinstance(value, datetime) else None


def relation_ids(properties: Dict[str, Any], name: str) -> List[str]:
    prop = properties.get(name)
    if property_type_of(prop) == PropertyType.RELATION:
        return get_value(properties, name)
    return []


def people(properties: Dict[str, Any], name: str) -> List[PersonReference]:
    prop = properties.get(name)
    if property_type_of(prop) == PropertyType.PEOPLE:
        return get_value(properties, name)
    return []


def transform_record(record: ExternalRecord, context: SyncContext) -> ClientFields:
    """
    Build the client field set for one directory record.

    Unknown labels map to defaults and missing properties to None/empty lists.

    Raises:
        ValueError: If a date property is malformed
    """
    props = record.properties

    def value(name: str) -> Any:
        return get_value(props, name)

    se_names = context.contact_names(relation_ids(props, "SE"))
    primary_names = context.contact_names(relation_ids(props, "Primary Consultant"))
    secondary_names = context.contact_names(relation_ids(props, "Secondaries"))
    grce_names = context.contact_names(relation_ids(props, "GRCE"))
    it_managers = people(props, "IT Manager")

    it_syncs = _as_text(value("IT Syncs"))

    return ClientFields(
        name=_as_text(value("Client")) or DEFAULT_CLIENT_NAME,
        status=map_status(_as_text(value("Status"))),
        priority=map_priority(_as_text(value("Priority"))),
        default_cadence=map_cadence(it_syncs),
        # Engineer names (first resolved contact per singular role)
        system_engineer_name=se_names[0] if se_names else None,
        primary_consultant_name=primary_names[0] if primary_names else None,
        secondary_consultant_names=secondary_names,
        it_manager_name=it_managers[0].name if it_managers else None,
        grce_engineer_name=grce_names[0] if grce_names else None,
        # Contact & location
        poc_email=_as_text(value("POC Email")),
        office_address=_as_text(value("Office Address")),
        # Service levels
        hours_per_month=_as_text(value("HPM")),
        it_syncs_frequency=it_syncs,
        onsites_frequency=_as_text(value("Onsites")),
        # Security & compliance
        compliance_frameworks=context.framework_names(props.get("Compliance")),
        dmarc=_as_text(value("DMARC")),
        access_requests=_as_text(value("Access Requests")),
        user_access_reviews=_as_text(value("User Access Reviews")),
        accepted_password_policy=_as_text(value("Accepted Password Policy?")),
        # Teams & HR
        teams=_as_list(value("Team(s)")),
        hr_processes=_as_list(value("HR Processes")),
        policies=_as_list(value("Policies")),
        # URLs
        it_glue_url=_as_text(value("IT Glue")),
        zendesk_url=_as_text(value("Zendesk")),
        trello_url=_as_text(value("Trello")),
        one_password_url=_as_text(value("1Password")),
        shared_drive_url=_as_text(value("Shared Drive")),
        website_url=_as_text(value("Website")),
        # Dates
        start_date=_as_datetime(value("Start Date")),
        estimation=_as_number(value("Estimation")),
        last_synced_at=context.started_at,
    )
