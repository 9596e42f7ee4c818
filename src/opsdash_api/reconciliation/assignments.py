"""
Assignment Reconciler

Computes the (user, role) assignments implied by a directory record and replaces the
client's stored assignment set with exactly that set.
"""

from typing import Dict
from typing import List
from typing import Optional
from uuid import UUID

from opsdash_api.directory.client import ExternalRecord
from opsdash_api.reconciliation.caches import SyncContext
from opsdash_api.reconciliation.enums import AssignmentRole
from opsdash_api.reconciliation.models.sync import ClientFields
from opsdash_api.reconciliation.models.sync import RoleAssignment
from opsdash_api.reconciliation.transform import people
from opsdash_api.reconciliation.transform import relation_ids

# Relation property holding the contacts of each role
ROLE_RELATIONS: Dict[AssignmentRole, str] = {
    AssignmentRole.SE: "SE",
    AssignmentRole.PRIMARY: "Primary Consultant",
    AssignmentRole.SECONDARY: "Secondaries",
    AssignmentRole.GRCE: "GRCE",
}

# People property holding the IT manager
IT_MANAGER_PROPERTY = "IT Manager"

# Roles mirrored onto the legacy single-engineer columns of the client
LEGACY_POINTER_COLUMNS: Dict[AssignmentRole, str] = {
    AssignmentRole.SE: "system_engineer_id",
    AssignmentRole.PRIMARY: "primary_consultant_id",
    AssignmentRole.SECONDARY: "secondary_consultant_id",
    AssignmentRole.GRCE: "grce_engineer_id",
}


def _fallback_names(fields: ClientFields) -> Dict[AssignmentRole, List[str]]:
    def one(name: Optional[str]) -> List[str]:
        return [name] if name else []

    return {
        AssignmentRole.SE: one(fields.system_engineer_name),
        AssignmentRole.PRIMARY: one(fields.primary_consultant_name),
        AssignmentRole.SECONDARY: list(fields.secondary_consultant_names),
        AssignmentRole.GRCE: one(fields.grce_engineer_name),
        AssignmentRole.IT_MANAGER: one(fields.it_manager_name),
    }


def compute_assignments(record: ExternalRecord, fields: ClientFields, context: SyncContext) -> List[RoleAssignment]:
    """
    Compute the full, deduplicated assignment set for one client.

    Contacts referenced by relation (or the IT manager people property) are resolved first.
    The name strings of ``fields`` are used only for roles where that produced no match.
    """
    resolver = context.resolver
    resolved: Dict[AssignmentRole, List[UUID]] = {role: [] for role in _fallback_names(fields)}

    for role, property_name in ROLE_RELATIONS.items():
        for contact_id in relation_ids(record.properties, property_name):
            contact = context.contacts.get(contact_id)
            if contact is None:
                continue
            user_id = resolver.resolve(name=contact.name, email=contact.email)
            if user_id is not None:
                resolved[role].append(user_id)

    for person in people(record.properties, IT_MANAGER_PROPERTY):
        user_id = resolver.resolve(name=person.name, email=person.email)
        if user_id is not None:
            resolved[AssignmentRole.IT_MANAGER].append(user_id)

    for role, names in _fallback_names(fields).items():
        if resolved[role]:
            continue
        for name in names:
            user_id = resolver.resolve(name=name)
            if user_id is not None:
                resolved[role].append(user_id)

    assignments = [RoleAssignment(user_id=user_id, role=role) for role, user_ids in resolved.items() for user_id in user_ids]
    return list(dict.fromkeys(assignments))


def legacy_pointers(assignments: List[RoleAssignment]) -> Dict[str, Optional[UUID]]:
    """First assigned user per legacy column (None when the role has no assignment)."""
    pointers: Dict[str, Optional[UUID]] = {column: None for column in LEGACY_POINTER_COLUMNS.values()}
    for assignment in assignments:
        column = LEGACY_POINTER_COLUMNS.get(assignment.role)
        if column and pointers[column] is None:
            pointers[column] = assignment.user_id
    return pointers
