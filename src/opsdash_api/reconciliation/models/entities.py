"""
Entity Models

Database models for the tables the directory sync reads and writes.
"""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel
from pydantic import ConfigDict

from opsdash_api.reconciliation.enums import AssignmentRole


class Identity(BaseModel):
    """Local user account that directory contacts are resolved against. Never created by the sync."""

    id: UUID
    name: str
    directory_name: Optional[str] = None  # Name as it appears in the directory, when linked
    email: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class Assignment(BaseModel):
    """Client engineer assignment (client, user, role)."""

    client_id: UUID
    user_id: UUID
    role: AssignmentRole

    model_config = ConfigDict(from_attributes=True, frozen=True)


class CatalogSystem(BaseModel):
    """Catalog system (vendor product) that clients can be linked to."""

    id: UUID
    name: str
    category: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)
