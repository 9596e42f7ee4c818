"""
Reconciliation Enums

Enum types used by the directory sync.
Values must match exactly with database constraints.
"""

from enum import Enum

# ════════════════════════════════════════════════════════════════════════════
# Client Enums
# ════════════════════════════════════════════════════════════════════════════


class ClientStatus(str, Enum):
    """Lifecycle status of a client account."""

    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    ON_HOLD = "ON_HOLD"
    OFFBOARDING = "OFFBOARDING"
    AS_NEEDED = "AS_NEEDED"


class Priority(str, Enum):
    """Client priority tier."""

    P1 = "P1"
    P2 = "P2"
    P3 = "P3"
    P4 = "P4"


class CheckCadence(str, Enum):
    """Default cadence for recurring infrastructure reviews."""

    WEEKLY = "WEEKLY"
    BIWEEKLY = "BIWEEKLY"
    MONTHLY = "MONTHLY"
    ADHOC = "ADHOC"


# ════════════════════════════════════════════════════════════════════════════
# Assignment Enums
# ════════════════════════════════════════════════════════════════════════════


class AssignmentRole(str, Enum):
    """Role of an engineer on a client."""

    SE = "SE"  # System engineer
    PRIMARY = "PRIMARY"  # Primary consultant
    SECONDARY = "SECONDARY"  # Secondary consultant
    GRCE = "GRCE"  # Compliance engineer
    IT_MANAGER = "IT_MANAGER"
    INFRA_CHECK = "INFRA_CHECK"  # Never computed by the directory sync; a sync replaces the whole assignment set, this role included


# ════════════════════════════════════════════════════════════════════════════
# System Catalog Enums
# ════════════════════════════════════════════════════════════════════════════


class SystemCategory(str, Enum):
    """Category of a catalog system (vendor product)."""

    IDENTITY = "IDENTITY"
    MDM = "MDM"
    AV_EDR = "AV_EDR"
    PASSWORD = "PASSWORD"
    GRC = "GRC"
    SECURITY_TRAINING = "SECURITY_TRAINING"
    BACKUP = "BACKUP"
    EMAIL_SECURITY = "EMAIL_SECURITY"


# ════════════════════════════════════════════════════════════════════════════
# Sync Job Enums
# ════════════════════════════════════════════════════════════════════════════


class SyncType(str, Enum):
    """Kind of sync recorded in sync_jobs."""

    DIRECTORY_FULL = "DIRECTORY_FULL"
    DIRECTORY_SINGLE = "DIRECTORY_SINGLE"


class SyncJobStatus(str, Enum):
    """Status of a sync_jobs row."""

    RUNNING = "RUNNING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
