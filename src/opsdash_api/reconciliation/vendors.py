"""
Vendor-Link Reconciler

Maps the vendor relations of a directory record onto catalog systems and links them to
the client. Links are additive: a vendor removed in the directory stays linked locally.
"""

from typing import Dict
from typing import Iterable
from typing import List
from typing import Optional
from uuid import UUID

from loguru import logger

from opsdash_api.directory.client import ExternalRecord
from opsdash_api.reconciliation.caches import SyncContext
from opsdash_api.reconciliation.enums import SystemCategory
from opsdash_api.reconciliation.transform import relation_ids

# Vendor relation columns in the directory -> catalog category
VENDOR_COLUMNS: Dict[str, SystemCategory] = {
    "IDP": SystemCategory.IDENTITY,
    "Email": SystemCategory.IDENTITY,
    "MDM": SystemCategory.MDM,
    "AV/EDR": SystemCategory.AV_EDR,
    "Password Manager": SystemCategory.PASSWORD,
    "GRC": SystemCategory.GRC,
    "Security Training": SystemCategory.SECURITY_TRAINING,
    "Workspace Backups": SystemCategory.BACKUP,
    "Endpoint Backup": SystemCategory.BACKUP,
    "Email Filter": SystemCategory.EMAIL_SECURITY,
}

# Directory vendor name (lowercase) -> catalog system name
VENDOR_ALIASES: Dict[str, str] = {
    # Identity / IDP
    "google workspace": "Google Workspace",
    "google": "Google Workspace",
    "okta": "Okta",
    "azure ad": "Azure AD",
    "azure": "Azure AD",
    "entra id": "Azure AD",
    "microsoft entra id": "Azure AD",
    "jumpcloud": "JumpCloud",
    "onelogin": "OneLogin",
    # MDM
    "kandji": "Kandji",
    "addigy": "Addigy",
    "jamf": "Jamf",
    "intune": "Intune",
    "microsoft intune": "Intune",
    "hexnode": "Hexnode",
    "mosyle": "Mosyle",
    "simplemdm": "SimpleMDM",
    "mobileiron": "MobileIron",
    "ibm maas360": "IBM MaaS360",
    "maas360": "IBM MaaS360",
    "scalefusion": "Scalefusion",
    "miradore": "Miradore",
    "workspace one": "Workspace One",
    "vmware workspace one": "Workspace One",
    "apple business essentials": "Apple Business Essentials",
    # AV / EDR
    "crowdstrike": "CrowdStrike",
    "sophos": "Sophos",
    "sentinelone": "SentinelOne",
    "huntress": "Huntress",
    "windows defender": "Windows Defender",
    "microsoft defender": "Microsoft Defender",
    "defender": "Windows Defender",
    "malwarebytes": "Malwarebytes",
    "arctic wolf": "Arctic Wolf",
    "cylance": "Cylance",
    "trend micro": "Trend Micro",
    "webroot": "Webroot",
    "norton": "Norton",
    "eset": "ESET",
    "bitdefender": "Bitdefender",
    "avira": "Avira",
    "cortex": "Cortex",
    "covalence": "Covalence",
    # Password managers
    "1password": "1Password",
    "bitwarden": "Bitwarden",
    "lastpass": "LastPass",
    "dashlane": "Dashlane",
    "keeper": "Keeper",
    # GRC
    "vanta": "Vanta",
    "drata": "Drata",
    "secureframe": "Secureframe",
    "sprinto": "Sprinto",
    "thoropass": "Thoropass",
    "hyperproof": "Hyperproof",
    "apptega": "Apptega",
    "onetrust": "OneTrust",
    "delve": "Delve",
    # Security training
    "knowbe4": "KnowBe4",
    "curricula": "Curricula",
    "ninjio": "Ninjio",
    "easyllama": "EasyLlama",
    "bullphish": "Bullphish",
    # Backup
    "backupify": "Backupify",
    "spanning": "Spanning",
    "cloudally": "CloudAlly",
    "dropsuite": "Dropsuite",
    "spinone": "SpinOne",
    "backblaze": "Backblaze",
    # Email security
    "abnormal": "Abnormal Security",
    "abnormal security": "Abnormal Security",
    "proofpoint": "Proofpoint",
    "checkpoint harmony email & collaboration": "CheckPoint Harmony",
    "checkpoint harmony": "CheckPoint Harmony",
    "valimail": "Valimail",
    "cisco umbrella": "Cisco Umbrella",
    "umbrella": "Cisco Umbrella",
    "dnsfilter": "DNSFilter",
}


def extract_vendor_names(record: ExternalRecord, context: SyncContext) -> List[str]:
    """Deduplicated vendor names referenced by any vendor column, in column order."""
    names: List[str] = []
    for column in VENDOR_COLUMNS:
        names.extend(context.vendor_names(relation_ids(record.properties, column)))
    return list(dict.fromkeys(names))


def resolve_system_id(vendor_name: str, catalog: Dict[str, UUID]) -> Optional[UUID]:
    """
    Catalog id for a vendor name: direct case-insensitive match, then the alias table.

    Args:
        vendor_name: Vendor name as shown in the directory
        catalog: Lowercase catalog system name -> system id
    """
    key = vendor_name.strip().lower()
    system_id = catalog.get(key)
    if system_id is not None:
        return system_id

    alias = VENDOR_ALIASES.get(key)
    if alias:
        return catalog.get(alias.lower())
    return None


async def link_vendors(client_id: UUID, vendor_names: Iterable[str], context: SyncContext, systems_repo) -> int:
    """
    Link every resolvable vendor to the client.

    Unmatched vendors are skipped; the catalog is expected to be incomplete.

    Returns:
        Number of links newly created
    """
    created = 0
    unmatched = []
    for vendor_name in vendor_names:
        system_id = resolve_system_id(vendor_name, context.catalog)
        if system_id is None:
            unmatched.append(vendor_name)
            continue
        if await systems_repo.link_client_system(client_id, system_id):
            created += 1

    if unmatched:
        logger.debug("Vendors without catalog match", client_id=str(client_id), vendors=unmatched)
    return created
