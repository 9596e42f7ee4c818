"""
Sync Context and Reference Caches

Everything one sync run looks up more than once lives on a SyncContext built at the
start of the run and dropped at the end:

- contact cache: contact record id -> name/email (one paginated fetch)
- vendor cache: vendor record id -> product name (one paginated fetch)
- framework cache: compliance record id -> framework name (lazy point lookups, memoized)
- local identities and the system catalog (one query each)
"""

from datetime import datetime
from datetime import timezone
from typing import Any
from typing import Dict
from typing import Iterable
from typing import List
from typing import Optional
from typing import Set
from uuid import UUID

from loguru import logger

from opsdash_api.directory.client import ExternalRecord
from opsdash_api.directory.config import DirectoryConfig
from opsdash_api.directory.properties import PropertyType
from opsdash_api.directory.properties import decode_property
from opsdash_api.directory.properties import get_text
from opsdash_api.directory.properties import get_title
from opsdash_api.directory.properties import property_type_of
from opsdash_api.errors import DirectoryAPIError
from opsdash_api.reconciliation.identity import IdentityResolver
from opsdash_api.reconciliation.models.entities import CatalogSystem
from opsdash_api.reconciliation.models.entities import Identity
from opsdash_api.reconciliation.models.sync import ContactInfo

# Property names tried, in order, for a compliance framework's name
FRAMEWORK_TITLE_PROPERTIES = ("Name", "Title", "Framework", "Compliance")


def contact_from_record(record: ExternalRecord) -> ContactInfo:
    """Name from the title property; email from an email-typed property, else any *email* text field."""
    properties = record.properties
    email = None

    for prop in properties.values():
        if property_type_of(prop) == PropertyType.EMAIL:
            email = decode_property(prop)
            if email:
                break

    if not email:
        for prop_name in properties:
            if "email" in prop_name.lower():
                email = get_text(properties, prop_name)
                if email:
                    break

    return ContactInfo(name=get_title(properties), email=email or None)


def framework_name_from_record(record: ExternalRecord) -> Optional[str]:
    properties = record.properties
    for prop_name in FRAMEWORK_TITLE_PROPERTIES:
        name = get_text(properties, prop_name)
        if name:
            return name
    return get_title(properties)


class SyncContext:
    """
    Per-run state shared by every step of a sync.

    Args:
        directory: Open DirectoryClient (or anything with the same two methods)
        config: Resolved directory configuration
        identities: Local users to resolve contacts against
        catalog: Local system catalog
        page_size: Page size for collection queries
    """

    def __init__(
        self,
        directory,
        config: DirectoryConfig,
        identities: Iterable[Identity] = (),
        catalog: Iterable[CatalogSystem] = (),
        page_size: int = 100,
    ):
        self.directory = directory
        self.config = config
        self.page_size = page_size
        self.started_at = datetime.now(timezone.utc)

        self.contacts: Dict[str, ContactInfo] = {}
        self.vendors: Dict[str, str] = {}
        self.frameworks: Dict[str, str] = {}
        self._framework_misses: Set[str] = set()

        self.identities: List[Identity] = list(identities)
        self.resolver = IdentityResolver(self.identities)
        self.catalog: Dict[str, UUID] = {system.name.lower(): system.id for system in catalog}

    async def build_caches(self) -> None:
        """Populate the contact and vendor caches. Must finish before any record is processed."""
        self.contacts = await self._load_collection(
            self.config.contacts_collection_id, "contacts", contact_from_record
        )
        self.vendors = await self._load_collection(
            self.config.vendors_collection_id, "vendors", lambda record: get_title(record.properties)
        )
        logger.info(
            "Reference caches built",
            contacts=len(self.contacts),
            vendors=len(self.vendors),
            identities=len(self.identities),
            catalog_systems=len(self.catalog),
        )

    async def _load_collection(self, collection_id: Optional[str], cache_name: str, extract) -> Dict[str, Any]:
        if not collection_id:
            logger.warning(f"No {cache_name} collection configured, {cache_name} cache left empty")
            return {}

        try:
            records = await self.directory.query_collection(collection_id, page_size=self.page_size)
            cache = {}
            for record in records:
                value = extract(record)
                if value:
                    cache[record.id] = value
        except Exception as e:
            logger.warning(
                "Failed to load reference cache, continuing without it",
                cache_name=cache_name,
                collection_id=collection_id,
                error=str(e) or type(e).__name__,
            )
            return {}

        return cache

    async def warm_frameworks(self, prop: Optional[Dict[str, Any]]) -> None:
        """
        Resolve the names of compliance records referenced by a relation property.

        Each id is fetched at most once per run, including ids whose lookup failed or
        returned no name. Failed lookups are logged and skipped.
        """
        if property_type_of(prop) != PropertyType.RELATION:
            return

        for record_id in decode_property(prop):
            if record_id in self.frameworks or record_id in self._framework_misses:
                continue
            try:
                record = await self.directory.get_record(record_id)
            except DirectoryAPIError as e:
                self._framework_misses.add(record_id)
                logger.warning(
                    "Failed to fetch compliance framework",
                    framework_id=record_id,
                    status_code=e.status_code,
                    error=e.message,
                )
                continue

            name = framework_name_from_record(record)
            if name:
                self.frameworks[record_id] = name
            else:
                self._framework_misses.add(record_id)

    def framework_names(self, prop: Optional[Dict[str, Any]]) -> List[str]:
        """Framework names of a multi_select or (already warmed) relation property."""
        property_type = property_type_of(prop)
        if property_type == PropertyType.MULTI_SELECT:
            return decode_property(prop)
        if property_type == PropertyType.RELATION:
            return [self.frameworks[record_id] for record_id in decode_property(prop) if record_id in self.frameworks]
        return []

    def contact_names(self, record_ids: Iterable[str]) -> List[str]:
        """Names of cached contacts, in relation order. Unknown ids are skipped."""
        names = []
        for record_id in record_ids:
            contact = self.contacts.get(record_id)
            if contact and contact.name:
                names.append(contact.name)
        return names

    def vendor_names(self, record_ids: Iterable[str]) -> List[str]:
        return [self.vendors[record_id] for record_id in record_ids if record_id in self.vendors]
