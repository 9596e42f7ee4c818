"""Fixtures for the directory-of-record: property builders, records and a fake client."""

from collections import Counter
from typing import Any
from typing import Dict
from typing import Iterable
from typing import List
from typing import Optional
from typing import Tuple

import pytest

from opsdash_api.directory.client import ExternalRecord
from opsdash_api.errors import DirectoryAPIError

CLIENT_COLLECTION_ID = "clients-db"
CONTACTS_COLLECTION_ID = "contacts-db"
VENDORS_COLLECTION_ID = "vendors-db"


# ════════════════════════════════════════════════════════════════════════════
# Property builders (shape of the directory API payload)
# ════════════════════════════════════════════════════════════════════════════


def title_prop(text: Optional[str]) -> Dict[str, Any]:
    runs = [{"plain_text": text}] if text else []
    return {"type": "title", "title": runs}


def rich_text_prop(text: Optional[str]) -> Dict[str, Any]:
    runs = [{"plain_text": text}] if text else []
    return {"type": "rich_text", "rich_text": runs}


def select_prop(name: Optional[str]) -> Dict[str, Any]:
    return {"type": "select", "select": {"name": name} if name else None}


def status_prop(name: Optional[str]) -> Dict[str, Any]:
    return {"type": "status", "status": {"name": name} if name else None}


def multi_select_prop(names: Iterable[str]) -> Dict[str, Any]:
    return {"type": "multi_select", "multi_select": [{"name": name} for name in names]}


def relation_prop(ids: Iterable[str]) -> Dict[str, Any]:
    return {"type": "relation", "relation": [{"id": record_id} for record_id in ids]}


def people_prop(people: Iterable[Tuple[str, Optional[str], Optional[str]]]) -> Dict[str, Any]:
    """people: (id, name, email) tuples."""
    return {
        "type": "people",
        "people": [
            {"id": person_id, "name": name, "person": {"email": email} if email else {}}
            for person_id, name, email in people
        ],
    }


def date_prop(start: Optional[str]) -> Dict[str, Any]:
    return {"type": "date", "date": {"start": start} if start else None}


def url_prop(url: Optional[str]) -> Dict[str, Any]:
    return {"type": "url", "url": url}


def email_prop(email: Optional[str]) -> Dict[str, Any]:
    return {"type": "email", "email": email}


def number_prop(number: Optional[float]) -> Dict[str, Any]:
    return {"type": "number", "number": number}


def checkbox_prop(checked: bool) -> Dict[str, Any]:
    return {"type": "checkbox", "checkbox": checked}


def make_record(record_id: str, properties: Dict[str, Any]) -> ExternalRecord:
    return ExternalRecord(
        id=record_id,
        properties=properties,
        created_time="2025-01-01T00:00:00.000Z",
        last_edited_time="2025-06-01T00:00:00.000Z",
    )


def client_record(
    record_id: str,
    name: Optional[str],
    se: Iterable[str] = (),
    primary: Iterable[str] = (),
    secondaries: Iterable[str] = (),
    grce: Iterable[str] = (),
    it_manager: Iterable[Tuple[str, Optional[str], Optional[str]]] = (),
    idp: Iterable[str] = (),
    mdm: Iterable[str] = (),
    av_edr: Iterable[str] = (),
    status: Optional[str] = "Active",
    priority: Optional[str] = "P2",
    it_syncs: Optional[str] = "Weekly",
    start_date: Optional[str] = "2024-03-01",
    website: Optional[str] = None,
    compliance: Optional[Dict[str, Any]] = None,
    **extra: Dict[str, Any],
) -> ExternalRecord:
    """A client record with the columns the sync reads."""
    properties = {
        "Client": title_prop(name),
        "Status": select_prop(status),
        "Priority": select_prop(priority),
        "IT Syncs": select_prop(it_syncs),
        "SE": relation_prop(se),
        "Primary Consultant": relation_prop(primary),
        "Secondaries": relation_prop(secondaries),
        "GRCE": relation_prop(grce),
        "IT Manager": people_prop(it_manager),
        "IDP": relation_prop(idp),
        "MDM": relation_prop(mdm),
        "AV/EDR": relation_prop(av_edr),
        "Start Date": date_prop(start_date),
        "Website": url_prop(website),
    }
    if compliance is not None:
        properties["Compliance"] = compliance
    properties.update(extra)
    return make_record(record_id, properties)


# ════════════════════════════════════════════════════════════════════════════
# Fake directory client
# ════════════════════════════════════════════════════════════════════════════


class FakeDirectoryClient:
    """
    In-memory stand-in for DirectoryClient that counts every outbound call.

    Args:
        collections: collection id -> records
        records: record id -> record for point lookups (collection records are added too)
        failing_collections: collection ids whose query raises DirectoryAPIError
        failing_records: record ids whose point lookup raises DirectoryAPIError
    """

    def __init__(
        self,
        collections: Optional[Dict[str, List[ExternalRecord]]] = None,
        records: Optional[Dict[str, ExternalRecord]] = None,
        failing_collections: Iterable[str] = (),
        failing_records: Iterable[str] = (),
    ):
        self.collections = collections or {}
        self.records = dict(records or {})
        for collection in self.collections.values():
            for record in collection:
                self.records.setdefault(record.id, record)
        self.failing_collections = set(failing_collections)
        self.failing_records = set(failing_records)
        self.query_calls: Counter = Counter()
        self.get_record_calls: Counter = Counter()

    async def __aenter__(self) -> "FakeDirectoryClient":
        return self

    async def __aexit__(self, exc_type, exc_value, traceback) -> None:
        return None

    async def query_collection(self, collection_id: str, page_size: int = 100) -> List[ExternalRecord]:
        self.query_calls[collection_id] += 1
        if collection_id in self.failing_collections:
            raise DirectoryAPIError(500, f"collection {collection_id} unavailable")
        if collection_id not in self.collections:
            raise DirectoryAPIError(404, f"Could not find database with ID: {collection_id}")
        return list(self.collections[collection_id])

    async def get_record(self, record_id: str) -> ExternalRecord:
        self.get_record_calls[record_id] += 1
        if record_id in self.failing_records or record_id not in self.records:
            raise DirectoryAPIError(404, f"Could not find page with ID: {record_id}")
        return self.records[record_id]

    def set_clients(self, records: List[ExternalRecord]) -> None:
        self.collections[CLIENT_COLLECTION_ID] = records
        for record in records:
            self.records[record.id] = record


# ════════════════════════════════════════════════════════════════════════════
# Reference data
# ════════════════════════════════════════════════════════════════════════════


@pytest.fixture
def contact_records() -> List[ExternalRecord]:
    """Contacts collection: one record per team member."""
    return [
        make_record("contact-alice", {"Name": title_prop("Alice Anders"), "Email": email_prop("alice@example.com")}),
        make_record(
            "contact-bob",
            {"Name": title_prop("Bob Baker (Lead)"), "Work Email": rich_text_prop("bob@example.com")},
        ),
        make_record("contact-carol", {"Name": title_prop("Carol C.")}),
        make_record("contact-dan", {"Name": title_prop("Dan Diaz"), "Email": email_prop("dan@example.com")}),
        make_record("contact-zed", {"Name": title_prop("Zed Nobody")}),
    ]


@pytest.fixture
def vendor_records() -> List[ExternalRecord]:
    """Vendors collection."""
    return [
        make_record("vendor-google", {"Name": title_prop("Google")}),
        make_record("vendor-kandji", {"Name": title_prop("Kandji")}),
        make_record("vendor-crowdstrike", {"Name": title_prop("CrowdStrike")}),
        make_record("vendor-acme", {"Name": title_prop("Acme Obscure Tool")}),
    ]


@pytest.fixture
def framework_records() -> Dict[str, ExternalRecord]:
    """Compliance framework records only reachable by point lookup."""
    return {
        "framework-soc2": make_record("framework-soc2", {"Name": title_prop("SOC 2")}),
        "framework-hipaa": make_record(
            "framework-hipaa",
            {"Description": rich_text_prop("Health data"), "Label": title_prop("HIPAA")},
        ),
    }


@pytest.fixture
def fake_directory(contact_records, vendor_records, framework_records) -> FakeDirectoryClient:
    """Fake directory with contacts, vendors and frameworks; no client records yet."""
    return FakeDirectoryClient(
        collections={
            CLIENT_COLLECTION_ID: [],
            CONTACTS_COLLECTION_ID: contact_records,
            VENDORS_COLLECTION_ID: vendor_records,
        },
        records=framework_records,
    )
