"""Test suite for vendor-link reconciliation."""

from uuid import uuid4

import pytest

from opsdash_api.reconciliation.vendors import VENDOR_ALIASES
from opsdash_api.reconciliation.vendors import extract_vendor_names
from opsdash_api.reconciliation.vendors import link_vendors
from opsdash_api.reconciliation.vendors import resolve_system_id
from tests.fixtures.directory_fixtures import client_record
from tests.fixtures.directory_fixtures import relation_prop
from tests.fixtures.repository_fixtures import CROWDSTRIKE_ID
from tests.fixtures.repository_fixtures import GOOGLE_WORKSPACE_ID
from tests.fixtures.repository_fixtures import KANDJI_ID
from tests.fixtures.repository_fixtures import FakeSystemRepository


class TestResolveSystemId:
    """Tests for resolve_system_id."""

    def test_direct_match_is_case_insensitive(self):
        """Test catalog names match regardless of case."""
        catalog = {"kandji": KANDJI_ID}
        assert resolve_system_id("KANDJI", catalog) == KANDJI_ID

    def test_alias_match(self):
        """Test directory vendor names map through the alias table."""
        catalog = {"google workspace": GOOGLE_WORKSPACE_ID}
        assert resolve_system_id("Google", catalog) == GOOGLE_WORKSPACE_ID

    def test_alias_target_missing_from_catalog(self):
        """Test an alias whose target is not in the catalog does not match."""
        assert resolve_system_id("Okta", {"google workspace": GOOGLE_WORKSPACE_ID}) is None

    def test_unknown_vendor(self):
        """Test vendors absent from catalog and aliases do not match."""
        assert resolve_system_id("Acme Obscure Tool", {"google workspace": GOOGLE_WORKSPACE_ID}) is None

    def test_alias_keys_are_lowercase(self):
        """Test the alias table is keyed by lowercase names."""
        assert all(key == key.lower() for key in VENDOR_ALIASES)


class TestExtractVendorNames:
    """Tests for extract_vendor_names."""

    @pytest.mark.asyncio
    async def test_names_from_every_vendor_column_deduplicated(self, context):
        """Test vendor columns are read in order and duplicates dropped."""
        record = client_record(
            "rec-1",
            "Acme Corp",
            idp=["vendor-google"],
            mdm=["vendor-kandji"],
            av_edr=["vendor-crowdstrike", "vendor-acme"],
            Email=relation_prop(["vendor-google"]),
        )

        assert extract_vendor_names(record, context) == ["Google", "Kandji", "CrowdStrike", "Acme Obscure Tool"]

    @pytest.mark.asyncio
    async def test_no_vendor_columns(self, context):
        """Test records without vendor relations yield no names."""
        assert extract_vendor_names(client_record("rec-1", "Acme Corp"), context) == []


class TestLinkVendors:
    """Tests for link_vendors."""

    @pytest.mark.asyncio
    async def test_links_are_additive_and_counted_once(self, context, catalog):
        """Test matched vendors are linked and re-linking creates nothing new."""
        systems = FakeSystemRepository(catalog)
        client_id = uuid4()
        names = ["Google", "Kandji", "CrowdStrike", "Acme Obscure Tool"]

        assert await link_vendors(client_id, names, context, systems) == 3
        assert systems.links == {
            (client_id, GOOGLE_WORKSPACE_ID),
            (client_id, KANDJI_ID),
            (client_id, CROWDSTRIKE_ID),
        }

        assert await link_vendors(client_id, ["Google"], context, systems) == 0
        assert len(systems.links) == 3
