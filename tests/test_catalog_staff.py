# tests/test_catalog_staff.py
from decimal import Decimal

import pytest

from booking_provisioning.errors import StoreError
from booking_provisioning.tenants.catalog import (
    CatalogSeeder, OTHER_CATEGORY, catalog_for_category, supported_categories
)
from booking_provisioning.tenants.models import (
    AssistantAssignment, AssistantKind, OwnerContact, SubscriptionTier, TenantUpdate, TenantStatus
)
from booking_provisioning.tenants.staff import StaffSeeder, split_owner_name
from booking_provisioning.tenants.storage_interfaces import TenantStoreError


@pytest.fixture
async def pending_tenant(registrar):
    registration = await registrar.register(
        tenant_id="tenant-1",
        business_name="Glow Nails",
        email="owner@glownails.com",
        phone="+15551234567",
        business_category="Nail Salon",
        tier=SubscriptionTier.STARTER,
    )
    return registration.tenant


def test_nail_salon_catalog_starts_with_classic_manicure():
    catalog = catalog_for_category("Nail Salon")

    assert len(catalog) == 6
    assert catalog[0].name == "Classic Manicure"
    assert catalog[0].duration_minutes == 30
    assert catalog[0].price == Decimal("35.00")


@pytest.mark.parametrize("category", ["Underwater Basket Weaving", OTHER_CATEGORY, ""])
def test_unknown_category_falls_back_to_generic_catalog(category):
    catalog = catalog_for_category(category)

    assert len(catalog) == 6
    assert catalog[0].name == "Consultation"
    assert {entry.name for entry in catalog} >= {"Basic Service", "Premium Service"}


def test_every_supported_category_has_a_catalog():
    for category in supported_categories():
        entries = catalog_for_category(category)
        assert entries
        assert all(entry.price >= 0 and entry.duration_minutes > 0 for entry in entries)


def test_split_owner_name_variants():
    def contact(**kwargs):
        return OwnerContact(email="o@example.com", phone="+1555", **kwargs)

    assert split_owner_name(contact(full_name="Jamie Rivera")) == ("Jamie", "Rivera")
    assert split_owner_name(contact(full_name="Mary Anne  de la Cruz")) == ("Mary", "Anne  de la Cruz")
    assert split_owner_name(contact(full_name="Cher")) == ("Cher", "")
    assert split_owner_name(contact()) == ("Owner", "")
    assert split_owner_name(contact(full_name="Ignored Name", first_name="Sam", last_name="Lee")) == ("Sam", "Lee")


async def test_seed_default_catalog_is_idempotent(store, pending_tenant):
    seeder = CatalogSeeder(store)

    first = await seeder.seed_default_catalog(pending_tenant.id, "Nail Salon")
    second = await seeder.seed_default_catalog(pending_tenant.id, "Nail Salon")

    assert len(first) == 6
    assert len(second) == 6
    assert len(await store.list_catalog_entries(pending_tenant.id)) == 6


async def test_seeding_is_ignored_once_tenant_left_pending(store, registrar, pending_tenant):
    await registrar.finalize(
        pending_tenant.id, "+15550001111", AssistantAssignment(kind=AssistantKind.SHARED, assistant_id="a")
    )

    catalog = await CatalogSeeder(store).seed_default_catalog(pending_tenant.id, "Nail Salon")

    assert catalog == []


async def test_seed_owner_creates_single_owner_record(store, pending_tenant):
    seeder = StaffSeeder(store)
    contact = OwnerContact(email="owner@glownails.com", phone="+15551234567", full_name="Jamie Rivera")

    member = await seeder.seed_owner(pending_tenant.id, contact)
    await seeder.seed_owner(pending_tenant.id, contact)

    assert member.first_name == "Jamie"
    assert member.role == "owner"
    staff = await store.list_staff_members(pending_tenant.id)
    assert len(staff) == 1
    assert staff[0].last_name == "Rivera"


async def test_seeder_store_failure_becomes_store_error(store, pending_tenant, monkeypatch):
    async def broken(*args, **kwargs):
        raise TenantStoreError("disk I/O error")

    monkeypatch.setattr(store, "add_catalog_entries", broken)
    monkeypatch.setattr(store, "add_staff_member", broken)

    catalog_result = await CatalogSeeder(store).seed_default_catalog(pending_tenant.id, "Nail Salon")
    staff_result = await StaffSeeder(store).seed_owner(
        pending_tenant.id, OwnerContact(email="o@example.com", phone="+1555")
    )

    assert isinstance(catalog_result, StoreError)
    assert catalog_result.step == "catalog"
    assert isinstance(staff_result, StoreError)
    assert staff_result.step == "staff"


async def test_update_tenant_round_trips_status(store, pending_tenant):
    updated = await store.update_tenant(pending_tenant.id, TenantUpdate(status=TenantStatus.FAILED))
    assert updated.status == TenantStatus.FAILED
