# booking_provisioning/tenants/staff.py
import logging
from typing import Tuple

from ..errors import Result, StoreError
from .models import OwnerContact, StaffMember
from .storage_interfaces import AbstractTenantStore, TenantStoreError

logger = logging.getLogger(__name__)

DEFAULT_OWNER_FIRST_NAME = "Owner"


def split_owner_name(contact: OwnerContact) -> Tuple[str, str]:
    """
    Derive (first, last) for the owner record.

    Explicit first/last win. Otherwise the full name is split on its first
    whitespace run; a single-word name yields an empty last name.
    """
    first = (contact.first_name or "").strip()
    last = (contact.last_name or "").strip()
    if first:
        return first, last

    full = (contact.full_name or "").strip()
    if not full:
        return DEFAULT_OWNER_FIRST_NAME, last
    parts = full.split(None, 1)
    return parts[0], (parts[1].strip() if len(parts) > 1 else last)


class StaffSeeder:
    def __init__(self, tenant_store: AbstractTenantStore):
        self.tenant_store = tenant_store

    async def seed_owner(self, tenant_id: str, contact: OwnerContact) -> Result[StaffMember]:
        """Create the implicit owner staff record for a `pending` tenant."""
        first_name, last_name = split_owner_name(contact)
        owner = StaffMember(
            tenant_id=tenant_id,
            first_name=first_name,
            last_name=last_name,
            email=contact.email,
            phone=contact.phone,
            role="owner",
            is_active=True,
        )
        try:
            stored = await self.tenant_store.add_staff_member(owner)
        except TenantStoreError as e:
            logger.warning(f"Owner staff seeding failed for tenant '{tenant_id}': {e}")
            return StoreError(str(e), step="staff")
        logger.info(f"Seeded owner staff record for tenant '{tenant_id}'.")
        return stored
