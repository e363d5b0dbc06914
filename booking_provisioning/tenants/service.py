# booking_provisioning/tenants/service.py
import logging
from typing import Optional, List
from .models import ProvisioningStatus, TenantInDB
from .storage_interfaces import AbstractTenantStore

logger = logging.getLogger(__name__)


class TenantService:
    """
    Read-side service for tenant administration.

    Everything here is derived from stored state alone, so a tenant left
    `pending` or `failed` by an interrupted saga can still be diagnosed.
    """

    def __init__(self, tenant_store: AbstractTenantStore):
        self.tenant_store = tenant_store

    async def get_tenant(self, tenant_id: str) -> Optional[TenantInDB]:
        logger.info(f"Service: Getting tenant with id: {tenant_id}")
        return await self.tenant_store.get_tenant(tenant_id)

    async def list_tenants(self, skip: int = 0, limit: int = 100) -> List[TenantInDB]:
        logger.info(f"Service: Listing tenants with skip: {skip}, limit: {limit}")
        return await self.tenant_store.list_tenants(skip=skip, limit=limit)

    async def get_provisioning_status(self, tenant_id: str) -> Optional[ProvisioningStatus]:
        """Assemble the provisioning outcome of one tenant from its stored rows."""
        logger.info(f"Service: Getting provisioning status for tenant: {tenant_id}")
        tenant = await self.tenant_store.get_tenant(tenant_id)
        if not tenant:
            return None
        phone_assignment = await self.tenant_store.get_phone_assignment(tenant_id)
        catalog = await self.tenant_store.list_catalog_entries(tenant_id)
        staff = await self.tenant_store.list_staff_members(tenant_id)
        return ProvisioningStatus(
            tenant_id=tenant.id,
            slug=tenant.slug,
            status=tenant.status,
            tier=tenant.tier,
            flow=tenant.flow,
            trial_ends_at=tenant.trial_ends_at,
            phone_assignment=phone_assignment,
            assistant_id=tenant.assistant_id,
            assistant_kind=tenant.assistant_kind,
            catalog_entry_count=len(catalog),
            staff_count=len(staff),
            failure_reason=tenant.failure_reason,
            warnings=tenant.warnings,
            updated_at=tenant.updated_at,
        )
