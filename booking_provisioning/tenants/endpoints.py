# booking_provisioning/tenants/endpoints.py
import logging
from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from typing import List, Annotated

from .models import ProvisioningStatus, Tenant
from .service import TenantService
from .storage_interfaces import AbstractTenantStore, TenantStoreError
from ..dependencies import get_admin_api_key, get_tenant_store

logger = logging.getLogger(__name__)

# Admin router for tenant inspection - requires admin API key authentication
tenants_admin_router = APIRouter(
    prefix="/admin/tenants",
    tags=["Admin - Tenants"],
    dependencies=[Depends(get_admin_api_key)]
)


async def get_tenant_service(
    tenant_store: Annotated[AbstractTenantStore, Depends(get_tenant_store)]
) -> TenantService:
    return TenantService(tenant_store)


@tenants_admin_router.get("/", response_model=List[Tenant])
@tenants_admin_router.get("", response_model=List[Tenant], include_in_schema=False)
async def list_tenants_endpoint(
    service: Annotated[TenantService, Depends(get_tenant_service)],
    skip: Annotated[int, Query(ge=0, description="Number of tenants to skip.")] = 0,
    limit: Annotated[int, Query(ge=1, le=100, description="Maximum number of tenants to return.")] = 100
):
    """List tenants, newest first. Handles both trailing slash variants."""
    try:
        tenants_in_db = await service.list_tenants(skip=skip, limit=limit)
    except TenantStoreError as e:
        logger.error(f"API: Could not list tenants: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Could not list tenants.")
    return [Tenant.model_validate(t) for t in tenants_in_db]


@tenants_admin_router.get("/{tenant_id}", response_model=Tenant)
async def get_tenant_endpoint(
    tenant_id: Annotated[str, Path(description="The ID of the tenant to retrieve")],
    service: Annotated[TenantService, Depends(get_tenant_service)]
):
    tenant_in_db = await service.get_tenant(tenant_id)
    if not tenant_in_db:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Tenant not found")
    return Tenant.model_validate(tenant_in_db)


@tenants_admin_router.get("/{tenant_id}/provisioning", response_model=ProvisioningStatus)
async def get_provisioning_status_endpoint(
    tenant_id: Annotated[str, Path(description="The ID of the tenant to inspect")],
    service: Annotated[TenantService, Depends(get_tenant_service)]
):
    """Stored provisioning outcome: status, assignments, failure reason and warnings."""
    provisioning_status = await service.get_provisioning_status(tenant_id)
    if not provisioning_status:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Tenant not found")
    return provisioning_status
