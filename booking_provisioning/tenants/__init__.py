# booking_provisioning/tenants/__init__.py
"""
Tenant records and the registration-side saga components.

Includes data models, the storage abstraction and its SQLite implementation,
the registrar, the catalog and staff seeders, and the admin read endpoints.
"""

from .models import (
    Tenant, TenantCreate, TenantUpdate, TenantInDB, TenantStatus, SubscriptionTier,
    ProvisioningFlow, ServiceCatalogEntry, StaffMember, OwnerContact,
    PhoneNumberAssignment, PhoneAssignmentKind, ForwardingRules,
    AssistantAssignment, AssistantKind, ProvisioningStatus
)
from .storage_interfaces import AbstractTenantStore, TenantStoreError, TenantStoreIntegrityError
from .sqlite_tenant_store import SQLiteTenantStore
from .registrar import TenantRegistrar, Registration, SlugGenerator
from .catalog import CatalogSeeder, catalog_for_category
from .staff import StaffSeeder
from .service import TenantService
from .endpoints import tenants_admin_router

__all__ = [
    # Data models
    "Tenant", "TenantCreate", "TenantUpdate", "TenantInDB", "TenantStatus",
    "SubscriptionTier", "ProvisioningFlow", "ServiceCatalogEntry", "StaffMember",
    "OwnerContact", "PhoneNumberAssignment", "PhoneAssignmentKind", "ForwardingRules",
    "AssistantAssignment", "AssistantKind", "ProvisioningStatus",
    # Storage
    "AbstractTenantStore", "TenantStoreError", "TenantStoreIntegrityError", "SQLiteTenantStore",
    # Saga components
    "TenantRegistrar", "Registration", "SlugGenerator",
    "CatalogSeeder", "catalog_for_category", "StaffSeeder",
    # Read side
    "TenantService",
    "tenants_admin_router",
]
