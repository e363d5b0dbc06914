# booking_provisioning/tenants/storage_interfaces.py
from abc import ABC, abstractmethod
from typing import Optional, List
from .models import (
    TenantInDB, TenantCreate, TenantUpdate, ServiceCatalogEntry, StaffMember,
    PhoneNumberAssignment
)


class TenantStoreError(Exception):
    """Any storage failure. Components convert it into a StoreError result."""


class TenantStoreIntegrityError(TenantStoreError):
    """A unique constraint was violated. The message names the offending column."""


class AbstractTenantStore(ABC):
    """
    Abstract base class defining the interface for tenant storage operations.

    The store is the single source of truth for provisioning state; every
    write after registration is keyed by tenant id.
    """

    @abstractmethod
    async def initialize(self) -> None:
        """Initialize the storage backend and prepare it for operations."""
        pass

    @abstractmethod
    async def teardown(self) -> None:
        """Clean up resources and properly close the storage backend."""
        pass

    @abstractmethod
    async def ping(self) -> None:
        """Raise TenantStoreError if the backend is unreachable."""
        pass

    @abstractmethod
    async def create_tenant(self, tenant_create: TenantCreate) -> TenantInDB:
        """
        Insert a new tenant in `pending` status.

        Args:
            tenant_create: Registration data with pre-allocated id and slug

        Returns:
            The stored tenant with timestamps

        Raises:
            TenantStoreIntegrityError: If the email or slug is already taken
        """
        pass

    @abstractmethod
    async def get_tenant(self, tenant_id: str) -> Optional[TenantInDB]:
        """
        Retrieve a tenant by id.

        Returns:
            The tenant if found, None otherwise
        """
        pass

    @abstractmethod
    async def list_tenants(self, skip: int = 0, limit: int = 100) -> List[TenantInDB]:
        """
        Retrieve a paginated list of tenants, newest first.

        Args:
            skip: Number of records to skip for pagination
            limit: Maximum number of records to return
        """
        pass

    @abstractmethod
    async def update_tenant(self, tenant_id: str, tenant_update: TenantUpdate) -> Optional[TenantInDB]:
        """
        Apply a partial update.

        Returns:
            The updated tenant, or None if the tenant doesn't exist
        """
        pass

    @abstractmethod
    async def add_catalog_entries(
        self, tenant_id: str, entries: List[ServiceCatalogEntry]
    ) -> List[ServiceCatalogEntry]:
        """
        Insert catalog entries while the tenant is still `pending`.

        Entries whose name already exists for the tenant are skipped, so a
        replayed attempt never duplicates the catalog.

        Returns:
            The tenant's full catalog after the insert
        """
        pass

    @abstractmethod
    async def list_catalog_entries(self, tenant_id: str) -> List[ServiceCatalogEntry]:
        pass

    @abstractmethod
    async def add_staff_member(self, staff_member: StaffMember) -> StaffMember:
        """Insert a staff record while the tenant is `pending`; an existing (tenant, email) row is kept."""
        pass

    @abstractmethod
    async def list_staff_members(self, tenant_id: str) -> List[StaffMember]:
        pass

    @abstractmethod
    async def save_phone_assignment(self, assignment: PhoneNumberAssignment) -> PhoneNumberAssignment:
        """Store the tenant's single telephony assignment, replacing any previous one."""
        pass

    @abstractmethod
    async def get_phone_assignment(self, tenant_id: str) -> Optional[PhoneNumberAssignment]:
        pass
