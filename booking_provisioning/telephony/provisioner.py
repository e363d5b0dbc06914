# booking_provisioning/telephony/provisioner.py
import logging
from typing import Optional

from ..errors import Result, TelephonyError
from ..external_services.base_service import PlatformApiError
from ..tenants.models import ForwardingRules, PhoneAssignmentKind, PhoneNumberAssignment
from ..tenants.storage_interfaces import AbstractTenantStore, TenantStoreError
from .interfaces import AbstractVoicePlatform

logger = logging.getLogger(__name__)


class TelephonyProvisioner:
    """Gives a tenant exactly one phone number assignment."""

    def __init__(self, platform: AbstractVoicePlatform, tenant_store: AbstractTenantStore):
        self.platform = platform
        self.tenant_store = tenant_store

    async def provision_new(self, tenant_id: str, display_name: str) -> Result[PhoneNumberAssignment]:
        """
        Allocate a new platform number for the tenant.

        A leased number already recorded for this tenant id is reused instead of
        allocating a second one. Any platform failure, including a timeout, is
        fatal and its raw body is kept in the error details.
        """
        try:
            existing = await self.tenant_store.get_phone_assignment(tenant_id)
        except TenantStoreError as e:
            return TelephonyError(f"Could not read phone assignment: {e}")
        if existing and existing.kind == PhoneAssignmentKind.LEASED:
            logger.info(f"Reusing phone number {existing.number} already leased to tenant '{tenant_id}'.")
            return existing

        logger.info(f"Provisioning new phone number for tenant '{tenant_id}'.")
        try:
            phone = await self.platform.create_phone_number(f"{display_name} Booking Line")
        except PlatformApiError as e:
            logger.error(f"Phone number provisioning failed for tenant '{tenant_id}': {e.describe()}")
            return TelephonyError(e.describe())

        assignment = PhoneNumberAssignment(
            tenant_id=tenant_id,
            kind=PhoneAssignmentKind.LEASED,
            number=phone.number,
            platform_phone_id=phone.id,
        )
        try:
            return await self.tenant_store.save_phone_assignment(assignment)
        except TenantStoreError as e:
            logger.error(
                f"Phone number {phone.number} ({phone.id}) allocated for tenant '{tenant_id}' "
                f"but not recorded: {e}"
            )
            return TelephonyError(
                f"Number {phone.number} (platform id {phone.id}) was allocated but could not be recorded: {e}"
            )

    async def attach_existing(
        self,
        tenant_id: str,
        number: str,
        forwarding_rules: Optional[ForwardingRules] = None,
    ) -> Result[PhoneNumberAssignment]:
        """
        Record the tenant's own number and forwarding rules.

        Local only: reachability is not checked and call forwarding is set up
        outside the saga.
        """
        assignment = PhoneNumberAssignment(
            tenant_id=tenant_id,
            kind=PhoneAssignmentKind.FORWARDED,
            number=number,
            forwarding_rules=forwarding_rules or ForwardingRules(),
        )
        try:
            stored = await self.tenant_store.save_phone_assignment(assignment)
        except TenantStoreError as e:
            return TelephonyError(f"Could not record existing number {number}: {e}")
        logger.info(f"Recorded existing number {number} for tenant '{tenant_id}' (forwarding setup is manual).")
        return stored
