# booking_provisioning/tenants/models.py
from decimal import Decimal
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
from datetime import datetime

from ..errors import ProvisioningWarning


class TenantStatus(str, Enum):
    PENDING = "pending"
    TRIALING = "trialing"
    FAILED = "failed"


class SubscriptionTier(str, Enum):
    STARTER = "starter"
    PROFESSIONAL = "professional"
    BUSINESS = "business"

    @property
    def gets_dedicated_assistant(self) -> bool:
        return self is SubscriptionTier.BUSINESS

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


class ProvisioningFlow(str, Enum):
    RAPID_SETUP = "rapid_setup"
    LEGACY_ONBOARDING = "legacy_onboarding"


class PhoneAssignmentKind(str, Enum):
    LEASED = "leased"
    FORWARDED = "forwarded"


class AssistantKind(str, Enum):
    SHARED = "shared"
    DEDICATED = "dedicated"


class TenantBase(BaseModel):
    """Base model containing the tenant fields supplied at registration."""
    business_name: str
    email: str
    phone: str
    business_category: str
    tier: SubscriptionTier
    flow: ProvisioningFlow = ProvisioningFlow.RAPID_SETUP


class TenantCreate(TenantBase):
    """Model for the registration insert, with identifiers allocated by the registrar."""
    id: str
    slug: str = Field(description="URL slug derived from the business name plus a base-36 suffix")
    trial_ends_at: datetime
    cancellation_token_hash: str
    routing_secret_encrypted: Optional[str] = None
    payment_customer_ref: Optional[str] = None


class TenantUpdate(BaseModel):
    """Partial update - only explicitly set fields are written."""
    status: Optional[TenantStatus] = None
    phone_number: Optional[str] = None
    assistant_id: Optional[str] = None
    assistant_kind: Optional[AssistantKind] = None
    failure_reason: Optional[str] = None
    warnings: Optional[List[ProvisioningWarning]] = None


class TenantInDB(TenantBase):
    """Model for tenant data as stored in database."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    slug: str
    status: TenantStatus
    trial_ends_at: datetime
    cancellation_token_hash: str
    routing_secret_encrypted: Optional[str] = None
    payment_customer_ref: Optional[str] = None
    phone_number: Optional[str] = None
    assistant_id: Optional[str] = None
    assistant_kind: Optional[AssistantKind] = None
    failure_reason: Optional[str] = None
    warnings: List[ProvisioningWarning] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class Tenant(BaseModel):
    """Model for tenant data in API responses. Secrets are never exposed."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    slug: str
    business_name: str
    email: str
    phone: str
    business_category: str
    tier: SubscriptionTier
    flow: ProvisioningFlow
    status: TenantStatus
    trial_ends_at: datetime
    phone_number: Optional[str] = None
    assistant_id: Optional[str] = None
    assistant_kind: Optional[AssistantKind] = None
    created_at: datetime
    updated_at: datetime


class ServiceCatalogEntry(BaseModel):
    name: str
    duration_minutes: int
    price: Decimal
    is_active: bool = True


class OwnerContact(BaseModel):
    """Contact details used to derive the owner staff record."""
    email: str
    phone: str
    full_name: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class StaffMember(BaseModel):
    tenant_id: str
    first_name: str
    last_name: str = ""
    email: str
    phone: str
    role: str = "owner"
    is_active: bool = True


class ForwardingRules(BaseModel):
    after_hours: bool = False
    complex_calls: bool = False


class PhoneNumberAssignment(BaseModel):
    tenant_id: str
    kind: PhoneAssignmentKind
    number: Optional[str] = None
    platform_phone_id: Optional[str] = Field(
        default=None,
        description="Platform resource id; only leased numbers have one"
    )
    forwarding_rules: Optional[ForwardingRules] = None
    created_at: Optional[datetime] = None


class AssistantAssignment(BaseModel):
    kind: AssistantKind
    assistant_id: str
    system_prompt: Optional[str] = None


class ProvisioningStatus(BaseModel):
    """Stored provisioning state of one tenant, for support follow-up."""
    tenant_id: str
    slug: str
    status: TenantStatus
    tier: SubscriptionTier
    flow: ProvisioningFlow
    trial_ends_at: datetime
    phone_assignment: Optional[PhoneNumberAssignment] = None
    assistant_id: Optional[str] = None
    assistant_kind: Optional[AssistantKind] = None
    catalog_entry_count: int = 0
    staff_count: int = 0
    failure_reason: Optional[str] = None
    warnings: List[ProvisioningWarning] = Field(default_factory=list)
    updated_at: datetime

