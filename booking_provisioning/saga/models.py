# booking_provisioning/saga/models.py
from datetime import datetime
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from ..errors import ProvisioningWarning
from ..payments.authorizer import bypass_requested
from ..tenants.models import AssistantKind, ProvisioningFlow, SubscriptionTier


class TelephonyStrategy(str, Enum):
    NEW_NUMBER = "new_number"
    USE_EXISTING = "use_existing"


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ForwardingRulesRequest(CamelModel):
    after_hours: bool = False
    complex_calls: bool = False


class ProvisionTenantRequest(CamelModel):
    """
    Inbound provisioning request.

    `flow` selects between the rapid-setup path and the legacy multi-step
    onboarding path; it is validated here rather than inferred from body shape.
    """
    business_name: str = Field(min_length=1)
    owner_email: EmailStr
    owner_phone: str = Field(min_length=1)
    owner_name: Optional[str] = None
    owner_first_name: Optional[str] = None
    owner_last_name: Optional[str] = None
    business_category: str = Field(min_length=1)
    tier: SubscriptionTier
    payment_method_ref: Optional[str] = None
    test_mode: bool = False
    telephony_strategy: TelephonyStrategy = TelephonyStrategy.NEW_NUMBER
    existing_number: Optional[str] = None
    forwarding_rules: Optional[ForwardingRulesRequest] = None
    flow: ProvisioningFlow = ProvisioningFlow.RAPID_SETUP

    # Runs before the length and email checks so they see the stripped value
    @field_validator("business_name", "owner_email", "owner_phone", "business_category", mode="before")
    @classmethod
    def strip_text(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("owner_email")
    @classmethod
    def lowercase_email(cls, value: str) -> str:
        return value.lower()

    @model_validator(mode="after")
    def check_conditional_fields(self) -> "ProvisionTenantRequest":
        if self.telephony_strategy == TelephonyStrategy.USE_EXISTING and not (self.existing_number or "").strip():
            raise ValueError("existingNumber is required when telephonyStrategy is 'use_existing'")
        if not self.payment_method_ref and not bypass_requested(self.payment_method_ref, self.test_mode):
            raise ValueError("paymentMethodRef is required unless testMode is set")
        return self


class ProvisioningOutcome(CamelModel):
    tenant_id: str
    slug: str
    business_name: str
    phone_number: Optional[str] = None
    existing_owner_phone: Optional[str] = None
    assistant_id: str
    assistant_kind: AssistantKind
    tier: SubscriptionTier
    trial_ends_at: datetime
    provisioned_at: datetime
    warnings: List[ProvisioningWarning] = Field(default_factory=list)
