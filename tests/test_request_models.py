# tests/test_request_models.py
import pytest
from pydantic import ValidationError

from booking_provisioning.errors import WarningKind
from booking_provisioning.saga.models import ProvisionTenantRequest, TelephonyStrategy
from booking_provisioning.saga.steps import SagaStep, StepFailurePolicy
from booking_provisioning.tenants.models import ProvisioningFlow, SubscriptionTier
from booking_provisioning.utils.security import FernetEncryptor, generate_token_and_hash, hash_token

from conftest import make_request


def test_request_normalizes_fields():
    request = make_request(businessName="  Glow Nails  ", ownerEmail=" Owner@GlowNails.COM ")

    assert request.business_name == "Glow Nails"
    assert request.owner_email == "owner@glownails.com"
    assert request.tier == SubscriptionTier.STARTER
    assert request.telephony_strategy == TelephonyStrategy.NEW_NUMBER
    assert request.flow == ProvisioningFlow.RAPID_SETUP


@pytest.mark.parametrize("overrides", [
    {"businessName": "   "},
    {"ownerEmail": "not-an-email"},
    {"ownerEmail": "owner@glow..nails.com"},
    {"ownerEmail": "<script>@x.y"},
    {"ownerPhone": "   "},
    {"businessCategory": "  "},
    {"tier": "platinum"},
    {"telephonyStrategy": "carrier_pigeon"},
    {"telephonyStrategy": "use_existing"},
    {"paymentMethodRef": None},
    {"flow": "instant"},
])
def test_invalid_requests_are_rejected(overrides):
    with pytest.raises(ValidationError):
        make_request(**overrides)


def test_payment_ref_optional_when_bypass_requested():
    assert make_request(paymentMethodRef=None, testMode=True).test_mode is True
    assert make_request(paymentMethodRef="skip_payment_validation").payment_method_ref == "skip_payment_validation"


def test_snake_case_names_are_accepted():
    request = ProvisionTenantRequest(
        business_name="Glow Nails",
        owner_email="owner@glownails.com",
        owner_phone="+15551234567",
        business_category="Other",
        tier="business",
        payment_method_ref="pm_card_visa",
    )
    assert request.tier.gets_dedicated_assistant


def test_continue_policy_requires_warning_kind():
    async def action(run):
        return None

    with pytest.raises(ValueError):
        SagaStep("catalog", action, StepFailurePolicy.WARN_AND_CONTINUE)
    assert SagaStep("catalog", action, StepFailurePolicy.WARN_AND_CONTINUE, WarningKind.SEEDING).warning_kind


def test_token_and_hash():
    token, token_hash = generate_token_and_hash(32)
    assert len(token) >= 43
    assert token_hash == hash_token(token)
    assert len(token_hash) == 64


def test_invalid_encryption_key_disables_encryption():
    encryptor = FernetEncryptor("not-a-valid-key")
    assert encryptor.key_valid is False
    assert encryptor.encrypt("secret") is None
