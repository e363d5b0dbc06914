# tests/test_saga_coordinator.py
from datetime import timedelta
from decimal import Decimal

import pytest

from booking_provisioning.errors import (
    AssistantError, DuplicateEmailError, InvalidRequestError, PaymentError, TelephonyError, WarningKind
)
from booking_provisioning.external_services.base_service import PlatformApiError
from booking_provisioning.saga.models import ProvisioningOutcome
from booking_provisioning.tenants.models import AssistantKind, PhoneAssignmentKind, TenantStatus
from booking_provisioning.tenants.service import TenantService
from booking_provisioning.tenants.storage_interfaces import TenantStoreError

from conftest import make_request


async def test_starter_tenant_gets_shared_assistant_and_catalog(coordinator, store, voice_platform, email_sender):
    outcome = await coordinator.provision_tenant(make_request())

    assert isinstance(outcome, ProvisioningOutcome)
    assert outcome.assistant_kind == AssistantKind.SHARED
    assert outcome.phone_number
    assert outcome.existing_owner_phone == "+15551234567"
    assert outcome.warnings == []
    assert outcome.trial_ends_at - outcome.provisioned_at <= timedelta(days=7)

    catalog = await store.list_catalog_entries(outcome.tenant_id)
    manicure = next(entry for entry in catalog if entry.name == "Classic Manicure")
    assert manicure.price == Decimal("35.00")
    assert manicure.duration_minutes == 30

    tenant = await store.get_tenant(outcome.tenant_id)
    assert tenant.status == TenantStatus.TRIALING
    assert voice_platform.links == [(voice_platform.phone_numbers[0].id, outcome.assistant_id)]
    assert len(email_sender.sent) == 1
    assert "Jamie" in email_sender.sent[0]["html"]


async def test_outcome_serializes_in_camel_case(coordinator):
    outcome = await coordinator.provision_tenant(make_request())

    body = outcome.model_dump(by_alias=True, mode="json")
    assert {"tenantId", "slug", "phoneNumber", "assistantId", "assistantKind", "trialEndsAt"} <= set(body)


async def test_same_email_twice_is_duplicate_with_no_side_effects(coordinator, voice_platform, email_sender):
    first = await coordinator.provision_tenant(make_request())
    phones_before = len(voice_platform.phone_numbers)

    second = await coordinator.provision_tenant(make_request())

    assert isinstance(first, ProvisioningOutcome)
    assert isinstance(second, DuplicateEmailError)
    assert len(voice_platform.phone_numbers) == phones_before
    assert len(email_sender.sent) == 1


async def test_same_name_different_email_gets_distinct_slug(coordinator):
    first = await coordinator.provision_tenant(make_request())
    second = await coordinator.provision_tenant(make_request(ownerEmail="second@glownails.com"))

    assert isinstance(second, ProvisioningOutcome)
    assert first.slug != second.slug
    assert first.tenant_id != second.tenant_id


async def test_business_tier_gets_distinct_dedicated_assistants(coordinator, voice_platform):
    first = await coordinator.provision_tenant(make_request(tier="business"))
    second = await coordinator.provision_tenant(
        make_request(tier="business", businessName="Luxe Spa", ownerEmail="owner@luxe.com", businessCategory="Day Spa")
    )

    assert first.assistant_kind == AssistantKind.DEDICATED
    assert second.assistant_kind == AssistantKind.DEDICATED
    assert first.assistant_id != second.assistant_id
    assert voice_platform.get_assistant_calls == 0
    assert "Classic Manicure" in voice_platform.assistant_configs[0]["model"]["messages"][0]["content"]
    assert "Signature Facial" in voice_platform.assistant_configs[1]["model"]["messages"][0]["content"]


async def test_telephony_failure_marks_tenant_failed(coordinator, store, voice_platform, email_sender):
    voice_platform.fail_phone = PlatformApiError("Vapi", "Service Unavailable", 503, "upstream down")

    result = await coordinator.provision_tenant(make_request())

    assert isinstance(result, TelephonyError)
    assert result.status_code == 500
    tenants = await store.list_tenants()
    assert len(tenants) == 1
    assert tenants[0].status == TenantStatus.FAILED
    assert tenants[0].failure_reason.startswith("telephony:")
    assert voice_platform.assistant_configs == []
    assert email_sender.sent == []


async def test_assistant_failure_keeps_phone_assignment(coordinator, store, voice_platform):
    voice_platform.fail_assistant = PlatformApiError("Vapi", "Invalid voice", 400, "{}")

    result = await coordinator.provision_tenant(make_request(tier="business"))

    assert isinstance(result, AssistantError)
    tenant = (await store.list_tenants())[0]
    assert tenant.status == TenantStatus.FAILED
    status = await TenantService(store).get_provisioning_status(tenant.id)
    assert status.phone_assignment.number == voice_platform.phone_numbers[0].number
    assert status.failure_reason.startswith("assistant:")


async def test_payment_failure_creates_no_tenant(coordinator, store, payment_gateway, voice_platform):
    payment_gateway.fail_with = PlatformApiError("Stripe", "Your card was declined.", 402, "{}")

    result = await coordinator.provision_tenant(make_request())

    assert isinstance(result, PaymentError)
    assert await store.list_tenants() == []
    assert voice_platform.phone_numbers == []


async def test_payment_idempotency_key_is_the_tenant_id(coordinator, payment_gateway):
    outcome = await coordinator.provision_tenant(make_request())

    create_call = payment_gateway.calls[0]
    assert create_call[0] == "create_customer"
    assert create_call[2] == outcome.tenant_id


async def test_bypass_skips_processor(coordinator, payment_gateway):
    outcome = await coordinator.provision_tenant(make_request(paymentMethodRef=None, testMode=True))

    assert isinstance(outcome, ProvisioningOutcome)
    assert payment_gateway.calls == []


async def test_bypass_rejected_when_not_permitted(coordinator, store):
    coordinator.payment_authorizer.bypass_enabled = False

    result = await coordinator.provision_tenant(make_request(paymentMethodRef="skip_payment_validation"))

    assert isinstance(result, InvalidRequestError)
    assert await store.list_tenants() == []


async def test_link_failure_is_warning(coordinator, store, voice_platform):
    voice_platform.fail_link = PlatformApiError("Vapi", "Bad Gateway", 502, "")

    outcome = await coordinator.provision_tenant(make_request())

    assert isinstance(outcome, ProvisioningOutcome)
    assert [w.kind for w in outcome.warnings] == [WarningKind.LINK]
    tenant = await store.get_tenant(outcome.tenant_id)
    assert tenant.status == TenantStatus.TRIALING
    assert [w.kind for w in tenant.warnings] == [WarningKind.LINK]


async def test_notification_failure_is_warning(coordinator, email_sender):
    email_sender.fail_with = PlatformApiError("Resend", "Rate limited", 429, "{}")

    outcome = await coordinator.provision_tenant(make_request())

    assert isinstance(outcome, ProvisioningOutcome)
    assert [w.kind for w in outcome.warnings] == [WarningKind.NOTIFICATION]


@pytest.mark.parametrize("flow", ["rapid_setup", "legacy_onboarding"])
async def test_seeding_failure_is_warning_and_tenant_still_trialing(coordinator, store, monkeypatch, flow):
    async def broken_insert(*args, **kwargs):
        raise TenantStoreError("database is locked")

    monkeypatch.setattr(store, "add_catalog_entries", broken_insert)
    monkeypatch.setattr(store, "add_staff_member", broken_insert)

    outcome = await coordinator.provision_tenant(make_request(flow=flow))

    assert isinstance(outcome, ProvisioningOutcome)
    assert [w.kind for w in outcome.warnings] == [WarningKind.SEEDING, WarningKind.SEEDING]
    tenant = await store.get_tenant(outcome.tenant_id)
    assert tenant.status == TenantStatus.TRIALING
    assert [w.kind for w in tenant.warnings] == [WarningKind.SEEDING, WarningKind.SEEDING]


async def test_existing_number_is_recorded_and_not_linked(coordinator, store, voice_platform):
    outcome = await coordinator.provision_tenant(make_request(
        telephonyStrategy="use_existing",
        existingNumber=" +15557654321 ",
        forwardingRules={"afterHours": True, "complexCalls": True},
    ))

    assert outcome.phone_number == "+15557654321"
    assert voice_platform.phone_numbers == []
    assert voice_platform.links == []
    assert [w.kind for w in outcome.warnings] == [WarningKind.LINK]
    assignment = await store.get_phone_assignment(outcome.tenant_id)
    assert assignment.kind == PhoneAssignmentKind.FORWARDED
    assert assignment.forwarding_rules.complex_calls is True


async def test_legacy_onboarding_flow(coordinator, store):
    outcome = await coordinator.provision_tenant(make_request(flow="legacy_onboarding", tier="business"))

    assert isinstance(outcome, ProvisioningOutcome)
    assert outcome.trial_ends_at - outcome.provisioned_at > timedelta(days=13)
    status = await TenantService(store).get_provisioning_status(outcome.tenant_id)
    assert status.flow.value == "legacy_onboarding"
    assert status.catalog_entry_count == 6
    assert status.staff_count == 1


async def test_provisioning_status_reflects_completed_saga(coordinator, store):
    outcome = await coordinator.provision_tenant(make_request())

    status = await TenantService(store).get_provisioning_status(outcome.tenant_id)

    assert status.status == TenantStatus.TRIALING
    assert status.assistant_id == outcome.assistant_id
    assert status.phone_assignment.number == outcome.phone_number
    assert status.catalog_entry_count == 6
    assert status.staff_count == 1
    assert status.failure_reason is None


async def test_provisioning_status_unknown_tenant(store):
    assert await TenantService(store).get_provisioning_status("missing") is None
