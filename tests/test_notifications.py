# tests/test_notifications.py
from datetime import datetime, timezone

from booking_provisioning.errors import WarningKind
from booking_provisioning.external_services.base_service import PlatformApiError
from booking_provisioning.notifications.dispatcher import (
    NotificationDispatcher, cancellation_link, render_welcome_email
)
from booking_provisioning.saga.models import ProvisioningOutcome
from booking_provisioning.tenants.models import AssistantKind, SubscriptionTier

DASHBOARD = "https://app.example.com"


def make_outcome(**overrides):
    values = {
        "tenant_id": "tenant-1",
        "slug": "glow-nails-rs",
        "business_name": "Glow Nails",
        "phone_number": "+15550000001",
        "assistant_id": "asst-1",
        "assistant_kind": AssistantKind.SHARED,
        "tier": SubscriptionTier.PROFESSIONAL,
        "trial_ends_at": datetime(2026, 3, 8, 12, 0, tzinfo=timezone.utc),
        "provisioned_at": datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc),
    }
    values.update(overrides)
    return ProvisioningOutcome(**values)


def test_cancellation_link_carries_token_and_tenant():
    link = cancellation_link(DASHBOARD + "/", "tenant-1", "tok123")
    assert link == "https://app.example.com/api/subscription/cancel?token=tok123&businessId=tenant-1"


def test_welcome_email_contents():
    body = render_welcome_email(make_outcome(), "Jamie", DASHBOARD, "tok123")

    assert "Jamie" in body
    assert "+15550000001" in body
    assert "Professional" in body
    assert "March 08, 2026" in body
    assert "https://app.example.com/dashboard" in body
    assert "token=tok123&amp;businessId=tenant-1" in body
    assert "Cancel Trial" in body


def test_welcome_email_escapes_tenant_text():
    body = render_welcome_email(make_outcome(business_name="<script>alert(1)</script> Spa"), "<b>", DASHBOARD, None)

    assert "<script>" not in body
    assert "&lt;script&gt;" in body
    assert "&lt;b&gt;" in body


async def test_send_welcome_uses_subject_and_owner_address(email_sender):
    dispatcher = NotificationDispatcher(email_sender, dashboard_base_url=DASHBOARD)

    warning = await dispatcher.send_welcome(make_outcome(), "owner@glownails.com", "Jamie", "tok123")

    assert warning is None
    assert email_sender.sent[0]["to"] == "owner@glownails.com"
    assert email_sender.sent[0]["subject"] == "Welcome to Your AI Assistant - Glow Nails is Ready!"


async def test_send_failure_becomes_notification_warning(email_sender):
    email_sender.fail_with = PlatformApiError("Resend", "Domain not verified", 403, "{}")
    dispatcher = NotificationDispatcher(email_sender, dashboard_base_url=DASHBOARD)

    warning = await dispatcher.send_welcome(make_outcome(), "owner@glownails.com", "Jamie")

    assert warning.kind == WarningKind.NOTIFICATION
    assert warning.step == "notify"
    assert "Domain not verified" in warning.message
