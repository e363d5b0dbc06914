# booking_provisioning/notifications/dispatcher.py
import html
import logging
from typing import Optional
from urllib.parse import urlencode

from ..errors import ProvisioningWarning, WarningKind
from ..external_services.base_service import PlatformApiError
from ..saga.models import ProvisioningOutcome
from ..settings import settings
from .interfaces import AbstractEmailSender

logger = logging.getLogger(__name__)


def cancellation_link(dashboard_base_url: str, tenant_id: str, cancellation_token: str) -> str:
    query = urlencode({"token": cancellation_token, "businessId": tenant_id})
    return f"{dashboard_base_url.rstrip('/')}/api/subscription/cancel?{query}"


def render_welcome_email(
    outcome: ProvisioningOutcome,
    owner_first_name: str,
    dashboard_base_url: str,
    cancellation_token: Optional[str],
) -> str:
    """HTML body of the welcome email. All tenant-supplied text is escaped."""
    business = html.escape(outcome.business_name)
    first_name = html.escape(owner_first_name)
    phone = html.escape(outcome.phone_number or "pending setup")
    dashboard_url = html.escape(f"{dashboard_base_url.rstrip('/')}/dashboard")
    trial_end = outcome.trial_ends_at.strftime("%B %d, %Y")
    if cancellation_token:
        cancel_href = html.escape(cancellation_link(dashboard_base_url, outcome.tenant_id, cancellation_token))
    else:
        cancel_href = html.escape(f"{dashboard_base_url.rstrip('/')}/dashboard/settings/billing")

    return (
        "<!DOCTYPE html>\n"
        "<html><body style=\"font-family: 'Segoe UI', Tahoma, sans-serif;\">\n"
        f"<h1>Welcome to Your AI Assistant, {first_name}!</h1>\n"
        f"<p>{business} is now set up to take bookings around the clock.</p>\n"
        "<h2>Your AI phone line</h2>\n"
        f"<p><strong>{phone}</strong></p>\n"
        f"<h2>Your plan: {html.escape(outcome.tier.display_name)}</h2>\n"
        f"<p>Your free trial runs until {trial_end}.</p>\n"
        f"<p><a href=\"{dashboard_url}\">Open your dashboard</a></p>\n"
        f"<p style=\"font-size: 12px;\">Not for you? <a href=\"{cancel_href}\">Cancel Trial</a></p>\n"
        "</body></html>\n"
    )


class NotificationDispatcher:
    """Sends the welcome email. Never affects the provisioning result."""

    def __init__(self, sender: AbstractEmailSender, dashboard_base_url: str = settings.dashboard_base_url):
        self.sender = sender
        self.dashboard_base_url = dashboard_base_url

    async def send_welcome(
        self,
        outcome: ProvisioningOutcome,
        owner_email: str,
        owner_first_name: str,
        cancellation_token: Optional[str] = None,
    ) -> Optional[ProvisioningWarning]:
        subject = f"Welcome to Your AI Assistant - {outcome.business_name} is Ready!"
        body = render_welcome_email(outcome, owner_first_name, self.dashboard_base_url, cancellation_token)
        try:
            await self.sender.send(owner_email, subject, body)
        except PlatformApiError as e:
            logger.warning(f"Welcome email for tenant '{outcome.tenant_id}' failed: {e.describe()}")
            return ProvisioningWarning(
                kind=WarningKind.NOTIFICATION,
                step="notify",
                message=f"Welcome email could not be sent to {owner_email}: {e.message}",
            )
        logger.info(f"Welcome email sent for tenant '{outcome.tenant_id}'.")
        return None
