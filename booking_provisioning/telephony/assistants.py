# booking_provisioning/telephony/assistants.py
import asyncio
import logging
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from ..errors import AssistantError, ProvisioningWarning, Result, WarningKind
from ..external_services.base_service import PlatformApiError
from ..settings import settings
from ..tenants.models import (
    AssistantAssignment, AssistantKind, PhoneNumberAssignment, ServiceCatalogEntry, SubscriptionTier
)
from .interfaces import AbstractVoicePlatform

logger = logging.getLogger(__name__)


class TenantContext(BaseModel):
    """Tenant identity needed to build a dedicated assistant."""
    tenant_id: str
    business_name: str
    business_category: str
    routing_secret: str
    # A dedicated assistant already recorded for this tenant, reused on replay
    existing_assistant_id: Optional[str] = None


def webhook_url_for(webhook_base_url: str, tenant_id: str) -> str:
    return f"{webhook_base_url.rstrip('/')}/webhook/vapi/{tenant_id}"


def build_system_prompt(
    context: TenantContext,
    catalog: List[ServiceCatalogEntry],
    webhook_url: str,
) -> str:
    """
    System prompt for a dedicated assistant.

    Deterministic for a given tenant and catalog: every entry is listed in
    catalog order with its name, duration and price.
    """
    service_lines = "\n".join(
        f"- {entry.name}: {entry.duration_minutes} min, ${entry.price:.2f}"
        for entry in catalog
    )
    return (
        f"You are the personalized AI concierge for {context.business_name}, "
        f"a {context.business_category}.\n"
        "\n"
        f"About {context.business_name}:\n"
        "You represent this specific business. Always identify yourself as calling "
        f"from {context.business_name}.\n"
        "\n"
        "Your role:\n"
        f"1. Help customers book appointments with {context.business_name}\n"
        "2. Answer questions about the services listed below\n"
        "3. Provide professional, warm customer service\n"
        "4. Collect complete customer information for bookings\n"
        "\n"
        "Available services:\n"
        f"{service_lines}\n"
        "\n"
        "For every booking, collect:\n"
        "- Customer name and phone number\n"
        "- Preferred date and time\n"
        "- Specific service requested\n"
        "- Any special requests or preferences\n"
        "\n"
        f"Business ID: {context.tenant_id}\n"
        f"Routing key: {context.routing_secret}\n"
        f"Webhook: {webhook_url}\n"
    )


class AssistantProvisioner:
    """
    Resolves the voice assistant for a tenant's tier.

    Starter and professional tenants share one platform-wide assistant, which is
    verified once per provisioner instance. Business tenants get their own.
    """

    def __init__(
        self,
        platform: AbstractVoicePlatform,
        shared_assistant_id: str = settings.shared_assistant_id,
        webhook_base_url: str = settings.webhook_base_url,
        model_provider: str = settings.dedicated_assistant_model_provider,
        model: str = settings.dedicated_assistant_model,
        voice_provider: str = settings.assistant_voice_provider,
        voice_id: str = settings.assistant_voice_id,
    ):
        self.platform = platform
        self.shared_assistant_id = shared_assistant_id
        self.webhook_base_url = webhook_base_url
        self.model_provider = model_provider
        self.model = model
        self.voice_provider = voice_provider
        self.voice_id = voice_id
        self._shared_verified = False
        self._shared_lock = asyncio.Lock()

    async def _verify_shared_assistant(self) -> Optional[AssistantError]:
        async with self._shared_lock:
            if self._shared_verified:
                return None
            try:
                await self.platform.get_assistant(self.shared_assistant_id)
            except PlatformApiError as e:
                logger.error(f"Shared assistant {self.shared_assistant_id} did not resolve: {e.describe()}")
                return AssistantError(f"Shared assistant could not be resolved: {e.describe()}")
            self._shared_verified = True
            logger.info(f"Shared assistant {self.shared_assistant_id} verified.")
            return None

    def dedicated_assistant_config(
        self, context: TenantContext, catalog: List[ServiceCatalogEntry]
    ) -> Dict[str, Any]:
        webhook_url = webhook_url_for(self.webhook_base_url, context.tenant_id)
        return {
            "name": f"{context.business_name} Custom AI Concierge",
            "model": {
                "provider": self.model_provider,
                "model": self.model,
                "messages": [
                    {"role": "system", "content": build_system_prompt(context, catalog, webhook_url)}
                ],
            },
            "voice": {"provider": self.voice_provider, "voiceId": self.voice_id},
            "serverUrl": webhook_url,
            "serverUrlSecret": context.routing_secret,
        }

    async def resolve_for_tier(
        self,
        tier: SubscriptionTier,
        context: TenantContext,
        catalog: List[ServiceCatalogEntry],
    ) -> Result[AssistantAssignment]:
        if not tier.gets_dedicated_assistant:
            error = await self._verify_shared_assistant()
            if error:
                return error
            logger.info(f"Tenant '{context.tenant_id}' ({tier.value}) uses shared assistant.")
            return AssistantAssignment(kind=AssistantKind.SHARED, assistant_id=self.shared_assistant_id)

        config = self.dedicated_assistant_config(context, catalog)
        system_prompt = config["model"]["messages"][0]["content"]
        if context.existing_assistant_id:
            logger.info(
                f"Reusing dedicated assistant {context.existing_assistant_id} for tenant '{context.tenant_id}'."
            )
            return AssistantAssignment(
                kind=AssistantKind.DEDICATED,
                assistant_id=context.existing_assistant_id,
                system_prompt=system_prompt,
            )

        logger.info(f"Creating dedicated assistant for tenant '{context.tenant_id}'.")
        try:
            assistant_id = await self.platform.create_assistant(config)
        except PlatformApiError as e:
            logger.error(f"Dedicated assistant creation failed for tenant '{context.tenant_id}': {e.describe()}")
            return AssistantError(e.describe())
        return AssistantAssignment(
            kind=AssistantKind.DEDICATED,
            assistant_id=assistant_id,
            system_prompt=system_prompt,
        )


class AssistantLinker:
    """Binds an assistant to a leased phone number. Relinking overwrites."""

    def __init__(self, platform: AbstractVoicePlatform):
        self.platform = platform

    async def link(
        self, phone: PhoneNumberAssignment, assistant: AssistantAssignment
    ) -> Optional[ProvisioningWarning]:
        """
        Returns:
            None when linked, otherwise a warning for the outcome
        """
        if not phone.platform_phone_id:
            logger.warning(
                f"Tenant '{phone.tenant_id}' uses forwarded number {phone.number}; "
                "assistant must be connected when forwarding is configured."
            )
            return ProvisioningWarning(
                kind=WarningKind.LINK,
                step="link",
                message=(
                    f"Number {phone.number} is forwarded from the business line and was not linked "
                    f"automatically. Connect assistant {assistant.assistant_id} once forwarding is active."
                ),
            )
        try:
            await self.platform.update_phone_number(phone.platform_phone_id, assistant.assistant_id)
        except PlatformApiError as e:
            logger.warning(
                f"Failed to link assistant {assistant.assistant_id} to phone {phone.platform_phone_id}: "
                f"{e.describe()}"
            )
            return ProvisioningWarning(
                kind=WarningKind.LINK,
                step="link",
                message=(
                    f"Assistant {assistant.assistant_id} could not be linked to {phone.number}: {e.message}. "
                    "The number will not receive AI calls until it is relinked."
                ),
            )
        logger.info(f"Assistant {assistant.assistant_id} linked to phone number {phone.number}.")
        return None
