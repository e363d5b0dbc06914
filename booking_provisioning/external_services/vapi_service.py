# booking_provisioning/external_services/vapi_service.py
import httpx
import logging
from typing import Any, Dict

from ..telephony.interfaces import AbstractVoicePlatform, PlatformPhoneNumber
from .base_service import JsonApiService, PlatformApiError

logger = logging.getLogger(__name__)


class VapiVoicePlatform(JsonApiService, AbstractVoicePlatform):
    """Vapi REST client. The httpx client carries the base URL and bearer key."""

    platform_name = "Vapi"

    def __init__(self, client: httpx.AsyncClient):
        super().__init__(client)

    async def create_phone_number(self, name: str) -> PlatformPhoneNumber:
        phone_data = await self._request(
            "POST", "/phone-number",
            json_payload={"provider": "vapi", "name": name, "assistantId": None},
        )
        if not phone_data.get("id"):
            raise PlatformApiError(self.platform_name, "Phone number response carried no id.", body=str(phone_data))
        logger.info(f"Vapi phone number provisioned: {phone_data.get('number')} ({phone_data['id']})")
        return PlatformPhoneNumber(id=phone_data["id"], number=phone_data.get("number"))

    async def create_assistant(self, assistant_config: Dict[str, Any]) -> str:
        assistant_data = await self._request("POST", "/assistant", json_payload=assistant_config)
        assistant_id = assistant_data.get("id")
        if not assistant_id:
            raise PlatformApiError(self.platform_name, "Assistant response carried no id.", body=str(assistant_data))
        logger.info(f"Vapi assistant created: {assistant_id}")
        return assistant_id

    async def get_assistant(self, assistant_id: str) -> Dict[str, Any]:
        return await self._request("GET", f"/assistant/{assistant_id}")

    async def update_phone_number(self, phone_id: str, assistant_id: str) -> None:
        await self._request("PATCH", f"/phone-number/{phone_id}", json_payload={"assistantId": assistant_id})
        logger.info(f"Vapi phone number {phone_id} linked to assistant {assistant_id}")
