# booking_provisioning/external_services/resend_service.py
import httpx
import logging
from typing import Optional

from ..notifications.interfaces import AbstractEmailSender
from .base_service import JsonApiService

logger = logging.getLogger(__name__)


class ResendEmailSender(JsonApiService, AbstractEmailSender):
    """Resend REST client. The httpx client carries the base URL and bearer key."""

    platform_name = "Resend"

    def __init__(self, client: httpx.AsyncClient, from_address: str):
        super().__init__(client)
        self.from_address = from_address

    async def send(self, to: str, subject: str, html: str) -> Optional[str]:
        result = await self._request(
            "POST", "/emails",
            json_payload={"from": self.from_address, "to": [to], "subject": subject, "html": html},
        )
        message_id = result.get("id")
        logger.info(f"Resend accepted email to {to} (id={message_id}).")
        return message_id
