# booking_provisioning/external_services/stripe_service.py
import httpx
import logging

from ..payments.interfaces import AbstractPaymentGateway, CustomerIdentity
from .base_service import JsonApiService, PlatformApiError

logger = logging.getLogger(__name__)


class StripePaymentGateway(JsonApiService, AbstractPaymentGateway):
    """
    Stripe REST client (form-encoded requests).

    The httpx client is expected to carry the base URL and the bearer secret key.
    """

    platform_name = "Stripe"

    def __init__(self, client: httpx.AsyncClient):
        super().__init__(client)

    async def create_customer(self, identity: CustomerIdentity, idempotency_key: str) -> str:
        form = {"email": identity.email, "name": identity.name}
        if identity.phone:
            form["phone"] = identity.phone
        customer = await self._request(
            "POST", "/customers", form_payload=form,
            headers={"Idempotency-Key": f"{idempotency_key}-customer"},
        )
        customer_id = customer.get("id")
        if not customer_id:
            raise PlatformApiError(self.platform_name, "Customer creation returned no id.", body=str(customer))
        logger.info(f"Stripe customer created: {customer_id}")
        return customer_id

    async def attach_payment_method(self, payment_method_ref: str, customer_ref: str) -> None:
        await self._request(
            "POST", f"/payment_methods/{payment_method_ref}/attach",
            form_payload={"customer": customer_ref},
        )

    async def authorize_zero_amount(
        self, customer_ref: str, payment_method_ref: str, idempotency_key: str
    ) -> str:
        setup_intent = await self._request(
            "POST", "/setup_intents",
            form_payload={
                "customer": customer_ref,
                "payment_method": payment_method_ref,
                "confirm": "true",
                "usage": "off_session",
                "payment_method_types[]": "card",
            },
            headers={"Idempotency-Key": f"{idempotency_key}-setup-intent"},
        )
        return str(setup_intent.get("status", "unknown"))

    async def set_default_payment_method(self, customer_ref: str, payment_method_ref: str) -> None:
        await self._request(
            "POST", f"/customers/{customer_ref}",
            form_payload={"invoice_settings[default_payment_method]": payment_method_ref},
        )
