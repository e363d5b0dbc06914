# booking_provisioning/payments/authorizer.py
import logging
from typing import Optional

from ..errors import InvalidRequestError, PaymentError, Result
from ..external_services.base_service import PlatformApiError
from .interfaces import AbstractPaymentGateway, CustomerIdentity

logger = logging.getLogger(__name__)

# Payment reference the signup UI sends when card collection is skipped in test mode
TEST_BYPASS_PAYMENT_REF = "skip_payment_validation"


def bypass_requested(payment_method_ref: Optional[str], test_mode: bool) -> bool:
    return test_mode or payment_method_ref == TEST_BYPASS_PAYMENT_REF


class PaymentAuthorizer:
    """
    Validates a payment method with a zero-amount authorization and makes it
    the customer's default for future billing. Nothing is charged.
    """

    def __init__(self, gateway: AbstractPaymentGateway, bypass_enabled: bool = False):
        self.gateway = gateway
        self.bypass_enabled = bypass_enabled

    async def authorize(
        self,
        payment_method_ref: Optional[str],
        customer: CustomerIdentity,
        idempotency_key: str,
        test_mode: bool = False,
    ) -> Result[Optional[str]]:
        """
        Args:
            payment_method_ref: Processor payment method id from the client
            customer: Identity used to create the processor customer
            idempotency_key: Pre-allocated tenant id, so a replay reuses the same objects
            test_mode: Caller asked to skip validation

        Returns:
            The customer reference, None when bypassed, or an error value
        """
        if bypass_requested(payment_method_ref, test_mode):
            if not self.bypass_enabled:
                logger.warning("Payment bypass requested but not permitted by configuration.")
                return InvalidRequestError(
                    "Test-mode payment bypass is not available in this environment. "
                    "Please provide a valid payment method."
                )
            logger.warning(f"Payment validation bypassed in test mode for {customer.email}.")
            return None

        if not payment_method_ref:
            return InvalidRequestError("A payment method is required.")

        try:
            customer_ref = await self.gateway.create_customer(customer, idempotency_key)
            await self.gateway.attach_payment_method(payment_method_ref, customer_ref)
            status = await self.gateway.authorize_zero_amount(customer_ref, payment_method_ref, idempotency_key)
            if status != "succeeded":
                logger.warning(f"Zero-amount authorization for {customer_ref} ended in status '{status}'.")
                return PaymentError(
                    f"Card verification did not complete (status: {status}). "
                    "Please try a different card."
                )
            await self.gateway.set_default_payment_method(customer_ref, payment_method_ref)
        except PlatformApiError as e:
            logger.warning(f"Payment authorization failed: {e.describe()}")
            return PaymentError(e.message)

        logger.info(f"Payment method validated for customer {customer_ref}.")
        return customer_ref
