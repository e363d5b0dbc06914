# booking_provisioning/payments/interfaces.py
from abc import ABC, abstractmethod
from typing import Optional

from pydantic import BaseModel


class CustomerIdentity(BaseModel):
    email: str
    name: str
    phone: Optional[str] = None


class AbstractPaymentGateway(ABC):
    """
    Payment processor capability used to validate a card without charging it.

    Implementations raise PlatformApiError on any processor failure. Every call
    takes an idempotency key so a replayed attempt never duplicates objects.
    """

    @abstractmethod
    async def create_customer(self, identity: CustomerIdentity, idempotency_key: str) -> str:
        """Create a customer and return its processor reference."""
        pass

    @abstractmethod
    async def attach_payment_method(self, payment_method_ref: str, customer_ref: str) -> None:
        pass

    @abstractmethod
    async def authorize_zero_amount(
        self, customer_ref: str, payment_method_ref: str, idempotency_key: str
    ) -> str:
        """
        Confirm a zero-liability authorization (setup intent) for off-session use.

        Returns:
            The authorization status reported by the processor
        """
        pass

    @abstractmethod
    async def set_default_payment_method(self, customer_ref: str, payment_method_ref: str) -> None:
        pass
