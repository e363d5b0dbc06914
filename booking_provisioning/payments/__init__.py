# booking_provisioning/payments/__init__.py
"""Zero-amount payment method authorization."""

from .interfaces import AbstractPaymentGateway, CustomerIdentity
from .authorizer import PaymentAuthorizer, TEST_BYPASS_PAYMENT_REF, bypass_requested

__all__ = [
    "AbstractPaymentGateway",
    "CustomerIdentity",
    "PaymentAuthorizer",
    "TEST_BYPASS_PAYMENT_REF",
    "bypass_requested",
]
