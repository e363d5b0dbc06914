# tests/test_payments.py
from booking_provisioning.errors import InvalidRequestError, PaymentError
from booking_provisioning.external_services.base_service import PlatformApiError
from booking_provisioning.payments.authorizer import TEST_BYPASS_PAYMENT_REF, PaymentAuthorizer, bypass_requested
from booking_provisioning.payments.interfaces import CustomerIdentity

CUSTOMER = CustomerIdentity(email="owner@glownails.com", name="Glow Nails", phone="+15551234567")


def test_bypass_requested():
    assert bypass_requested(None, True)
    assert bypass_requested(TEST_BYPASS_PAYMENT_REF, False)
    assert not bypass_requested("pm_card_visa", False)


async def test_authorize_runs_full_validation(payment_gateway):
    authorizer = PaymentAuthorizer(payment_gateway)

    customer_ref = await authorizer.authorize("pm_card_visa", CUSTOMER, idempotency_key="tenant-abcdef12")

    assert customer_ref == "cus_tenant-a"
    assert [call[0] for call in payment_gateway.calls] == [
        "create_customer", "attach", "authorize", "set_default"
    ]
    assert payment_gateway.calls[0][2] == "tenant-abcdef12"


async def test_bypass_allowed_makes_no_processor_calls(payment_gateway):
    authorizer = PaymentAuthorizer(payment_gateway, bypass_enabled=True)

    assert await authorizer.authorize(None, CUSTOMER, "k", test_mode=True) is None
    assert await authorizer.authorize(TEST_BYPASS_PAYMENT_REF, CUSTOMER, "k") is None
    assert payment_gateway.calls == []


async def test_bypass_rejected_when_not_permitted(payment_gateway):
    authorizer = PaymentAuthorizer(payment_gateway, bypass_enabled=False)

    result = await authorizer.authorize(TEST_BYPASS_PAYMENT_REF, CUSTOMER, "k")

    assert isinstance(result, InvalidRequestError)
    assert result.status_code == 400
    assert payment_gateway.calls == []


async def test_missing_payment_method_is_invalid(payment_gateway):
    result = await PaymentAuthorizer(payment_gateway).authorize(None, CUSTOMER, "k")
    assert isinstance(result, InvalidRequestError)


async def test_declined_card_becomes_payment_error(payment_gateway):
    payment_gateway.fail_with = PlatformApiError("Stripe", "Your card was declined.", 402, '{"error": {}}')

    result = await PaymentAuthorizer(payment_gateway).authorize("pm_card_declined", CUSTOMER, "k")

    assert isinstance(result, PaymentError)
    assert result.details == "Your card was declined."
    assert result.to_response() == {
        "error": "Payment method validation failed",
        "details": "Your card was declined.",
        "errorType": "payment_error",
    }


async def test_incomplete_setup_intent_is_payment_error(payment_gateway):
    payment_gateway.setup_status = "requires_action"

    result = await PaymentAuthorizer(payment_gateway).authorize("pm_card_3ds", CUSTOMER, "k")

    assert isinstance(result, PaymentError)
    assert "requires_action" in result.details
    assert "set_default" not in [call[0] for call in payment_gateway.calls]
