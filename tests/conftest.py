# tests/conftest.py
import itertools
from typing import Any, Dict, List, Optional

import pytest

from booking_provisioning.external_services.base_service import PlatformApiError
from booking_provisioning.notifications.dispatcher import NotificationDispatcher
from booking_provisioning.notifications.interfaces import AbstractEmailSender
from booking_provisioning.payments.authorizer import PaymentAuthorizer
from booking_provisioning.payments.interfaces import AbstractPaymentGateway, CustomerIdentity
from booking_provisioning.saga.coordinator import SagaCoordinator
from booking_provisioning.saga.models import ProvisionTenantRequest
from booking_provisioning.storage.sqlite_base import open_sqlite_connection, close_sqlite_connection
from booking_provisioning.telephony.assistants import AssistantLinker, AssistantProvisioner
from booking_provisioning.telephony.interfaces import AbstractVoicePlatform, PlatformPhoneNumber
from booking_provisioning.telephony.provisioner import TelephonyProvisioner
from booking_provisioning.tenants.catalog import CatalogSeeder
from booking_provisioning.tenants.registrar import TenantRegistrar
from booking_provisioning.tenants.sqlite_tenant_store import SQLiteTenantStore
from booking_provisioning.tenants.staff import StaffSeeder
from booking_provisioning.utils.security import FernetEncryptor, generate_fernet_key

SHARED_ASSISTANT_ID = "shared-assistant-0001"
WEBHOOK_BASE = "https://hooks.example.com"


class FakePaymentGateway(AbstractPaymentGateway):
    def __init__(self):
        self.calls: List[tuple] = []
        self.fail_with: Optional[PlatformApiError] = None
        self.setup_status = "succeeded"

    async def create_customer(self, identity: CustomerIdentity, idempotency_key: str) -> str:
        self.calls.append(("create_customer", identity.email, idempotency_key))
        if self.fail_with:
            raise self.fail_with
        return f"cus_{idempotency_key[:8]}"

    async def attach_payment_method(self, payment_method_ref: str, customer_ref: str) -> None:
        self.calls.append(("attach", payment_method_ref, customer_ref))

    async def authorize_zero_amount(self, customer_ref: str, payment_method_ref: str, idempotency_key: str) -> str:
        self.calls.append(("authorize", customer_ref, payment_method_ref))
        return self.setup_status

    async def set_default_payment_method(self, customer_ref: str, payment_method_ref: str) -> None:
        self.calls.append(("set_default", customer_ref, payment_method_ref))


class FakeVoicePlatform(AbstractVoicePlatform):
    def __init__(self):
        self._ids = itertools.count(1)
        self.phone_numbers: List[PlatformPhoneNumber] = []
        self.assistant_configs: List[Dict[str, Any]] = []
        self.assistant_ids: List[str] = []
        self.links: List[tuple] = []
        self.get_assistant_calls = 0
        self.fail_phone: Optional[PlatformApiError] = None
        self.fail_assistant: Optional[PlatformApiError] = None
        self.fail_link: Optional[PlatformApiError] = None
        self.fail_get_assistant: Optional[PlatformApiError] = None

    async def create_phone_number(self, name: str) -> PlatformPhoneNumber:
        if self.fail_phone:
            raise self.fail_phone
        n = next(self._ids)
        phone = PlatformPhoneNumber(id=f"phone-{n}", number=f"+1555000{n:04d}")
        self.phone_numbers.append(phone)
        return phone

    async def create_assistant(self, assistant_config: Dict[str, Any]) -> str:
        if self.fail_assistant:
            raise self.fail_assistant
        assistant_id = f"asst-{next(self._ids)}"
        self.assistant_configs.append(assistant_config)
        self.assistant_ids.append(assistant_id)
        return assistant_id

    async def get_assistant(self, assistant_id: str) -> Dict[str, Any]:
        self.get_assistant_calls += 1
        if self.fail_get_assistant:
            raise self.fail_get_assistant
        return {"id": assistant_id}

    async def update_phone_number(self, phone_id: str, assistant_id: str) -> None:
        if self.fail_link:
            raise self.fail_link
        self.links.append((phone_id, assistant_id))


class FakeEmailSender(AbstractEmailSender):
    def __init__(self):
        self.sent: List[Dict[str, str]] = []
        self.fail_with: Optional[PlatformApiError] = None

    async def send(self, to: str, subject: str, html: str) -> Optional[str]:
        if self.fail_with:
            raise self.fail_with
        self.sent.append({"to": to, "subject": subject, "html": html})
        return f"email-{len(self.sent)}"


def make_request(**overrides) -> ProvisionTenantRequest:
    payload = {
        "businessName": "Glow Nails",
        "ownerEmail": "owner@glownails.com",
        "ownerPhone": "+15551234567",
        "ownerName": "Jamie Rivera",
        "businessCategory": "Nail Salon",
        "tier": "starter",
        "paymentMethodRef": "pm_card_visa",
        "telephonyStrategy": "new_number",
    }
    payload.update(overrides)
    return ProvisionTenantRequest.model_validate(payload)


@pytest.fixture
def conn():
    connection = open_sqlite_connection(":memory:")
    yield connection
    close_sqlite_connection(connection)


@pytest.fixture
def store(conn):
    return SQLiteTenantStore(conn)


@pytest.fixture
def encryptor():
    return FernetEncryptor(generate_fernet_key())


@pytest.fixture
def registrar(store, encryptor):
    return TenantRegistrar(store, encryptor=encryptor)


@pytest.fixture
def payment_gateway():
    return FakePaymentGateway()


@pytest.fixture
def voice_platform():
    return FakeVoicePlatform()


@pytest.fixture
def email_sender():
    return FakeEmailSender()


@pytest.fixture
def assistant_provisioner(voice_platform):
    return AssistantProvisioner(
        voice_platform,
        shared_assistant_id=SHARED_ASSISTANT_ID,
        webhook_base_url=WEBHOOK_BASE,
    )


@pytest.fixture
def coordinator(store, registrar, payment_gateway, voice_platform, email_sender, assistant_provisioner):
    return SagaCoordinator(
        payment_authorizer=PaymentAuthorizer(payment_gateway, bypass_enabled=True),
        registrar=registrar,
        catalog_seeder=CatalogSeeder(store),
        staff_seeder=StaffSeeder(store),
        telephony=TelephonyProvisioner(voice_platform, store),
        assistants=assistant_provisioner,
        linker=AssistantLinker(voice_platform),
        notifier=NotificationDispatcher(email_sender, dashboard_base_url="https://app.example.com"),
    )
