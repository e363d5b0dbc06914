# booking_provisioning/tenants/registrar.py
import logging
import re
import secrets
import threading
import time
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional

from pydantic import BaseModel

from ..errors import (
    DuplicateEmailError, DuplicateSlugError, ProvisioningError, ProvisioningWarning,
    Result, StoreError
)
from ..settings import settings
from ..utils.security import FernetEncryptor, generate_token_and_hash
from .models import (
    AssistantAssignment, ProvisioningFlow, SubscriptionTier, TenantCreate, TenantInDB,
    TenantStatus, TenantUpdate
)
from .storage_interfaces import AbstractTenantStore, TenantStoreError, TenantStoreIntegrityError

logger = logging.getLogger(__name__)

_NON_ALNUM = re.compile(r"[^a-z0-9]+")
_BASE36_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"
FALLBACK_SLUG_BASE = "business"


def to_base36(value: int) -> str:
    if value < 0:
        raise ValueError("base36 encoding requires a non-negative integer")
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36_DIGITS[rem])
    return "".join(reversed(digits))


def slugify(name: str) -> str:
    """Lower-case, collapse non-alphanumeric runs to one hyphen, trim hyphens."""
    return _NON_ALNUM.sub("-", name.lower()).strip("-")


class SlugGenerator:
    """
    Appends a base-36 millisecond suffix to the slugified name.

    Suffixes handed out by one generator are strictly increasing, so two
    identical names never collide even within the same millisecond.
    """

    def __init__(self, clock_ms: Optional[Callable[[], int]] = None):
        self._clock_ms = clock_ms or (lambda: time.time_ns() // 1_000_000)
        self._last_ms = -1
        self._lock = threading.Lock()

    def _next_suffix_ms(self) -> int:
        with self._lock:
            now_ms = self._clock_ms()
            if now_ms <= self._last_ms:
                now_ms = self._last_ms + 1
            self._last_ms = now_ms
            return now_ms

    def derive(self, business_name: str) -> str:
        base = slugify(business_name) or FALLBACK_SLUG_BASE
        return f"{base}-{to_base36(self._next_suffix_ms())}"


class Registration(BaseModel):
    """A stored tenant plus the secrets that are only available at registration time."""
    tenant: TenantInDB
    cancellation_token: str
    routing_secret: str


def classify_integrity_error(message: str, email: str, slug: str) -> ProvisioningError:
    """Map a unique-constraint message (SQLite or Postgres style) to a typed error."""
    lowered = message.lower()
    if "email" in lowered:
        return DuplicateEmailError(email)
    if "slug" in lowered:
        return DuplicateSlugError(slug)
    return StoreError(message, step="register")


class TenantRegistrar:
    """Creates, finalizes and fails tenant records."""

    def __init__(
        self,
        tenant_store: AbstractTenantStore,
        encryptor: Optional[FernetEncryptor] = None,
        slug_generator: Optional[SlugGenerator] = None,
        rapid_setup_trial_days: int = settings.rapid_setup_trial_days,
        legacy_trial_days: int = settings.legacy_trial_days,
    ):
        self.tenant_store = tenant_store
        self.encryptor = encryptor or FernetEncryptor(settings.encryption_key)
        self.slug_generator = slug_generator or SlugGenerator()
        self.trial_days = {
            ProvisioningFlow.RAPID_SETUP: rapid_setup_trial_days,
            ProvisioningFlow.LEGACY_ONBOARDING: legacy_trial_days,
        }

    def trial_ends_at(self, flow: ProvisioningFlow, registered_at: datetime) -> datetime:
        return registered_at + timedelta(days=self.trial_days[flow])

    async def register(
        self,
        tenant_id: str,
        business_name: str,
        email: str,
        phone: str,
        business_category: str,
        tier: SubscriptionTier,
        flow: ProvisioningFlow = ProvisioningFlow.RAPID_SETUP,
        payment_customer_ref: Optional[str] = None,
    ) -> Result[Registration]:
        """
        Insert the tenant in `pending` status.

        Returns:
            Registration with the one-time secrets, DuplicateEmailError /
            DuplicateSlugError on a uniqueness conflict, or StoreError
        """
        slug = self.slug_generator.derive(business_name)
        cancellation_token, cancellation_token_hash = generate_token_and_hash(
            settings.cancellation_token_bytes_length
        )
        routing_secret = secrets.token_urlsafe(settings.routing_secret_bytes_length)
        routing_secret_encrypted = self.encryptor.encrypt(routing_secret) if self.encryptor.key_valid else None
        if routing_secret_encrypted is None:
            logger.warning(f"Routing secret for tenant '{tenant_id}' not persisted: no valid encryption key.")

        tenant_create = TenantCreate(
            id=tenant_id,
            slug=slug,
            business_name=business_name,
            email=email,
            phone=phone,
            business_category=business_category,
            tier=tier,
            flow=flow,
            trial_ends_at=self.trial_ends_at(flow, datetime.now(timezone.utc)),
            cancellation_token_hash=cancellation_token_hash,
            routing_secret_encrypted=routing_secret_encrypted,
            payment_customer_ref=payment_customer_ref,
        )

        logger.info(f"Registrar: registering tenant '{tenant_id}' with slug '{slug}' ({flow.value}).")
        try:
            tenant = await self.tenant_store.create_tenant(tenant_create)
        except TenantStoreIntegrityError as e:
            error = classify_integrity_error(str(e), email=email, slug=slug)
            logger.warning(f"Registrar: registration rejected for tenant '{tenant_id}': {error!r}")
            return error
        except TenantStoreError as e:
            return StoreError(str(e), step="register")

        return Registration(
            tenant=tenant,
            cancellation_token=cancellation_token,
            routing_secret=routing_secret,
        )

    async def _update(self, tenant_id: str, update: TenantUpdate, step: str) -> Result[TenantInDB]:
        try:
            tenant = await self.tenant_store.update_tenant(tenant_id, update)
        except TenantStoreError as e:
            return StoreError(str(e), step=step)
        if tenant is None:
            return StoreError(f"Tenant '{tenant_id}' not found.", step=step)
        return tenant

    async def record_assistant(self, tenant_id: str, assistant: AssistantAssignment) -> Result[TenantInDB]:
        """Persist the resolved assistant while the tenant is still `pending`."""
        return await self._update(
            tenant_id,
            TenantUpdate(assistant_id=assistant.assistant_id, assistant_kind=assistant.kind),
            step="assistant",
        )

    async def finalize(
        self,
        tenant_id: str,
        phone_number: Optional[str],
        assistant: AssistantAssignment,
    ) -> Result[TenantInDB]:
        """Transition `pending -> trialing` and persist the resolved references."""
        try:
            current = await self.tenant_store.get_tenant(tenant_id)
        except TenantStoreError as e:
            return StoreError(str(e), step="finalize")
        if current is None:
            return StoreError(f"Tenant '{tenant_id}' not found.", step="finalize")
        if current.status != TenantStatus.PENDING:
            return StoreError(
                f"Tenant '{tenant_id}' is '{current.status.value}', only pending tenants can be finalized.",
                step="finalize",
            )
        tenant = await self._update(
            tenant_id,
            TenantUpdate(
                status=TenantStatus.TRIALING,
                phone_number=phone_number,
                assistant_id=assistant.assistant_id,
                assistant_kind=assistant.kind,
            ),
            step="finalize",
        )
        if not isinstance(tenant, ProvisioningError):
            logger.info(f"Registrar: tenant '{tenant_id}' finalized as trialing until {tenant.trial_ends_at}.")
        return tenant

    async def mark_failed(self, tenant_id: str, error: ProvisioningError) -> Optional[ProvisioningError]:
        """Tag the tenant `failed` with the failing step; the row is never deleted."""
        reason = f"{error.step or 'unknown'}: {error.error}: {error.details}"
        result = await self._update(
            tenant_id,
            TenantUpdate(status=TenantStatus.FAILED, failure_reason=reason),
            step="mark_failed",
        )
        if isinstance(result, ProvisioningError):
            logger.error(f"Registrar: could not mark tenant '{tenant_id}' failed: {result.details}")
            return result
        logger.warning(f"Registrar: tenant '{tenant_id}' marked failed ({reason}).")
        return None

    async def record_warnings(
        self, tenant_id: str, warnings: List[ProvisioningWarning]
    ) -> Optional[ProvisioningError]:
        result = await self._update(tenant_id, TenantUpdate(warnings=warnings), step="warnings")
        return result if isinstance(result, ProvisioningError) else None
