# booking_provisioning/saga/coordinator.py
import asyncio
import logging
import uuid
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from ..errors import ProvisioningError, ProvisioningWarning, Result, WarningKind
from ..notifications.dispatcher import NotificationDispatcher
from ..payments.authorizer import PaymentAuthorizer
from ..payments.interfaces import CustomerIdentity
from ..telephony.assistants import AssistantLinker, AssistantProvisioner, TenantContext
from ..telephony.provisioner import TelephonyProvisioner
from ..tenants.catalog import CatalogSeeder, catalog_for_category
from ..tenants.models import ForwardingRules, OwnerContact, ProvisioningFlow
from ..tenants.registrar import TenantRegistrar
from ..tenants.staff import StaffSeeder, split_owner_name
from .models import ProvisionTenantRequest, ProvisioningOutcome, TelephonyStrategy
from .steps import (
    ParallelSteps, PlanItem, ProvisioningRun, SagaStep, StepFailurePolicy, StepResult
)

logger = logging.getLogger(__name__)


class SagaCoordinator:
    """
    Sequences tenant provisioning across payment, store, voice platform and email.

    There is no rollback: a step that aborts after registration leaves the
    tenant row tagged `failed` for manual follow-up. Steps after registration
    are keyed by the tenant id allocated before payment, so external calls that
    support it are idempotent on replay.
    """

    def __init__(
        self,
        payment_authorizer: PaymentAuthorizer,
        registrar: TenantRegistrar,
        catalog_seeder: CatalogSeeder,
        staff_seeder: StaffSeeder,
        telephony: TelephonyProvisioner,
        assistants: AssistantProvisioner,
        linker: AssistantLinker,
        notifier: NotificationDispatcher,
        id_factory: Callable[[], str] = lambda: str(uuid.uuid4()),
    ):
        self.payment_authorizer = payment_authorizer
        self.registrar = registrar
        self.catalog_seeder = catalog_seeder
        self.staff_seeder = staff_seeder
        self.telephony = telephony
        self.assistants = assistants
        self.linker = linker
        self.notifier = notifier
        self.id_factory = id_factory
        self.plans: Dict[ProvisioningFlow, List[PlanItem]] = {
            ProvisioningFlow.RAPID_SETUP: self._rapid_setup_plan(),
            ProvisioningFlow.LEGACY_ONBOARDING: self._legacy_onboarding_plan(),
        }

    # Plans

    def _rapid_setup_plan(self) -> List[PlanItem]:
        return [
            SagaStep("payment", self._authorize_payment),
            SagaStep("register", self._register),
            ParallelSteps("seed", [
                SagaStep("catalog", self._seed_catalog, StepFailurePolicy.WARN_AND_CONTINUE, WarningKind.SEEDING),
                SagaStep("staff", self._seed_owner, StepFailurePolicy.WARN_AND_CONTINUE, WarningKind.SEEDING),
            ]),
            SagaStep("telephony", self._provision_telephony),
            SagaStep("assistant", self._resolve_assistant),
            SagaStep("link", self._link, StepFailurePolicy.WARN_AND_CONTINUE, WarningKind.LINK),
            SagaStep("finalize", self._finalize),
            SagaStep("notify", self._notify, StepFailurePolicy.WARN_AND_CONTINUE, WarningKind.NOTIFICATION),
        ]

    def _legacy_onboarding_plan(self) -> List[PlanItem]:
        return [
            SagaStep("payment", self._authorize_payment),
            SagaStep("register", self._register),
            SagaStep("staff", self._seed_owner, StepFailurePolicy.WARN_AND_CONTINUE, WarningKind.SEEDING),
            SagaStep("telephony", self._provision_telephony),
            SagaStep("assistant", self._resolve_assistant),
            SagaStep("link", self._link, StepFailurePolicy.WARN_AND_CONTINUE, WarningKind.LINK),
            SagaStep("catalog", self._seed_catalog, StepFailurePolicy.WARN_AND_CONTINUE, WarningKind.SEEDING),
            SagaStep("finalize", self._finalize),
            SagaStep("notify", self._notify, StepFailurePolicy.WARN_AND_CONTINUE, WarningKind.NOTIFICATION),
        ]

    # Entry point

    async def provision_tenant(self, request: ProvisionTenantRequest) -> Result[ProvisioningOutcome]:
        run = ProvisioningRun(
            tenant_id=self.id_factory(),
            request=request,
            owner=OwnerContact(
                email=request.owner_email,
                phone=request.owner_phone,
                full_name=request.owner_name,
                first_name=request.owner_first_name,
                last_name=request.owner_last_name,
            ),
            customer=CustomerIdentity(
                email=request.owner_email,
                name=request.business_name,
                phone=request.owner_phone,
            ),
        )
        logger.info(
            f"Saga: provisioning '{request.business_name}' as tenant '{run.tenant_id}' "
            f"({request.flow.value}, tier={request.tier.value})."
        )

        for item in self.plans[request.flow]:
            if isinstance(item, ParallelSteps):
                results = await asyncio.gather(*(self._run_step(step, run) for step in item.steps))
                error = next((r for r in results if r is not None), None)
            else:
                error = await self._run_step(item, run)
            if error is not None:
                return await self._abort(run, error)

        if run.warnings:
            persist_error = await self.registrar.record_warnings(run.tenant_id, run.warnings)
            if persist_error:
                logger.error(f"Saga: warnings for tenant '{run.tenant_id}' not persisted: {persist_error.details}")
        run.outcome.warnings = list(run.warnings)
        logger.info(
            f"Saga: tenant '{run.tenant_id}' provisioned with {len(run.warnings)} warning(s)."
        )
        return run.outcome

    async def _run_step(self, step: SagaStep, run: ProvisioningRun) -> Optional[ProvisioningError]:
        """Run one step and apply its failure policy. Returns an error only when the saga must abort."""
        logger.info(f"Saga [{run.tenant_id}]: step '{step.name}' started.")
        result: StepResult = await step.action(run)

        if result is None:
            logger.info(f"Saga [{run.tenant_id}]: step '{step.name}' succeeded.")
            return None
        if isinstance(result, ProvisioningWarning):
            logger.warning(f"Saga [{run.tenant_id}]: step '{step.name}' warning: {result.message}")
            run.warnings.append(result)
            return None
        if result.step is None:
            result.step = step.name
        if step.on_failure == StepFailurePolicy.WARN_AND_CONTINUE:
            logger.warning(f"Saga [{run.tenant_id}]: best-effort step '{step.name}' failed: {result.details}")
            run.warnings.append(ProvisioningWarning(kind=step.warning_kind, step=step.name, message=result.details))
            return None
        logger.error(f"Saga [{run.tenant_id}]: step '{step.name}' failed: {result!r}")
        return result

    async def _abort(self, run: ProvisioningRun, error: ProvisioningError) -> ProvisioningError:
        if run.registered:
            mark_error = await self.registrar.mark_failed(run.tenant_id, error)
            if mark_error:
                logger.error(f"Saga: tenant '{run.tenant_id}' could not be marked failed: {mark_error.details}")
        return error

    # Step actions

    async def _authorize_payment(self, run: ProvisioningRun) -> StepResult:
        result = await self.payment_authorizer.authorize(
            run.request.payment_method_ref,
            run.customer,
            idempotency_key=run.tenant_id,
            test_mode=run.request.test_mode,
        )
        if isinstance(result, ProvisioningError):
            return result
        run.customer_ref = result
        return None

    async def _register(self, run: ProvisioningRun) -> StepResult:
        request = run.request
        result = await self.registrar.register(
            tenant_id=run.tenant_id,
            business_name=request.business_name,
            email=request.owner_email,
            phone=request.owner_phone,
            business_category=request.business_category,
            tier=request.tier,
            flow=request.flow,
            payment_customer_ref=run.customer_ref,
        )
        if isinstance(result, ProvisioningError):
            return result
        run.registration = result
        return None

    async def _seed_catalog(self, run: ProvisioningRun) -> StepResult:
        result = await self.catalog_seeder.seed_default_catalog(run.tenant_id, run.request.business_category)
        if isinstance(result, ProvisioningError):
            return result
        run.catalog = result
        return None

    async def _seed_owner(self, run: ProvisioningRun) -> StepResult:
        result = await self.staff_seeder.seed_owner(run.tenant_id, run.owner)
        return result if isinstance(result, ProvisioningError) else None

    async def _provision_telephony(self, run: ProvisioningRun) -> StepResult:
        request = run.request
        if request.telephony_strategy == TelephonyStrategy.USE_EXISTING:
            rules = request.forwarding_rules
            result = await self.telephony.attach_existing(
                run.tenant_id,
                request.existing_number.strip(),
                ForwardingRules(**rules.model_dump()) if rules else None,
            )
        else:
            result = await self.telephony.provision_new(run.tenant_id, request.business_name)
        if isinstance(result, ProvisioningError):
            return result
        run.phone = result
        return None

    async def _resolve_assistant(self, run: ProvisioningRun) -> StepResult:
        request = run.request
        tenant = run.registration.tenant
        # Legacy onboarding resolves the assistant before the catalog is stored
        catalog = run.catalog or catalog_for_category(request.business_category)
        context = TenantContext(
            tenant_id=run.tenant_id,
            business_name=request.business_name,
            business_category=request.business_category,
            routing_secret=run.registration.routing_secret,
            existing_assistant_id=tenant.assistant_id,
        )
        result = await self.assistants.resolve_for_tier(request.tier, context, catalog)
        if isinstance(result, ProvisioningError):
            return result
        run.assistant = result

        recorded = await self.registrar.record_assistant(run.tenant_id, result)
        if isinstance(recorded, ProvisioningError):
            logger.warning(f"Saga: assistant for tenant '{run.tenant_id}' not recorded early: {recorded.details}")
        return None

    async def _link(self, run: ProvisioningRun) -> StepResult:
        return await self.linker.link(run.phone, run.assistant)

    async def _finalize(self, run: ProvisioningRun) -> StepResult:
        result = await self.registrar.finalize(run.tenant_id, run.phone.number, run.assistant)
        if isinstance(result, ProvisioningError):
            return result
        run.tenant = result
        run.outcome = ProvisioningOutcome(
            tenant_id=result.id,
            slug=result.slug,
            business_name=result.business_name,
            phone_number=run.phone.number,
            existing_owner_phone=run.request.owner_phone,
            assistant_id=run.assistant.assistant_id,
            assistant_kind=run.assistant.kind,
            tier=result.tier,
            trial_ends_at=result.trial_ends_at,
            provisioned_at=datetime.now(timezone.utc),
        )
        return None

    async def _notify(self, run: ProvisioningRun) -> StepResult:
        first_name, _ = split_owner_name(run.owner)
        return await self.notifier.send_welcome(
            run.outcome,
            owner_email=run.request.owner_email,
            owner_first_name=first_name,
            cancellation_token=run.registration.cancellation_token,
        )
