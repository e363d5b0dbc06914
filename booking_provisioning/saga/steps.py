# booking_provisioning/saga/steps.py
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, List, Optional, Union

from ..errors import ProvisioningError, ProvisioningWarning, WarningKind
from ..payments.interfaces import CustomerIdentity
from ..tenants.models import (
    AssistantAssignment, OwnerContact, PhoneNumberAssignment, ServiceCatalogEntry, TenantInDB
)
from ..tenants.registrar import Registration
from .models import ProvisionTenantRequest, ProvisioningOutcome


class StepFailurePolicy(str, Enum):
    ABORT = "abort"
    WARN_AND_CONTINUE = "warn_and_continue"


@dataclass
class ProvisioningRun:
    """Mutable state of one provisioning attempt, keyed by its pre-allocated tenant id."""
    tenant_id: str
    request: ProvisionTenantRequest
    owner: OwnerContact
    customer: CustomerIdentity
    customer_ref: Optional[str] = None
    registration: Optional[Registration] = None
    catalog: List[ServiceCatalogEntry] = field(default_factory=list)
    phone: Optional[PhoneNumberAssignment] = None
    assistant: Optional[AssistantAssignment] = None
    tenant: Optional[TenantInDB] = None
    outcome: Optional[ProvisioningOutcome] = None
    warnings: List[ProvisioningWarning] = field(default_factory=list)

    @property
    def registered(self) -> bool:
        return self.registration is not None


StepResult = Union[None, ProvisioningError, ProvisioningWarning]


@dataclass
class SagaStep:
    """
    One provisioning step.

    `on_failure` decides what an error result does: ABORT ends the saga (and
    marks a registered tenant failed), WARN_AND_CONTINUE records a warning of
    `warning_kind` and moves on.
    """
    name: str
    action: Callable[[ProvisioningRun], Awaitable[StepResult]]
    on_failure: StepFailurePolicy = StepFailurePolicy.ABORT
    warning_kind: Optional[WarningKind] = None

    def __post_init__(self):
        if self.on_failure == StepFailurePolicy.WARN_AND_CONTINUE and self.warning_kind is None:
            raise ValueError(f"Step '{self.name}' continues on failure and needs a warning kind")


@dataclass
class ParallelSteps:
    """Independent steps run concurrently; all finish before the saga moves on."""
    name: str
    steps: List[SagaStep]


PlanItem = Union[SagaStep, ParallelSteps]
