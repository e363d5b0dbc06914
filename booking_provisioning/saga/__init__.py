# booking_provisioning/saga/__init__.py
"""
Tenant provisioning saga.

The coordinator and its HTTP router live in `saga.coordinator` and
`saga.endpoints`; this package root only exposes the request/outcome models.
"""

from .models import ProvisionTenantRequest, ProvisioningOutcome, TelephonyStrategy

__all__ = ["ProvisionTenantRequest", "ProvisioningOutcome", "TelephonyStrategy"]
