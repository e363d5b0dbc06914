# booking_provisioning/telephony/__init__.py
"""Phone number allocation, assistant resolution and linking."""

from .interfaces import AbstractVoicePlatform, PlatformPhoneNumber
from .provisioner import TelephonyProvisioner
from .assistants import AssistantProvisioner, AssistantLinker, TenantContext, build_system_prompt

__all__ = [
    "AbstractVoicePlatform",
    "PlatformPhoneNumber",
    "TelephonyProvisioner",
    "AssistantProvisioner",
    "AssistantLinker",
    "TenantContext",
    "build_system_prompt",
]
