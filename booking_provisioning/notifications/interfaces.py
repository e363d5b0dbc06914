# booking_provisioning/notifications/interfaces.py
from abc import ABC, abstractmethod
from typing import Optional


class AbstractEmailSender(ABC):
    """Outbound email capability. Implementations raise PlatformApiError on failure."""

    @abstractmethod
    async def send(self, to: str, subject: str, html: str) -> Optional[str]:
        """Send one message and return the provider's message id, if any."""
        pass
