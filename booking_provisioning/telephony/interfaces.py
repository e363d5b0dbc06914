# booking_provisioning/telephony/interfaces.py
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from pydantic import BaseModel


class PlatformPhoneNumber(BaseModel):
    id: str
    number: Optional[str] = None


class AbstractVoicePlatform(ABC):
    """
    Telephony / voice-AI platform capability.

    Implementations raise PlatformApiError on any non-2xx response or timeout.
    """

    @abstractmethod
    async def create_phone_number(self, name: str) -> PlatformPhoneNumber:
        """Allocate a new platform-owned number, initially unbound."""
        pass

    @abstractmethod
    async def create_assistant(self, assistant_config: Dict[str, Any]) -> str:
        """Register an assistant and return its id."""
        pass

    @abstractmethod
    async def get_assistant(self, assistant_id: str) -> Dict[str, Any]:
        pass

    @abstractmethod
    async def update_phone_number(self, phone_id: str, assistant_id: str) -> None:
        """Bind a number to an assistant, overwriting any previous binding."""
        pass
