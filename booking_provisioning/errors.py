# booking_provisioning/errors.py
from enum import Enum
from typing import Any, Dict, Optional, TypeVar, Union

from fastapi import status
from pydantic import BaseModel


class ProvisioningError:
    """
    Base class for expected provisioning failures.

    Instances are returned as values from component methods rather than raised,
    and render as the public error body `{error, details, errorType}`.
    """

    def __init__(
        self,
        status_code: int,
        error_type: str,
        error: str,
        details: str,
        step: Optional[str] = None
    ):
        self.status_code = status_code
        self.error_type = error_type
        self.error = error
        self.details = details
        self.step = step

    def to_response(self) -> Dict[str, Any]:
        return {"error": self.error, "details": self.details, "errorType": self.error_type}

    def __repr__(self) -> str:
        return f"{type(self).__name__}(error_type={self.error_type!r}, details={self.details!r})"


class InvalidRequestError(ProvisioningError):
    """Malformed or missing request fields. Raised before any side effect."""

    def __init__(self, details: str):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            error_type="validation_error",
            error="Invalid provisioning request",
            details=details
        )


class DuplicateEmailError(ProvisioningError):
    def __init__(self, email: str):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            error_type="duplicate_email",
            error="Email already registered",
            details=(
                f"An account with the email {email} already exists. "
                "Please use a different email address or sign in to your existing account."
            ),
            step="register"
        )


class DuplicateSlugError(ProvisioningError):
    def __init__(self, slug: str):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            error_type="duplicate_slug",
            error="Business name conflict",
            details=(
                f"The business identifier '{slug}' is already taken. "
                "Please try again or use a slightly different business name."
            ),
            step="register"
        )


class PaymentError(ProvisioningError):
    """Card validation failed. Terminal and user-fixable; no tenant exists."""

    def __init__(self, details: str):
        super().__init__(
            status_code=status.HTTP_402_PAYMENT_REQUIRED,
            error_type="payment_error",
            error="Payment method validation failed",
            details=details,
            step="payment"
        )


class StoreError(ProvisioningError):
    def __init__(self, details: str, step: Optional[str] = None):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error_type="store_error",
            error="Failed to persist business record",
            details=details,
            step=step
        )


class TelephonyError(ProvisioningError):
    def __init__(self, details: str):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error_type="telephony_error",
            error="Failed to provision phone number",
            details=details,
            step="telephony"
        )


class AssistantError(ProvisioningError):
    def __init__(self, details: str):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error_type="assistant_error",
            error="Failed to provision AI assistant",
            details=details,
            step="assistant"
        )


class WarningKind(str, Enum):
    LINK = "link_warning"
    NOTIFICATION = "notification_warning"
    SEEDING = "seeding_warning"


class ProvisioningWarning(BaseModel):
    """A non-fatal step failure carried in the provisioning outcome."""
    kind: WarningKind
    step: str
    message: str


T = TypeVar("T")

# Every component method returns either its value or a ProvisioningError
Result = Union[T, ProvisioningError]
