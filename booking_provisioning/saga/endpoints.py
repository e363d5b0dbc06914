# booking_provisioning/saga/endpoints.py
import logging
from datetime import datetime, timezone
from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from ..dependencies import get_saga_coordinator
from ..errors import InvalidRequestError, ProvisioningError
from ..tenants.catalog import supported_categories
from ..tenants.models import SubscriptionTier
from .coordinator import SagaCoordinator
from .models import ProvisionTenantRequest, TelephonyStrategy

logger = logging.getLogger(__name__)

SERVICE_NAME = "tenant-provisioning"

provisioning_router = APIRouter(tags=["Provisioning"])


def _describe_validation_error(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        location = ".".join(str(p) for p in item.get("loc", ()) if p != "__root__")
        message = item.get("msg", "invalid value").removeprefix("Value error, ")
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts)


def _error_response(error: ProvisioningError) -> JSONResponse:
    return JSONResponse(status_code=error.status_code, content=error.to_response())


@provisioning_router.post("/provision")
async def provision_tenant_endpoint(
    request: Request,
    coordinator: Annotated[SagaCoordinator, Depends(get_saga_coordinator)],
):
    """
    Provision a tenant end to end.

    Returns the outcome with 200, or an error body `{error, details, errorType}`
    with 400 (malformed input), 402 (card declined), 409 (duplicate email or
    slug) or 500 (downstream failure).
    """
    try:
        body = await request.json()
    except ValueError:
        return _error_response(InvalidRequestError("Request body must be a JSON object."))
    try:
        provision_request = ProvisionTenantRequest.model_validate(body)
    except ValidationError as e:
        details = _describe_validation_error(e)
        logger.warning(f"API: Rejected provisioning request: {details}")
        return _error_response(InvalidRequestError(details))

    logger.info(
        f"API: Received provisioning request for '{provision_request.business_name}' "
        f"(tier={provision_request.tier.value}, flow={provision_request.flow.value})"
    )
    result = await coordinator.provision_tenant(provision_request)
    if isinstance(result, ProvisioningError):
        logger.warning(f"API: Provisioning failed for '{provision_request.business_name}': {result!r}")
        return _error_response(result)
    return JSONResponse(status_code=status.HTTP_200_OK, content=result.model_dump(by_alias=True, mode="json"))


@provisioning_router.get("/provision")
async def provisioning_descriptor_endpoint():
    """Static capability descriptor. Takes no input and always answers 200."""
    return {
        "service": SERVICE_NAME,
        "status": "active",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "features": [
            "zero_amount_payment_authorization",
            "default_service_catalog",
            "owner_staff_record",
            "dedicated_phone_number",
            "existing_number_forwarding",
            "shared_assistant",
            "dedicated_assistant",
            "welcome_email",
        ],
        "tiers": [tier.value for tier in SubscriptionTier],
        "telephonyStrategies": [strategy.value for strategy in TelephonyStrategy],
        "businessCategories": supported_categories(),
    }
