# booking_provisioning/dependencies.py
import logging
from fastapi import HTTPException, Request, status, Header
from typing import Optional, Annotated, TYPE_CHECKING

from .settings import settings

if TYPE_CHECKING:
    from .tenants.storage_interfaces import AbstractTenantStore
    from .saga.coordinator import SagaCoordinator

logger = logging.getLogger(__name__)


async def get_admin_api_key(
    x_admin_api_key: Annotated[
        Optional[str],
        Header(description="The API Key for accessing admin routes.")
    ] = None
) -> str:
    """
    Validates admin API key authentication for protected admin endpoints.

    Raises HTTPException 503 when the server has no key configured, 401 when
    the header is missing and 403 when it doesn't match.
    """
    if not settings.admin_api_key:
        logger.critical("ADMIN_API_KEY is not configured on the server. Admin endpoints are effectively disabled.")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Admin API service is not configured properly (API Key missing on server).",
        )

    if not x_admin_api_key:
        logger.warning("Admin API: Missing X-Admin-API-Key header.")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated: X-Admin-API-Key header missing.",
            headers={"WWW-Authenticate": 'Basic realm="Admin Area"'},
        )

    if x_admin_api_key != settings.admin_api_key:
        logger.warning("Admin API: Invalid X-Admin-API-Key provided.")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Forbidden: Invalid API Key.",
            headers={"WWW-Authenticate": 'Basic realm="Admin Area"'},
        )

    return x_admin_api_key


async def get_tenant_store(request: Request) -> "AbstractTenantStore":
    """Tenant store built by the application lifespan."""
    store = getattr(request.app.state, "tenant_store", None)
    if store is None:
        logger.error("Tenant store requested before application startup completed.")
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Tenant store not available.")
    return store


async def get_saga_coordinator(request: Request) -> "SagaCoordinator":
    coordinator = getattr(request.app.state, "saga_coordinator", None)
    if coordinator is None:
        logger.error("Saga coordinator requested before application startup completed.")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Provisioning service not available.",
        )
    return coordinator
