# booking_provisioning/main.py
from fastapi import FastAPI
from contextlib import asynccontextmanager
import logging
from typing import Dict, Optional
import httpx
from dotenv import load_dotenv
load_dotenv()

from .settings import settings
from .storage.sqlite_base import open_sqlite_connection, close_sqlite_connection
from .tenants.sqlite_tenant_store import SQLiteTenantStore
from .tenants.storage_interfaces import TenantStoreError
from .tenants.registrar import TenantRegistrar
from .tenants.catalog import CatalogSeeder
from .tenants.staff import StaffSeeder
from .tenants.endpoints import tenants_admin_router
from .payments.authorizer import PaymentAuthorizer
from .telephony.provisioner import TelephonyProvisioner
from .telephony.assistants import AssistantProvisioner, AssistantLinker
from .notifications.dispatcher import NotificationDispatcher
from .external_services.stripe_service import StripePaymentGateway
from .external_services.vapi_service import VapiVoicePlatform
from .external_services.resend_service import ResendEmailSender
from .saga.coordinator import SagaCoordinator
from .saga.endpoints import provisioning_router
from .utils.security import FernetEncryptor

if not logging.getLogger().hasHandlers():
    logging.basicConfig(
        level="DEBUG" if settings.debug_mode else "INFO",
        format='%(asctime)s - %(name)s [%(levelname)s] - %(message)s'
    )

logger = logging.getLogger(__name__)
logger.setLevel(logging.DEBUG if settings.debug_mode else logging.INFO)


def _platform_client(base_url: str, api_key: Optional[str], name: str) -> httpx.AsyncClient:
    if not api_key:
        logger.warning(f"{name} API key is not configured; calls to {base_url} will be rejected.")
    headers = {"Authorization": f"Bearer {api_key}"} if api_key else {}
    return httpx.AsyncClient(
        base_url=base_url,
        headers=headers,
        timeout=httpx.Timeout(settings.external_call_timeout_seconds),
    )


def build_saga_coordinator(
    tenant_store: SQLiteTenantStore,
    stripe_client: httpx.AsyncClient,
    vapi_client: httpx.AsyncClient,
    resend_client: httpx.AsyncClient,
) -> SagaCoordinator:
    """Wire every saga component to its injected capability."""
    voice_platform = VapiVoicePlatform(vapi_client)
    return SagaCoordinator(
        payment_authorizer=PaymentAuthorizer(
            StripePaymentGateway(stripe_client),
            bypass_enabled=settings.payment_bypass_enabled,
        ),
        registrar=TenantRegistrar(tenant_store, encryptor=FernetEncryptor(settings.encryption_key)),
        catalog_seeder=CatalogSeeder(tenant_store),
        staff_seeder=StaffSeeder(tenant_store),
        telephony=TelephonyProvisioner(voice_platform, tenant_store),
        assistants=AssistantProvisioner(voice_platform),
        linker=AssistantLinker(voice_platform),
        notifier=NotificationDispatcher(ResendEmailSender(resend_client, settings.notification_from_address)),
    )


@asynccontextmanager
async def provisioning_app_lifespan(app_instance: FastAPI):
    """
    Builds the SQLite connection, the tenant store, the platform HTTP clients
    and the saga coordinator, and releases them in reverse order on shutdown.
    """
    logger.info("Application startup initiated.")
    conn = open_sqlite_connection(settings.sqlite_db_path)
    tenant_store = SQLiteTenantStore(conn)
    await tenant_store.initialize()

    stripe_client = _platform_client(settings.stripe_api_base, settings.stripe_secret_key, "Stripe")
    vapi_client = _platform_client(settings.vapi_api_base, settings.vapi_api_key, "Vapi")
    resend_client = _platform_client(settings.resend_api_base, settings.resend_api_key, "Resend")

    app_instance.state.tenant_store = tenant_store
    app_instance.state.saga_coordinator = build_saga_coordinator(
        tenant_store, stripe_client, vapi_client, resend_client
    )
    logger.info("Provisioning components initialized.")

    try:
        yield
    finally:
        logger.info("Application shutdown initiated.")
        for client in (resend_client, vapi_client, stripe_client):
            await client.aclose()
        await tenant_store.teardown()
        close_sqlite_connection(conn)
        logger.info("All components torn down.")


app = FastAPI(
    title=settings.app_name,
    debug=settings.debug_mode,
    version="0.1.0",
    lifespan=provisioning_app_lifespan
)


@app.get("/")
async def root_api():
    return {"message": f"Welcome to {settings.app_name}!"}


@app.get("/health")
async def health_api():
    """Health check that validates storage connectivity."""
    store_statuses: Dict[str, str] = {}
    all_healthy = True
    tenant_store = getattr(app.state, "tenant_store", None)
    if tenant_store is None:
        store_statuses["sqlite_main_db"] = "not initialized"
        all_healthy = False
    else:
        try:
            await tenant_store.ping()
            store_statuses["sqlite_main_db"] = "healthy"
        except TenantStoreError as e:
            store_statuses["sqlite_main_db"] = f"unhealthy: {e}"
            all_healthy = False

    return {
        "status": "healthy" if all_healthy else "degraded",
        "environment": settings.environment,
        "details": store_statuses
    }


app.include_router(provisioning_router)
app.include_router(tenants_admin_router)

logger.info(f"{settings.app_name} initialized. Routers mounted.")
