# booking_provisioning/settings.py
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from typing import Literal, Optional
import logging
from pathlib import Path

logger = logging.getLogger(__name__)
if not logging.getLogger().hasHandlers():
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s SETTINGS.PY - [%(levelname)s] - %(message)s'
    )

# booking_provisioning/settings.py -> project root is one directory up
PROJECT_ROOT = Path(__file__).parent.parent.resolve()
DOTENV_PATH = PROJECT_ROOT / ".env"

if DOTENV_PATH.exists():
    logger.info(f"SETTINGS.PY: .env file FOUND at explicit path: {DOTENV_PATH}")
else:
    logger.info(
        f"SETTINGS.PY: .env file NOT FOUND at {DOTENV_PATH}. "
        "Relying on OS env vars or defaults."
    )


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    app_name: str = "Booking Provisioning Service"
    environment: Literal["development", "staging", "production"] = "development"
    debug_mode: bool = False

    # SQLite configuration
    sqlite_db_path: str = "./booking_provisioning_data.sqlite3"

    # Security settings
    admin_api_key: Optional[str] = Field(
        default=None,
        description="API Key for accessing admin routes."
    )
    encryption_key: Optional[str] = Field(
        default=None,
        description="Fernet key used to encrypt assistant routing secrets. MUST be set for production."
    )
    cancellation_token_bytes_length: int = 32
    routing_secret_bytes_length: int = 32

    # Payment processor
    stripe_secret_key: Optional[str] = None
    stripe_api_base: str = "https://api.stripe.com/v1"
    payment_test_bypass_allowed: bool = Field(
        default=False,
        description="Allows test-mode requests to skip card validation. Ignored in production."
    )

    # Voice / telephony platform
    vapi_api_key: Optional[str] = None
    vapi_api_base: str = "https://api.vapi.ai"
    shared_assistant_id: str = "8ab7e000-aea8-4141-a471-33133219a471"
    dedicated_assistant_model_provider: str = "openai"
    dedicated_assistant_model: str = "gpt-4o"
    assistant_voice_provider: str = "11labs"
    assistant_voice_id: str = "sarah"
    webhook_base_url: str = "http://localhost:8000"

    # Email
    resend_api_key: Optional[str] = None
    resend_api_base: str = "https://api.resend.com"
    notification_from_address: str = "Booking Platform <welcome@example.com>"
    dashboard_base_url: str = "http://localhost:3000"

    external_call_timeout_seconds: float = 15.0
    rapid_setup_trial_days: int = 7
    legacy_trial_days: int = 14

    model_config = SettingsConfigDict(
        env_file=DOTENV_PATH if DOTENV_PATH.exists() else None,
        extra="ignore",
        env_file_encoding='utf-8'
    )

    @property
    def payment_bypass_enabled(self) -> bool:
        """Test-mode payment bypass is never honoured in production."""
        return self.payment_test_bypass_allowed and self.environment != "production"


settings = Settings()

# Sensitive values are masked
logger.info(
    f"SETTINGS.PY: Post-Settings() settings.environment: '{settings.environment}', "
    f"debug_mode: {settings.debug_mode}"
)
logger.info(
    f"SETTINGS.PY: Post-Settings() settings.admin_api_key: "
    f"{'********' if settings.admin_api_key else 'None'}"
)
logger.info(
    f"SETTINGS.PY: Post-Settings() settings.stripe_secret_key: "
    f"{'********' if settings.stripe_secret_key else 'None'}, "
    f"vapi_api_key: {'********' if settings.vapi_api_key else 'None'}, "
    f"resend_api_key: {'********' if settings.resend_api_key else 'None'}"
)
logger.info(
    f"SETTINGS.PY: Post-Settings() settings.payment_bypass_enabled: {settings.payment_bypass_enabled}"
)
