import logging
import os
from pathlib import Path

import uvicorn
from dotenv import load_dotenv

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s RUN_DEV.PY - [%(levelname)s] - %(message)s'
)
logger = logging.getLogger("run_dev_script")

TRUTHY = ("true", "1", "yes", "on", "t")
SECRET_VARS = ("ADMIN_API_KEY", "ENCRYPTION_KEY", "STRIPE_SECRET_KEY", "VAPI_API_KEY", "RESEND_API_KEY")
PLAIN_VARS = ("ENVIRONMENT", "DEBUG_MODE", "SQLITE_DB_PATH", "PAYMENT_TEST_BYPASS_ALLOWED", "WEBHOOK_BASE_URL")


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in TRUTHY


def main() -> None:
    dotenv_path = Path(__file__).parent.resolve() / ".env"
    if dotenv_path.exists():
        load_dotenv(dotenv_path=dotenv_path, override=True)
        logger.info(f"Loaded environment from {dotenv_path}")
    else:
        logger.warning(f"No .env at {dotenv_path}; using OS environment and settings defaults.")

    for name in PLAIN_VARS:
        logger.info(f"{name}: {os.getenv(name)}")
    for name in SECRET_VARS:
        logger.info(f"{name}: {'********' if os.getenv(name) else 'None'}")

    host = os.getenv("DEV_SERVER_HOST", "127.0.0.1")
    port = int(os.getenv("DEV_SERVER_PORT", "8000"))
    reload = _env_flag("DEV_SERVER_RELOAD", str(_env_flag("DEBUG_MODE", "false")))

    logger.info(f"Serving booking_provisioning on http://{host}:{port} (reload={reload})")
    uvicorn.run(
        "booking_provisioning.main:app",
        host=host,
        port=port,
        log_level=os.getenv("DEV_SERVER_LOG_LEVEL", "info").lower(),
        reload=reload,
    )


if __name__ == "__main__":
    main()
