# booking_provisioning/cli/config.py
import os
from dotenv import load_dotenv
from pathlib import Path

# booking_provisioning/cli/config.py -> three parents up is the project root
project_root = Path(__file__).parent.parent.parent.resolve()

load_dotenv(dotenv_path=project_root / '.env', override=True)

PROVISIONING_CLI_API_BASE_URL = os.getenv("PROVISIONING_CLI_API_BASE_URL", "http://127.0.0.1:8000")

# Admin API key for authenticated operations
PROVISIONING_CLI_ADMIN_API_KEY = os.getenv("ADMIN_API_KEY")
