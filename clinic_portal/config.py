import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes"}


API_BASE_URL = os.getenv("CLINIC_API_URL", "http://localhost:8080/api/v1").rstrip("/")

TIMEOUT = (5, 30)  # (connect, read)
HEADERS_JSON = {"Accept": "application/json", "Content-Type": "application/json"}

SESSION_FILE = Path(os.getenv("CLINIC_SESSION_FILE", str(Path.home() / ".clinic_portal" / "session.json")))
PERSIST_SESSION = _flag("CLINIC_PERSIST_SESSION", "1")

# clinic used when the logged-in staff member has no clinic of their own
DEFAULT_CLINIC_ID = os.getenv("CLINIC_DEFAULT_CLINIC", "PK001")
PAYMENTS_PAGE_SIZE = int(os.getenv("CLINIC_PAYMENTS_PAGE_SIZE", "10"))

LOG_LEVEL = os.getenv("CLINIC_LOG_LEVEL", "INFO").upper()
