from dotenv import load_dotenv
import os

# Load environment variables
load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if not value:
        return default
    return int(value)


DATABASE_URL = os.getenv("DATABASE_URL")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Comma separated; "*" allows every origin
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv(
        "CORS_ORIGINS",
        "http://localhost:3000,https://localhost:3000,http://127.0.0.1:3000,https://127.0.0.1:3000",
    ).split(",")
    if origin.strip()
]

# Role granted to new registrations and used when an account is approved without an explicit role
DEFAULT_ROLE = os.getenv("DEFAULT_ROLE", "employee")

REQUIRE_DECLINE_REASON = _env_bool("REQUIRE_DECLINE_REASON", True)

# Optional approval stages
ACCOMMODATION_DEPARTMENT_STAGE = _env_bool("ACCOMMODATION_DEPARTMENT_STAGE", False)
ACCOMMODATION_MD_STAGE = _env_bool("ACCOMMODATION_MD_STAGE", False)
FACILITY_MD_STAGE = _env_bool("FACILITY_MD_STAGE", False)

MAX_GUESTS = _env_int("MAX_GUESTS", 20)
MAX_ATTENDEES = _env_int("MAX_ATTENDEES", 500)
MAX_ITEM_QUANTITY = _env_int("MAX_ITEM_QUANTITY", 50)

NOTIFICATION_POLL_SECONDS = _env_int("NOTIFICATION_POLL_SECONDS", 5)
