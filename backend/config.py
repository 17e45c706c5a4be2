import os
from dotenv import load_dotenv

load_dotenv()


def _env_int(key: str, default: int) -> int:
    val = os.getenv(key)
    if val is None or val == "":
        return default
    try:
        return int(val)
    except ValueError:
        return default


DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./survey.db")
ORIGINS = os.getenv("ORIGINS", "http://localhost:8000").split(",")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# dashboard gate (UI convenience only)
DASHBOARD_PASSWORD = os.getenv("DASHBOARD_PASSWORD", "change-me")
AUTH_COOKIE_NAME = os.getenv("AUTH_COOKIE_NAME", "dashboard_authenticated")

PAGE_SIZE = _env_int("PAGE_SIZE", 20)

# exports are stamped in a fixed zone; IST has no DST so an offset is enough
EXPORT_UTC_OFFSET_MINUTES = _env_int("EXPORT_UTC_OFFSET_MINUTES", 330)
EXPORT_TZ_LABEL = os.getenv("EXPORT_TZ_LABEL", "IST")
