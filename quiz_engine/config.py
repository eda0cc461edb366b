import os
from dotenv import load_dotenv

# ---------------------------
# Load environment variables
# ---------------------------
load_dotenv()


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return int(value)


# ---------------------------
# Application
# ---------------------------
APP_NAME = os.getenv("APP_NAME", "Classroom Quiz Engine")
APP_VERSION = os.getenv("APP_VERSION", "1.0.0")
DEBUG = os.getenv("DEBUG", "false").lower() in ("1", "true", "yes")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# ---------------------------
# Quiz policy
# ---------------------------
MAX_ATTEMPTS_ALLOWED = _env_int("MAX_ATTEMPTS_ALLOWED", 100)
ATTEMPT_LIST_LIMIT = _env_int("ATTEMPT_LIST_LIMIT", 200)
START_ATTEMPT_RETRIES = _env_int("START_ATTEMPT_RETRIES", 3)

TITLE_MAX_LENGTH = 255
