"""Runtime configuration, read once from the environment"""
import logging
import os

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

load_dotenv()


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name, "")
    if not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("%s=%r is not an integer, using %d", name, raw, default)
        return default


# Optional GitHub credential; unauthenticated search is allowed but rate limited harder
GITHUB_TOKEN = os.getenv("GITHUB_TOKEN", "").strip()

SENTRY_DSN = os.getenv("SENTRY_DSN", "")
ENVIRONMENT = os.getenv("ENVIRONMENT", "production")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Upstream responses are reused for an hour
CACHE_TTL_SECONDS = _int_env("CACHE_TTL_SECONDS", 60 * 60)

MIN_PROTOCOL_TVL = 1_000_000
MAX_PROTOCOLS = 30

GITHUB_MAX_QUERIES = 5
GITHUB_REQUEST_DELAY = 0.5  # seconds between search calls
MAX_REPOS = 50

FORTNIGHT_DAYS = 14
TOP_N_METRICS = 10

VERSION = "0.1.0"
