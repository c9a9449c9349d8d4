"""Application configuration: environment variables and derived constants.

Loads the bot token, HTTP settings and admin ids from the environment via
``python-dotenv``.  All values are resolved at import time so other modules
can ``from sutradhar.config import …`` without repeated lookups.
"""

# ── stdlib ───────────────────────────────────────────────────────────────────
import os

# ── third-party ──────────────────────────────────────────────────────────────
from dotenv import load_dotenv

# ── core ─────────────────────────────────────────────────────────────────────
from sutradhar.core.logger import SutradharLogger
from sutradhar.sdk.transport import DEFAULT_BASE_URL

# ── Environment bootstrap ────────────────────────────────────────────────────
load_dotenv()

# ── Logger (used for startup diagnostics at the bottom of this module) ───────
logger = SutradharLogger.get_logger()


# ── Helper functions (private) ───────────────────────────────────────────────


def _parse_ids(raw: str | None) -> list[int]:
    """Parse a comma-separated string of Telegram ids into a list of ints.

    Non-numeric tokens are skipped with a warning.
    """
    if not raw:
        return []
    result: list[int] = []
    for token in raw.split(","):
        token = token.strip()
        if not token:
            continue
        try:
            result.append(int(token))
        except ValueError:
            logger.warning("Ignoring non-numeric admin id", extra={"value": token})
    return result


def _parse_number(name: str, default, cast=int):
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return cast(raw)
    except ValueError:
        logger.warning("Invalid numeric setting, using default", extra={"setting": name, "value": raw, "default": default})
        return default


def _parse_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() not in ("0", "false", "no", "off")


# ── Public constants ─────────────────────────────────────────────────────────

BOT_TOKEN: str | None = os.environ.get("BOT_TOKEN")
API_BASE_URL: str = os.environ.get("API_BASE_URL") or DEFAULT_BASE_URL
HTTP_TIMEOUT: float = _parse_number("HTTP_TIMEOUT", 10.0, float)
HTTP_RETRIES: int = _parse_number("HTTP_RETRIES", 3)
RETRY_DELAY: float = _parse_number("RETRY_DELAY", 1.0, float)
VERIFY_SSL: bool = _parse_bool("VERIFY_SSL", True)
HTTP_PROXY: str | None = os.environ.get("HTTP_PROXY") or None
POLL_TIMEOUT: int = _parse_number("POLL_TIMEOUT", 30)
ADMIN_IDS: list[int] = _parse_ids(os.environ.get("ADMIN_IDS"))


# ── Startup diagnostics ─────────────────────────────────────────────────────

if BOT_TOKEN:
    logger.info("Config loaded: BOT_TOKEN is set", extra={"api_base_url": API_BASE_URL})
else:
    logger.warning("Config loaded: BOT_TOKEN is NOT set")

if ADMIN_IDS:
    logger.info("ADMIN_IDS loaded", extra={"admin_ids": ADMIN_IDS})
else:
    logger.debug("No ADMIN_IDS configured in environment")

if not VERIFY_SSL:
    logger.warning("TLS certificate verification is disabled")
