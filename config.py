"""Application configuration — environment variables and derived constants.

Loads ``BOT_TOKEN``, ``API_URL``, ``REQUEST_TIMEOUT`` and
``KEYBOARD_REMOVED_TEXT`` from the environment via ``python-dotenv``.  All
values are resolved at import time so other modules can ``from config import …``
without repeated lookups.
"""

# ── stdlib ───────────────────────────────────────────────────────────────────
import os

# ── third-party ──────────────────────────────────────────────────────────────
from dotenv import load_dotenv

# ── core ─────────────────────────────────────────────────────────────────────
from core.logger import WolfgramLogger

# ── Environment bootstrap ────────────────────────────────────────────────────
load_dotenv()

logger = WolfgramLogger.get_logger()

DEFAULT_API_URL = "https://api.telegram.org/bot"
DEFAULT_TIMEOUT = 10


# ── Helper functions (private) ───────────────────────────────────────────────


def _parse_timeout(raw: str | None) -> int:
    """Parse ``REQUEST_TIMEOUT`` into a positive number of seconds.

    Missing, non-numeric or non-positive values fall back to
    :data:`DEFAULT_TIMEOUT`.
    """
    if not raw:
        return DEFAULT_TIMEOUT
    try:
        value = int(raw.strip())
    except ValueError:
        return DEFAULT_TIMEOUT
    return value if value > 0 else DEFAULT_TIMEOUT


# ── Public constants ─────────────────────────────────────────────────────────

BOT_TOKEN: str = os.environ.get("BOT_TOKEN", "").strip()
API_URL: str = os.environ.get("API_URL", DEFAULT_API_URL).strip() or DEFAULT_API_URL
REQUEST_TIMEOUT: int = _parse_timeout(os.environ.get("REQUEST_TIMEOUT"))
KEYBOARD_REMOVED_TEXT: str = os.environ.get("KEYBOARD_REMOVED_TEXT") or "Keyboard deleted"


# ── Startup diagnostics ─────────────────────────────────────────────────────

if BOT_TOKEN:
    logger.info("Config loaded — BOT_TOKEN is set", extra={"api_url": API_URL})
else:
    logger.warning("Config loaded — BOT_TOKEN is NOT set, network calls will fail")

logger.debug("Request timeout resolved", extra={"request_timeout": REQUEST_TIMEOUT})
