"""Application configuration — environment variables and derived constants.

Loads the bot token, API host, polling and webhook settings from the
environment via ``python-dotenv``.  All values are resolved at import time
so the runner can ``from config import …`` without repeated lookups.  The
library packages never import this module; they take explicit arguments.
"""

# ── stdlib ───────────────────────────────────────────────────────────────────
import os

# ── third-party ──────────────────────────────────────────────────────────────
from dotenv import load_dotenv

# ── core ─────────────────────────────────────────────────────────────────────
from core.logger import TelerouteLogger

# ── Environment bootstrap ────────────────────────────────────────────────────
load_dotenv()

# ── Logger (used for startup diagnostics at the bottom of this module) ───────
logger = TelerouteLogger.get_logger()

UPDATE_MODES = ("poll", "push")


# ── Helper functions (private) ───────────────────────────────────────────────


def _parse_float(name: str, default: float) -> float:
    """Read *name* as a positive float, falling back to *default*.

    Missing values fall back silently; unparsable or non-positive values fall
    back with a warning.
    """
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Invalid number in environment, using default", extra={"variable": name, "value": raw, "default": default})
        return default
    if value <= 0:
        logger.warning("Non-positive value in environment, using default", extra={"variable": name, "value": raw, "default": default})
        return default
    return value


def _parse_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Invalid integer in environment, using default", extra={"variable": name, "value": raw, "default": default})
        return default
    if value < 0:
        logger.warning("Negative value in environment, using default", extra={"variable": name, "value": raw, "default": default})
        return default
    return value


def _parse_mode(raw: str | None) -> str:
    """Return ``"poll"`` or ``"push"``; anything else means ``"poll"``."""
    if not raw:
        return "poll"
    mode = raw.strip().lower()
    if mode not in UPDATE_MODES:
        logger.warning("Unknown UPDATE_MODE, using poll", extra={"value": raw})
        return "poll"
    return mode


# ── Public constants ─────────────────────────────────────────────────────────

BOT_TOKEN: str | None = os.environ.get("BOT_TOKEN")
API_HOST: str = os.environ.get("API_HOST") or "api.telegram.org"

UPDATE_INTERVAL: float = _parse_float("UPDATE_INTERVAL", 2.0)
POLL_TIMEOUT: int = _parse_int("POLL_TIMEOUT", 30)
REQUEST_TIMEOUT: float = _parse_float("REQUEST_TIMEOUT", 10.0)
UPDATE_MODE: str = _parse_mode(os.environ.get("UPDATE_MODE"))

WEBHOOK_HOST: str = os.environ.get("WEBHOOK_HOST") or "0.0.0.0"
WEBHOOK_PORT: int = _parse_int("WEBHOOK_PORT", 8443)
WEBHOOK_PATH: str = os.environ.get("WEBHOOK_PATH") or "/"
WEBHOOK_SECRET: str | None = os.environ.get("WEBHOOK_SECRET") or None

RESTART_DELAY: float = _parse_float("RESTART_DELAY", 5.0)


# ── Startup diagnostics ─────────────────────────────────────────────────────

if BOT_TOKEN:
    logger.info("Config loaded — BOT_TOKEN is set", extra={"api_host": API_HOST})
else:
    logger.warning("Config loaded — BOT_TOKEN is NOT set")

logger.info(
    "Update source configured",
    extra={
        "mode": UPDATE_MODE,
        "update_interval": UPDATE_INTERVAL,
        "poll_timeout": POLL_TIMEOUT,
        "webhook": f"{WEBHOOK_HOST}:{WEBHOOK_PORT}{WEBHOOK_PATH}" if UPDATE_MODE == "push" else None,
    },
)

if UPDATE_MODE == "push" and not WEBHOOK_SECRET:
    logger.warning("Push mode without WEBHOOK_SECRET — webhook requests are not authenticated")
