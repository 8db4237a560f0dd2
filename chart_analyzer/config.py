"""
Environment configuration.
Values come from the process environment, with a local .env loaded first.
"""

import logging
import os

from dotenv import load_dotenv

load_dotenv()

# ============================================================
# GEMINI
# ============================================================

GEMINI_API_KEY_ENV = "GEMINI_API_KEY"

GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
GEMINI_TEMPERATURE = float(os.getenv("GEMINI_TEMPERATURE", 0.1))
GEMINI_TOP_P = float(os.getenv("GEMINI_TOP_P", 0.95))
GEMINI_MAX_OUTPUT_TOKENS = int(os.getenv("GEMINI_MAX_OUTPUT_TOKENS", 8192))

# ============================================================
# SERVER
# ============================================================


def resolve_log_level(name) -> int:
    """Map a level name like "debug" to its logging constant; unknown names fall back to INFO."""
    level = getattr(logging, (name or "").strip().upper(), None)
    return level if isinstance(level, int) else logging.INFO


LOG_LEVEL = resolve_log_level(os.getenv("LOG_LEVEL", "INFO"))
PORT = int(os.getenv("PORT", 8002))


def get_gemini_api_key():
    """Read the key per request so a redeployed secret is picked up without a restart."""
    return os.getenv(GEMINI_API_KEY_ENV) or None
