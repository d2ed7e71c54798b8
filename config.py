"""
CONFIGURATION MODULE
====================

PURPOSE:
  Central place for all J.A.R.V.I.S voice relay settings: the Groq API key,
  model parameters, throttling limits, history retention and the Jarvis
  persona prompt. Everything lives in memory; nothing here points at disk.

WHAT THIS FILE DOES:
  - Loads environment variables from .env (so API keys stay out of code).
  - Exposes GROQ_API_KEY / GROQ_MODEL and the completion parameters.
  - Defines the abuse controls: rate limit window, cooldown, tracked clients.
  - Defines history retention, prune interval and the /history page size.
  - Holds the persona prompt template that defines Jarvis's voice.

USAGE:
  Import what you need: `from config import GROQ_API_KEY, PORT, JARVIS_PERSONA_PROMPT`
  main.py builds the application context from these values.
"""

import os
import logging
from dotenv import load_dotenv


# -----------------------------------------------------------------------------
# LOGGING
# -----------------------------------------------------------------------------
logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# ENVIRONMENT
# -----------------------------------------------------------------------------
# Load environment variables from .env file (if it exists).
load_dotenv()


def _env_int(name: str, default: int) -> int:
    """Read an int from the environment; fall back to default on missing or bad values."""
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring invalid integer for %s: %r", name, raw)
        return default


def _env_float(name: str, default: float) -> float:
    """Read a float from the environment; fall back to default on missing or bad values."""
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring invalid number for %s: %r", name, raw)
        return default


# ============================================================================
# SERVER
# ============================================================================
HOST = os.getenv("HOST", "0.0.0.0")
PORT = _env_int("PORT", 5000)

# Origins allowed to call the API from a browser. "*" lets any front end in.
CORS_ALLOW_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ALLOW_ORIGINS", "*").split(",")
    if origin.strip()
]

# ============================================================================
# GROQ API CONFIGURATION
# ============================================================================
# Groq serves an OpenAI-compatible chat completions endpoint. Older deployments
# set the key as OPENAI_API_KEY, so that name is still honoured.
GROQ_API_KEY = (os.getenv("GROQ_API_KEY", "").strip() or os.getenv("OPENAI_API_KEY", "").strip())
GROQ_MODEL = os.getenv("GROQ_MODEL", "openai/gpt-oss-120b")

# Replies are spoken aloud, so they are kept short at the source too.
MAX_COMPLETION_TOKENS = _env_int("MAX_COMPLETION_TOKENS", 150)
COMPLETION_TEMPERATURE = _env_float("COMPLETION_TEMPERATURE", 0.7)
# Seconds to wait for Groq before giving up. The call is never retried.
GROQ_API_TIMEOUT = _env_float("GROQ_API_TIMEOUT", 15.0)

# ============================================================================
# ABUSE CONTROLS
# ============================================================================
# Sliding window: at most RATE_LIMIT_MAX_REQUESTS per client per window.
RATE_LIMIT_MAX_REQUESTS = _env_int("RATE_LIMIT_MAX_REQUESTS", 5)
RATE_LIMIT_WINDOW_SECONDS = _env_float("RATE_LIMIT_WINDOW_SECONDS", 60.0)
# Minimum gap between two requests from the same client.
COOLDOWN_SECONDS = _env_float("COOLDOWN_SECONDS", 3.0)
# Upper bound on remembered clients per gate; least recently seen are evicted first.
MAX_TRACKED_CLIENTS = _env_int("MAX_TRACKED_CLIENTS", 10_000)

# ============================================================================
# CONVERSATION HISTORY
# ============================================================================
HISTORY_RETENTION_DAYS = _env_float("HISTORY_RETENTION_DAYS", 7)
HISTORY_PRUNE_INTERVAL_HOURS = _env_float("HISTORY_PRUNE_INTERVAL_HOURS", 24)
HISTORY_LIMIT = _env_int("HISTORY_LIMIT", 20)

# ============================================================================
# REQUEST SHAPING
# ============================================================================
# Live mode is for quick spoken questions; longer ones belong in record mode.
LIVE_MODE_MAX_WORDS = _env_int("LIVE_MODE_MAX_WORDS", 25)
DEFAULT_USER_NAME = "friend"
DEFAULT_MODE = "live"

# Random pause before replying so answers don't land unnaturally fast.
REPLY_DELAY_MIN_SECONDS = _env_float("REPLY_DELAY_MIN_SECONDS", 0.2)
REPLY_DELAY_MAX_SECONDS = _env_float("REPLY_DELAY_MAX_SECONDS", 0.4)

# ============================================================================
# JARVIS PERSONALITY CONFIGURATION
# ============================================================================
# {assistant_name}, {user_name} and {length_rules} are filled in per request by
# the prompt builder. Literal braces must be doubled.

ASSISTANT_NAME = (os.getenv("ASSISTANT_NAME", "").strip() or "Jarvis")

JARVIS_PERSONA_PROMPT = """You are {assistant_name}, a friendly, witty, and conversational AI assistant who behaves like a close friend.

Personality:
- Warm, engaging, and genuinely interested in the conversation
- Use casual, friendly language like you're talking to a best friend
- Use "you" and "I" to keep it personal
- Add light humor when it suits, but keep it kind
- Be supportive and show empathy when appropriate
- Ask a short follow-up question when it keeps the conversation flowing

You are talking to {user_name}.

Response Length Guidelines (CRITICAL):
{length_rules}

Formatting Rules (STRICT):
- DO NOT use markdown formatting like **bold**, *italic*, headings or bullet symbols
- DO NOT use emojis, decorative symbols or special characters
- Write plain text that sounds natural when spoken aloud

Remember: you are a voice assistant. Everything you write will be read out loud.
"""

LIVE_LENGTH_RULES = """- Keep responses SHORT: 1 to 3 sentences
- For factual questions (names, dates, lists, definitions) give the direct answer first, then at most a brief friendly comment
- For greetings be warm but brief: 1 or 2 sentences
- For bigger topics stay focused: 3 to 4 sentences at most
- Avoid long explanations unless specifically asked"""

RECORD_LENGTH_RULES = """- The user recorded a longer message, so you may answer more fully
- Stay conversational: a short paragraph is fine, a lecture is not
- Still lead with the direct answer for factual questions"""
