"""
PROMPT BUILDER MODULE
=====================

Turns the Jarvis persona template from config.py into the system message for
one request. Two things vary per call:

  - user_name: who Jarvis is talking to ("friend" when not given).
  - mode: "live" asks for 1-3 sentence answers; anything else ("record")
    relaxes the length rules for longer recorded questions.

Live mode also caps the question itself: more than LIVE_MODE_MAX_WORDS cleaned
words is rejected before Groq is called.
"""

from typing import Optional, Tuple

from app.utils.text_cleaning import split_words
from config import (
    ASSISTANT_NAME,
    DEFAULT_MODE,
    DEFAULT_USER_NAME,
    JARVIS_PERSONA_PROMPT,
    LIVE_LENGTH_RULES,
    LIVE_MODE_MAX_WORDS,
    RECORD_LENGTH_RULES,
)

LIVE_MODE = "live"
RECORD_MODE = "record"

TOO_LONG_MESSAGE = "That's a bit long! Try using record mode for longer questions."


def normalize_mode(mode: Optional[str]) -> str:
    """Missing mode means live; only the exact value "live" is strict, everything else is relaxed."""
    if not mode:
        return DEFAULT_MODE
    return LIVE_MODE if mode == LIVE_MODE else RECORD_MODE


def is_too_long_for_live(cleaned_text: str, max_words: int = LIVE_MODE_MAX_WORDS) -> bool:
    return len(split_words(cleaned_text)) > max_words


def build_system_prompt(user_name: Optional[str] = None, mode: Optional[str] = None) -> str:
    name = (user_name or "").strip() or DEFAULT_USER_NAME
    length_rules = LIVE_LENGTH_RULES if normalize_mode(mode) == LIVE_MODE else RECORD_LENGTH_RULES
    return JARVIS_PERSONA_PROMPT.format(
        assistant_name=ASSISTANT_NAME,
        user_name=name,
        length_rules=length_rules,
    )


def build_messages(
    cleaned_text: str,
    user_name: Optional[str] = None,
    mode: Optional[str] = None,
) -> Tuple[str, str]:
    """Return (system_prompt, user_message) for one completion."""
    return build_system_prompt(user_name, mode), cleaned_text
