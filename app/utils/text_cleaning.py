"""
TEXT CLEANING UTILITY
=====================

Two small pure functions used on either side of the Groq call:

  sanitize_input(text) - normalizes raw speech-to-text output before validation:
                         lowercase, keep only words and basic punctuation, drop
                         filler words ("uh", "like", "you know", ...), collapse spaces.
  clean_reply(text)    - makes the model's answer safe to speak: removes markdown
                         emphasis markers and any symbol a voice engine would read
                         out literally (emojis, bullets, arrows, ...).
"""

import re
from typing import Optional


# Filler words that speech-to-text picks up but carry no meaning.
FILLER_WORDS = ("uh", "uhm", "umm", "hmm", "er", "like", "you know", "ok")

_FILLER_PATTERN = re.compile(
    r"\b(?:" + "|".join(re.escape(word) for word in FILLER_WORDS) + r")\b",
    re.IGNORECASE,
)
# Everything except word characters, whitespace and . , ! ? ' "
_INPUT_DISALLOWED = re.compile(r"[^\w\s.,!?'\"]")
# Everything except word characters, whitespace and . , ! ? ; : ' " - ( )
_REPLY_DISALLOWED = re.compile(r"[^\w\s.,!?;:'\"\-()]")
_WHITESPACE = re.compile(r"\s+")


def _collapse(text: str) -> str:
    return _WHITESPACE.sub(" ", text).strip()


def sanitize_input(text: Optional[str]) -> str:
    """
    Normalize a raw utterance. Returns "" for empty or missing input.

    Each pass removes fillers, then disallowed characters, then collapses
    whitespace. A pass can expose a new filler ("you uh know" -> "you know",
    "u@h" -> "uh"), so passes repeat until nothing changes. That keeps
    sanitize_input(sanitize_input(x)) == sanitize_input(x).
    """
    if not text:
        return ""

    cleaned = text.lower()
    while True:
        stripped = _collapse(_INPUT_DISALLOWED.sub("", _FILLER_PATTERN.sub("", cleaned)))
        if stripped == cleaned:
            return cleaned
        cleaned = stripped


def split_words(text: str) -> list:
    """Split on whitespace, dropping empty tokens."""
    return [word for word in text.split() if word]


def clean_reply(text: Optional[str]) -> str:
    """Strip ** and * emphasis markers and unspeakable symbols from a model reply."""
    if not text:
        return ""
    reply = text.replace("**", "").replace("*", "")
    reply = _REPLY_DISALLOWED.sub("", reply)
    return reply.strip()
