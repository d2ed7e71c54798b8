"""
INPUT VALIDATOR MODULE
======================

Decides whether a transcribed utterance is worth sending to Groq. Runs before
any network call, so noise (coughs, "hahaha", half-heard words) never costs
API quota.

The checks are a small ordered chain of named rules. Each rule looks at the
cleaned text and its words and says whether the utterance fails it; the first
failing rule's message is returned to the user. The default chain:

  1. gibberish    - the whole utterance is one short chunk repeated 3+ times.
  2. too_short    - fewer than 3 words.
  3. low_content  - no word longer than 3 letters and fewer than 5 words.
"""

import logging
import re
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from app.models import ValidationResult
from app.utils.text_cleaning import sanitize_input, split_words

logger = logging.getLogger("J.A.R.V.I.S")

GIBBERISH_MESSAGE = "Gibberish detected."
UNCLEAR_MESSAGE = "Please speak clearly."

_REPEATED_CHUNK = re.compile(r"(\w+)\1{2,}")


@dataclass(frozen=True)
class ValidationRule:
    """A named check. `fails(cleaned_text, words)` returns True when the utterance should be rejected."""
    name: str
    fails: Callable[[str, List[str]], bool]
    message: str


def is_gibberish(cleaned_text: str, words: List[str]) -> bool:
    compact = re.sub(r"\s", "", cleaned_text)
    return _REPEATED_CHUNK.fullmatch(compact) is not None


def is_too_short(cleaned_text: str, words: List[str], min_words: int = 3) -> bool:
    return len(words) < min_words


def lacks_content(cleaned_text: str, words: List[str]) -> bool:
    has_meaningful_word = any(len(word) > 3 for word in words)
    return not has_meaningful_word and len(words) < 5


DEFAULT_RULES = (
    ValidationRule("gibberish", is_gibberish, GIBBERISH_MESSAGE),
    ValidationRule("too_short", is_too_short, UNCLEAR_MESSAGE),
    ValidationRule("low_content", lacks_content, UNCLEAR_MESSAGE),
)


class InputValidator:
    """Sanitizes an utterance and runs it through an ordered rule chain."""

    def __init__(self, rules: Optional[Sequence[ValidationRule]] = None):
        self.rules = tuple(DEFAULT_RULES if rules is None else rules)

    def validate(self, text: Optional[str]) -> ValidationResult:
        cleaned_text = sanitize_input(text)
        words = split_words(cleaned_text)

        for rule in self.rules:
            if rule.fails(cleaned_text, words):
                logger.info("Input rejected by rule '%s': %r", rule.name, cleaned_text)
                return ValidationResult(
                    is_valid=False,
                    reason_message=rule.message,
                    cleaned_text=cleaned_text,
                )

        return ValidationResult(is_valid=True, cleaned_text=cleaned_text)


def validate_input(text: Optional[str]) -> ValidationResult:
    """Validate with the default rule chain."""
    return InputValidator().validate(text)
