"""
ASK SERVICE MODULE
==================

The /ask pipeline. AskService does not handle HTTP; main.py passes in the
caller's identity and request fields and turns the outcome into a response.

FLOW (each step can stop the request early):
  1. Admission     - rate limit, then cooldown (429).
  2. Validation    - sanitize and reject noise (400).
  3. Live length   - more than 25 words in live mode (400).
  4. Credentials   - no API key configured (500).
  5. Prompt        - persona + user name + mode rules.
  6. Groq          - one call, no retries (502 / 500 on failure).
  7. Clean reply   - strip markdown and unspeakable symbols.
  8. Log           - append (user, reply) to the conversation log.
  9. Short pause   - 200-400 ms, then the reply goes back.

Every failure is raised as AskRejected with a status code and a reply that can
be spoken aloud. Upstream error details are logged, never returned.

AppContext owns all mutable state (log, throttles) and the Groq client, so a
test can build one with fakes and run the pipeline in isolation.
"""

import asyncio
import logging
import random
from dataclasses import dataclass, field
from typing import Any, Optional, Tuple

from app.services.admission import AdmissionController
from app.services.completion_client import (
    MalformedCompletionError,
    MissingCredentialError,
    UpstreamStatusError,
    UpstreamTransportError,
)
from app.services.conversation_log import ConversationLog
from app.services.input_validator import InputValidator
from app.services.prompt_builder import (
    LIVE_MODE,
    TOO_LONG_MESSAGE,
    build_messages,
    is_too_long_for_live,
    normalize_mode,
)
from app.utils.text_cleaning import clean_reply

logger = logging.getLogger("J.A.R.V.I.S")

MISSING_KEY_MESSAGE = "Server configuration error: API key missing."
UPSTREAM_FAILURE_MESSAGE = "Sorry, I couldn't reach my brain just now. Please try again in a moment."
MALFORMED_RESPONSE_MESSAGE = "Sorry, I didn't get a proper answer that time. Could you ask me again?"
GENERIC_ERROR_MESSAGE = "Sorry, something went wrong on my end."


class AskRejected(Exception):
    """A request that ends without a model answer. `reply` is safe to show and speak."""

    def __init__(self, status_code: int, reply: str):
        super().__init__(reply)
        self.status_code = status_code
        self.reply = reply


@dataclass
class AppContext:
    """Everything the pipeline reads or mutates, built once per app."""
    completion_client: Any
    conversation_log: ConversationLog = field(default_factory=ConversationLog)
    admission: AdmissionController = field(default_factory=AdmissionController)
    validator: InputValidator = field(default_factory=InputValidator)
    reply_delay_range: Tuple[float, float] = (0.2, 0.4)


class AskService:
    def __init__(self, context: AppContext):
        self.context = context

    async def _pause_before_reply(self) -> None:
        low, high = self.context.reply_delay_range
        delay = random.uniform(low, high)
        if delay > 0:
            await asyncio.sleep(delay)

    async def ask(
        self,
        identity: str,
        text: Optional[str],
        user_name: Optional[str] = None,
        mode: Optional[str] = None,
    ) -> str:
        """Run one utterance through the pipeline and return Jarvis's spoken reply."""
        try:
            return await self._ask(identity, text, user_name, mode)
        except AskRejected:
            raise
        except Exception as e:
            logger.error("Server error while handling /ask: %s", e, exc_info=True)
            raise AskRejected(500, GENERIC_ERROR_MESSAGE) from e

    async def _ask(self, identity, text, user_name, mode) -> str:
        ctx = self.context

        decision = ctx.admission.admit(identity)
        if not decision.allowed:
            raise AskRejected(429, decision.message)

        result = ctx.validator.validate(text)
        if not result.is_valid:
            raise AskRejected(400, result.reason_message)
        cleaned_text = result.cleaned_text

        mode = normalize_mode(mode)
        if mode == LIVE_MODE and is_too_long_for_live(cleaned_text):
            logger.info("Live-mode question too long from %s", identity)
            raise AskRejected(400, TOO_LONG_MESSAGE)

        if not getattr(ctx.completion_client, "has_credentials", True):
            logger.error("No API key found in environment variables")
            raise AskRejected(500, MISSING_KEY_MESSAGE)

        system_prompt, user_message = build_messages(cleaned_text, user_name, mode)

        try:
            raw_reply = await ctx.completion_client.complete(system_prompt, user_message)
        except MissingCredentialError as e:
            raise AskRejected(500, MISSING_KEY_MESSAGE) from e
        except (UpstreamStatusError, UpstreamTransportError) as e:
            logger.warning("Upstream failure for %s: %s", identity, e)
            raise AskRejected(502, UPSTREAM_FAILURE_MESSAGE) from e
        except MalformedCompletionError as e:
            logger.warning("Malformed completion for %s: %s", identity, e)
            raise AskRejected(500, MALFORMED_RESPONSE_MESSAGE) from e

        reply = clean_reply(raw_reply)
        ctx.conversation_log.append(cleaned_text, reply)

        await self._pause_before_reply()
        logger.info("Sending reply back to %s", identity)
        return reply
