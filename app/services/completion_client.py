"""
GROQ COMPLETION CLIENT MODULE
=============================

Sends one system prompt + one user message to Groq through LangChain's ChatGroq
and returns the raw reply text. No history is sent; every question stands alone.

SETTINGS (from config.py):
  - max_tokens 150 and temperature 0.7: short, lively spoken answers.
  - timeout 15s and max_retries 0: a hung or failing Groq call is reported
    once and never retried.

FAILURES (all subclasses of CompletionError, so callers can tell them apart):
  MissingCredentialError   - no API key configured; raised before any network work.
  UpstreamStatusError      - Groq answered with a non-2xx status.
  UpstreamTransportError   - connection failure or timeout.
  MalformedCompletionError - Groq answered but there is no usable text.
"""

import logging
from typing import Optional

import groq
from langchain_core.prompts import ChatPromptTemplate
from langchain_groq import ChatGroq

from config import (
    COMPLETION_TEMPERATURE,
    GROQ_API_TIMEOUT,
    GROQ_MODEL,
    MAX_COMPLETION_TOKENS,
)

logger = logging.getLogger("J.A.R.V.I.S")


class CompletionError(Exception):
    """Base class for every way a completion can fail."""


class MissingCredentialError(CompletionError):
    pass


class UpstreamStatusError(CompletionError):
    def __init__(self, status_code: int, message: str = ""):
        super().__init__(message or f"Groq returned HTTP {status_code}")
        self.status_code = status_code


class UpstreamTransportError(CompletionError):
    pass


class MalformedCompletionError(CompletionError):
    pass


def escape_curly_braces(text: str) -> str:
    """
    Double every { and } so LangChain does not treat them as template variables.
    The user's name ends up in the system prompt and may contain braces.
    """
    if not text:
        return text
    return text.replace("{", "{{").replace("}", "}}")


def _mask_key(api_key: str) -> str:
    """Show only the last 4 characters of a key in logs."""
    if len(api_key) <= 4:
        return "****"
    return "****" + api_key[-4:]


class GroqCompletionClient:
    """Thin async wrapper around ChatGroq with explicit, distinguishable failures."""

    def __init__(
        self,
        api_key: Optional[str],
        model: str = GROQ_MODEL,
        max_tokens: int = MAX_COMPLETION_TOKENS,
        temperature: float = COMPLETION_TEMPERATURE,
        timeout: float = GROQ_API_TIMEOUT,
    ):
        self.api_key = (api_key or "").strip()
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.timeout = timeout
        self._llm: Optional[ChatGroq] = None

    @property
    def has_credentials(self) -> bool:
        return bool(self.api_key)

    def _get_llm(self) -> ChatGroq:
        # Built on first use: ChatGroq refuses to construct without a key.
        if self._llm is None:
            self._llm = ChatGroq(
                api_key=self.api_key,
                model=self.model,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                timeout=self.timeout,
                max_retries=0,
            )
            logger.info("Groq client ready (model=%s, key=%s)", self.model, _mask_key(self.api_key))
        return self._llm

    async def complete(self, system_prompt: str, user_message: str) -> str:
        """Return the model's raw reply text, or raise a CompletionError subclass."""
        if not self.has_credentials:
            logger.error("No API key found in environment variables")
            raise MissingCredentialError("GROQ_API_KEY is not set")

        prompt = ChatPromptTemplate.from_messages([
            ("system", escape_curly_braces(system_prompt)),
            ("human", "{question}"),
        ])
        chain = prompt | self._get_llm()

        logger.info("Making request to Groq API...")
        try:
            response = await chain.ainvoke({"question": user_message})
        except groq.APIStatusError as e:
            logger.error("Groq API responded with HTTP %s: %s", e.status_code, e)
            raise UpstreamStatusError(e.status_code) from e
        except groq.APIConnectionError as e:
            # Also covers groq.APITimeoutError.
            logger.error("Could not reach Groq API: %s", e)
            raise UpstreamTransportError(str(e)) from e
        except (KeyError, IndexError, TypeError, ValueError) as e:
            logger.error("Groq API returned an unexpected response: %s", e)
            raise MalformedCompletionError(str(e)) from e

        content = getattr(response, "content", None)
        if not isinstance(content, str) or not content.strip():
            logger.error("Groq API returned an empty completion: %r", response)
            raise MalformedCompletionError("Groq API returned an unexpected response.")

        logger.info("API response received")
        return content.strip()
