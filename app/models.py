"""
DATA MODELS MODULE
==================

This file defines the Pydantic models used for API requests, responses, and
the in-memory conversation log. FastAPI uses these to validate incoming JSON
and to serialize responses; the services use them internally.

MODELS:
  AskRequest        - Body of POST /ask (text + optional userName and mode).
  AskResponse       - Body returned by /ask, on success and on every error.
  HistoryItem       - One exchange as shown by GET /history (user + ai).
  HistoryResponse   - Body of GET /history (newest first).
  MessageResponse   - Plain {"message": ...} body for /, /clear-history.
  HealthResponse    - Body of GET /health.
  ConversationEntry - One logged exchange with its timestamp. Immutable.
  ValidationResult  - Outcome of validating one utterance.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional

# ==============================================================================
# REQUEST/RESPONSE MODELS
# ==============================================================================

class AskRequest(BaseModel):
    """
    Request body for POST /ask.

    - text: The transcribed utterance. Missing or empty text is not a schema
      error; the validator answers it with "Please speak clearly."
    - userName: How Jarvis should address the user. Defaults to "friend".
    - mode: "live" (default) for short spoken questions, "record" for longer ones.
    """
    text: Optional[str] = Field(None, max_length=5_000)
    userName: Optional[str] = Field(None, max_length=100)
    mode: Optional[str] = Field(None, max_length=20)

class AskResponse(BaseModel):
    """Response body for POST /ask. Errors use the same shape so clients can speak them."""
    reply: str

class HistoryItem(BaseModel):
    user: str
    ai: str

class HistoryResponse(BaseModel):
    history: List[HistoryItem]

class MessageResponse(BaseModel):
    message: str

class HealthResponse(BaseModel):
    status: str
    message: str

# ==============================================================================
# INTERNAL MODELS
# ==============================================================================

class ConversationEntry(BaseModel):
    """
    One successful exchange. Created by the conversation log on append and
    never modified afterwards; it only disappears through prune or clear.
    """
    model_config = ConfigDict(frozen=True)

    user_text: str
    ai_text: str
    timestamp: int  # Epoch milliseconds.

class ValidationResult(BaseModel):
    """Result of validating one utterance; reason_message is empty when valid."""
    is_valid: bool
    reason_message: str = ""
    cleaned_text: str = ""
