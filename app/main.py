"""
J.A.R.V.I.S VOICE RELAY API
===========================

This module defines the FastAPI application and all HTTP endpoints. A voice
front end transcribes what the user said, POSTs the text to /ask, and speaks
the reply it gets back.

ENDPOINTS:
  GET  /              - Returns a short status message.
  GET  /health        - Returns {"status": "OK"} for monitoring.
  POST /ask           - Ask Jarvis: throttled, validated, answered by Groq, cleaned.
  GET  /history       - The 20 most recent exchanges, newest first.
  GET  /clear-history - Empties the conversation history.

ERRORS:
  /ask always answers with {"reply": "..."}, also on errors, so the front end
  can speak whatever comes back. 400 = unclear or too long, 429 = slow down,
  500 = server problem, 502 = Groq unreachable or failing.

STARTUP:
  The lifespan function builds the AppContext (conversation log, throttles,
  Groq client), prunes old history once, and starts two background loops:
  history pruning every 24 hours and throttle cleanup every rate window.
  Both loops are cancelled on shutdown. History is never written to disk.
"""

import asyncio
import logging
import os
import signal
from contextlib import asynccontextmanager
from typing import Awaitable, Callable, Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.models import (
    AskRequest,
    AskResponse,
    HealthResponse,
    HistoryItem,
    HistoryResponse,
    MessageResponse,
)
from app.services.admission import AdmissionController, CooldownGate, RateLimiter
from app.services.ask_service import AppContext, AskRejected, AskService
from app.services.completion_client import GroqCompletionClient
from app.services.conversation_log import ConversationLog
from config import (
    COOLDOWN_SECONDS,
    CORS_ALLOW_ORIGINS,
    GROQ_API_KEY,
    HISTORY_LIMIT,
    HISTORY_PRUNE_INTERVAL_HOURS,
    HISTORY_RETENTION_DAYS,
    HOST,
    MAX_TRACKED_CLIENTS,
    PORT,
    RATE_LIMIT_MAX_REQUESTS,
    RATE_LIMIT_WINDOW_SECONDS,
    REPLY_DELAY_MAX_SECONDS,
    REPLY_DELAY_MIN_SECONDS,
)


# -----------------------------------------------------------------------------
# LOGGING
# -----------------------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s | %(levelname)-8s | %(name)-20s | %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)
logger = logging.getLogger("J.A.R.V.I.S")

RETENTION_SECONDS = HISTORY_RETENTION_DAYS * 24 * 60 * 60
PRUNE_INTERVAL_SECONDS = HISTORY_PRUNE_INTERVAL_HOURS * 60 * 60
BAD_REQUEST_MESSAGE = "Sorry, I couldn't understand that request."


def print_title():
    """Print the J.A.R.V.I.S ASCII art banner to the console when the server starts."""
    CYAN    = "\033[96m"
    BLUE    = "\033[94m"
    MAGENTA = "\033[95m"
    WHITE   = "\033[97m"
    DIM     = "\033[2m"
    BOLD    = "\033[1m"
    RESET   = "\033[0m"

    banner = f"""
{BOLD}{CYAN}      ██╗ █████╗ ██████╗ ██╗   ██╗██╗███████╗
{BLUE}      ██║██╔══██╗██╔══██╗██║   ██║██║██╔════╝
{BLUE}      ██║███████║██████╔╝██║   ██║██║███████╗
{MAGENTA} ██   ██║██╔══██║██╔══██╗╚██╗ ██╔╝██║╚════██║
{MAGENTA} ╚█████╔╝██║  ██║██║  ██║ ╚████╔╝ ██║███████║
{DIM}{CYAN}  ╚════╝ ╚═╝  ╚═╝╚═╝  ╚═╝  ╚═══╝  ╚═╝╚══════╝{RESET}
      {WHITE}{BOLD}Voice Relay - short questions, speakable answers{RESET}
"""
    print(banner)


def build_context() -> AppContext:
    """Build the production AppContext from config.py values."""
    return AppContext(
        completion_client=GroqCompletionClient(api_key=GROQ_API_KEY),
        conversation_log=ConversationLog(),
        admission=AdmissionController(
            rate_limiter=RateLimiter(
                max_requests=RATE_LIMIT_MAX_REQUESTS,
                window_seconds=RATE_LIMIT_WINDOW_SECONDS,
                max_clients=MAX_TRACKED_CLIENTS,
            ),
            cooldown=CooldownGate(
                cooldown_seconds=COOLDOWN_SECONDS,
                max_clients=MAX_TRACKED_CLIENTS,
            ),
        ),
        reply_delay_range=(REPLY_DELAY_MIN_SECONDS, REPLY_DELAY_MAX_SECONDS),
    )


def get_client_identity(request: Request) -> str:
    """Throttling key for a caller: its IP address."""
    return request.client.host if request.client else "unknown"


# -------------------------------------------------------------------------
# BACKGROUND MAINTENANCE
# -------------------------------------------------------------------------

async def run_periodically(interval_seconds: float, job: Callable[[], object]) -> None:
    """Call job() every interval_seconds until cancelled."""
    while True:
        await asyncio.sleep(interval_seconds)
        job()


def _on_maintenance_done(task: "asyncio.Task") -> None:
    """A maintenance loop only ends by cancellation; anything else takes the process down."""
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.critical("Background task %s failed: %s", task.get_name(), exc, exc_info=exc)
        os.kill(os.getpid(), signal.SIGTERM)


def start_maintenance(name: str, interval_seconds: float, job: Callable[[], object]) -> "asyncio.Task":
    task = asyncio.create_task(run_periodically(interval_seconds, job), name=name)
    task.add_done_callback(_on_maintenance_done)
    return task


# -------------------------------------------------------------------------
# LIFESPAN (STARTUP / SHUTDOWN)
# -------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup: build the context (unless one was injected), prune history once,
    start the prune and throttle-sweep loops. Shutdown: cancel both loops.
    """
    print_title()
    logger.info("=" * 60)
    logger.info("J.A.R.V.I.S - Starting Up...")
    logger.info("=" * 60)

    if app.state.context is None:
        app.state.context = build_context()
    context: AppContext = app.state.context

    if not getattr(context.completion_client, "has_credentials", True):
        logger.warning("GROQ_API_KEY not set. /ask will answer with a configuration error.")

    context.conversation_log.prune(RETENTION_SECONDS)

    tasks = [
        start_maintenance(
            "history-prune",
            PRUNE_INTERVAL_SECONDS,
            lambda: context.conversation_log.prune(RETENTION_SECONDS),
        ),
        start_maintenance(
            "throttle-sweep",
            RATE_LIMIT_WINDOW_SECONDS,
            context.admission.sweep,
        ),
    ]

    logger.info("Server running on http://localhost:%s", PORT)
    logger.info("Health check available at http://localhost:%s/health", PORT)
    logger.info("=" * 60)

    try:
        yield
    finally:
        logger.info("Shutting down J.A.R.V.I.S...")
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        logger.info("Process terminated")


# -------------------------------------------------------------------------
# FASTAPI APP
# -------------------------------------------------------------------------

def create_app(context: Optional[AppContext] = None) -> FastAPI:
    """Build the app. Tests pass their own context; production builds one at startup."""
    app = FastAPI(
        title="J.A.R.V.I.S Voice Relay",
        description="Short spoken questions in, short speakable answers out",
        lifespan=lifespan,
    )
    app.state.context = context

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ALLOW_ORIGINS,
        allow_credentials=False,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "Accept"],
        max_age=86400,
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next: Callable[[Request], Awaitable]):
        logger.info("%s %s from origin: %s", request.method, request.url.path, request.headers.get("origin"))
        return await call_next(request)

    @app.exception_handler(RequestValidationError)
    async def handle_bad_body(request: Request, exc: RequestValidationError):
        logger.warning("Rejected malformed request body on %s: %s", request.url.path, exc.errors())
        return JSONResponse(status_code=400, content={"reply": BAD_REQUEST_MESSAGE})

    # =========================================================================
    # API ENDPOINTS
    # =========================================================================

    @app.get("/", response_model=MessageResponse)
    async def root():
        return MessageResponse(message="J.A.R.V.I.S voice relay is running!")

    @app.get("/health", response_model=HealthResponse)
    async def health():
        return HealthResponse(status="OK", message="Server is running")

    @app.post("/ask", response_model=AskResponse)
    async def ask(body: AskRequest, request: Request):
        """
        Ask Jarvis one question.

        REQUEST BODY:
        {
            "text": "what's a good name for a golden retriever",
            "userName": "Sam",
            "mode": "live"
        }

        RESPONSE (success and errors alike):
        {
            "reply": "Sunny is a great pick! Got any other names in mind?"
        }
        """
        identity = get_client_identity(request)
        service = AskService(request.app.state.context)
        try:
            reply = await service.ask(identity, body.text, body.userName, body.mode)
        except AskRejected as e:
            return JSONResponse(status_code=e.status_code, content={"reply": e.reply})
        return AskResponse(reply=reply)

    @app.get("/history", response_model=HistoryResponse)
    async def history(request: Request):
        """Return the most recent exchanges, newest first."""
        entries = request.app.state.context.conversation_log.recent(HISTORY_LIMIT)
        return HistoryResponse(
            history=[HistoryItem(user=entry.user_text, ai=entry.ai_text) for entry in entries]
        )

    @app.get("/clear-history", response_model=MessageResponse)
    async def clear_history(request: Request):
        request.app.state.context.conversation_log.clear()
        return MessageResponse(message="Conversation history has been cleared.")

    return app


app = create_app()


# -------------------------------------------------------------------------
# STANDALONE RUN (python -m app.main)
# -------------------------------------------------------------------------
def run():
    """Start the uvicorn server (same as run.py); used if someone does python -m app.main"""
    uvicorn.run(
        "app.main:app",
        host=HOST,
        port=PORT,
        log_level="info"
    )

if __name__ == "__main__":
    run()
