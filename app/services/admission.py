"""
ADMISSION CONTROL MODULE
========================

Two throttles that run before anything expensive happens on POST /ask:

  RateLimiter  - sliding window: at most N requests per client per window
                 (default 5 per 60 seconds).
  CooldownGate - at least a fixed gap between two requests from the same
                 client (default 3 seconds).

AdmissionController runs the rate limiter first, then the cooldown gate. A
request stopped by the rate limiter never reaches the cooldown gate, so its
stored timestamp is left alone.

Clients are identified by a plain string (the caller's IP address). Both gates
remember at most `max_clients` identities and sweep() forgets identities whose
state has expired. When a gate is full it sweeps first; if it is still full,
new identities are refused until room frees up. Clients already tracked are
never dropped while their state can still affect a decision.
"""

import logging
import time
from collections import deque
from dataclasses import dataclass
from typing import Callable, Dict, Optional

logger = logging.getLogger("J.A.R.V.I.S")

RATE_LIMIT_MESSAGE = "You have sent too many requests. Please wait a minute before trying again."
COOLDOWN_MESSAGE = "Hold on! Please wait a few seconds before asking again."


@dataclass(frozen=True)
class AdmissionDecision:
    allowed: bool
    gate: str = ""
    message: str = ""


class RateLimiter:
    """Sliding-window request counter keyed by client identity."""

    def __init__(
        self,
        max_requests: int = 5,
        window_seconds: float = 60.0,
        max_clients: int = 10_000,
        clock: Callable[[], float] = time.time,
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.max_clients = max_clients
        self._clock = clock
        self._hits: Dict[str, deque] = {}

    def _expire(self, hits: deque, now: float) -> None:
        while hits and now - hits[0] >= self.window_seconds:
            hits.popleft()

    def check(self, identity: str) -> bool:
        """Count this request if it fits in the window. Returns False when the client is over the limit or the table is full."""
        now = self._clock()
        hits = self._hits.get(identity)
        if hits is None:
            if len(self._hits) >= self.max_clients and not self._make_room():
                logger.warning("Rate limiter full (%s clients); refusing %s", len(self._hits), identity)
                return False
            hits = deque()
            self._hits[identity] = hits

        self._expire(hits, now)
        if len(hits) >= self.max_requests:
            return False
        hits.append(now)
        return True

    def sweep(self) -> int:
        """Forget clients with no requests inside the window. Returns how many were dropped."""
        now = self._clock()
        stale = []
        for identity, hits in self._hits.items():
            self._expire(hits, now)
            if not hits:
                stale.append(identity)
        for identity in stale:
            del self._hits[identity]
        return len(stale)

    def _make_room(self) -> bool:
        self.sweep()
        return len(self._hits) < self.max_clients

    def __len__(self) -> int:
        return len(self._hits)


class CooldownGate:
    """Minimum gap between admitted requests, keyed by client identity."""

    def __init__(
        self,
        cooldown_seconds: float = 3.0,
        max_clients: int = 10_000,
        clock: Callable[[], float] = time.time,
    ):
        self.cooldown_seconds = cooldown_seconds
        self.max_clients = max_clients
        self._clock = clock
        self._last_request: Dict[str, float] = {}

    def check(self, identity: str) -> bool:
        """Admit and record this request unless the previous admitted one was too recent."""
        now = self._clock()
        last = self._last_request.get(identity)
        if last is not None and now - last < self.cooldown_seconds:
            return False

        if last is None and len(self._last_request) >= self.max_clients:
            self.sweep()
            if len(self._last_request) >= self.max_clients:
                logger.warning("Cooldown gate full (%s clients); refusing %s", len(self._last_request), identity)
                return False

        self._last_request[identity] = now
        return True

    def sweep(self) -> int:
        """Forget clients whose cooldown has already run out. Returns how many were dropped."""
        now = self._clock()
        stale = [
            identity
            for identity, last in self._last_request.items()
            if now - last >= self.cooldown_seconds
        ]
        for identity in stale:
            del self._last_request[identity]
        return len(stale)

    def __len__(self) -> int:
        return len(self._last_request)


class AdmissionController:
    """Runs the rate limiter and the cooldown gate, in that order."""

    def __init__(
        self,
        rate_limiter: Optional[RateLimiter] = None,
        cooldown: Optional[CooldownGate] = None,
    ):
        self.rate_limiter = rate_limiter or RateLimiter()
        self.cooldown = cooldown or CooldownGate()

    def admit(self, identity: str) -> AdmissionDecision:
        if not self.rate_limiter.check(identity):
            logger.warning("Rate limit hit for %s", identity)
            return AdmissionDecision(False, "rate_limit", RATE_LIMIT_MESSAGE)
        if not self.cooldown.check(identity):
            logger.info("Cooldown active for %s", identity)
            return AdmissionDecision(False, "cooldown", COOLDOWN_MESSAGE)
        return AdmissionDecision(True)

    def sweep(self) -> int:
        """Drop expired client state from both gates."""
        return self.rate_limiter.sweep() + self.cooldown.sweep()
