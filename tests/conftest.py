import pytest

from app.services.admission import AdmissionController, CooldownGate, RateLimiter
from app.services.ask_service import AppContext
from app.services.conversation_log import ConversationLog


class FakeClock:
    """Manually advanced stand-in for time.time()."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeCompletionClient:
    """Records every call and answers with a fixed reply or raises a fixed error."""

    def __init__(self, reply="Sure thing! How about you?", error=None, has_credentials=True):
        self.reply = reply
        self.error = error
        self.has_credentials = has_credentials
        self.calls = []

    async def complete(self, system_prompt, user_message):
        self.calls.append((system_prompt, user_message))
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def fake_client():
    return FakeCompletionClient()


@pytest.fixture
def make_context(clock):
    def _make(client, max_requests=5, window_seconds=60.0, cooldown_seconds=3.0):
        return AppContext(
            completion_client=client,
            conversation_log=ConversationLog(clock=clock),
            admission=AdmissionController(
                rate_limiter=RateLimiter(max_requests, window_seconds, clock=clock),
                cooldown=CooldownGate(cooldown_seconds, clock=clock),
            ),
            reply_delay_range=(0.0, 0.0),
        )
    return _make
