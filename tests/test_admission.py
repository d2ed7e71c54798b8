from app.services.admission import (
    COOLDOWN_MESSAGE,
    RATE_LIMIT_MESSAGE,
    AdmissionController,
    CooldownGate,
    RateLimiter,
)


def make_controller(clock, max_requests=5, window_seconds=60.0, cooldown_seconds=3.0):
    return AdmissionController(
        rate_limiter=RateLimiter(max_requests, window_seconds, clock=clock),
        cooldown=CooldownGate(cooldown_seconds, clock=clock),
    )


def test_cooldown_rejects_quick_second_request(clock):
    controller = make_controller(clock)

    assert controller.admit("1.2.3.4").allowed is True
    clock.advance(1.5)
    decision = controller.admit("1.2.3.4")

    assert decision.allowed is False
    assert decision.gate == "cooldown"
    assert decision.message == COOLDOWN_MESSAGE


def test_cooldown_admits_spaced_requests(clock):
    controller = make_controller(clock)

    assert controller.admit("1.2.3.4").allowed is True
    clock.advance(3.0)
    assert controller.admit("1.2.3.4").allowed is True


def test_cooldown_rejection_keeps_original_timestamp(clock):
    gate = CooldownGate(3.0, clock=clock)

    assert gate.check("a") is True
    clock.advance(2.0)
    assert gate.check("a") is False
    clock.advance(1.0)
    # 3s after the admitted request, even though a rejected one came in between.
    assert gate.check("a") is True


def test_cooldown_is_per_identity(clock):
    controller = make_controller(clock)

    assert controller.admit("a").allowed is True
    assert controller.admit("b").allowed is True


def test_rate_gate_boundary(clock):
    limiter = RateLimiter(max_requests=5, window_seconds=60.0, clock=clock)

    for _ in range(5):
        assert limiter.check("a") is True
        clock.advance(1.0)
    assert limiter.check("a") is False

    clock.advance(60.0)
    assert limiter.check("a") is True


def test_rate_window_slides(clock):
    limiter = RateLimiter(max_requests=2, window_seconds=10.0, clock=clock)

    assert limiter.check("a") is True      # t=0
    clock.advance(6.0)
    assert limiter.check("a") is True      # t=6
    clock.advance(2.0)
    assert limiter.check("a") is False     # t=8, two hits inside the window
    clock.advance(2.0)
    assert limiter.check("a") is True      # t=10, the t=0 hit has left the window


def test_rate_rejection_does_not_touch_cooldown(clock):
    controller = make_controller(clock)

    for _ in range(5):
        assert controller.admit("a").allowed is True
        clock.advance(4.0)
    last_admitted = clock() - 4.0

    decision = controller.admit("a")
    assert decision.allowed is False
    assert decision.gate == "rate_limit"
    assert decision.message == RATE_LIMIT_MESSAGE
    assert controller.cooldown._last_request["a"] == last_admitted

    clock.advance(60.0)
    assert controller.admit("a").allowed is True


def test_rate_limit_holds_when_client_table_is_full(clock):
    limiter = RateLimiter(max_requests=5, window_seconds=60.0, max_clients=2, clock=clock)

    admitted = 0
    for i in range(10):
        if limiter.check("attacker"):
            admitted += 1
        limiter.check(f"other-{i}")
        limiter.check(f"another-{i}")
        clock.advance(1.0)

    assert admitted == 5
    assert len(limiter) == 2


def test_full_rate_limiter_refuses_new_clients(clock):
    limiter = RateLimiter(max_requests=5, window_seconds=60.0, max_clients=2, clock=clock)

    assert limiter.check("a") is True
    assert limiter.check("b") is True
    assert limiter.check("c") is False
    # Tracked clients keep their window.
    assert limiter.check("a") is True


def test_full_rate_limiter_sweeps_expired_clients_first(clock):
    limiter = RateLimiter(max_requests=5, window_seconds=60.0, max_clients=2, clock=clock)
    limiter.check("a")
    clock.advance(30.0)
    limiter.check("b")
    clock.advance(31.0)

    assert limiter.check("c") is True
    assert len(limiter) == 2


def test_full_cooldown_gate_refuses_until_cooldowns_expire(clock):
    gate = CooldownGate(3.0, max_clients=2, clock=clock)

    assert gate.check("a") is True
    assert gate.check("b") is True
    assert gate.check("c") is False
    assert gate.check("a") is False

    clock.advance(3.0)
    assert gate.check("c") is True
    assert len(gate) == 1


def test_sweep_drops_expired_state(clock):
    controller = make_controller(clock)
    controller.admit("a")
    clock.advance(30.0)
    controller.admit("b")

    clock.advance(31.0)
    # "a" is past both its window and cooldown; "b" is still inside its window.
    dropped = controller.sweep()

    assert len(controller.rate_limiter) == 1
    assert len(controller.cooldown) == 0
    assert dropped == 3
