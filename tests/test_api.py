import pytest
from fastapi.testclient import TestClient

from app.main import create_app
from app.services.admission import COOLDOWN_MESSAGE
from app.services.ask_service import GENERIC_ERROR_MESSAGE, MISSING_KEY_MESSAGE, UPSTREAM_FAILURE_MESSAGE
from app.services.completion_client import UpstreamStatusError
from tests.conftest import FakeCompletionClient

QUESTION = {"text": "What is the tallest mountain on Earth?", "userName": "Sam", "mode": "live"}


@pytest.fixture
def fake():
    return FakeCompletionClient(reply="Mount *Everest*, easily!")


@pytest.fixture
def client(make_context, fake):
    context = make_context(fake, max_requests=100, cooldown_seconds=0)
    with TestClient(create_app(context)) as test_client:
        yield test_client


def test_root_and_health(client):
    assert client.get("/").json() == {"message": "J.A.R.V.I.S voice relay is running!"}
    health = client.get("/health")
    assert health.status_code == 200
    assert health.json()["status"] == "OK"


def test_ask_returns_clean_reply(client, fake):
    response = client.post("/ask", json=QUESTION)

    assert response.status_code == 200
    assert response.json() == {"reply": "Mount Everest, easily!"}
    assert "You are talking to Sam." in fake.calls[0][0]


def test_ask_rejects_unclear_input(client):
    response = client.post("/ask", json={"text": "hi"})
    assert response.status_code == 400
    assert response.json() == {"reply": "Please speak clearly."}


def test_ask_without_text_is_unclear(client):
    response = client.post("/ask", json={})
    assert response.status_code == 400
    assert response.json()["reply"] == "Please speak clearly."


def test_ask_rejects_malformed_body_with_speakable_reply(client):
    response = client.post("/ask", json={"text": ["not", "a", "string"]})
    assert response.status_code == 400
    assert isinstance(response.json()["reply"], str)


def test_ask_live_mode_too_long(client, fake):
    text = " ".join(f"thing{i}" for i in range(30))
    response = client.post("/ask", json={"text": text, "mode": "live"})

    assert response.status_code == 400
    assert "record mode" in response.json()["reply"]
    assert fake.calls == []


def test_history_newest_first_and_clear(client):
    client.post("/ask", json={"text": "first question about mountains"})
    client.post("/ask", json={"text": "second question about rivers"})

    history = client.get("/history").json()["history"]
    assert [item["user"] for item in history] == [
        "second question about rivers",
        "first question about mountains",
    ]
    assert history[0]["ai"] == "Mount Everest, easily!"

    cleared = client.get("/clear-history")
    assert cleared.status_code == 200
    assert client.get("/history").json() == {"history": []}


def test_history_is_capped_at_twenty(client):
    for i in range(22):
        client.post("/ask", json={"text": f"question number {i} about things"})
    assert len(client.get("/history").json()["history"]) == 20


def test_cooldown_returns_429(make_context, fake):
    with TestClient(create_app(make_context(fake))) as test_client:
        assert test_client.post("/ask", json=QUESTION).status_code == 200
        response = test_client.post("/ask", json=QUESTION)

    assert response.status_code == 429
    assert response.json() == {"reply": COOLDOWN_MESSAGE}


def test_missing_key_returns_500(make_context):
    context = make_context(FakeCompletionClient(has_credentials=False))
    with TestClient(create_app(context)) as test_client:
        response = test_client.post("/ask", json=QUESTION)

    assert response.status_code == 500
    assert response.json() == {"reply": MISSING_KEY_MESSAGE}


def test_upstream_error_returns_502_without_detail(make_context):
    context = make_context(FakeCompletionClient(error=UpstreamStatusError(401, "invalid api key")))
    with TestClient(create_app(context)) as test_client:
        response = test_client.post("/ask", json=QUESTION)

    assert response.status_code == 502
    assert response.json() == {"reply": UPSTREAM_FAILURE_MESSAGE}


def test_cors_preflight(client):
    response = client.options(
        "/ask",
        headers={
            "Origin": "http://localhost:3000",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "Content-Type",
        },
    )
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] in ("*", "http://localhost:3000")


def test_unexpected_error_returns_generic_500(make_context):
    context = make_context(FakeCompletionClient(error=RuntimeError("socket exploded")))
    with TestClient(create_app(context)) as test_client:
        response = test_client.post("/ask", json=QUESTION)

    assert response.status_code == 500
    assert response.json() == {"reply": GENERIC_ERROR_MESSAGE}
