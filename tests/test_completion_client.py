import asyncio

import groq
import httpx
import pytest
from langchain_core.messages import AIMessage
from langchain_core.runnables import RunnableLambda

from app.services.completion_client import (
    GroqCompletionClient,
    MalformedCompletionError,
    MissingCredentialError,
    UpstreamStatusError,
    UpstreamTransportError,
    escape_curly_braces,
)

GROQ_URL = "https://api.groq.com/openai/v1/chat/completions"


def client_with_fake_llm(fake):
    client = GroqCompletionClient(api_key="gsk_test_key")
    client._llm = RunnableLambda(fake)
    return client


def test_missing_key_fails_before_building_llm():
    client = GroqCompletionClient(api_key="")

    assert client.has_credentials is False
    with pytest.raises(MissingCredentialError):
        asyncio.run(client.complete("system", "hello there"))
    assert client._llm is None


def test_returns_stripped_content():
    seen = {}

    def fake(prompt_value):
        seen["messages"] = prompt_value.to_messages()
        return AIMessage(content="  Hey there!  ")

    client = client_with_fake_llm(fake)
    reply = asyncio.run(client.complete("Be nice to {name}", "how are you doing"))

    assert reply == "Hey there!"
    system, human = seen["messages"]
    assert system.content == "Be nice to {name}"
    assert human.content == "how are you doing"


def test_empty_content_is_malformed():
    client = client_with_fake_llm(lambda _: AIMessage(content="   "))
    with pytest.raises(MalformedCompletionError):
        asyncio.run(client.complete("system", "hello there"))


def test_non_2xx_is_status_error():
    def fake(_):
        request = httpx.Request("POST", GROQ_URL)
        response = httpx.Response(503, request=request)
        raise groq.APIStatusError("Service Unavailable", response=response, body=None)

    client = client_with_fake_llm(fake)
    with pytest.raises(UpstreamStatusError) as exc_info:
        asyncio.run(client.complete("system", "hello there"))
    assert exc_info.value.status_code == 503


def test_connection_failure_is_transport_error():
    def fake(_):
        raise groq.APIConnectionError(request=httpx.Request("POST", GROQ_URL))

    client = client_with_fake_llm(fake)
    with pytest.raises(UpstreamTransportError):
        asyncio.run(client.complete("system", "hello there"))


def test_escape_curly_braces():
    assert escape_curly_braces("{a} and }{") == "{{a}} and }}{{"
    assert escape_curly_braces("") == ""
