"""
Tests for the AI completion client: retries, error mapping and headers.

The HTTP call itself (`_post`) is replaced so no network access is needed.
"""
import pytest

from hiring_platform.errors import (
    UpstreamServiceError,
    UpstreamTimeoutError,
    UpstreamRateLimitError,
    MalformedResponseError,
)
from hiring_platform.services.completion import CompletionClient, _parse_retry_after

MESSAGES = [{"role": "user", "content": "Hello"}]


def _reply(content="Hi!"):
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


class ScriptedClient(CompletionClient):
    """CompletionClient whose HTTP responses are scripted in advance."""

    def __init__(self, outcomes, **kwargs):
        options = {
            "api_key": "sk-test",
            "base_url": "https://ai.example.com/api/v1/",
            "model": "test-model",
            "app_name": "Hiring Platform",
            "referer": "http://localhost:3000",
            "max_retries": 2,
            "backoff_s": 0,
        }
        options.update(kwargs)
        super().__init__(**options)
        self.outcomes = list(outcomes)
        self.payloads = []

    async def _post(self, payload: dict) -> dict:
        self.payloads.append(payload)
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@pytest.mark.asyncio
async def test_complete_returns_message_content():
    client = ScriptedClient([_reply("Hello back")])

    assert await client.complete(MESSAGES) == "Hello back"
    assert client.payloads == [{"model": "test-model", "messages": MESSAGES}]


@pytest.mark.asyncio
async def test_json_mode_requests_json_object():
    client = ScriptedClient([_reply("{}")])

    await client.complete(MESSAGES, json_mode=True)

    assert client.payloads[0]["response_format"] == {"type": "json_object"}


@pytest.mark.asyncio
async def test_missing_api_key_is_not_retryable():
    client = ScriptedClient([], api_key=None)

    with pytest.raises(UpstreamServiceError) as exc_info:
        await client.complete(MESSAGES)

    assert exc_info.value.status_code == 503
    assert exc_info.value.retryable is False
    assert client.payloads == []


@pytest.mark.asyncio
async def test_transient_failures_are_retried():
    client = ScriptedClient([
        UpstreamTimeoutError(),
        UpstreamServiceError("bad gateway", retryable=True),
        _reply("third time lucky"),
    ])

    assert await client.complete(MESSAGES) == "third time lucky"
    assert len(client.payloads) == 3


@pytest.mark.asyncio
async def test_gives_up_after_max_retries():
    client = ScriptedClient([UpstreamTimeoutError()] * 3, max_retries=2)

    with pytest.raises(UpstreamTimeoutError):
        await client.complete(MESSAGES)

    assert len(client.payloads) == 3


@pytest.mark.asyncio
async def test_client_errors_are_not_retried():
    client = ScriptedClient([UpstreamServiceError("rejected"), _reply()])

    with pytest.raises(UpstreamServiceError) as exc_info:
        await client.complete(MESSAGES)

    assert exc_info.value.retryable is False
    assert len(client.payloads) == 1


@pytest.mark.asyncio
async def test_rate_limit_honours_retry_after(monkeypatch):
    delays = []

    async def fake_sleep(delay):
        delays.append(delay)

    monkeypatch.setattr("hiring_platform.services.completion.asyncio.sleep", fake_sleep)
    limited = UpstreamRateLimitError()
    limited.retry_after = 7.0
    client = ScriptedClient([limited, UpstreamTimeoutError(), _reply()], backoff_s=0.5)

    await client.complete(MESSAGES)

    # Retry-After wins over backoff; then exponential backoff for attempt 2
    assert delays == [7.0, 1.0]


@pytest.mark.asyncio
@pytest.mark.parametrize("data", [
    {},
    {"choices": []},
    {"choices": [{"message": {}}]},
    {"choices": [{"message": {"content": None}}]},
    ["not", "a", "dict"],
])
async def test_malformed_provider_body(data):
    client = ScriptedClient([data])

    with pytest.raises(MalformedResponseError):
        await client.complete(MESSAGES)


def test_headers_identify_application():
    client = ScriptedClient([])

    headers = client._headers()

    assert headers["Authorization"] == "Bearer sk-test"
    assert headers["X-Title"] == "Hiring Platform"
    assert headers["HTTP-Referer"] == "http://localhost:3000"
    assert client.url == "https://ai.example.com/api/v1/chat/completions"


@pytest.mark.parametrize("value,expected", [
    (None, None),
    ("", None),
    ("3", 3.0),
    ("1.5", 1.5),
    ("-2", 0.0),
    ("Wed, 21 Oct 2026 07:28:00 GMT", None),
])
def test_parse_retry_after(value, expected):
    assert _parse_retry_after(value) == expected
