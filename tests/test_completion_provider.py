"""
Tests for the HTTP completion provider.
"""

import httpx
import pytest

from portfolio_backend.exceptions import CompletionError
from portfolio_backend.repositories import HttpCompletionProvider
from portfolio_backend.repositories.http_completion_provider import extract_reply

API_URL = "https://ai.example.com/chat"


def make_provider(handler) -> HttpCompletionProvider:
    return HttpCompletionProvider(API_URL, api_key="key-123", transport=httpx.MockTransport(handler))


async def test_reads_result_message_and_sends_params():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"result": {"message": "Halo juga!"}})

    provider = make_provider(handler)
    reply = await provider.complete("Halo", timeout=5)
    await provider.close()

    assert reply == "Halo juga!"
    params = seen[0].url.params
    assert params["prompt"] == "Halo"
    assert params["apikey"] == "key-123"
    assert params["search_enabled"] == "false"
    assert params["thinking_enabled"] == "false"
    assert params["imageUrl"] == ""


async def test_reads_response_field():
    provider = make_provider(lambda request: httpx.Response(200, json={"response": "Baik."}))
    assert await provider.complete("Apa kabar?", timeout=5) == "Baik."


async def test_unknown_shape_is_none():
    provider = make_provider(lambda request: httpx.Response(200, json={"status": "ok"}))
    assert await provider.complete("Halo", timeout=5) is None


async def test_server_error_raises():
    provider = make_provider(lambda request: httpx.Response(500, text="boom"))
    with pytest.raises(CompletionError):
        await provider.complete("Halo", timeout=5)


async def test_invalid_json_raises():
    provider = make_provider(lambda request: httpx.Response(200, text="<html>"))
    with pytest.raises(CompletionError):
        await provider.complete("Halo", timeout=5)


async def test_timeout_raises():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    provider = make_provider(handler)
    with pytest.raises(CompletionError, match="timed out"):
        await provider.complete("Halo", timeout=0.1)


async def test_unconfigured_provider_raises():
    provider = HttpCompletionProvider(api_url=None)
    assert not provider.is_configured
    with pytest.raises(CompletionError):
        await provider.complete("Halo", timeout=5)


@pytest.mark.parametrize(
    "data, expected",
    [
        ({"result": {"message": "a"}, "response": "b"}, "a"),
        ({"result": {"message": "  "}, "response": "b"}, "b"),
        ({"result": "flat", "response": "b"}, "b"),
        ({"response": ""}, None),
        (["not", "a", "dict"], None),
    ],
)
def test_extract_reply(data, expected):
    assert extract_reply(data) == expected
