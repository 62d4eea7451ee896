"""Tests for candidate-origin GETs and backoff."""

import httpx
import pytest

from public_forms.services.http_service import backoff_delay, get_first_valid


def test_backoff_delay_is_linear_then_capped():
    delays = [backoff_delay(n, base_delay=1.2, max_delay=6.0) for n in range(1, 9)]
    assert delays[:5] == pytest.approx([1.2, 2.4, 3.6, 4.8, 6.0])
    assert delays[5:] == [6.0, 6.0, 6.0]
    assert all(a <= b for a, b in zip(delays, delays[1:]))


def test_backoff_delay_before_first_attempt_is_zero():
    assert backoff_delay(0, base_delay=1.2, max_delay=6.0) == 0.0


@pytest.mark.asyncio
async def test_get_first_valid_moves_past_failures(mock_client_factory):
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.url.host)
        if request.url.host == "down.test":
            raise httpx.ConnectError("boom", request=request)
        if request.url.host == "slow.test":
            raise httpx.ReadTimeout("slow", request=request)
        if request.url.host == "error.test":
            return httpx.Response(503, json={"message": "busy"})
        if request.url.host == "html.test":
            return httpx.Response(200, text="<html>")
        if request.url.host == "empty.test":
            return httpx.Response(200, json={"form": None})
        return httpx.Response(200, json={"form": {"title": "ok"}})

    client = mock_client_factory(handler)
    urls = [f"https://{host}/x" for host in ("down.test", "slow.test", "error.test", "html.test", "empty.test", "ok.test")]

    result = await get_first_valid(client, urls, lambda body: body if body.get("form") else None, timeout=1)

    assert result == {"form": {"title": "ok"}}
    assert seen == ["down.test", "slow.test", "error.test", "html.test", "empty.test", "ok.test"]


@pytest.mark.asyncio
async def test_get_first_valid_stops_at_first_success(mock_client_factory):
    calls = {"count": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        calls["count"] += 1
        return httpx.Response(200, json={"n": calls["count"]})

    client = mock_client_factory(handler)
    result = await get_first_valid(client, ["https://a.test", "https://b.test"], lambda body: body, timeout=1)

    assert result == {"n": 1}
    assert calls["count"] == 1


@pytest.mark.asyncio
async def test_get_first_valid_returns_none_when_all_fail(mock_client_factory):
    client = mock_client_factory(lambda request: httpx.Response(500))
    assert await get_first_valid(client, ["https://a.test", "https://b.test"], lambda body: body, timeout=1) is None
