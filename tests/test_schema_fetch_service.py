"""Tests for the resilient schema fetcher."""

import asyncio

import httpx
import pytest

from public_forms.schemas.forms import PublicFormPayload
from public_forms.services.schema_fetch_service import (
    RETRY_MESSAGE,
    FetchStatus,
    ScheduledFetch,
    SchemaFetchError,
    build_candidate_urls,
    fetch_public_form,
    unwrap_public_form_payload,
)

ORIGINS = ["https://portal.test", "https://api.test"]


def test_build_candidate_urls_keeps_origin_order_and_encodes_slug():
    assert build_candidate_urls("youth camp", ORIGINS) == [
        "https://portal.test/api/v1/forms/youth%20camp",
        "https://api.test/api/v1/forms/youth%20camp",
    ]


def test_unwrap_accepts_plain_and_wrapped_payloads(form_payload):
    plain = unwrap_public_form_payload(form_payload)
    wrapped = unwrap_public_form_payload({"data": form_payload})
    assert isinstance(plain, PublicFormPayload)
    assert plain == wrapped
    assert plain.form.title == "Youth Summit"
    assert plain.event.location == "Main Auditorium"


@pytest.mark.parametrize("body", [None, [], {"form": None}, {"data": {}}, {"event": {"title": "x"}}])
def test_unwrap_rejects_payloads_without_form(body):
    assert unwrap_public_form_payload(body) is None


def test_unwrap_rejects_duplicate_field_keys():
    body = {"form": {"title": "x", "fields": [{"key": "a"}, {"key": "a"}]}}
    assert unwrap_public_form_payload(body) is None


@pytest.mark.asyncio
async def test_fetch_public_form_raises_when_every_origin_fails(mock_client_factory):
    client = mock_client_factory(lambda request: httpx.Response(404))
    with pytest.raises(SchemaFetchError) as exc:
        await fetch_public_form(client, "camp", origins=ORIGINS, timeout=1)
    assert exc.value.urls == build_candidate_urls("camp", ORIGINS)


@pytest.mark.asyncio
async def test_fetch_falls_back_to_direct_origin(mock_client_factory, form_payload):
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "portal.test":
            return httpx.Response(502)
        return httpx.Response(200, json=form_payload)

    client = mock_client_factory(handler)
    payload = await fetch_public_form(client, "camp", origins=ORIGINS, timeout=1)
    assert payload.form.title == "Youth Summit"


@pytest.mark.asyncio
async def test_fails_twice_then_succeeds_without_further_timers(mock_client_factory, form_payload, sleep_recorder):
    requests: list[str] = []
    statuses: list[tuple[FetchStatus, str | None]] = []
    loaded: list[PublicFormPayload] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(str(request.url))
        # Two full attempts fail on both origins; the third attempt's first origin answers.
        if len(requests) <= 4:
            raise httpx.ConnectError("down", request=request)
        return httpx.Response(200, json=form_payload)

    fetch = ScheduledFetch(
        mock_client_factory(handler),
        "camp",
        on_success=loaded.append,
        on_status=lambda status, message: statuses.append((status, message)),
        origins=ORIGINS,
        timeout=1,
        sleep=sleep_recorder,
    )

    payload = await fetch.wait()

    assert payload is not None
    assert loaded == [payload]
    assert fetch.attempt == 3
    assert fetch.status == FetchStatus.READY
    assert sleep_recorder.delays == pytest.approx([1.2, 2.4])
    assert len(requests) == 5
    assert (FetchStatus.RETRYING, RETRY_MESSAGE) in statuses
    assert statuses[0] == (FetchStatus.LOADING, None)
    assert statuses[-1] == (FetchStatus.READY, None)

    # Nothing else is scheduled once the form is loaded.
    for _ in range(5):
        await asyncio.sleep(0)
    assert len(requests) == 5
    assert sleep_recorder.delays == pytest.approx([1.2, 2.4])
    assert fetch.pending_delay is None


@pytest.mark.asyncio
async def test_cancel_during_retry_wait_stops_the_loop(mock_client_factory):
    requests: list[str] = []
    sleeping = asyncio.Event()
    delays: list[float] = []

    async def blocking_sleep(delay: float) -> None:
        delays.append(delay)
        sleeping.set()
        await asyncio.Event().wait()

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(str(request.url))
        return httpx.Response(500)

    loaded: list[PublicFormPayload] = []
    fetch = ScheduledFetch(
        mock_client_factory(handler),
        "camp",
        on_success=loaded.append,
        origins=ORIGINS,
        timeout=1,
        sleep=blocking_sleep,
    )
    fetch.start()
    await asyncio.wait_for(sleeping.wait(), timeout=1)
    assert fetch.pending_delay == pytest.approx(1.2)

    fetch.cancel()
    assert await fetch.wait() is None

    assert fetch.alive is False
    assert fetch.status == FetchStatus.CANCELLED
    assert fetch.pending_delay is None
    assert delays == pytest.approx([1.2])
    assert len(requests) == 2
    assert loaded == []


@pytest.mark.asyncio
async def test_cancel_while_request_in_flight_skips_callback(mock_client_factory, form_payload):
    loaded: list[PublicFormPayload] = []
    fetch: ScheduledFetch | None = None

    def handler(request: httpx.Request) -> httpx.Response:
        fetch.cancel()
        return httpx.Response(200, json=form_payload)

    fetch = ScheduledFetch(
        mock_client_factory(handler),
        "camp",
        on_success=loaded.append,
        origins=ORIGINS,
        timeout=1,
    )

    assert await fetch.wait() is None
    assert loaded == []
    assert fetch.status == FetchStatus.CANCELLED


@pytest.mark.asyncio
async def test_cancel_is_idempotent(mock_client_factory):
    client = mock_client_factory(lambda request: httpx.Response(500))
    fetch = ScheduledFetch(client, "camp", on_success=lambda payload: None, origins=ORIGINS)
    fetch.cancel()
    fetch.cancel()
    assert fetch.status == FetchStatus.CANCELLED
