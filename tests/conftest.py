"""
Test configuration and fixtures.

Provides:
- A sample public form payload as the backend returns it (camelCase)
- A recording sleep so retry timers never really wait
- HTTPX clients backed by MockTransport for backend calls
- HTTPX AsyncClient for the proxy app
"""
import asyncio
from typing import AsyncGenerator, Callable

import httpx
import pytest
from httpx import AsyncClient, ASGITransport

from public_forms.main import app
from public_forms.routers.proxy import get_upstream_client


# =============================================================================
# Payloads
# =============================================================================

@pytest.fixture
def form_payload() -> dict:
    """Registration form with contact fields, choices and an image upload."""
    return {
        "form": {
            "title": "Youth Summit",
            "fields": [
                {"key": "full_name", "label": "Full Name", "type": "text", "required": True, "order": 1},
                {"key": "email_address", "label": "Email", "type": "email", "required": True, "order": 2},
                {"key": "phone_number", "label": "Phone", "type": "tel", "order": 3},
                {
                    "key": "sessions",
                    "label": "Sessions",
                    "type": "checkboxes",
                    "options": [
                        {"label": "Morning", "value": "morning"},
                        {"label": "Evening", "value": "evening"},
                    ],
                    "order": 4,
                },
                {"key": "photo", "label": "Photo", "type": "upload", "order": 5},
            ],
            "settings": {
                "formType": "registration",
                "dateFormat": "dd/mm/yyyy",
                "successTitle": "Thanks {{name}}",
                "successSubtitle": "for {{eventTitle}}",
                "successMessage": "See you on {{ eventDate }} at {{eventLocation}}.",
            },
        },
        "event": {
            "title": "Youth Summit 2026",
            "date": "2026-11-14",
            "time": "10:00 AM",
            "location": "Main Auditorium",
            "tags": ["Worship", "Workshops"],
        },
    }


# =============================================================================
# Timers
# =============================================================================

class SleepRecorder:
    """Stand-in for asyncio.sleep that records delays and returns at once."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)
        await asyncio.sleep(0)


@pytest.fixture
def sleep_recorder() -> SleepRecorder:
    return SleepRecorder()


# =============================================================================
# Backend clients
# =============================================================================

@pytest.fixture
async def mock_client_factory() -> AsyncGenerator[Callable[..., httpx.AsyncClient], None]:
    """Build AsyncClients whose requests go to a handler function."""
    clients: list[httpx.AsyncClient] = []

    def _make(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        clients.append(client)
        return client

    yield _make

    for client in clients:
        await client.aclose()


# =============================================================================
# Proxy app
# =============================================================================

@pytest.fixture
def upstream_requests() -> list[httpx.Request]:
    return []


@pytest.fixture
def upstream_handler(upstream_requests: list[httpx.Request]):
    """Default upstream: echo a small JSON body and a domain-scoped cookie."""

    def handler(request: httpx.Request) -> httpx.Response:
        upstream_requests.append(request)
        return httpx.Response(
            200,
            json={"ok": True},
            headers=[
                ("set-cookie", "sid=abc; Domain=api.example.org; Path=/; HttpOnly"),
                ("x-upstream", "yes"),
            ],
        )

    return handler


@pytest.fixture
async def client(upstream_handler) -> AsyncGenerator[AsyncClient, None]:
    """AsyncClient for the proxy app, with the upstream replaced by a mock."""

    async def override_get_upstream_client():
        async with httpx.AsyncClient(transport=httpx.MockTransport(upstream_handler)) as upstream:
            yield upstream

    app.dependency_overrides[get_upstream_client] = override_get_upstream_client

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as c:
        yield c

    app.dependency_overrides.clear()
