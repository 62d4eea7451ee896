"""Resilient public form fetching with candidate origins and retry backoff."""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Any, Awaitable, Callable
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from public_forms.core.config import API_PREFIX, settings
from public_forms.core.structured_logging import build_log_context
from public_forms.schemas.forms import PublicFormPayload
from public_forms.services.http_service import backoff_delay, get_first_valid
from public_forms.utils.presentation import RETRYING_MESSAGE

logger = logging.getLogger(__name__)

RETRY_MESSAGE = RETRYING_MESSAGE


class SchemaFetchError(Exception):
    """Every candidate origin failed for one attempt."""

    def __init__(self, slug: str, urls: list[str]):
        self.slug = slug
        self.urls = urls
        super().__init__(f"Could not load form '{slug}' from {len(urls)} origin(s)")


class FetchStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    RETRYING = "retrying"
    READY = "ready"
    CANCELLED = "cancelled"


def build_candidate_urls(slug: str, origins: list[str] | None = None) -> list[str]:
    origins = origins if origins is not None else settings.fetch_origins
    encoded = quote(slug, safe="")
    return [f"{origin}{API_PREFIX}/forms/{encoded}" for origin in origins]


def unwrap_public_form_payload(body: Any) -> PublicFormPayload | None:
    """Accept ``{form, event}`` or ``{data: {form, event}}``; None without a form."""
    if not isinstance(body, dict):
        return None
    payload = body.get("data") if "data" in body else body
    if not isinstance(payload, dict) or not payload.get("form"):
        return None
    try:
        return PublicFormPayload.model_validate(payload)
    except ValidationError:
        logger.warning("Discarding malformed form payload")
        return None


async def fetch_public_form(
    client: httpx.AsyncClient,
    slug: str,
    *,
    origins: list[str] | None = None,
    timeout: float | None = None,
) -> PublicFormPayload:
    """One attempt across all candidate origins."""
    urls = build_candidate_urls(slug, origins)
    payload = await get_first_valid(
        client,
        urls,
        unwrap_public_form_payload,
        timeout=timeout if timeout is not None else settings.FETCH_TIMEOUT_SECONDS,
    )
    if payload is None:
        raise SchemaFetchError(slug, urls)
    return payload


class ScheduledFetch:
    """
    Fetch loop for one mounted form: retries until success or ``cancel()``.

    Only one attempt or one retry timer is ever pending. After ``cancel()`` no
    callback fires and no further timer is armed.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        slug: str,
        *,
        on_success: Callable[[PublicFormPayload], None],
        on_status: Callable[[FetchStatus, str | None], None] | None = None,
        origins: list[str] | None = None,
        timeout: float | None = None,
        base_delay: float | None = None,
        max_delay: float | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.client = client
        self.slug = slug
        self.on_success = on_success
        self.on_status = on_status
        self.origins = origins
        self.timeout = timeout
        self.base_delay = base_delay if base_delay is not None else settings.RETRY_BASE_SECONDS
        self.max_delay = max_delay if max_delay is not None else settings.RETRY_MAX_SECONDS
        self._sleep = sleep
        self._alive = True
        self._task: asyncio.Task | None = None
        self.attempt = 0
        self.status = FetchStatus.IDLE
        self.pending_delay: float | None = None

    @property
    def alive(self) -> bool:
        return self._alive

    def delay_for(self, attempt: int) -> float:
        return backoff_delay(attempt, base_delay=self.base_delay, max_delay=self.max_delay)

    def start(self) -> asyncio.Task:
        if self._task is None:
            self._task = asyncio.ensure_future(self.run())
        return self._task

    def cancel(self) -> None:
        if not self._alive:
            return
        self._alive = False
        self.status = FetchStatus.CANCELLED
        self.pending_delay = None
        if self._task is not None and not self._task.done():
            self._task.cancel()
        logger.debug("Schema fetch cancelled", extra=build_log_context(slug=self.slug))

    async def wait(self) -> PublicFormPayload | None:
        task = self.start()
        try:
            return await task
        except asyncio.CancelledError:
            # Only our own cancel() ends quietly; outer cancellation propagates.
            if self._alive:
                raise
            return None

    def _report(self, status: FetchStatus, message: str | None) -> None:
        self.status = status
        if self.on_status is not None:
            self.on_status(status, message)

    async def run(self) -> PublicFormPayload | None:
        while self._alive:
            self.attempt += 1
            self._report(FetchStatus.RETRYING if self.attempt > 1 else FetchStatus.LOADING, None)

            try:
                payload = await fetch_public_form(
                    self.client, self.slug, origins=self.origins, timeout=self.timeout
                )
            except SchemaFetchError:
                if not self._alive:
                    return None
                delay = self.delay_for(self.attempt)
                logger.warning(
                    "Form fetch failed, retrying in %.1fs",
                    delay,
                    extra=build_log_context(slug=self.slug, attempt=self.attempt),
                )
                self._report(self.status, RETRY_MESSAGE)
                self.pending_delay = delay
                await self._sleep(delay)
                self.pending_delay = None
                continue

            if not self._alive:
                return None
            self.on_success(payload)
            self._report(FetchStatus.READY, None)
            return payload
        return None
