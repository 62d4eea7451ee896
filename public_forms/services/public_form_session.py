"""State holder for one mounted public form: load, edit, submit, confirm."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field as dataclass_field
from typing import Any, Awaitable, Callable

import httpx
from fastapi import UploadFile

from public_forms.core.clock import Clock, SystemClock
from public_forms.core.config import settings as app_settings
from public_forms.core.structured_logging import build_log_context
from public_forms.schemas.forms import FormField, FormSettings, PublicFormPayload, SubmissionResult
from public_forms.services.form_validation_service import (
    ClientValidationError,
    FieldValue,
    FormState,
)
from public_forms.services.schema_cache import InMemoryKeyValueStore, KeyValueStore, SchemaCache
from public_forms.services.schema_fetch_service import FetchStatus, ScheduledFetch
from public_forms.services.submission_service import (
    ServerValidationError,
    SubmissionError,
    compose_submission,
    submit_public_form,
)
from public_forms.services.success_service import (
    SuccessDetail,
    SuccessMessage,
    build_success_details,
    render_success_message,
    resolve_success_tokens,
)
from public_forms.utils.file_upload import build_file_preview
from public_forms.utils.presentation import is_form_closed, load_status_message

logger = logging.getLogger(__name__)

CLOSED_MESSAGE = "This registration is closed."


class FormClosedError(SubmissionError):
    """The form's closing or expiry time has passed."""

    def __init__(self) -> None:
        super().__init__(CLOSED_MESSAGE)


@dataclass
class SuccessState:
    tokens: dict[str, str]
    details: list[SuccessDetail]
    message: SuccessMessage
    result: SubmissionResult = dataclass_field(default_factory=SubmissionResult)


class PublicFormSession:
    """
    One public form as seen by one visitor.

    ``mount()`` starts the resilient fetch unless a cached payload is already
    available; ``unmount()`` cancels it. A submission is awaited once and
    never retried.
    """

    def __init__(
        self,
        slug: str,
        *,
        client: httpx.AsyncClient,
        store: KeyValueStore | None = None,
        clock: Clock | None = None,
        origins: list[str] | None = None,
        fetch_timeout: float | None = None,
        retry_base_delay: float | None = None,
        retry_max_delay: float | None = None,
        max_image_bytes: int | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.slug = (slug or "").strip()
        self.client = client
        self.cache = SchemaCache(store if store is not None else InMemoryKeyValueStore())
        self.clock = clock or SystemClock()
        self.origins = origins if origins is not None else app_settings.fetch_origins
        self.fetch_timeout = fetch_timeout
        self.retry_base_delay = retry_base_delay
        self.retry_max_delay = retry_max_delay
        self._sleep = sleep

        self.payload: PublicFormPayload | None = self.cache.load(self.slug)
        self.state = FormState(max_image_bytes=max_image_bytes)
        if self.payload is not None:
            self.state.reset(self.payload.form.fields)

        self.status = FetchStatus.READY if self.payload is not None else FetchStatus.IDLE
        self.load_error: str | None = None
        self.submitting = False
        self.success: SuccessState | None = None
        self._fetch: ScheduledFetch | None = None

    # Loading

    @property
    def loading(self) -> bool:
        return self.payload is None

    @property
    def retrying(self) -> bool:
        return self.status == FetchStatus.RETRYING

    @property
    def status_message(self) -> str:
        return load_status_message(self.load_error, self.retrying)

    def mount(self) -> ScheduledFetch | None:
        """Start fetching when nothing usable is cached yet."""
        if not self.slug or self.payload is not None or self._fetch is not None:
            return None
        self._fetch = ScheduledFetch(
            self.client,
            self.slug,
            on_success=self._on_schema_loaded,
            on_status=self._on_fetch_status,
            origins=self.origins,
            timeout=self.fetch_timeout,
            base_delay=self.retry_base_delay,
            max_delay=self.retry_max_delay,
            sleep=self._sleep,
        )
        self._fetch.start()
        return self._fetch

    def unmount(self) -> None:
        if self._fetch is not None:
            self._fetch.cancel()

    async def load(self) -> PublicFormPayload | None:
        """Mount and wait until the form is available (or the fetch is cancelled)."""
        fetch = self.mount()
        if fetch is not None:
            await fetch.wait()
        return self.payload

    def _on_fetch_status(self, status: FetchStatus, message: str | None) -> None:
        self.status = status
        self.load_error = message

    def _on_schema_loaded(self, payload: PublicFormPayload) -> None:
        self.payload = payload
        self.cache.save(self.slug, payload)
        self.state.reset(payload.form.fields)
        self.success = None
        self.load_error = None
        logger.info(
            "Form loaded",
            extra=build_log_context(slug=self.slug, attempt=self._fetch.attempt if self._fetch else None),
        )

    # Form access

    @property
    def fields(self) -> list[FormField]:
        return list(self.payload.form.fields) if self.payload else []

    @property
    def form_settings(self) -> FormSettings:
        return self.payload.form.settings if self.payload else FormSettings()

    @property
    def is_closed(self) -> bool:
        return is_form_closed(self.form_settings, self.clock)

    def get_field(self, key: str) -> FormField:
        for f in self.fields:
            if f.key == key:
                return f
        raise KeyError(key)

    def update(self, key: str, value: FieldValue) -> str | None:
        return self.state.update_field(self.get_field(key), value)

    def preview(self, key: str) -> str:
        value = self.state.values.get(key)
        return build_file_preview(value if isinstance(value, UploadFile) else None)

    # Submission

    async def submit(self) -> SuccessState:
        """
        Validate and POST the current values.

        Raises FormClosedError, ClientValidationError, ServerValidationError or
        SubmissionError. On success the values are reset and the confirmation
        is returned.
        """
        if self.payload is None:
            raise SubmissionError("Form is not loaded yet.")
        if self.submitting:
            raise SubmissionError("A submission is already in progress.")
        if self.is_closed:
            raise FormClosedError()

        fields = self.fields
        self.state.form_error = None
        if not self.state.validate_all(fields):
            raise ClientValidationError(dict(self.state.errors), self.state.form_error)

        submitted_values = dict(self.state.values)
        composed = compose_submission(fields, submitted_values)
        self.submitting = True
        try:
            result = await submit_public_form(
                self.client,
                self.slug,
                composed,
                origin=self.origins[0] if self.origins else None,
            )
        except ServerValidationError as exc:
            self.state.apply_server_errors(exc.field_errors)
            raise
        finally:
            self.submitting = False

        schema = self.payload.form
        event = self.payload.event
        tokens = resolve_success_tokens(schema, event, submitted_values)
        self.success = SuccessState(
            tokens=tokens,
            details=build_success_details(schema, event, submitted_values),
            message=render_success_message(schema.settings, tokens),
            result=result,
        )
        self.state.reset(fields)
        return self.success

    def success_message(self) -> SuccessMessage:
        """Confirmation copy; before any submission it previews from current values."""
        if self.success is not None:
            return self.success.message
        if self.payload is None:
            return render_success_message(FormSettings(), {})
        tokens = resolve_success_tokens(self.payload.form, self.payload.event, self.state.values)
        return render_success_message(self.payload.form.settings, tokens)
