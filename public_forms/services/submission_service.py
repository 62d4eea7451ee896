"""Compose and send public form submissions."""

import json
import logging
from dataclasses import dataclass, field as dataclass_field
from enum import Enum
from typing import Any, Iterable
from urllib.parse import quote

import httpx
from fastapi import UploadFile

from public_forms.core.config import API_PREFIX, settings
from public_forms.core.structured_logging import build_log_context
from public_forms.schemas.forms import FormField, SubmissionResult
from public_forms.services.field_types import FieldCategory, classify_field
from public_forms.services.form_validation_service import Values
from public_forms.services.server_validation import (
    extract_server_field_errors,
    get_first_server_field_error,
    get_server_error_message,
)
from public_forms.utils.file_upload import read_upload_bytes

logger = logging.getLogger(__name__)

DEFAULT_SUBMIT_ERROR = "Failed to submit registration"


class SubmissionError(Exception):
    """The submission POST failed as a whole. Never retried automatically."""

    def __init__(self, message: str = DEFAULT_SUBMIT_ERROR, *, status_code: int | None = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class ServerValidationError(SubmissionError):
    """The backend rejected specific fields."""

    def __init__(self, field_errors: dict[str, str], *, status_code: int | None = None):
        self.field_errors = field_errors
        message = get_first_server_field_error(field_errors) or "Please review the highlighted fields."
        super().__init__(message, status_code=status_code)


class SubmissionEncoding(str, Enum):
    JSON = "json"
    MULTIPART = "multipart"


@dataclass
class ComposedSubmission:
    encoding: SubmissionEncoding
    values: dict[str, Any]
    files: dict[str, UploadFile] = dataclass_field(default_factory=dict)

    def request_kwargs(self) -> dict[str, Any]:
        """Keyword arguments for ``httpx.AsyncClient.post``."""
        if self.encoding == SubmissionEncoding.JSON:
            return {"json": {"values": self.values}}
        files = [
            (
                key,
                (
                    upload.filename or key,
                    read_upload_bytes(upload),
                    upload.content_type or "application/octet-stream",
                ),
            )
            for key, upload in self.files.items()
        ]
        return {"data": {"values": json.dumps(self.values)}, "files": files}


def compose_submission(fields: Iterable[FormField], values: Values) -> ComposedSubmission:
    """
    Turn the value map into a request body.

    Any selected file switches the whole submission to multipart; file fields
    still appear in the plain values map, by filename.
    """
    plain: dict[str, Any] = {}
    files: dict[str, UploadFile] = {}

    for f in fields:
        value = values.get(f.key)
        if classify_field(f) == FieldCategory.IMAGE:
            if isinstance(value, UploadFile):
                files[f.key] = value
                plain[f.key] = value.filename
            continue
        if isinstance(value, list):
            plain[f.key] = list(value)
        elif isinstance(value, (str, bool, int, float)):
            plain[f.key] = value

    encoding = SubmissionEncoding.MULTIPART if files else SubmissionEncoding.JSON
    return ComposedSubmission(encoding=encoding, values=plain, files=files)


def build_submission_url(origin: str, slug: str) -> str:
    return f"{origin}{API_PREFIX}/forms/{quote(slug, safe='')}/submissions"


def _response_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


async def submit_public_form(
    client: httpx.AsyncClient,
    slug: str,
    submission: ComposedSubmission,
    *,
    origin: str | None = None,
    timeout: float | None = None,
) -> SubmissionResult:
    """POST once. Raises ServerValidationError or SubmissionError on failure."""
    origin = origin or settings.fetch_origins[0]
    url = build_submission_url(origin, slug)
    log_context = build_log_context(slug=slug, url=url, encoding=submission.encoding.value)

    try:
        response = await client.post(
            url,
            timeout=timeout if timeout is not None else settings.SUBMIT_TIMEOUT_SECONDS,
            **submission.request_kwargs(),
        )
    except httpx.RequestError as exc:
        logger.warning("Submission request failed: %s", exc.__class__.__name__, extra=log_context)
        raise SubmissionError(DEFAULT_SUBMIT_ERROR) from exc

    body = _response_body(response)
    if not response.is_success:
        field_errors = extract_server_field_errors(body)
        logger.info(
            "Submission rejected with %s",
            response.status_code,
            extra={**log_context, "status_code": response.status_code},
        )
        if field_errors:
            raise ServerValidationError(field_errors, status_code=response.status_code)
        raise SubmissionError(
            get_server_error_message(body, DEFAULT_SUBMIT_ERROR),
            status_code=response.status_code,
        )

    if isinstance(body, dict):
        return SubmissionResult.model_validate(body)
    return SubmissionResult()
