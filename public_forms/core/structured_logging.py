"""Structured logging helpers (PII-safe)."""

from typing import Any


def build_log_context(
    *,
    slug: str | None = None,
    attempt: int | None = None,
    url: str | None = None,
    status_code: int | None = None,
    encoding: str | None = None,
) -> dict[str, Any]:
    """Return a PII-safe log context dict. Never pass submitted values here."""
    context: dict[str, Any] = {}
    if slug:
        context["slug"] = slug
    if attempt is not None:
        context["attempt"] = attempt
    if url:
        context["url"] = url
    if status_code is not None:
        context["status_code"] = status_code
    if encoding:
        context["encoding"] = encoding
    return context
