"""Normalize backend error bodies into field messages and a banner message."""

from typing import Any

ServerFieldErrors = dict[str, str]

_VALUES_PREFIX = "values."


def _normalize_message(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value
    if isinstance(value, list):
        parts = [part for part in (_normalize_message(item) for item in value) if part]
        if parts:
            return ", ".join(parts)
    if isinstance(value, dict):
        message = value.get("message")
        if isinstance(message, str) and message.strip():
            return message
    return None


def _extract_error_bucket(payload: Any) -> dict[str, Any] | None:
    if not isinstance(payload, dict):
        return None
    if isinstance(payload.get("errors"), dict):
        return payload["errors"]
    data = payload.get("data")
    if isinstance(data, dict) and isinstance(data.get("errors"), dict):
        return data["errors"]
    details = payload.get("details")
    if isinstance(details, dict) and isinstance(details.get("errors"), dict):
        return details["errors"]
    return None


def _normalize_field_key(key: str) -> str:
    if key.startswith(_VALUES_PREFIX):
        return key[len(_VALUES_PREFIX) :]
    return key


def extract_server_field_errors(payload: Any) -> ServerFieldErrors:
    """
    Flatten ``errors`` (or ``data.errors`` / ``details.errors``) into key → message.

    Nested buckets become dotted keys and a leading ``values.`` is dropped, so
    ``{"values": {"email": ["taken"]}}`` yields ``{"email": "taken"}``.
    """
    bucket = _extract_error_bucket(payload)
    if not bucket:
        return {}

    normalized: ServerFieldErrors = {}

    def collect(errors: dict[str, Any], prefix: str = "") -> None:
        for raw_key, value in errors.items():
            key = f"{prefix}.{raw_key}" if prefix else str(raw_key)
            message = _normalize_message(value)
            if message:
                normalized[_normalize_field_key(key)] = message
                continue
            if isinstance(value, dict):
                collect(value, key)

    collect(bucket)
    return normalized


def get_server_error_message(payload: Any, fallback: str = "Request failed") -> str:
    if isinstance(payload, dict):
        message = payload.get("message") or payload.get("error")
        if isinstance(message, str) and message.strip():
            return message
    return fallback


def get_first_server_field_error(errors: ServerFieldErrors) -> str | None:
    for message in errors.values():
        if message:
            return message
    return None
