"""HTTP helpers: candidate-origin GETs and retry backoff."""

from __future__ import annotations

import logging
from typing import Any, Callable, Sequence, TypeVar

import httpx

from public_forms.core.structured_logging import build_log_context

logger = logging.getLogger(__name__)

T = TypeVar("T")


def backoff_delay(attempt: int, *, base_delay: float, max_delay: float) -> float:
    """Delay before the retry that follows ``attempt`` (1-based): linear, capped."""
    if attempt < 1:
        return 0.0
    return min(max_delay, base_delay * attempt)


async def get_first_valid(
    client: httpx.AsyncClient,
    urls: Sequence[str],
    parse: Callable[[Any], T | None],
    *,
    timeout: float,
) -> T | None:
    """
    GET each URL in order and return the first parsed payload.

    Timeouts, transport errors, non-2xx responses, bad JSON and payloads that
    ``parse`` rejects all move on to the next URL. Returns None when every URL
    fails.
    """
    for url in urls:
        try:
            response = await client.get(url, timeout=timeout)
        except httpx.TimeoutException:
            logger.warning("GET timed out", extra=build_log_context(url=url))
            continue
        except httpx.RequestError as exc:
            logger.warning("GET failed: %s", exc.__class__.__name__, extra=build_log_context(url=url))
            continue

        if not response.is_success:
            logger.info(
                "GET returned %s",
                response.status_code,
                extra=build_log_context(url=url, status_code=response.status_code),
            )
            continue

        try:
            body = response.json()
        except ValueError:
            logger.warning("GET returned invalid JSON", extra=build_log_context(url=url))
            continue

        parsed = parse(body)
        if parsed is None:
            continue
        return parsed

    return None
