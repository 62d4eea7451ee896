"""Same-origin proxy for the portal API.

Public form pages try this path first so that browsers never need a
cross-origin request to load or submit a form.
"""

import logging
import re
from typing import AsyncIterator

import httpx
from fastapi import APIRouter, Depends, HTTPException, Request, Response

from public_forms.core.config import API_PREFIX, settings
from public_forms.core.structured_logging import build_log_context

logger = logging.getLogger(__name__)

router = APIRouter(prefix=API_PREFIX, tags=["proxy"])

PROXY_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "HEAD"]

# Request headers never forwarded upstream
_DROPPED_REQUEST_HEADERS = {"host", "content-length", "origin"}
# Response headers recomputed by the server or rewritten below
_DROPPED_RESPONSE_HEADERS = {"content-length", "content-encoding", "transfer-encoding", "set-cookie"}

_COOKIE_DOMAIN_RE = re.compile(r";\s*Domain=[^;]+", re.IGNORECASE)


async def get_upstream_client() -> AsyncIterator[httpx.AsyncClient]:
    async with httpx.AsyncClient(follow_redirects=False, timeout=settings.SUBMIT_TIMEOUT_SECONDS) as client:
        yield client


def strip_cookie_domain(cookie: str) -> str:
    """Make upstream cookies host-only for the proxy's domain."""
    return _COOKIE_DOMAIN_RE.sub("", cookie)


def build_forward_headers(request: Request) -> dict[str, str]:
    headers = {
        name: value
        for name, value in request.headers.items()
        if name.lower() not in _DROPPED_REQUEST_HEADERS
    }
    headers.setdefault("x-forwarded-proto", "https")
    headers.setdefault("x-forwarded-host", request.headers.get("host", ""))
    return headers


@router.api_route("/{path:path}", methods=PROXY_METHODS)
async def proxy(
    path: str,
    request: Request,
    client: httpx.AsyncClient = Depends(get_upstream_client),
) -> Response:
    origin = settings.proxy_upstream
    if not origin:
        raise HTTPException(
            status_code=500,
            detail="Missing API origin. Set API_PROXY_ORIGIN or API_ORIGIN.",
        )

    target = f"{origin}{API_PREFIX}/{path}"
    method = request.method.upper()
    body = None if method in ("GET", "HEAD") else await request.body()

    try:
        upstream = await client.request(
            method,
            target,
            params=list(request.query_params.multi_items()),
            content=body,
            headers=build_forward_headers(request),
        )
    except httpx.RequestError as exc:
        logger.warning("Upstream request failed: %s", exc.__class__.__name__, extra=build_log_context(url=target))
        raise HTTPException(status_code=502, detail="Upstream unavailable")

    response = Response(content=upstream.content, status_code=upstream.status_code)
    for name, value in upstream.headers.multi_items():
        if name.lower() in _DROPPED_RESPONSE_HEADERS:
            continue
        response.headers.append(name, value)
    for cookie in upstream.headers.get_list("set-cookie"):
        response.headers.append("set-cookie", strip_cookie_domain(cookie))
    return response
