"""httpx session helpers shared by the gym clients."""

from __future__ import annotations

from typing import Any, Optional

import httpx
import structlog

from .config import SiteConfig
from .errors import TransportError

LOGGER = structlog.get_logger(__name__)


def open_session(site: SiteConfig, *, transport: Optional[httpx.AsyncBaseTransport] = None) -> httpx.AsyncClient:
    """
    Create the HTTP client for one booking attempt.

    Redirects are followed so that ``Set-Cookie`` headers along the chain end up
    in the client's cookie jar. The client is never shared between attempts.
    """
    return httpx.AsyncClient(
        base_url=site.base_url,
        timeout=site.timeout_seconds,
        follow_redirects=True,
        headers=site.default_headers,
        transport=transport,
    )


async def send(client: httpx.AsyncClient, method: str, url: str, **kwargs: Any) -> httpx.Response:
    """Issue a request, turning httpx failures into :class:`TransportError`."""
    try:
        return await client.request(method, url, **kwargs)
    except httpx.TimeoutException as exc:
        LOGGER.error("http.timeout", method=method, url=url)
        raise TransportError(f"Request timed out: {method} {url}") from exc
    except httpx.HTTPError as exc:
        LOGGER.error("http.failed", method=method, url=url, error=str(exc))
        raise TransportError(str(exc) or exc.__class__.__name__) from exc


def ensure_ok(response: httpx.Response) -> httpx.Response:
    """Raise unless the site answered 200."""
    if response.status_code != 200:
        LOGGER.error(
            "http.bad_status",
            url=str(response.request.url),
            status_code=response.status_code,
            headers=dict(response.headers),
        )
        raise TransportError(f"Resp statusCode {response.status_code}", status_code=response.status_code)
    return response


def read_json(response: httpx.Response) -> dict[str, Any]:
    """Decode a JSON API response, surfacing the site's own ``error`` field."""
    try:
        body = response.json()
    except ValueError as exc:
        ensure_ok(response)
        raise TransportError("Response is not valid JSON", status_code=response.status_code) from exc

    if isinstance(body, dict) and body.get("error"):
        LOGGER.error("http.api_error", url=str(response.request.url), error=body["error"])
        raise TransportError(str(body["error"]), status_code=response.status_code)

    ensure_ok(response)

    if not isinstance(body, dict):
        raise TransportError("Response is not a JSON object", status_code=response.status_code)
    return body
