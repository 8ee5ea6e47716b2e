from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from ..domain.parsers import parse_weight

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FetchResult:
    text: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class CheckResult:
    connected: bool
    raw: Optional[str] = None
    weight: Optional[float] = None
    error: Optional[str] = None


async def fetch_text(client: httpx.AsyncClient, url: str) -> FetchResult:
    """GET a device URL and return its body as text.

    Transport errors and non-2xx answers come back as ``FetchResult.error``;
    nothing is raised.
    """
    try:
        resp = await client.get(url)
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        logger.debug("Device fetch failed url=%s: %r", url, e)
        return FetchResult(error=str(e) or type(e).__name__)

    if not resp.is_success:
        return FetchResult(error=f"HTTP {resp.status_code}: {resp.text}")
    return FetchResult(text=resp.text)


def validate_url(url: str) -> httpx.URL:
    try:
        parsed = httpx.URL(url)
    except (httpx.InvalidURL, TypeError) as e:
        raise ValueError(f"Invalid URL: {url!r}") from e
    if parsed.scheme not in ("http", "https") or not parsed.host:
        raise ValueError(f"Invalid URL: {url!r}")
    return parsed


async def check_device(
    url: str,
    timeout: float = 3.0,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> CheckResult:
    """One-shot connectivity test for a scale or photocell URL."""
    validate_url(url)

    try:
        async with httpx.AsyncClient(timeout=timeout, transport=transport) as client:
            resp = await client.get(url, headers={"Cache-Control": "no-cache"})
    except httpx.TimeoutException:
        logger.warning("Device check timed out url=%s timeout=%.1fs", url, timeout)
        return CheckResult(connected=False, error="Timeout")
    except httpx.HTTPError as e:
        logger.warning("Device check failed url=%s: %s", url, e)
        return CheckResult(connected=False, error=str(e) or type(e).__name__)

    if not resp.is_success:
        return CheckResult(connected=False, error=f"HTTP {resp.status_code}")

    raw = resp.text.strip()
    parsed = parse_weight(raw)
    return CheckResult(
        connected=True,
        raw=raw,
        weight=None if parsed.status == "error" else parsed.value,
    )
