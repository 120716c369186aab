"""Outbound fetching with manual, timestamp-aware redirect handling."""

import re
from collections.abc import AsyncIterable

import httpx

from core.config import CacheSettings, FetchSettings
from core.exceptions import RedirectLoopError, UpstreamConnectionError, UpstreamTimeoutError
from core.headers import HOP_BY_HOP_HEADERS
from core.protocols import RequestLogger
from core.request_types import Fetched, FetchResult, Redirected

# "<timestamp>id_/<absolute url>", an archive capture of that URL at that time
TS_URL = re.compile(r"(\d+)id_/(https?:.*)")

REDIRECT_STATUSES = {301, 302, 303, 307, 308}
NO_HTTPS_HEADER = "x-owt-no-https"


def match_capture(url: str) -> tuple[str, str] | None:
    """Split a timestamped capture URL into (timestamp, url)."""
    match = TS_URL.search(url)
    if not match:
        return None
    return match.group(1), match.group(2)


class UpstreamClient:
    """Fetch upstream resources, chasing archive-internal redirects."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        cache: CacheSettings,
        fetch: FetchSettings,
        logger: RequestLogger,
    ) -> None:
        self._client = client
        self._cache = cache
        self._max_redirects = fetch.max_redirects
        self._logger = logger

    async def fetch(
        self,
        url: str,
        method: str,
        headers: dict[str, str],
        body: AsyncIterable[bytes] | None = None,
    ) -> FetchResult:
        """Fetch ``url``, following only redirects that stay within one capture.

        The returned response is open in streaming mode; the caller owns it.
        """
        headers = {k.lower(): v for k, v in headers.items() if k.lower() not in HOP_BY_HOP_HEADERS}
        force_https_follow = headers.pop(NO_HTTPS_HEADER, None) is not None

        hops = 0
        while True:
            response = await self._send(url, method, headers, body)
            next_url, result = self._check_redirect(url, response, force_https_follow)
            if next_url is None:
                return result

            await response.aclose()
            hops += 1
            # Hop limit guards against self-referential capture redirects
            if hops > self._max_redirects:
                raise RedirectLoopError(
                    f"Exceeded {self._max_redirects} redirects",
                    target=next_url,
                )
            next_url = str(httpx.URL(url).join(next_url))
            self._logger.log_redirect(url, next_url, response.status_code)
            url = next_url

    def _check_redirect(
        self,
        url: str,
        response: httpx.Response,
        force_https_follow: bool,
    ) -> tuple[str | None, FetchResult]:
        """Return the URL to follow, or None with the final result."""
        location = response.headers.get("location")
        if response.status_code not in REDIRECT_STATUSES or not location:
            return None, Fetched(response)

        capture = match_capture(location)
        current = match_capture(url)
        if capture and current and capture[1] == current[1]:
            # Same resource at another timestamp
            return location, Fetched(response)

        if force_https_follow and location.startswith("https://"):
            return location, Fetched(response)

        if capture:
            timestamp, target = capture
            return None, Redirected(response, target=target, timestamp=timestamp)
        return None, Fetched(response)

    async def _send(
        self,
        url: str,
        method: str,
        headers: dict[str, str],
        body: AsyncIterable[bytes] | None,
    ) -> httpx.Response:
        """Send one request with redirects disabled and the body left unread."""
        request = self._client.build_request(
            method,
            url,
            headers=headers,
            content=body,
            extensions={
                "cache_ttl_by_status": dict(self._cache.ttl_by_status),
                "rewrite_content": False,
            },
        )
        try:
            return await self._client.send(request, stream=True, follow_redirects=False)
        except httpx.TimeoutException as e:
            raise UpstreamTimeoutError(f"Upstream timeout: {e}", target=url) from e
        except httpx.RequestError as e:
            raise UpstreamConnectionError(f"Upstream connection error: {e}", target=url) from e
