"""Header translation for upstream requests."""

from collections.abc import Iterable, Mapping

import httpx

# Edge platform metadata and headers reserved for the replay client
STRIPPED_PREFIXES = ("cf-", "x-pywb-")

PROXY_REFERER = "x-proxy-referer"
PROXY_USER_AGENT = "x-proxy-user-agent"
PROXY_COOKIE = "x-proxy-cookie"
OVERRIDE_HEADERS = {PROXY_REFERER, PROXY_USER_AGENT, PROXY_COOKIE}

# Hop-by-hop headers are owned by each connection, never forwarded (RFC 7230)
HOP_BY_HOP_HEADERS = {
    "connection",
    "keep-alive",
    "proxy-authenticate",
    "proxy-authorization",
    "proxy-connection",
    "te",
    "trailer",
    "transfer-encoding",
    "upgrade",
}


def url_origin(url: str) -> str | None:
    """Return the serialized origin of an absolute URL, or None if it has none."""
    try:
        parsed = httpx.URL(url)
    except httpx.InvalidURL:
        return None
    if parsed.scheme not in ("http", "https") or not parsed.host:
        return None
    # httpx drops default ports, matching browser origin serialization
    origin = f"{parsed.scheme}://{parsed.host}"
    if parsed.port is not None:
        origin += f":{parsed.port}"
    return origin


class HeaderTranslator:
    """Translate inbound client headers into upstream request headers."""

    def translate(
        self,
        headers: Mapping[str, str] | Iterable[tuple[str, str]],
        target_url: str,
    ) -> dict[str, str]:
        """Build a fresh lower-cased header dict for the upstream request."""
        items = headers.items() if isinstance(headers, Mapping) else headers
        inbound: dict[str, str] = {}
        for key, value in items:
            inbound[key.lower()] = value

        upstream: dict[str, str] = {}
        for key, value in inbound.items():
            if key.startswith(STRIPPED_PREFIXES) or key in OVERRIDE_HEADERS:
                continue
            upstream[key] = value

        referrer = inbound.get(PROXY_REFERER)
        if referrer:
            upstream["referer"] = referrer
            self._apply_fetch_site(upstream, referrer, target_url)

        user_agent = inbound.get(PROXY_USER_AGENT)
        if user_agent:
            upstream["user-agent"] = user_agent

        cookie = inbound.get(PROXY_COOKIE)
        if cookie:
            upstream["cookie"] = cookie

        upstream.pop("host", None)
        return upstream

    @staticmethod
    def _apply_fetch_site(upstream: dict[str, str], referrer: str, target_url: str) -> None:
        """Forge Origin and Sec-Fetch-Site as the browser would for the real target."""
        origin = url_origin(referrer)
        if origin is None:
            return
        if origin != url_origin(target_url):
            upstream["origin"] = origin
            upstream["sec-fetch-site"] = "cross-origin"
        else:
            upstream.pop("origin", None)
            upstream["sec-fetch-site"] = "same-origin"
