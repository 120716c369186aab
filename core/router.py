"""Request dispatch logic - preflight, proxy or not found."""

import re
from urllib.parse import urlsplit

from core.exceptions import InvalidTargetError
from core.headers import url_origin
from core.request_types import RouteDecision

# Some callers collapse "https://" to "https:/" inside the path
_SINGLE_SLASH_SCHEME = re.compile(r"(https?:/)([^/])")


def normalize_request_url(url: str) -> str:
    """Restore the double slash of the first single-slash http(s) scheme."""
    return _SINGLE_SLASH_SCHEME.sub(r"\1/\2", url, count=1)


class RouteDecider:
    """Decide how an inbound request is handled."""

    def __init__(self, prefix: str = "/proxy/"):
        self.prefix = prefix

    def decide(self, method: str, url: str, host: str | None = None) -> RouteDecision:
        """Return the route for a raw request URL.

        ``url`` is the full, undecoded request URL and ``host`` the value of the
        request's Host header.
        """
        if method.upper() == "OPTIONS":
            return RouteDecision(route="preflight")

        url = normalize_request_url(url)
        parts = urlsplit(url)
        if not parts.path.startswith(self.prefix):
            return RouteDecision(route="not_found")

        return RouteDecision(route="proxy", target_url=self._extract_target(url, parts.path, parts.query, host))

    def _extract_target(self, url: str, path: str, query: str, host: str | None) -> str:
        """Take everything after the request host, minus the prefix, as the target."""
        if host and host in url:
            path_with_query = url.split(host, 1)[1]
        else:
            path_with_query = f"{path}?{query}" if query else path

        target = path_with_query[len(self.prefix):]
        if target.startswith("//"):
            target = "https:" + target

        if url_origin(target) is None:
            raise InvalidTargetError(f"Invalid proxy target: {target!r}")
        return target
