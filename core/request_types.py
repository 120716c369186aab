"""Shared request data types."""

from dataclasses import dataclass

import httpx


@dataclass(frozen=True)
class RouteDecision:
    """Dispatch decision for an inbound request."""

    route: str  # "preflight", "proxy" or "not_found"
    target_url: str | None = None


@dataclass(frozen=True)
class Fetched:
    """Final upstream response, no redirect annotation."""

    response: httpx.Response


@dataclass(frozen=True)
class Redirected:
    """Upstream redirect to a timestamped capture that was not followed.

    Attributes:
        response: The 3xx upstream response
        target: Absolute URL captured from the Location header
        timestamp: Timestamp digits preceding ``id_/`` in the Location header
    """

    response: httpx.Response
    target: str
    timestamp: str


FetchResult = Fetched | Redirected
