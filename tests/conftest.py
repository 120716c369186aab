import httpx
import pytest

from core.config import Config


class RecordingLogger:
    """RequestLogger that keeps every call for assertions."""

    def __init__(self):
        self.proxied = []
        self.redirects = []
        self.errors = []

    def log_proxy(self, method, target_url, status, *, headers, redirect_to=None):
        self.proxied.append(
            {
                "method": method,
                "target": target_url,
                "status": status,
                "headers": headers,
                "redirect_to": redirect_to,
            }
        )

    def log_redirect(self, from_url, to_url, status):
        self.redirects.append((from_url, to_url, status))

    def log_error(self, route, status, message):
        self.errors.append((route, status, message))


def upstream_response(status=200, headers=None, body=b""):
    """Build an unread upstream response, as a live transport returns it."""
    return httpx.Response(status, headers=headers, stream=httpx.ByteStream(body))


class RecordingUpstream:
    """MockTransport handler that replays queued or routed responses."""

    def __init__(self, routes=None):
        self.routes = routes or {}
        self.requests = []
        self.bodies = []

    def __call__(self, request):
        self.requests.append(request)
        self.bodies.append(request.content)
        route = self.routes.get(str(request.url))
        if route is None:
            return upstream_response(404, body=b"no route")
        if isinstance(route, Exception):
            raise route
        status, headers, body = route
        return upstream_response(status, headers, body)


@pytest.fixture
def config():
    return Config()


@pytest.fixture
def logger():
    return RecordingLogger()
