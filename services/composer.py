"""Compose the client-facing response from the final upstream response."""

from collections.abc import Mapping

import httpx
from fastapi import Response
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask

from core.headers import HOP_BY_HOP_HEADERS
from core.request_types import FetchResult, Redirected
from core.streams import OneShotStream
from services.upstream import REDIRECT_STATUSES

# Sidecar headers the replay client reads through CORS
EXPOSED_PROXY_HEADERS = [
    "x-redirect-status",
    "x-redirect-statusText",
    "X-Proxy-Set-Cookie",
    "x-orig-location",
    "x-orig-ts",
]
NOT_EXPOSED = {"transfer-encoding", "content-encoding"}

# Presence marks an archived capture, valid even with an error status
ARCHIVE_MARKER = "memento-datetime"

ERROR_BODY = "Sorry, this page was not found or could not be loaded: (Error {status})"


class ResponseComposer:
    """Translate an upstream response into headers the browser will accept."""

    async def compose(
        self,
        request_headers: Mapping[str, str],
        result: FetchResult,
    ) -> Response:
        """Build the outgoing response; the upstream body is streamed, not buffered."""
        upstream = result.response
        synthesized: list[tuple[str, str]] = []

        set_cookies = upstream.headers.get_list("set-cookie")
        if set_cookies:
            synthesized.append(("X-Proxy-Set-Cookie", ", ".join(set_cookies)))

        if upstream.status_code in REDIRECT_STATUSES:
            synthesized.extend(self._redirect_headers(result))
            status = 200
        else:
            status = upstream.status_code

        origin = request_headers.get("origin")
        if origin:
            synthesized.extend(self._cors_headers(origin, upstream))

        # Synthesized headers replace upstream values of the same name
        replaced = {key.lower() for key, _ in synthesized}
        headers = [(key, value) for key, value in self._copy_headers(upstream) if key.lower() not in replaced]
        headers.extend(synthesized)

        if status >= 400 and ARCHIVE_MARKER not in upstream.headers:
            await upstream.aclose()
            return self._error_response(status, headers)

        response = StreamingResponse(
            OneShotStream(upstream.aiter_raw(), name="response"),
            status_code=status,
            background=BackgroundTask(upstream.aclose),
        )
        for key, value in headers:
            response.headers.append(key, value)
        return response

    @staticmethod
    def _copy_headers(upstream: httpx.Response) -> list[tuple[str, str]]:
        return [
            (key, value)
            for key, value in upstream.headers.multi_items()
            if key.lower() not in HOP_BY_HOP_HEADERS
        ]

    @staticmethod
    def _redirect_headers(result: FetchResult) -> list[tuple[str, str]]:
        """Describe the redirect in headers instead of letting the browser act on it."""
        upstream = result.response
        headers = [
            ("x-redirect-status", str(upstream.status_code)),
            ("x-redirect-statusText", upstream.reason_phrase),
        ]
        location = upstream.headers.get("location")
        if location:
            headers.append(("x-orig-location", location))
        elif isinstance(result, Redirected):
            headers.append(("x-orig-location", result.target))
        if isinstance(result, Redirected):
            headers.append(("x-orig-ts", result.timestamp))
        return headers

    @staticmethod
    def _cors_headers(origin: str, upstream: httpx.Response) -> list[tuple[str, str]]:
        """Reflect the origin and expose every upstream header to the caller."""
        exposed = list(EXPOSED_PROXY_HEADERS)
        for name in upstream.headers.keys():
            if name not in NOT_EXPOSED and name not in exposed:
                exposed.append(name)
        return [
            ("Access-Control-Allow-Origin", origin),
            ("Access-Control-Allow-Credentials", "true"),
            ("Access-Control-Expose-Headers", ",".join(exposed)),
        ]

    @staticmethod
    def _error_response(status: int, headers: list[tuple[str, str]]) -> Response:
        response = Response(content=ERROR_BODY.format(status=status), status_code=status)
        for key, value in headers:
            # Length and encoding described the upstream body, not the replacement
            if key.lower() in ("content-length", "content-encoding"):
                continue
            response.headers.append(key, value)
        return response
