"""Simple responders: JSON errors and CORS preflight."""

from collections.abc import Mapping

from fastapi.responses import JSONResponse, Response

from core.config import CorsSettings


def json_error(message: str = "not found", status: int = 404) -> JSONResponse:
    """Return ``{"error": message}`` with the given status."""
    return JSONResponse({"error": message}, status_code=status)


class PreflightResponder:
    """Answer OPTIONS requests."""

    def __init__(self, cors: CorsSettings) -> None:
        self._cors = cors

    def respond(self, headers: Mapping[str, str]) -> Response:
        origin = headers.get("origin")
        method = headers.get("access-control-request-method")
        request_headers = headers.get("access-control-request-headers")

        if not self._cors.is_allowed(origin):
            return json_error("origin not allowed", 403)

        # All three must be present for a real preflight
        if origin is not None and method is not None and request_headers is not None:
            return Response(
                headers={
                    "Access-Control-Allow-Methods": method,
                    "Access-Control-Allow-Headers": request_headers,
                    "Access-Control-Allow-Origin": origin,
                    "Access-Control-Allow-Credentials": "true",
                },
            )

        return Response(headers={"Allow": "GET, HEAD, POST, OPTIONS"})
