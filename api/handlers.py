"""FastAPI route and exception handlers."""

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse

from core.exceptions import ProxyError, UpstreamError
from core.protocols import RequestLogger
from services.responders import json_error


async def handle_request(request: Request) -> Response:
    """Hand every inbound request to the proxy service."""
    proxy_service = request.app.state.proxy_service
    return await proxy_service.handle(request)


def register_exception_handlers(app: FastAPI, logger: RequestLogger) -> None:
    """Map proxy errors to ``{"error": ...}`` JSON responses."""

    @app.exception_handler(ProxyError)
    async def _proxy_error(request: Request, exc: ProxyError) -> JSONResponse:
        route = request.url.path
        if isinstance(exc, UpstreamError) and exc.target:
            route = exc.target
        logger.log_error(route, exc.status_code, str(exc))
        return json_error(str(exc), exc.status_code)
