"""FastAPI application factory."""

from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request

from api.handlers import handle_request, register_exception_handlers
from core.config import Config
from core.protocols import RequestLogger
from services.proxy_service import ProxyService
from services.upstream import UpstreamClient

ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def create_app(
    config: Config,
    logger: RequestLogger,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    ``transport`` replaces the network transport of the upstream client.
    """
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        client = httpx.AsyncClient(
            follow_redirects=False,
            timeout=config.fetch.timeout,
            transport=transport,
        )
        upstream = UpstreamClient(client, config.cache, config.fetch, logger)
        app.state.proxy_service = ProxyService(config=config, logger=logger, upstream=upstream)
        try:
            yield
        finally:
            await client.aclose()

    app = FastAPI(
        title="Live-Web Proxy",
        version="0.1.0",
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    register_exception_handlers(app, logger)

    @app.api_route("/{path:path}", methods=ALL_METHODS)
    async def proxy_all(request: Request, path: str):
        return await handle_request(request)

    return app
