"""Proxy orchestration: dispatch, translate, fetch, compose."""

from fastapi import Request, Response

from core.config import Config
from core.headers import HeaderTranslator
from core.protocols import RequestLogger
from core.request_types import FetchResult, Redirected
from core.router import RouteDecider
from core.streams import OneShotStream
from services.composer import ResponseComposer
from services.responders import PreflightResponder, json_error
from services.upstream import UpstreamClient

BODYLESS_METHODS = {"GET", "HEAD"}


def raw_request_url(request: Request) -> str:
    """Rebuild the request URL without percent-decoding the path."""
    raw_path = request.scope.get("raw_path")
    if raw_path:
        path = raw_path.decode("latin-1").split("?", 1)[0]
    else:
        path = request.url.path
    host = request.headers.get("host") or request.url.netloc
    url = f"{request.url.scheme}://{host}{path}"
    query = request.scope.get("query_string", b"")
    if query:
        url += "?" + query.decode("latin-1")
    return url


class ProxyService:
    """Handle one request/response cycle."""

    def __init__(
        self,
        config: Config,
        logger: RequestLogger,
        upstream: UpstreamClient,
        decider: RouteDecider | None = None,
        translator: HeaderTranslator | None = None,
        composer: ResponseComposer | None = None,
        preflight: PreflightResponder | None = None,
    ) -> None:
        self._logger = logger
        self._upstream = upstream
        self._decider = decider or RouteDecider(config.proxy.prefix)
        self._translator = translator or HeaderTranslator()
        self._composer = composer or ResponseComposer()
        self._preflight = preflight or PreflightResponder(config.cors)

    async def handle(self, request: Request) -> Response:
        """Dispatch by method and path."""
        decision = self._decider.decide(
            request.method,
            raw_request_url(request),
            request.headers.get("host"),
        )
        if decision.route == "preflight":
            return self._preflight.respond(request.headers)
        if decision.route == "proxy" and decision.target_url:
            return await self.proxy(decision.target_url, request)
        return json_error()

    async def proxy(self, target_url: str, request: Request) -> Response:
        """Forward the request to ``target_url`` and compose the reply."""
        headers = self._translator.translate(request.headers.items(), target_url)
        body = None
        if request.method.upper() not in BODYLESS_METHODS:
            body = OneShotStream(request.stream(), name="request")

        result = await self._upstream.fetch(target_url, request.method, headers, body)

        try:
            self._log_result(request.method, target_url, headers, result)
        except Exception:
            # The composer owns the upstream stream only once it is reached
            await result.response.aclose()
            raise

        return await self._composer.compose(request.headers, result)

    def _log_result(
        self,
        method: str,
        target_url: str,
        headers: dict[str, str],
        result: FetchResult,
    ) -> None:
        response = result.response
        redirect_to = None
        if isinstance(result, Redirected):
            redirect_to = result.target
        elif 300 <= response.status_code < 400:
            redirect_to = response.headers.get("location")
        self._logger.log_proxy(
            method,
            target_url,
            response.status_code,
            headers=headers,
            redirect_to=redirect_to,
        )
        if response.status_code >= 400:
            self._logger.log_error(response.url.host, response.status_code, response.reason_phrase)
