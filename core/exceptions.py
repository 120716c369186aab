"""Custom exception hierarchy for the live-web proxy."""


class ProxyError(Exception):
    """Base exception for all proxy errors."""

    status_code: int = 500


class InvalidTargetError(ProxyError):
    """Raised when the URL embedded in the request path is not an absolute http(s) URL."""

    status_code = 400


class StreamConsumedError(ProxyError):
    """Raised when a one-shot body stream is iterated a second time."""


class UpstreamError(ProxyError):
    """Raised when the upstream fetch fails.

    Attributes:
        message: Error message
        status_code: HTTP status code reported to the client
        target: Upstream URL that was being fetched (optional)
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        target: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code or 502
        self.target = target


class UpstreamTimeoutError(UpstreamError):
    """Raised when an upstream request times out."""

    def __init__(
        self,
        message: str,
        target: str | None = None,
    ) -> None:
        super().__init__(message, status_code=504, target=target)


class UpstreamConnectionError(UpstreamError):
    """Raised when unable to connect to an upstream host."""

    def __init__(
        self,
        message: str,
        target: str | None = None,
    ) -> None:
        super().__init__(message, status_code=502, target=target)


class RedirectLoopError(UpstreamError):
    """Raised when redirect following exceeds the configured hop limit."""

    def __init__(
        self,
        message: str,
        target: str | None = None,
    ) -> None:
        super().__init__(message, status_code=508, target=target)
