"""Shared protocol definitions."""

from typing import Protocol


class RequestLogger(Protocol):
    """Protocol for request logging (Dashboard, ConsoleLogger)."""

    def log_proxy(
        self,
        method: str,
        target_url: str,
        status: int,
        *,
        headers: dict[str, str],
        redirect_to: str | None = None,
    ) -> None: ...
    def log_redirect(self, from_url: str, to_url: str, status: int) -> None: ...
    def log_error(self, route: str, status: int, message: str) -> None: ...
