"""Real-time CLI dashboard for proxy monitoring."""

from datetime import datetime
from threading import Lock

import httpx
from rich.console import Console
from rich.layout import Layout
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.config import Config
from ui.log_utils import write_cli_log, write_request_log

console = Console()


class RequestInfo:
    """Info about a single proxied request."""

    def __init__(self, method: str, target: str, status: int, redirect_to: str | None, timestamp: datetime):
        self.method = method
        self.target = target[:80] + "..." if len(target) > 80 else target
        self.status = status
        self.redirect_to = redirect_to
        self.timestamp = timestamp


class Dashboard:
    """Real-time dashboard showing recent proxied requests."""

    def __init__(self, config: Config):
        self.config = config
        self._lock = Lock()
        self._requests: list[RequestInfo] = []
        self._max_requests = 12
        self._counts = {"proxied": 0, "followed": 0, "errors": 0}
        self._errors: list[str] = []
        self._live: Live | None = None

    def start(self) -> "Dashboard":
        """Start the live dashboard."""
        self._live = Live(
            self._build_layout(),
            console=console,
            refresh_per_second=4,
            screen=False,
        )
        self._live.start()
        return self

    def stop(self) -> None:
        """Stop the live dashboard."""
        if self._live:
            self._live.stop()

    def log_proxy(
        self,
        method: str,
        target_url: str,
        status: int,
        *,
        headers: dict[str, str],
        redirect_to: str | None = None,
    ) -> None:
        """Log a completed upstream fetch."""
        with self._lock:
            self._counts["proxied"] += 1
            info = RequestInfo(method, target_url, status, redirect_to, datetime.now())
            self._requests.insert(0, info)
            self._requests = self._requests[: self._max_requests]

            write_request_log(method, target_url, status, headers, redirect_to=redirect_to)
            write_cli_log("PROXY", f"{method} {target_url}", status=status)

            self._refresh()

    def log_redirect(self, from_url: str, to_url: str, status: int) -> None:
        """Log a redirect followed internally."""
        with self._lock:
            self._counts["followed"] += 1
            write_cli_log("FOLLOW", f"{from_url} -> {to_url}", status=status)
            self._refresh()

    def log_error(self, route: str, status: int, message: str) -> None:
        """Log an error."""
        with self._lock:
            self._counts["errors"] += 1
            truncated = message[:50] + "..." if len(message) > 50 else message
            self._errors.insert(0, f"{route} {status}: {truncated}")
            self._errors = self._errors[:3]
            self._refresh()
            write_cli_log("ERROR", message[:200], route=route, status=status)

    def _refresh(self) -> None:
        """Refresh the display."""
        if self._live:
            self._live.update(self._build_layout())

    def _build_layout(self) -> Layout:
        """Build the dashboard layout."""
        layout = Layout()

        layout.split_column(
            Layout(name="header", size=3),
            Layout(name="body"),
            Layout(name="footer", size=5),
        )

        layout["header"].update(self._build_header())
        layout["body"].update(self._build_requests_panel())
        layout["footer"].update(self._build_footer())

        return layout

    def _build_header(self) -> Panel:
        """Build header with stats."""
        stats = Text()
        stats.append("Live-Web Proxy", style="bold cyan")
        stats.append("  |  ")
        stats.append(f"Proxied: {self._counts['proxied']}", style="blue")
        stats.append("  |  ")
        stats.append(f"Followed: {self._counts['followed']}", style="magenta")
        stats.append("  |  ")
        stats.append(f"Errors: {self._counts['errors']}", style="red")
        stats.append("  |  ")
        stats.append(f"Port: {self.config.proxy.port}", style="dim")

        return Panel(stats, style="cyan")

    def _build_requests_panel(self) -> Panel:
        """Build recent requests panel."""
        if self._requests:
            table = Table(show_header=True, header_style="bold", expand=True, box=None)
            table.add_column("Time", style="dim", width=8)
            table.add_column("Method", width=7)
            table.add_column("Status", width=6)
            table.add_column("Target", ratio=3)
            table.add_column("Redirect", ratio=1)

            for req in self._requests:
                table.add_row(
                    req.timestamp.strftime("%H:%M:%S"),
                    req.method,
                    Text(str(req.status), style=_status_style(req.status)),
                    Text(req.target),
                    Text(_host(req.redirect_to)) if req.redirect_to else "",
                )

            content = table
        else:
            content = Text("Waiting for requests...", style="dim")

        return Panel(content, title="[blue]Recent Requests[/blue]", border_style="blue")

    def _build_footer(self) -> Panel:
        """Build footer with errors and help."""
        if self._errors:
            error_text = Text()
            for err in self._errors:
                error_text.append("! ", style="red bold")
                error_text.append(err + "\n", style="red")
            content = error_text
        else:
            content = Text(
                f"Fetch http://{self.config.proxy.host}:{self.config.proxy.port}"
                f"{self.config.proxy.prefix}<url> to proxy",
                style="dim",
            )

        return Panel(content, title="[dim]Status[/dim]", border_style="dim")


def _status_style(status: int) -> str:
    if status >= 400:
        return "red"
    if status >= 300:
        return "yellow"
    return "green"


def _host(url: str) -> str:
    try:
        return httpx.URL(url).host or url
    except httpx.InvalidURL:
        return url
