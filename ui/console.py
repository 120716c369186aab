"""Line-oriented console logger for non-interactive runs."""

from rich.console import Console
from rich.markup import escape

from ui.log_utils import write_cli_log, write_request_log

console = Console()


class ConsoleLogger:
    """Print one line per proxy event."""

    def log_proxy(
        self,
        method: str,
        target_url: str,
        status: int,
        *,
        headers: dict[str, str],
        redirect_to: str | None = None,
    ) -> None:
        style = "red" if status >= 400 else "yellow" if status >= 300 else "green"
        line = f"[{style}]{status}[/{style}] {method} {escape(target_url)}"
        if redirect_to:
            line += f" [dim]-> {escape(redirect_to)}[/dim]"
        console.print(line, highlight=False)
        write_request_log(method, target_url, status, headers, redirect_to=redirect_to)
        write_cli_log("PROXY", f"{method} {target_url}", status=status)

    def log_redirect(self, from_url: str, to_url: str, status: int) -> None:
        console.print(f"[magenta]follow[/magenta] {status} {escape(from_url)} -> {escape(to_url)}", highlight=False)
        write_cli_log("FOLLOW", f"{from_url} -> {to_url}", status=status)

    def log_error(self, route: str, status: int, message: str) -> None:
        console.print(f"[red][ERROR][/red] {escape(route)} {status}: {escape(message)}", highlight=False)
        write_cli_log("ERROR", message[:200], route=route, status=status)
