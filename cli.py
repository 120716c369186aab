"""CLI entry point for liveweb-proxy."""

import sys
from datetime import datetime
from pathlib import Path

from rich.console import Console

from app import create_app
from core.config import CONFIG_FILE, load_config
from ui.console import ConsoleLogger
from ui.dashboard import Dashboard
from ui.log_utils import clear_logs, write_cli_log

console = Console()


def main():
    """Main CLI entry point."""
    args = sys.argv[1:]

    if "--help" in args or "-h" in args:
        _print_help()
        return

    config_file = CONFIG_FILE
    if "--config-file" in args:
        index = args.index("--config-file")
        if index + 1 >= len(args):
            console.print("[red][ERROR][/red] --config-file requires a path")
            sys.exit(1)
        config_file = Path(args[index + 1]).expanduser()

    config = load_config(config_file)

    if "--config" in args:
        console.print(f"[bold]Config:[/bold] {config_file}")
        console.print_json(config.model_dump_json())
        return

    # Clear previous logs and pick the request logger
    clear_logs()
    plain = "--plain" in args
    logger = ConsoleLogger() if plain else Dashboard(config)

    import uvicorn

    app = create_app(config, logger)

    uvicorn_config = uvicorn.Config(
        app,
        host=config.proxy.host,
        port=config.proxy.port,
        log_level="warning",
        timeout_keep_alive=config.proxy.keep_alive_timeout,
    )
    server = uvicorn.Server(uvicorn_config)

    if isinstance(logger, Dashboard):
        logger.start()
    else:
        console.print(
            f"[bold cyan]Live-Web Proxy[/bold cyan] on "
            f"http://{config.proxy.host}:{config.proxy.port}{config.proxy.prefix}"
        )
    start_time = datetime.now()
    write_cli_log("STARTUP", "Proxy started", port=config.proxy.port)
    try:
        server.run()
    finally:
        duration = datetime.now() - start_time
        write_cli_log("SHUTDOWN", "Proxy stopped", duration=str(duration))
        if isinstance(logger, Dashboard):
            logger.stop()


def _print_help():
    """Print help message."""
    help_text = """
[bold cyan]Live-Web Proxy[/bold cyan]

Fetches live web resources for browser-based archive replay,
adding the CORS and redirect headers the replay client needs.

[bold]Usage:[/bold]
    liveweb-proxy                        Start with live dashboard
    liveweb-proxy --plain                Start with one log line per request
    liveweb-proxy --config               Show config location and settings
    liveweb-proxy --config-file PATH     Use another config file
    liveweb-proxy --help                 Show this help

[bold]Requests:[/bold]
    GET /proxy/https://example.com/page?q=1
    Control headers: X-Proxy-Referer, X-Proxy-User-Agent,
    X-Proxy-Cookie, X-OWT-No-HTTPS
"""
    console.print(help_text)


if __name__ == "__main__":
    main()
