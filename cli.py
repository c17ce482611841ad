"""CLI entry point for loyalty-proxy."""

import sys
from datetime import datetime

from rich.console import Console

from adapters import registered_platforms
from app import create_app
from core.config import Config, config_path, load_config
from ui.dashboard import Dashboard
from ui.log_utils import clear_logs, write_cli_log

console = Console()


def main():
    """Main CLI entry point."""
    config = load_config()

    # Handle CLI arguments
    if len(sys.argv) > 1:
        arg = sys.argv[1]

        if arg == "--check":
            print_config_status(config)
            return

        if arg == "--config":
            console.print(f"[bold]Config:[/bold] {config_path()}")
            return

        if arg in ("--help", "-h"):
            _print_help()
            return

    # v2 routes cannot authenticate without both credentials
    problems = config_problems(config)
    if problems:
        for problem in problems:
            console.print(f"[red][ERROR][/red] {problem}")
        console.print(f"[dim]Edit {config_path()}[/dim]")
        sys.exit(1)

    clear_logs()
    dashboard = Dashboard(config)

    import uvicorn

    app = create_app(config, dashboard)

    uvicorn_config = uvicorn.Config(
        app,
        host=config.proxy.host,
        port=config.proxy.port,
        log_level="warning",
        timeout_keep_alive=config.limits.keep_alive_timeout,
    )
    server = uvicorn.Server(uvicorn_config)

    dashboard.start()
    start_time = datetime.now()
    write_cli_log("STARTUP", "Proxy started", port=config.proxy.port, platform=config.platform.name)
    try:
        server.run()
    finally:
        duration = datetime.now() - start_time
        write_cli_log("SHUTDOWN", "Proxy stopped", duration=str(duration))
        dashboard.stop()


def config_problems(config: Config) -> list[str]:
    """Return blocking configuration problems, empty when the proxy can start."""
    problems = []
    if not config.loyalty.guid:
        problems.append("Loyalty API guid not configured (loyalty.guid)")
    if not config.loyalty.api_key:
        problems.append("Loyalty API key not configured (loyalty.api_key)")
    if config.platform.name not in registered_platforms():
        problems.append(
            f"Unknown platform '{config.platform.name}' "
            f"(available: {', '.join(registered_platforms())})"
        )
    return problems


def print_config_status(config: Config) -> None:
    console.print(f"[bold]v1:[/bold] {config.loyalty.api_url.v1}")
    console.print(f"[bold]v2:[/bold] {config.loyalty.api_url.v2}")
    console.print(f"[bold]Merchant:[/bold] {config.loyalty.merchant_id or '[yellow]not set[/yellow]'}")
    console.print(f"[bold]Platform:[/bold] {config.platform.name}")
    problems = config_problems(config)
    if problems:
        for problem in problems:
            console.print(f"[yellow]Warning:[/yellow] {problem}")
    else:
        console.print("[green]Configuration OK[/green]")


def _print_help():
    """Print help message."""
    help_text = """
[bold cyan]Loyalty Proxy[/bold cyan]

Forwards storefront loyalty calls to the rewards API (v1/v2),
adding credentials and the signed-in customer's identity.

[bold]Usage:[/bold]
    loyalty-proxy              Start with live dashboard
    loyalty-proxy --check      Check configuration
    loyalty-proxy --config     Show config location
    loyalty-proxy --help       Show this help

[bold]Configuration:[/bold]
    Set LOYALTY_PROXY_CONFIG to use a config file other than the default.
"""
    console.print(help_text)


if __name__ == "__main__":
    main()
