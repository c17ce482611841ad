"""Real-time CLI dashboard for proxy monitoring."""

from datetime import datetime
from itertools import count
from threading import Lock
from typing import Any

from rich.console import Console
from rich.layout import Layout
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.config import Config
from ui.log_utils import write_cli_log, write_upstream_log

console = Console()


class RequestInfo:
    """Info about a single forwarded request."""

    def __init__(
        self,
        request_id: int,
        route: str,
        version: str,
        method: str,
        path: str,
        timestamp: datetime,
    ):
        self.request_id = request_id
        self.route = route
        self.version = version
        self.method = method
        self.path = path
        self.status: int | None = None
        self.timestamp = timestamp


class Dashboard:
    """Real-time dashboard showing forwarded loyalty API calls."""

    def __init__(self, config: Config, *, write_logs: bool = True):
        self.config = config
        self._write_logs = write_logs
        self._lock = Lock()
        self._ids = count(1)
        self._recent: list[RequestInfo] = []
        self._max_recent = 8
        self._request_count = {"v1": 0, "v2": 0}
        self._route_count: dict[str, int] = {}
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

    def log_forward(
        self,
        route: str,
        version: str,
        method: str,
        *,
        path: str,
        params: list[tuple[str, str]],
        headers: dict[str, str],
        body: dict[str, Any] | None = None,
    ) -> int:
        """Log a request about to be sent upstream and return its id."""
        with self._lock:
            self._request_count[version] = self._request_count.get(version, 0) + 1
            self._route_count[route] = self._route_count.get(route, 0) + 1
            request_id = next(self._ids)
            info = RequestInfo(request_id, route, version, method, path, datetime.now())
            self._recent.insert(0, info)
            self._recent = self._recent[: self._max_recent]
            self._refresh()

            if self._write_logs:
                write_upstream_log(
                    route, version, method, path=path, params=params, headers=headers, body=body
                )
                write_cli_log("FORWARD", f"{method} {version}{path}", route=route)
            return request_id

    def log_response(self, route: str, status: int, *, request_id: int) -> None:
        """Record the upstream status of a forwarded request."""
        with self._lock:
            self._set_status(request_id, status)
            self._refresh()

    def log_error(
        self, route: str, status: int, message: str, *, request_id: int | None = None
    ) -> None:
        """Log an error, marking the forwarded request when there is one."""
        with self._lock:
            if request_id is not None:
                self._set_status(request_id, status)
            truncated = message[:50] + "..." if len(message) > 50 else message
            self._errors.insert(0, f"{route} {status}: {truncated}")
            self._errors = self._errors[:3]
            self._refresh()
            if self._write_logs:
                write_cli_log("ERROR", message[:200], route=route, status=status)

    def status_of(self, request_id: int) -> int | None:
        with self._lock:
            for info in self._recent:
                if info.request_id == request_id:
                    return info.status
        return None

    def _set_status(self, request_id: int, status: int) -> None:
        for info in self._recent:
            if info.request_id == request_id:
                info.status = status
                return

    def snapshot(self) -> dict[str, Any]:
        """Counters for display and tests."""
        with self._lock:
            return {
                "requests": dict(self._request_count),
                "routes": dict(self._route_count),
                "errors": list(self._errors),
            }

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

        layout["body"].split_row(
            Layout(name="routes", ratio=1),
            Layout(name="recent", ratio=2),
        )

        layout["header"].update(self._build_header())
        layout["routes"].update(self._build_routes_panel())
        layout["recent"].update(self._build_recent_panel())
        layout["footer"].update(self._build_footer())

        return layout

    def _build_header(self) -> Panel:
        """Build header with stats."""
        stats = Text()
        stats.append("Loyalty Proxy", style="bold cyan")
        stats.append("  |  ")
        stats.append(f"v1: {self._request_count.get('v1', 0)}", style="blue")
        stats.append("  |  ")
        stats.append(f"v2: {self._request_count.get('v2', 0)}", style="magenta")
        stats.append("  |  ")
        stats.append(f"Platform: {self.config.platform.name}", style="dim")
        stats.append("  |  ")
        stats.append(f"Port: {self.config.proxy.port}", style="dim")

        return Panel(stats, style="cyan")

    def _build_routes_panel(self) -> Panel:
        if self._route_count:
            content = Table.grid(padding=(0, 1))
            content.add_column()
            content.add_column(justify="right")
            for route, total in sorted(self._route_count.items()):
                content.add_row(f"[bold]{route}[/bold]", str(total))
        else:
            content = Text("Waiting for requests...", style="dim")

        return Panel(content, title="[blue]Routes[/blue]", border_style="blue")

    def _build_recent_panel(self) -> Panel:
        if self._recent:
            table = Table(show_header=True, header_style="bold", expand=True, box=None)
            table.add_column("Time", style="dim", width=8)
            table.add_column("API", width=3)
            table.add_column("Request", ratio=2)
            table.add_column("Status", width=6)

            for info in self._recent:
                status = str(info.status) if info.status is not None else "..."
                style = "red" if info.status and info.status >= 400 else "green"
                table.add_row(
                    info.timestamp.strftime("%H:%M:%S"),
                    info.version,
                    f"{info.method} {info.path}",
                    Text(status, style=style),
                )

            content = table
        else:
            content = Text("No upstream calls yet...", style="dim")

        return Panel(content, title="[magenta]Recent[/magenta]", border_style="magenta")

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
                f"Serving http://{self.config.proxy.host}:{self.config.proxy.port}"
                f"{self.config.proxy.mount_path}",
                style="dim",
            )

        return Panel(content, title="[dim]Status[/dim]", border_style="dim")
