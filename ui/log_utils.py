"""Shared logging utilities."""

import json
import shutil
from datetime import UTC, datetime
from pathlib import Path
from typing import Any
from uuid import uuid4

LOG_ROOT = Path.cwd() / "logs"
CLI_LOG_FILE = LOG_ROOT / "proxy.log"

_SENSITIVE_PARAMS = {"token"}


def write_upstream_log(
    route: str,
    version: str,
    method: str,
    *,
    path: str,
    params: list[tuple[str, str]],
    headers: dict[str, str] | None = None,
    body: Any = None,
    log_root: Path = LOG_ROOT,
) -> Path:
    """Write a single forwarded request log entry."""
    payload = {
        "timestamp": _utc_now(),
        "route": route,
        "version": version,
        "method": method,
        "path": path,
        "params": redact_params(params),
        "headers": redact_headers(headers or {}),
        "body": body,
    }
    return _write_json(log_root / "upstream" / route, payload)


def write_cli_log(
    level: str,
    message: str,
    **extra: Any,
) -> None:
    """Append a line to the rolling CLI log file."""
    CLI_LOG_FILE.parent.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now(UTC).strftime("%Y-%m-%d %H:%M:%S")
    extra_str = " ".join(f"{k}={v}" for k, v in extra.items()) if extra else ""
    line = f"[{timestamp}] {level}: {message}"
    if extra_str:
        line += f" {extra_str}"
    line += "\n"
    with CLI_LOG_FILE.open("a") as f:
        f.write(line)


def clear_logs(log_root: Path = LOG_ROOT) -> None:
    """Remove request logs from a previous run, keeping the CLI log."""
    upstream = log_root / "upstream"
    if upstream.exists():
        shutil.rmtree(upstream, ignore_errors=True)


def redact_headers(headers: dict[str, str]) -> dict[str, str]:
    """Redact sensitive headers."""
    redacted = {}
    for key, value in headers.items():
        lowered = key.lower()
        if "key" in lowered or "guid" in lowered or "authorization" in lowered:
            redacted[key] = _mask(value)
        else:
            redacted[key] = value
    return redacted


def redact_params(params: list[tuple[str, str]]) -> list[tuple[str, str]]:
    return [(key, _mask(value) if key in _SENSITIVE_PARAMS else value) for key, value in params]


def _write_json(folder: Path, payload: dict[str, Any]) -> Path:
    """Write payload to a unique JSON file in the given folder."""
    folder.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now(UTC).strftime("%Y%m%dT%H%M%S.%fZ")
    file_path = folder / f"{timestamp}_{uuid4().hex}.json"
    file_path.write_text(json.dumps(payload, indent=2, default=str))
    return file_path


def _mask(value: str) -> str:
    if len(value) <= 10:
        return "***"
    return value[:6] + "..." + value[-4:]


def _utc_now() -> str:
    return datetime.now(UTC).isoformat()
