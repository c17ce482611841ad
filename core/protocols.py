"""Shared protocol definitions."""

from typing import Any, Protocol

from core.request_types import QueryParams


class RequestLogger(Protocol):
    """Protocol for request logging (Dashboard)."""

    def log_forward(
        self,
        route: str,
        version: str,
        method: str,
        *,
        path: str,
        params: QueryParams,
        headers: dict[str, str],
        body: dict[str, Any] | None = None,
    ) -> int: ...
    def log_response(self, route: str, status: int, *, request_id: int) -> None: ...
    def log_error(
        self, route: str, status: int, message: str, *, request_id: int | None = None
    ) -> None: ...
