"""Shared request data types."""

from dataclasses import dataclass, field
from typing import Any

QueryParams = list[tuple[str, str]]


@dataclass(frozen=True)
class UpstreamRequest:
    """Prepared data for an upstream request."""

    route: str
    version: str
    method: str
    path: str
    headers: dict[str, str]
    params: QueryParams = field(default_factory=list)
    body: dict[str, Any] | None = None
