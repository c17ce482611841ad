"""Platform adapters resolving the caller's identity from a bearer token.

Adapters register themselves under a platform name; the proxy picks one per
request based on ``platform.name`` in the configuration.
"""

from collections.abc import Callable
from typing import Protocol

import httpx
from fastapi import Request

from core.config import Config
from core.exceptions import UnknownPlatform
from core.payloads import User

__all__ = ["UserAdapter", "get_adapter", "register_adapter", "registered_platforms"]


class UserAdapter(Protocol):
    """Capability shared by every platform adapter."""

    platform: str

    async def resolve_user(self, token: str) -> User: ...


AdapterFactory = Callable[[Config, Request, httpx.AsyncClient], UserAdapter]

_REGISTRY: dict[str, AdapterFactory] = {}


def register_adapter(name: str) -> Callable[[AdapterFactory], AdapterFactory]:
    """Class decorator registering an adapter under a platform name."""

    def decorator(factory: AdapterFactory) -> AdapterFactory:
        _REGISTRY[name] = factory
        return factory

    return decorator


def registered_platforms() -> list[str]:
    return sorted(_REGISTRY)


def get_adapter(
    name: str,
    config: Config,
    request: Request,
    client: httpx.AsyncClient,
) -> UserAdapter:
    """Build the adapter registered for ``name``."""
    factory = _REGISTRY.get(name)
    if factory is None:
        raise UnknownPlatform(name)
    return factory(config, request, client)


# Built-in adapters register on import
from adapters import rest, static  # noqa: E402,F401
