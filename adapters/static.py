"""Adapter backed by a fixed token table from the config (local development)."""

import httpx
from fastapi import Request

from adapters import register_adapter
from core.config import Config
from core.exceptions import AuthError
from core.payloads import User


@register_adapter("static")
class StaticUserAdapter:
    platform = "static"

    def __init__(self, config: Config, request: Request, client: httpx.AsyncClient) -> None:
        self._users = config.platform.static_users

    async def resolve_user(self, token: str) -> User:
        entry = self._users.get(token)
        if entry is None:
            raise AuthError("Invalid token", status_code=401, platform=self.platform)
        return User(id=entry.id, email=entry.email)
