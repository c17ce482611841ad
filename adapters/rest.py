"""Adapter resolving users through a storefront REST ``me`` endpoint."""

import json
import logging
from typing import Any

import httpx
from fastapi import Request
from pydantic import ValidationError

from adapters import register_adapter
from core.config import Config
from core.exceptions import AuthError
from core.payloads import User

logger = logging.getLogger(__name__)


@register_adapter("rest")
class RestUserAdapter:
    """Resolve ``{id, email}`` by calling the platform with the caller's token."""

    platform = "rest"

    def __init__(self, config: Config, request: Request, client: httpx.AsyncClient) -> None:
        self._settings = config.platform
        self._request = request
        self._client = client

    async def resolve_user(self, token: str) -> User:
        url = f"{self._settings.base_url.rstrip('/')}{self._settings.me_path}"
        try:
            response = await self._client.get(
                url,
                headers={"Authorization": f"Bearer {token}", "Accept": "application/json"},
            )
        except httpx.RequestError as e:
            logger.warning("Platform user lookup for %s failed: %s", self._request.url.path, e)
            raise AuthError(
                f"Platform unreachable: {e}",
                detail={"message": "User lookup failed", "error": type(e).__name__},
                platform=self.platform,
            ) from e

        detail = _decode(response)
        if response.status_code in (401, 403):
            raise AuthError("Invalid token", status_code=401, detail=detail, platform=self.platform)
        if not response.is_success:
            logger.warning(
                "Platform returned %s for user lookup on %s",
                response.status_code,
                self._request.url.path,
            )
            raise AuthError("User lookup failed", detail=detail, platform=self.platform)

        # Storefront APIs wrap the record as {"code": ..., "result": {...}}
        record = detail.get("result", detail) if isinstance(detail, dict) else detail
        try:
            return User.model_validate(record)
        except ValidationError as e:
            raise AuthError(
                "Platform returned an unexpected user record",
                detail={"message": "User lookup failed"},
                platform=self.platform,
            ) from e


def _decode(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return {"message": response.text}
