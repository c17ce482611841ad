"""Resolve the calling user through the configured platform adapter."""

import httpx
from fastapi import Request

from adapters import get_adapter
from core.config import Config
from core.exceptions import AuthError
from core.payloads import User
from core.protocols import RequestLogger
from core.transform import TOKEN_PARAM


class UserResolver:
    """Turn the ``token`` query parameter into a User."""

    def __init__(self, config: Config, client: httpx.AsyncClient, logger: RequestLogger) -> None:
        self._config = config
        self._client = client
        self._logger = logger

    async def resolve(self, request: Request, route: str) -> User:
        token = request.query_params.get(TOKEN_PARAM)
        if not token:
            self._logger.log_error(route, 401, "Missing token")
            raise AuthError("Token is required.", status_code=401)

        platform = self._config.platform.name
        try:
            adapter = get_adapter(platform, self._config, request, self._client)
            return await adapter.resolve_user(token)
        except AuthError as e:
            self._logger.log_error(route, e.status_code, f"{e.platform or platform}: {e.message}")
            raise
