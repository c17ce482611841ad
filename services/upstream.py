"""HTTP forwarding to the loyalty API and response relay."""

import json
from typing import Any

import httpx
from fastapi import Response
from fastapi.responses import JSONResponse

from core.exceptions import BadUpstreamResponse, UpstreamTimeoutError, UpstreamTransportError
from core.protocols import RequestLogger
from core.request_types import UpstreamRequest

_EMPTY = object()


class UpstreamClient:
    """Forward prepared requests to the v1 or v2 loyalty API."""

    def __init__(
        self,
        v1_client: httpx.AsyncClient,
        v2_client: httpx.AsyncClient,
    ) -> None:
        self._clients = {
            "v1": v1_client,
            "v2": v2_client,
        }

    async def forward(self, prepared: UpstreamRequest, logger: RequestLogger) -> Response:
        """Issue one upstream call and relay its status and body."""
        client = self._client_for(prepared.version)
        request_id = logger.log_forward(
            prepared.route,
            prepared.version,
            prepared.method,
            path=prepared.path,
            params=prepared.params,
            headers=prepared.headers,
            body=prepared.body,
        )
        try:
            response = await client.request(
                prepared.method,
                prepared.path.lstrip("/"),
                params=prepared.params or None,
                json=prepared.body,
                headers=prepared.headers,
            )
        except httpx.TimeoutException as e:
            logger.log_error(prepared.route, 500, "Upstream timeout", request_id=request_id)
            raise UpstreamTimeoutError(f"Upstream timeout: {e}", error=type(e).__name__) from e
        except httpx.RequestError as e:
            logger.log_error(prepared.route, 500, str(e), request_id=request_id)
            raise UpstreamTransportError(
                f"Upstream connection error: {e}", error=type(e).__name__
            ) from e

        if not response.is_success:
            logger.log_error(
                prepared.route, response.status_code, response.text, request_id=request_id
            )
        else:
            logger.log_response(prepared.route, response.status_code, request_id=request_id)

        body = decode_body(response)
        if body is _EMPTY:
            return Response(status_code=response.status_code)
        return JSONResponse(content=body, status_code=response.status_code)

    def _client_for(self, version: str) -> httpx.AsyncClient:
        """Select the appropriate cached client."""
        return self._clients[version]


class _NonStandardConstant(ValueError):
    """NaN / Infinity literals, which are not JSON and cannot be relayed."""


def _reject_constant(name: str) -> Any:
    raise _NonStandardConstant(f"non-standard JSON constant {name}")


def decode_body(response: httpx.Response) -> Any:
    """Decode an upstream body as JSON.

    The body may arrive empty, as a JSON document, or as a JSON string that
    itself holds a JSON document; the latter is unwrapped once.
    """
    if not response.content.strip():
        return _EMPTY
    try:
        body = json.loads(response.content, parse_constant=_reject_constant)
    except (ValueError, UnicodeDecodeError) as e:
        raise _bad_response(response, e) from e

    if isinstance(body, str):
        try:
            return json.loads(body, parse_constant=_reject_constant)
        except _NonStandardConstant as e:
            raise _bad_response(response, e) from e
        except json.JSONDecodeError:
            return body
    return body


def _bad_response(response: httpx.Response, error: Exception) -> BadUpstreamResponse:
    return BadUpstreamResponse(
        f"Upstream returned a body that is not valid JSON: {error}",
        upstream_status=response.status_code,
    )
