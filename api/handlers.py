"""FastAPI route handlers."""

import json
from json import JSONDecodeError
from typing import Any

from fastapi import Request, Response

from core.config import Config
from core.exceptions import InvalidPayload, RequestTooLarge
from core.protocols import RequestLogger
from core.request_types import QueryParams, UpstreamRequest
from core.transform import is_flag_set
from services.loyalty_service import LoyaltyService
from services.users import UserResolver

MAX_BODY_SIZE = 5 * 1024 * 1024  # 5MB


async def _parse_json_body(request: Request) -> dict[str, Any]:
    """Parse request body as a JSON object."""
    raw_body = await request.body()
    if len(raw_body) > MAX_BODY_SIZE:
        raise RequestTooLarge("Request body too large")
    if not raw_body.strip():
        return {}

    try:
        body = json.loads(raw_body.decode("utf-8", errors="replace"))
    except (JSONDecodeError, ValueError) as e:
        raise InvalidPayload(f"Invalid JSON: {e}") from e
    if not isinstance(body, dict):
        raise InvalidPayload("Request body must be a JSON object")
    return body


def _query(request: Request) -> QueryParams:
    return list(request.query_params.multi_items())


def client_ip(request: Request, config: Config) -> str | None:
    """Caller address, honouring X-Forwarded-For only when configured."""
    if config.proxy.trust_forwarded:
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


def _service(request: Request) -> LoyaltyService:
    return request.app.state.loyalty_service


def _resolver(request: Request) -> UserResolver:
    return request.app.state.user_resolver


async def _forward(request: Request, prepared: UpstreamRequest, logger: RequestLogger) -> Response:
    upstream = request.app.state.upstream_client
    return await upstream.forward(prepared, logger)


async def handle_customer_details(request: Request, logger: RequestLogger) -> Response:
    """Identify a referrer by email (v1)."""
    prepared = _service(request).customer_details(_query(request))
    return await _forward(request, prepared, logger)


async def handle_referral_email_shares(request: Request, logger: RequestLogger) -> Response:
    """Send referral share emails on behalf of a customer (v1)."""
    body = await _parse_json_body(request)
    prepared = _service(request).referral_email_shares(body)
    return await _forward(request, prepared, logger)


async def handle_actions(request: Request, config: Config, logger: RequestLogger) -> Response:
    """Record a customer action for the authenticated user."""
    body = await _parse_json_body(request)
    user = await _resolver(request).resolve(request, "actions")
    prepared = _service(request).actions(body, user, client_ip(request, config))
    return await _forward(request, prepared, logger)


async def handle_customer_record(request: Request, logger: RequestLogger) -> Response:
    """Create or update the authenticated user's customer record."""
    body = await _parse_json_body(request)
    service = _service(request)
    service.validate_customer_record(body)
    user = await _resolver(request).resolve(request, "customers")
    return await _forward(request, service.customer_record(body, user), logger)


async def handle_customer_birthdays(request: Request, logger: RequestLogger) -> Response:
    body = await _parse_json_body(request)
    service = _service(request)
    service.validate_birthday(body)
    user = await _resolver(request).resolve(request, "customer_birthdays")
    return await _forward(request, service.customer_birthday(body, user), logger)


async def handle_all_customers(request: Request, logger: RequestLogger) -> Response:
    """Fetch all customers; query (e.g. ``last_seen_at``) is passed through."""
    prepared = _service(request).all_customers(_query(request))
    return await _forward(request, prepared, logger)


async def handle_customer(request: Request, logger: RequestLogger) -> Response:
    """Fetch the authenticated user's customer record (points, referral link)."""
    user = await _resolver(request).resolve(request, "customer")
    prepared = _service(request).customer(_query(request), user)
    return await _forward(request, prepared, logger)


async def handle_redemptions(request: Request, logger: RequestLogger) -> Response:
    """Redeem the authenticated user's points for a redemption option."""
    body = await _parse_json_body(request)
    service = _service(request)
    service.validate_redemption(body)
    user = await _resolver(request).resolve(request, "redemptions")
    return await _forward(request, service.redemption(body, user), logger)


async def handle_redemption_options(request: Request, logger: RequestLogger) -> Response:
    return await _forward(request, _service(request).redemption_options(), logger)


async def handle_redemption_codes(request: Request, logger: RequestLogger) -> Response:
    prepared = _service(request).redemption_codes(_query(request))
    return await _forward(request, prepared, logger)


async def handle_campaigns(request: Request, logger: RequestLogger) -> Response:
    """List active campaigns, with per-customer status when ``with_status`` is set."""
    user = None
    if is_flag_set(request.query_params.get("with_status")):
        user = await _resolver(request).resolve(request, "campaigns")
    prepared = _service(request).campaigns(_query(request), user)
    return await _forward(request, prepared, logger)


async def handle_vip_tiers(request: Request, logger: RequestLogger) -> Response:
    return await _forward(request, _service(request).vip_tiers(), logger)
