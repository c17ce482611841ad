"""FastAPI application factory."""

from contextlib import asynccontextmanager

import httpx
from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import JSONResponse

from api.handlers import (
    handle_actions,
    handle_all_customers,
    handle_campaigns,
    handle_customer,
    handle_customer_birthdays,
    handle_customer_details,
    handle_customer_record,
    handle_redemption_codes,
    handle_redemption_options,
    handle_redemptions,
    handle_referral_email_shares,
    handle_vip_tiers,
)
from core.config import Config
from core.exceptions import ProxyError
from core.headers import HeaderBuilder
from core.protocols import RequestLogger
from services.loyalty_service import LoyaltyService
from services.upstream import UpstreamClient
from services.users import UserResolver


def create_app(
    config: Config,
    logger: RequestLogger,
    transport: httpx.AsyncBaseTransport | None = None,
    platform_transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    ``transport`` and ``platform_transport`` replace the network layer of the
    loyalty API and platform clients respectively.
    """
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        limits = httpx.Limits(
            max_connections=config.limits.max_connections,
            max_keepalive_connections=config.limits.max_keepalive_connections,
        )
        timeout = httpx.Timeout(config.limits.timeout, connect=config.limits.connect_timeout)
        v1_client = httpx.AsyncClient(
            base_url=config.loyalty.api_url.v1,
            timeout=timeout,
            limits=limits,
            transport=transport,
        )
        v2_client = httpx.AsyncClient(
            base_url=config.loyalty.api_url.v2,
            timeout=timeout,
            limits=limits,
            transport=transport,
        )
        platform_client = httpx.AsyncClient(
            timeout=timeout,
            limits=limits,
            transport=platform_transport,
        )
        app.state.upstream_client = UpstreamClient(v1_client, v2_client)
        app.state.loyalty_service = LoyaltyService(config, HeaderBuilder(config.loyalty))
        app.state.user_resolver = UserResolver(config, platform_client, logger)
        try:
            yield
        finally:
            await v1_client.aclose()
            await v2_client.aclose()
            await platform_client.aclose()

    app = FastAPI(title="Loyalty Proxy", version="0.1.0", lifespan=lifespan)

    @app.exception_handler(ProxyError)
    async def proxy_error_handler(request: Request, exc: ProxyError):
        return JSONResponse(content=exc.payload(), status_code=exc.status_code)

    @app.get("/health")
    async def health():
        return {"status": "ok", "platform": config.platform.name}

    router = APIRouter(prefix=config.proxy.mount_path.rstrip("/"))

    # v1
    @router.get("/customer_details")
    async def customer_details(request: Request):
        return await handle_customer_details(request, logger)

    @router.post("/referral_email_shares")
    async def referral_email_shares(request: Request):
        return await handle_referral_email_shares(request, logger)

    # v2
    @router.post("/actions")
    async def actions(request: Request):
        return await handle_actions(request, config, logger)

    @router.post("/customers")
    async def customer_record(request: Request):
        return await handle_customer_record(request, logger)

    @router.post("/customer_birthdays")
    async def customer_birthdays(request: Request):
        return await handle_customer_birthdays(request, logger)

    @router.get("/customers/all")
    async def all_customers(request: Request):
        return await handle_all_customers(request, logger)

    @router.get("/customers")
    async def customer(request: Request):
        return await handle_customer(request, logger)

    @router.post("/redemptions")
    async def redemptions(request: Request):
        return await handle_redemptions(request, logger)

    @router.get("/redemption_options")
    async def redemption_options(request: Request):
        return await handle_redemption_options(request, logger)

    @router.get("/redemption_codes")
    async def redemption_codes(request: Request):
        return await handle_redemption_codes(request, logger)

    @router.get("/campaigns")
    async def campaigns(request: Request):
        return await handle_campaigns(request, logger)

    @router.get("/vip_tiers")
    async def vip_tiers(request: Request):
        return await handle_vip_tiers(request, logger)

    app.include_router(router)
    return app
