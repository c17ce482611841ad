"""Tests for the platform adapter registry and user resolution."""

import httpx
import pytest
from starlette.requests import Request

from adapters import get_adapter, register_adapter, registered_platforms
from adapters.rest import RestUserAdapter
from core.config import Config, PlatformSettings
from core.exceptions import AuthError, UnknownPlatform
from core.payloads import User
from services.users import UserResolver
from ui.dashboard import Dashboard


def _request(query: str = "", path: str = "/") -> Request:
    return Request(
        {"type": "http", "method": "GET", "path": path, "headers": [], "query_string": query.encode()}
    )


def _rest_adapter(handler) -> RestUserAdapter:
    config = Config(platform=PlatformSettings(name="rest", base_url="https://shop.test/api/", me_path="/user/me"))
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return RestUserAdapter(config, _request(path="/api/ext/loyalty/actions"), client)


class TestRegistry:
    def test_builtin_platforms(self):
        assert {"rest", "static"} <= set(registered_platforms())

    def test_unknown_platform(self):
        with pytest.raises(UnknownPlatform) as exc:
            get_adapter("nope", Config(), _request(), httpx.AsyncClient())

        assert exc.value.status_code == 500

    @pytest.mark.asyncio
    async def test_register_custom_adapter(self):
        @register_adapter("fixed")
        class FixedAdapter:
            platform = "fixed"

            def __init__(self, config, request, client):
                pass

            async def resolve_user(self, token):
                return User(id=token, email=f"{token}@fixed")

        adapter = get_adapter("fixed", Config(), _request(), httpx.AsyncClient())

        assert await adapter.resolve_user("x") == User(id="x", email="x@fixed")


class TestRestAdapter:
    @pytest.mark.asyncio
    async def test_resolves_wrapped_result(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"code": 200, "result": {"id": 3, "email": "a@x.com", "name": "A"}})

        user = await _rest_adapter(handler).resolve_user("tok")

        assert user == User(id=3, email="a@x.com")
        assert seen[0].url == "https://shop.test/api/user/me"
        assert seen[0].headers["authorization"] == "Bearer tok"

    @pytest.mark.asyncio
    async def test_resolves_plain_record(self):
        adapter = _rest_adapter(lambda request: httpx.Response(200, json={"id": "u1", "email": "a@x.com"}))

        assert await adapter.resolve_user("tok") == User(id="u1", email="a@x.com")

    @pytest.mark.asyncio
    async def test_rejected_token(self):
        adapter = _rest_adapter(lambda request: httpx.Response(401, json={"code": 401, "result": "expired"}))

        with pytest.raises(AuthError) as exc:
            await adapter.resolve_user("tok")

        assert exc.value.status_code == 401
        assert exc.value.payload() == {"code": 401, "result": "expired"}

    @pytest.mark.asyncio
    async def test_platform_error(self):
        adapter = _rest_adapter(lambda request: httpx.Response(503, text="down"))

        with pytest.raises(AuthError) as exc:
            await adapter.resolve_user("tok")

        assert exc.value.status_code == 500
        assert exc.value.payload() == {"message": "down"}

    @pytest.mark.asyncio
    async def test_platform_unreachable(self, caplog):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(AuthError) as exc:
            await _rest_adapter(handler).resolve_user("tok")

        assert exc.value.status_code == 500
        assert exc.value.payload()["error"] == "ConnectError"
        assert exc.value.platform == "rest"
        assert "/api/ext/loyalty/actions" in caplog.text

    @pytest.mark.asyncio
    async def test_unexpected_record(self):
        adapter = _rest_adapter(lambda request: httpx.Response(200, json={"result": {"name": "A"}}))

        with pytest.raises(AuthError):
            await adapter.resolve_user("tok")


class TestUserResolver:
    @pytest.mark.asyncio
    async def test_resolves_through_configured_platform(self, config):
        resolver = UserResolver(config, httpx.AsyncClient(), Dashboard(config, write_logs=False))

        user = await resolver.resolve(_request("token=good"), "actions")

        assert user == User(id="u1", email="a@x.com")

    @pytest.mark.asyncio
    async def test_missing_token(self, config):
        dashboard = Dashboard(config, write_logs=False)
        resolver = UserResolver(config, httpx.AsyncClient(), dashboard)

        with pytest.raises(AuthError) as exc:
            await resolver.resolve(_request(), "actions")

        assert exc.value.status_code == 401
        assert dashboard.snapshot()["errors"] == ["actions 401: Missing token"]

    @pytest.mark.asyncio
    async def test_failure_logged_with_adapter_platform(self):
        @register_adapter("bridge")
        class BridgeAdapter:
            platform = "bridge"

            def __init__(self, config, request, client):
                pass

            async def resolve_user(self, token):
                raise AuthError("Session expired", status_code=401, platform="sso")

        config = Config(platform=PlatformSettings(name="bridge"))
        dashboard = Dashboard(config, write_logs=False)
        resolver = UserResolver(config, httpx.AsyncClient(), dashboard)

        with pytest.raises(AuthError):
            await resolver.resolve(_request("token=t"), "customer")

        assert dashboard.snapshot()["errors"] == ["customer 401: sso: Session expired"]
